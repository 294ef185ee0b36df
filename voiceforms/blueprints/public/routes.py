"""Endpoints used by anonymous respondents."""
import time
from io import BytesIO

from flask import jsonify, request, current_app, send_file
from werkzeug.utils import secure_filename

from . import bp
from .forms import SubmitResponseForm, TranscribeForm, ReconcileForm
from ...errors import ValidationFailed, NotFound
from ...extensions import db
from ...models.question import Question
from ...services.question_kinds import QuestionKind
from ...services import storage
from ...services.reconciler import AnswerSlot, apply_transition, append_transcript
from ...services.submission import load_open_form, submit_response
from ...services.transcription import transcribe
from ...utils.decorators import json_body
from ...utils.formdata import json_formdata, clean


def _slot_dict(slot: AnswerSlot):
    return {
        "answer_text": slot.combined_text,
        "transcript_text": slot.transcript_segment,
        "audio_url": slot.audio_reference,
    }


@bp.post("/api/forms/<form_id>/submit")
def submit(form_id):
    form = load_open_form(form_id)
    payload = json_body()
    submit_form = SubmitResponseForm(formdata=json_formdata(payload, exclude=('respondent_meta',)))
    if not submit_form.validate():
        raise ValidationFailed('Validation error', details=submit_form.errors)
    response = submit_response(
        form, submit_form,
        client_meta=payload.get('respondent_meta'),
        user_agent=request.headers.get('User-Agent', ''),
    )
    return jsonify({"success": True, "response_id": response.id})


@bp.post("/api/upload-audio")
def upload_audio():
    f = request.files.get('file')
    form_id = request.form.get('formId')
    question_id = request.form.get('questionId')
    if f is None or not form_id or not question_id:
        raise ValidationFailed('Missing required fields')
    form = load_open_form(form_id)
    question = db.session.get(Question, question_id)
    if question is None or question.form_id != form.id:
        raise NotFound('Question not found')
    if not QuestionKind(question.type).accepts_audio:
        raise ValidationFailed('This question does not accept audio answers')

    max_size = current_app.config.get('MAX_AUDIO_BYTES', 10 * 1024 * 1024)
    # read one byte past the limit so oversized payloads are refused before upload
    data = f.stream.read(max_size + 1)
    if len(data) > max_size:
        raise ValidationFailed(f'File size exceeds maximum limit of {max_size // (1024 * 1024)}MB')
    if not data:
        raise ValidationFailed('Uploaded file is empty')

    safe_form = secure_filename(form_id)
    safe_question = secure_filename(question_id)
    if not safe_form or not safe_question:
        raise ValidationFailed('Invalid form or question id')
    temp_id = f"temp-{int(time.time() * 1000)}"
    path = f"forms/{safe_form}/responses/{temp_id}/{safe_question}.webm"
    url = storage.save_bytes(data, path, content_type='audio/webm')
    current_app.logger.info('Stored audio for form %s question %s at %s (%d bytes)', form_id, question_id, path, len(data))
    return jsonify({"url": url, "path": path})


@bp.post("/api/transcribe")
def transcribe_audio():
    payload = json_body()
    form = TranscribeForm(formdata=json_formdata(payload))
    if not form.validate():
        raise ValidationFailed('Validation error', details=form.errors)

    audio_url = form.audio_url.data
    bucket, key = storage.parse_locator(audio_url)
    audio = storage.read_bytes(bucket, key)
    text = transcribe(audio, filename=key.rsplit('/', 1)[-1], language=clean(form.language.data))

    body = {"transcript": text}
    if 'answer_text' in payload:
        slot = append_transcript(AnswerSlot(payload.get('answer_text') or ''), text, audio_url)
        body["answer"] = _slot_dict(slot)
    return jsonify(body)


@bp.post("/api/answers/reconcile")
def reconcile():
    """Apply one transition to a posted answer slot.

    For ``append`` the ``value`` is the new transcript and ``audio_reference``
    the locator of the recording it came from.
    """
    form = ReconcileForm(formdata=json_formdata(json_body()))
    if not form.validate():
        raise ValidationFailed('Validation error', details=form.errors)
    slot = AnswerSlot(
        combined_text=form.combined_text.data or '',
        transcript_segment=clean(form.transcript_segment.data),
        audio_reference=clean(form.audio_reference.data),
    )
    new_slot = apply_transition(slot, form.action.data, form.value.data, clean(form.audio_reference.data))
    return jsonify(_slot_dict(new_slot))


@bp.get("/storage/<bucket>/<path:key>")
def serve_blob(bucket, key):
    data = storage.read_bytes(bucket, key)
    return send_file(BytesIO(data), mimetype=storage.content_type_for(key), download_name=key.rsplit('/', 1)[-1])
