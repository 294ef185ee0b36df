"""Validating and storing one respondent's submission."""
from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..errors import NotFound, AuthorizationDenied, ValidationFailed, InternalFailure
from ..models.form import Form
from ..models.question import Question
from ..models.response import Response
from ..models.answer import Answer
from .question_kinds import QuestionKind, validate_answer
from .storage import parse_locator
from ..utils.formdata import clean


def load_open_form(form_id) -> Form:
    form = db.session.get(Form, form_id)
    if form is None:
        raise NotFound('Form not found')
    if not form.published:
        raise AuthorizationDenied('Form is not published')
    return form


def _answer_rows(entries, questions):
    rows = []
    seen = set()
    for entry in entries:
        qid = entry.question_id.data
        question = questions.get(qid)
        if question is None:
            raise ValidationFailed(f'Question {qid} does not belong to this form')
        if qid in seen:
            raise ValidationFailed(f'Question {qid} is answered more than once')
        seen.add(qid)

        text = clean(entry.answer_text.data)
        audio_url = clean(entry.audio_url.data)
        transcript = clean(entry.transcript_text.data)
        if not QuestionKind(question.type).accepts_audio:
            audio_url = transcript = None
        elif audio_url:
            # only locators handed out by the upload endpoint are accepted
            parse_locator(audio_url)

        if not (text and text.strip()) and not audio_url:
            # blank entries are skips, not answers
            continue

        problem = validate_answer(question, text)
        if problem:
            raise ValidationFailed(f'Answer to "{question.prompt}" {problem}',
                                   details={'question_id': qid})
        rows.append({
            'question_id': qid,
            'answer_text': text,
            'audio_url': audio_url,
            'transcript_text': transcript,
        })
    return rows


def _check_required(questions, rows):
    answered = {r['question_id'] for r in rows if r['answer_text'] and r['answer_text'].strip()}
    for q in sorted(questions.values(), key=lambda q: q.order_index):
        if q.required and q.id not in answered:
            raise ValidationFailed(f'Question {q.id} is required',
                                   details={'question_id': q.id, 'prompt': q.prompt})


def submit_response(form: Form, submit_form, client_meta=None, user_agent: str = '') -> Response:
    """Check an already shape-validated submission against ``form`` and store it.

    Everything is checked before anything is written; the response and its
    answers are committed together or not at all.
    """
    client_meta = client_meta or {}
    if not isinstance(client_meta, dict):
        raise ValidationFailed('respondent_meta must be an object')

    questions = {q.id: q for q in Question.query.filter_by(form_id=form.id).all()}
    rows = _answer_rows([e.form for e in submit_form.answers.entries], questions)
    _check_required(questions, rows)

    email = clean(submit_form.respondent_email.data)
    if form.setting('collect_email') and not email:
        raise ValidationFailed('Email is required for this form')
    if form.setting('limit_one_response') and email:
        already = Response.query.filter_by(form_id=form.id, respondent_email=email).first()
        if already is not None:
            raise ValidationFailed('You have already submitted a response to this form')

    try:
        response = Response(
            form_id=form.id,
            respondent_email=email,
            respondent_meta={'userAgent': user_agent or '', **client_meta},
        )
        db.session.add(response)
        db.session.flush()
        for row in rows:
            db.session.add(Answer(response_id=response.id, **row))
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.exception('Storing response failed for form %s', form.id)
        raise InternalFailure() from e

    current_app.logger.info('Stored response %s for form %s (%d answers)', response.id, form.id, len(rows))
    return response
