from io import BytesIO

from flask import jsonify, send_file, current_app
from flask_login import current_user
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload

from . import bp
from .forms import FormMetaForm, QuestionsForm
from ...extensions import db
from ...errors import ValidationFailed, AuthenticationMissing, InternalFailure
from ...models.form import Form
from ...models.question import Question
from ...models.response import Response
from ...models.answer import Answer
from ...services.analytics import build_form_analytics
from ...services.builder import apply_form_meta, replace_questions
from ...services.export import export_csv, export_filename
from ...utils.decorators import login_required_json, owned_form_or_error, json_body, get_or_404
from ...utils.formdata import json_formdata


def _validated_meta():
    payload = json_body()
    form_meta = FormMetaForm(formdata=json_formdata(payload))
    if not form_meta.validate():
        raise ValidationFailed('Validation error', details=form_meta.errors)
    return form_meta, payload


def _commit(what, form_id=None):
    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.exception('%s failed for form %s', what, form_id)
        raise InternalFailure() from e


@bp.get("")
@login_required_json
def list_forms():
    forms = Form.query.filter_by(owner_id=current_user.id).order_by(Form.created_at.desc()).all()
    return jsonify([f.to_dict() for f in forms])


@bp.post("")
@login_required_json
def create_form():
    form_meta, payload = _validated_meta()
    form = apply_form_meta(Form(owner_id=current_user.id), form_meta, payload)
    db.session.add(form)
    _commit('Creating form')
    current_app.logger.info('Form %s created by user %s', form.id, current_user.id)
    return jsonify(form.to_dict()), 201


@bp.get("/<form_id>")
def get_form(form_id):
    form = get_or_404(Form, form_id, "Form not found")
    if not form.published:
        # drafts are only visible to their owner
        if not current_user.is_authenticated:
            raise AuthenticationMissing()
        owned_form_or_error(form_id)
    return jsonify(form.to_dict(with_questions=True))


@bp.put("/<form_id>")
def update_form(form_id):
    form = owned_form_or_error(form_id)
    form_meta, payload = _validated_meta()
    apply_form_meta(form, form_meta, payload)
    _commit('Updating form', form_id)
    return jsonify(form.to_dict())


@bp.delete("/<form_id>")
def delete_form(form_id):
    form = owned_form_or_error(form_id)
    db.session.delete(form)
    _commit('Deleting form', form_id)
    current_app.logger.info('Form %s deleted', form_id)
    return jsonify({"success": True})


@bp.post("/<form_id>/questions")
def save_questions(form_id):
    form = owned_form_or_error(form_id)
    questions_form = QuestionsForm(formdata=json_formdata(json_body()))
    if not questions_form.validate():
        raise ValidationFailed('Validation error', details=questions_form.errors)
    questions = replace_questions(form, questions_form)
    return jsonify({"questions": [q.to_dict() for q in questions]})


@bp.get("/<form_id>/responses")
def list_responses(form_id):
    form = owned_form_or_error(form_id)
    try:
        responses = (
            Response.query.filter_by(form_id=form.id)
            .options(selectinload(Response.answers).selectinload(Answer.question))
            .order_by(Response.created_at.desc())
            .all()
        )
    except SQLAlchemyError as e:
        current_app.logger.exception('Fetching responses failed for form %s', form_id)
        raise InternalFailure() from e
    return jsonify([r.to_dict(with_answers=True) for r in responses])


@bp.get("/<form_id>/analytics")
def form_analytics(form_id):
    form = owned_form_or_error(form_id)
    try:
        responses = Response.query.filter_by(form_id=form.id).order_by(Response.created_at.desc()).all()
        questions = Question.query.filter_by(form_id=form.id).order_by(Question.order_index.asc()).all()
        answers = (
            Answer.query.join(Response, Answer.response_id == Response.id)
            .filter(Response.form_id == form.id)
            .all()
        )
    except SQLAlchemyError as e:
        current_app.logger.exception('Fetching analytics data failed for form %s', form_id)
        raise InternalFailure() from e

    payload = build_form_analytics(
        form, questions, responses, answers,
        window_days=current_app.config.get('ANALYTICS_WINDOW_DAYS', 30),
    )
    return jsonify(payload)


@bp.get("/<form_id>/export")
def export_responses(form_id):
    form = owned_form_or_error(form_id)
    try:
        responses = (
            Response.query.filter_by(form_id=form.id)
            .options(selectinload(Response.answers))
            .order_by(Response.created_at.desc())
            .all()
        )
        questions = Question.query.filter_by(form_id=form.id).order_by(Question.order_index.asc()).all()
    except SQLAlchemyError as e:
        current_app.logger.exception('Fetching export data failed for form %s', form_id)
        raise InternalFailure() from e

    csv_text = export_csv(form, questions, responses)
    bio = BytesIO(csv_text.encode('utf-8'))
    bio.seek(0)
    return send_file(bio, as_attachment=True, download_name=export_filename(form.title), mimetype='text/csv')
