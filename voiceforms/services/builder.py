"""Writing forms and their question lists."""
from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..errors import InternalFailure, ValidationFailed
from ..models.form import Form
from ..models.question import Question
from ..utils.formdata import clean

SETTING_KEYS = ("collect_email", "limit_one_response", "show_progress_bar", "confirmation_message")


def _number(value):
    if value is None:
        return None
    return int(value) if float(value).is_integer() else value


def settings_from(form_meta, payload):
    # an absent or null "settings" key clears the settings, as the clients send it
    if not payload.get("settings"):
        return None
    data = form_meta.settings.data
    return {k: clean(data.get(k)) for k in SETTING_KEYS if clean(data.get(k)) is not None}


def apply_form_meta(form: Form, form_meta, payload):
    form.title = form_meta.title.data
    form.description = clean(form_meta.description.data)
    form.published = bool(form_meta.published.data)
    form.settings = settings_from(form_meta, payload)
    return form


def _question_values(entry):
    rules = entry.validation.data or {}
    validation = {
        "min": _number(rules.get("min")),
        "max": _number(rules.get("max")),
        "pattern": clean(rules.get("pattern")),
    }
    validation = {k: v for k, v in validation.items() if v is not None} or None
    options = [o for o in (entry.options.data or []) if o is not None and o != ""] or None
    return {
        "order_index": entry.order_index.data,
        "type": entry.type.data,
        "prompt": entry.prompt.data,
        "required": bool(entry.required.data),
        "options": options,
        "validation": validation,
    }


def replace_questions(form: Form, questions_form):
    """Make ``form``'s questions exactly the submitted list.

    Entries carrying the id of an existing question update it in place so
    answers already collected for it are kept; existing questions missing from
    the list are deleted together with their answers; the rest are created.
    """
    existing = {q.id: q for q in form.questions}
    entries = [e.form for e in questions_form.questions.entries]

    kept_ids = set()
    for entry in entries:
        qid = clean(entry.id.data)
        if qid and qid not in existing:
            raise ValidationFailed(f'Question {qid} does not belong to this form')
        if qid:
            if qid in kept_ids:
                raise ValidationFailed(f'Question {qid} is listed more than once')
            kept_ids.add(qid)

    try:
        for qid, q in existing.items():
            if qid not in kept_ids:
                form.questions.remove(q)
        # park kept rows on negative indexes so reordering can't trip the unique constraint
        for pos, qid in enumerate(kept_ids):
            existing[qid].order_index = -(pos + 1)
        db.session.flush()

        for entry in entries:
            values = _question_values(entry)
            qid = clean(entry.id.data)
            if qid:
                q = existing[qid]
                for k, v in values.items():
                    setattr(q, k, v)
            else:
                form.questions.append(Question(**values))
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.exception('Saving questions failed for form %s', form.id)
        raise InternalFailure() from e

    db.session.refresh(form)
    return sorted(form.questions, key=lambda q: q.order_index)
