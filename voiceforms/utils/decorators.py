from functools import wraps
from flask import request, current_app
from flask_login import current_user
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..errors import AuthenticationMissing, AuthorizationDenied, NotFound, ValidationFailed, InternalFailure
from ..models.form import Form


def login_required_json(view):
    @wraps(view)
    def wrapped(*args, **kwargs):
        if not current_user.is_authenticated:
            raise AuthenticationMissing()
        return view(*args, **kwargs)
    return wrapped


def owned_form_or_error(form_id):
    """Load a form the current user owns.

    A missing form and someone else's form both answer 403 so form ids of other
    owners cannot be probed.
    """
    if not current_user.is_authenticated:
        raise AuthenticationMissing()
    try:
        form = db.session.get(Form, form_id)
    except SQLAlchemyError as e:
        current_app.logger.exception("Failed to load form %s", form_id)
        raise InternalFailure() from e
    if form is None or not form.is_owned_by(current_user):
        raise AuthorizationDenied()
    return form


def json_body():
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise ValidationFailed('Request body must be a JSON object')
    return payload


def get_or_404(model, ident, message='Not found'):
    obj = db.session.get(model, ident)
    if obj is None:
        raise NotFound(message)
    return obj
