from flask import jsonify
from flask_login import login_user, logout_user, current_user
from . import bp
from ...extensions import db
from .forms import LoginForm, SignupForm
from ...models.user import User
from ...errors import ValidationFailed, AuthenticationMissing
from ...utils.decorators import json_body, login_required_json
from ...utils.formdata import json_formdata


@bp.post("/signup")
def signup():
    form = SignupForm(formdata=json_formdata(json_body()))
    if not form.validate():
        raise ValidationFailed('Validation error', details=form.errors)
    if User.query.filter_by(email=form.email.data).first() is not None:
        raise ValidationFailed('A user with this email already exists')
    user = User(email=form.email.data)
    user.set_password(form.password.data)
    db.session.add(user)
    db.session.commit()
    login_user(user)
    return jsonify(user.to_dict()), 201


@bp.post("/login")
def login():
    form = LoginForm(formdata=json_formdata(json_body()))
    if not form.validate():
        raise ValidationFailed('Validation error', details=form.errors)
    user = User.query.filter_by(email=form.email.data).first()
    if user is None or not user.check_password(form.password.data):
        raise AuthenticationMissing('Invalid credentials')
    login_user(user)
    return jsonify(user.to_dict())


@bp.post("/logout")
@login_required_json
def logout():
    logout_user()
    return jsonify({"success": True})


@bp.get("/me")
@login_required_json
def me():
    return jsonify(current_user.to_dict())
