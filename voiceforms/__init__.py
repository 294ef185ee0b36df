import logging
import os

from flask import Flask, jsonify

from .extensions import db, login_manager, migrate
from .errors import register_error_handlers


def create_app(config_object='config.Config'):
    """App factory.

    Blueprints: ``/auth`` (owner sessions), ``/api/forms`` (owner form CRUD,
    analytics and export) and the public respondent endpoints at the root.
    """
    app = Flask(__name__)
    app.config.from_object(config_object)

    level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    app.logger.setLevel(level)

    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)

    @login_manager.user_loader
    def load_user(user_id):
        from .models.user import User
        try:
            return db.session.get(User, int(user_id))
        except (TypeError, ValueError):
            return None

    register_error_handlers(app)

    from .blueprints.auth import bp as auth_bp
    app.register_blueprint(auth_bp, url_prefix="/auth")

    from .blueprints.forms import bp as forms_bp
    app.register_blueprint(forms_bp, url_prefix="/api/forms")

    from .blueprints.public import bp as public_bp
    app.register_blueprint(public_bp)

    @app.get('/healthz')
    def healthz():
        return jsonify({"ok": True})

    # alembic sets SKIP_CREATE_ALL; local sqlite setups get their tables created
    uri = app.config.get('SQLALCHEMY_DATABASE_URI') or ''
    if uri.startswith('sqlite') and not os.getenv('SKIP_CREATE_ALL'):
        with app.app_context():
            from . import models  # noqa: F401
            db.create_all()

    return app
