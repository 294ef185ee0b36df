"""Error taxonomy shared by the services and the JSON views.

Every error carries the HTTP status it maps to. Validation and authorization
errors are raised before any aggregation or mutation starts and expose their
message (and optional details) to the caller. Upstream and internal failures
only ever expose a generic message; the cause is logged where it happens.
"""
from flask import jsonify, current_app
from werkzeug.exceptions import HTTPException


class FormsError(Exception):
    status_code = 500
    public_message = None

    def __init__(self, message=None, details=None):
        super().__init__(message or self.public_message or self.__class__.__name__)
        self.message = message or self.public_message
        self.details = details

    def to_dict(self):
        body = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class AuthenticationMissing(FormsError):
    status_code = 401
    public_message = "Unauthorized"


class AuthorizationDenied(FormsError):
    status_code = 403
    public_message = "Forbidden"


class ValidationFailed(FormsError):
    status_code = 400
    public_message = "Validation error"


class NotFound(FormsError):
    status_code = 404
    public_message = "Not found"


class NoQuestionsError(NotFound):
    """A form without questions cannot be exported (configuration error)."""

    def __init__(self, message="No questions found", details=None):
        super().__init__(message, details)


class UpstreamFailure(FormsError):
    """Transcription service or blob storage failed."""
    status_code = 502
    public_message = "Upstream service failure"

    def to_dict(self):
        return {"error": self.public_message}


class InternalFailure(FormsError):
    status_code = 500
    public_message = "Internal server error"

    def to_dict(self):
        return {"error": self.public_message}


def register_error_handlers(app):
    @app.errorhandler(FormsError)
    def _handle_forms_error(err):
        if err.status_code >= 500:
            # cause was already logged by the raiser; keep a breadcrumb here
            current_app.logger.warning('%s: %s', err.__class__.__name__, err)
        return jsonify(err.to_dict()), err.status_code

    @app.errorhandler(HTTPException)
    def _handle_http_error(err):
        return jsonify({"error": err.description or err.name}), err.code

    @app.errorhandler(Exception)
    def _handle_unexpected(err):
        current_app.logger.exception('Unhandled error')
        return jsonify(InternalFailure().to_dict()), 500
