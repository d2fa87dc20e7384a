from flask import jsonify
from werkzeug.exceptions import HTTPException
from marshmallow import ValidationError
from sqlalchemy.exc import IntegrityError
import logging

from services.errors import ServiceError

logger = logging.getLogger(__name__)

_HTTP_ERROR_CODES = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
    413: "PAYLOAD_TOO_LARGE",
    415: "UNSUPPORTED_MEDIA_TYPE",
    422: "VALIDATION_ERROR",
}


class ServiceErrorResponse(Exception):
    """Raised by views to turn a ServiceError into the error envelope."""

    def __init__(self, error: ServiceError):
        super().__init__(error.message)
        self.error = error


def error_response(error: str, message: str, status: int, details: dict | None = None):
    payload = {"error": error, "message": message, "status": status}
    if details:
        payload["details"] = details
    return jsonify(payload), status


def register_error_handlers(app):
    @app.errorhandler(ServiceErrorResponse)
    def handle_service_error(err: ServiceErrorResponse):
        return error_response(err.error.kind.value, err.error.message, err.error.status)

    # Marshmallow validation errors map to 400
    @app.errorhandler(ValidationError)
    def handle_validation_error(err: ValidationError):
        # err.messages contains field-level details
        return error_response("VALIDATION_FAILED", "Invalid input", 400, details=err.messages)

    # Integrity errors that escaped the service layer; the DB message stays server-side
    @app.errorhandler(IntegrityError)
    def handle_integrity_error(err: IntegrityError):
        logger.warning("Integrity error: %s", getattr(err, "orig", err))
        return error_response("CONFLICT", "Unique constraint violated.", 409)

    # Werkzeug HTTPExceptions map to their status codes
    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status = err.code or 400
        if status == 404:
            return error_response("NOT_FOUND", "Resource not found", 404)
        return error_response(_HTTP_ERROR_CODES.get(status, "BAD_REQUEST"), err.description, status)

    # 500 Internal Error (catch-all): full traceback in the log, nothing in the body
    @app.errorhandler(Exception)
    def internal_error(err: Exception):
        logger.exception("Unhandled exception", exc_info=err)
        return error_response("INTERNAL_FAILURE", "An unexpected error occurred", 500)
