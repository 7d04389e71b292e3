"""
Centralized error handlers for the API.
"""

from http import HTTPStatus

from flask import Flask, current_app, jsonify
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from werkzeug.exceptions import HTTPException, RequestEntityTooLarge

from bistro_shared.errors import AppError, UpstreamUnavailable, Unknown, ValidationError
from bistro_shared.logging_config import get_logger
from bistro_shared.serializers import error_response

logger = get_logger(__name__)


def _show_details() -> bool:
    return not current_app.config.get("IS_PRODUCTION", True)


def _render(error: AppError, details=None):
    payload = error_response(
        error.message,
        error.code,
        (details if details is not None else error.details) if _show_details() else None,
    )
    return jsonify(payload), error.status_code


def register_error_handlers(app: Flask) -> None:
    """
    Register centralized error handlers for the Flask app.

    Every failure is answered with ``{message, error, details?}``; details
    are only included outside production.
    """

    @app.errorhandler(AppError)
    def handle_app_error(e: AppError):
        if e.status_code >= HTTPStatus.INTERNAL_SERVER_ERROR:
            logger.error(f"{e.code}: {e.message}")
        else:
            logger.warning(f"{e.code}: {e.message}")
        return _render(e)

    @app.errorhandler(PydanticValidationError)
    def handle_pydantic_validation_error(e: PydanticValidationError):
        logger.warning(f"Pydantic validation error: {e}")
        details = e.errors(include_url=False, include_context=False, include_input=False)
        return _render(ValidationError(), details=details)

    @app.errorhandler(OperationalError)
    def handle_database_unavailable(e: OperationalError):
        logger.error(f"Database unavailable: {e}", exc_info=True)
        return _render(UpstreamUnavailable(), details=str(e.orig or e))

    @app.errorhandler(SQLAlchemyError)
    def handle_database_error(e: SQLAlchemyError):
        logger.error(f"Database error: {e}", exc_info=True)
        return _render(Unknown("Database error"), details=str(e))

    @app.errorhandler(RequestEntityTooLarge)
    def handle_too_large(e: RequestEntityTooLarge):
        return jsonify(error_response("Uploaded file is too large", "PAYLOAD_TOO_LARGE")), e.code

    @app.errorhandler(HTTPException)
    def handle_http_exception(e: HTTPException):
        logger.warning(f"HTTP exception {e.code}: {e.description}")
        code = e.name.upper().replace(" ", "_")
        return jsonify(error_response(e.description or e.name, code)), e.code

    @app.errorhandler(Exception)
    def handle_generic_exception(e: Exception):
        logger.error(f"Unhandled exception: {e}", exc_info=True)
        return _render(Unknown(), details={"type": type(e).__name__, "error": str(e)})
