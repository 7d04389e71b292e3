"""
Error taxonomy shared by services and HTTP handlers.

Every domain failure is an ``AppError`` carrying the HTTP status it maps to
and a stable machine code. The Flask error handlers translate them into
``{message, error, details?}`` payloads.
"""

from __future__ import annotations

from http import HTTPStatus
from typing import Any


class AppError(Exception):
    """Base class for expected, user-facing failures."""

    status_code: HTTPStatus = HTTPStatus.INTERNAL_SERVER_ERROR
    code: str = "UNKNOWN"
    default_message = "Server error"

    def __init__(self, message: str | None = None, details: Any = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class ValidationError(AppError):
    """Bad or missing input, rejected before any mutation."""

    status_code = HTTPStatus.BAD_REQUEST
    code = "VALIDATION_ERROR"
    default_message = "Invalid request data"


class InvalidStatus(ValidationError):
    code = "INVALID_STATUS"
    default_message = "Invalid status"


class InvalidTransition(ValidationError):
    code = "INVALID_TRANSITION"
    default_message = "Status transition not allowed"


class MenuItemUnavailable(ValidationError):
    code = "MENU_ITEM_UNAVAILABLE"
    default_message = "Menu item is not available"


class Unauthenticated(AppError):
    status_code = HTTPStatus.UNAUTHORIZED
    code = "UNAUTHENTICATED"
    default_message = "Authentication required"


class InvalidCredentials(Unauthenticated):
    code = "INVALID_CREDENTIALS"
    default_message = "Invalid email or password"


class Forbidden(AppError):
    status_code = HTTPStatus.FORBIDDEN
    code = "FORBIDDEN"
    default_message = "Access denied"


class NotFound(AppError):
    status_code = HTTPStatus.NOT_FOUND
    code = "NOT_FOUND"
    default_message = "Resource not found"


class MenuItemNotFound(NotFound):
    """A line item references a menu item that does not exist.

    Raised while placing an order, where it is a client input problem.
    """

    status_code = HTTPStatus.BAD_REQUEST
    code = "MENU_ITEM_NOT_FOUND"
    default_message = "Menu item not found"


class Conflict(AppError):
    status_code = HTTPStatus.CONFLICT
    code = "CONFLICT"
    default_message = "Resource already exists"


class UpstreamUnavailable(AppError):
    status_code = HTTPStatus.INTERNAL_SERVER_ERROR
    code = "UPSTREAM_UNAVAILABLE"
    default_message = "Database unavailable"


class Unknown(AppError):
    status_code = HTTPStatus.INTERNAL_SERVER_ERROR
    code = "UNKNOWN"
    default_message = "Server error"
