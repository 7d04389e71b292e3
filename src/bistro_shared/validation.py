"""
Input validation utilities.
"""

from __future__ import annotations

import re
from typing import Any

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from bistro_shared.constants import MAX_HISTORY_LIMIT, Roles
from bistro_shared.errors import ValidationError

MIN_PASSWORD_LENGTH = 6
EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")


def validate_password(password: str) -> None:
    if not password:
        raise ValidationError("Password is required")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
        )


def validate_email(email: str) -> None:
    if not email:
        raise ValidationError("Email is required")
    if not EMAIL_PATTERN.match(email):
        raise ValidationError("Please provide a valid email")


def validate_role(role: str) -> None:
    if role not in Roles.all_values():
        allowed = ", ".join(Roles.all_values())
        raise ValidationError(f"Invalid role: {role}. Allowed roles: {allowed}")


def parse_payload(schema: type[BaseModel], payload: Any) -> BaseModel:
    """
    Validate a request payload, converting pydantic errors into the
    application's ``ValidationError`` with per-field details.
    """
    try:
        return schema.model_validate(payload or {})
    except PydanticValidationError as exc:
        details = [
            {
                "field": ".".join(str(part) for part in error["loc"]),
                "message": error["msg"],
            }
            for error in exc.errors()
        ]
        first = details[0] if details else None
        message = f"{first['field']}: {first['message']}" if first else "Invalid request data"
        raise ValidationError(message, details=details) from exc


def parse_int(value: str | None, field: str, default: int | None = None) -> int | None:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"{field} must be an integer") from exc


def validate_limit(limit: int | None, default: int) -> int:
    """Normalize a result limit to the range [1, MAX_HISTORY_LIMIT]."""
    if limit is None:
        return default
    if limit < 1:
        raise ValidationError("limit must be a positive integer")
    return min(limit, MAX_HISTORY_LIMIT)
