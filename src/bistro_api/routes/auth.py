"""
Auth API - login and current user.
"""

from __future__ import annotations

from flask import Blueprint, jsonify, request

from bistro_api.decorators import get_current_user, login_required, public
from bistro_api.extensions import get_services
from bistro_shared.schemas import LoginRequest
from bistro_shared.serializers import serialize_user_summary
from bistro_shared.validation import parse_payload

auth_bp = Blueprint("auth", __name__)


@auth_bp.post("/auth/login")
@public
def login():
    """
    Exchange email and password for a bearer token.

    Body: ``{"email": str, "password": str}``
    """
    payload = parse_payload(LoginRequest, request.get_json(silent=True))
    return jsonify(get_services().auth.login(payload.email, payload.password))


@auth_bp.get("/auth/me")
@login_required
def me():
    return jsonify({"user": serialize_user_summary(get_current_user())})


__all__ = ["auth_bp"]
