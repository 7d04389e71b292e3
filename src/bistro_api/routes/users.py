"""
Users API - staff accounts, admin only.
"""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, jsonify

from bistro_api.decorators import admin_required
from bistro_api.extensions import get_services
from bistro_api.routes._helpers import json_body
from bistro_shared.schemas import CreateUserRequest, UpdateUserRequest
from bistro_shared.validation import parse_payload

users_bp = Blueprint("users", __name__)


@users_bp.get("/users")
@admin_required
def list_users():
    return jsonify(get_services().users.list_users())


@users_bp.get("/users/<int:user_id>")
@admin_required
def get_user(user_id: int):
    return jsonify(get_services().users.get_user(user_id))


@users_bp.post("/users")
@admin_required
def create_user():
    payload = parse_payload(CreateUserRequest, json_body())
    user = get_services().users.create_user(
        name=payload.name,
        email=payload.email,
        password=payload.password,
        role=payload.role,
        is_active=payload.is_active,
    )
    return jsonify(user), HTTPStatus.CREATED


@users_bp.put("/users/<int:user_id>")
@admin_required
def update_user(user_id: int):
    payload = parse_payload(UpdateUserRequest, json_body())
    user = get_services().users.update_user(user_id, payload.model_dump(exclude_unset=True))
    return jsonify(user)


@users_bp.delete("/users/<int:user_id>")
@admin_required
def delete_user(user_id: int):
    get_services().users.delete_user(user_id)
    return jsonify({"message": "User deleted successfully"})


__all__ = ["users_bp"]
