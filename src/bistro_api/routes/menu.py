"""
Menu API - catalog reads for everyone, edits for admins.
"""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, jsonify, request

from bistro_api.decorators import admin_required, get_current_user, public
from bistro_api.extensions import get_services
from bistro_api.routes._helpers import form_or_json, query_flag
from bistro_shared.constants import Roles
from bistro_shared.schemas import CreateMenuItemRequest, UpdateMenuItemRequest
from bistro_shared.validation import parse_payload

menu_bp = Blueprint("menu", __name__)


@menu_bp.get("/menu")
@public
def list_menu():
    """
    Query params:
    - category: only items of this category
    - includeUnavailable: admins only, also return unavailable items
    """
    user = get_current_user()
    include_unavailable = (
        query_flag("includeUnavailable") and user is not None and user.role == Roles.ADMIN.value
    )
    items = get_services().menu.list_items(
        category=request.args.get("category") or None,
        include_unavailable=include_unavailable,
    )
    return jsonify(items)


@menu_bp.get("/menu/categories")
@public
def list_categories():
    return jsonify(get_services().menu.list_categories())


@menu_bp.get("/menu/<int:item_id>")
@public
def get_menu_item(item_id: int):
    return jsonify(get_services().menu.get_item(item_id))


@menu_bp.post("/menu")
@admin_required
def create_menu_item():
    data, upload = form_or_json()
    payload = parse_payload(CreateMenuItemRequest, data)
    item = get_services().menu.create_item(payload.model_dump(), upload=upload)
    return jsonify(item), HTTPStatus.CREATED


@menu_bp.put("/menu/<int:item_id>")
@admin_required
def update_menu_item(item_id: int):
    data, upload = form_or_json()
    payload = parse_payload(UpdateMenuItemRequest, data)
    item = get_services().menu.update_item(
        item_id, payload.model_dump(exclude_unset=True), upload=upload
    )
    return jsonify(item)


@menu_bp.delete("/menu/<int:item_id>")
@admin_required
def delete_menu_item(item_id: int):
    get_services().menu.delete_item(item_id)
    return jsonify({"message": "Menu item deleted successfully"})


__all__ = ["menu_bp"]
