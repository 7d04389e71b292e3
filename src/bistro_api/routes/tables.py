"""
Tables API.
"""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, jsonify

from bistro_api.decorators import admin_required, login_required, public
from bistro_api.extensions import get_services
from bistro_api.routes._helpers import json_body
from bistro_shared.schemas import CreateTableRequest, UpdateTableRequest
from bistro_shared.validation import parse_payload

tables_bp = Blueprint("tables", __name__)


@tables_bp.get("/tables")
@public
def list_tables():
    """All tables by number, with occupancy derived from unpaid orders."""
    return jsonify(get_services().tables.list_tables())


@tables_bp.get("/tables/<int:table_id>")
@login_required
def get_table(table_id: int):
    return jsonify(get_services().tables.get_table(table_id))


@tables_bp.post("/tables")
@admin_required
def create_table():
    payload = parse_payload(CreateTableRequest, json_body())
    table = get_services().tables.create_table(payload.number, payload.capacity)
    return jsonify(table), HTTPStatus.CREATED


@tables_bp.put("/tables/<int:table_id>")
@admin_required
def update_table(table_id: int):
    payload = parse_payload(UpdateTableRequest, json_body())
    table = get_services().tables.update_table(
        table_id, number=payload.number, capacity=payload.capacity, status=payload.status
    )
    return jsonify(table)


@tables_bp.delete("/tables/<int:table_id>")
@admin_required
def delete_table(table_id: int):
    get_services().tables.delete_table(table_id)
    return jsonify({"message": "Table deleted successfully"})


__all__ = ["tables_bp"]
