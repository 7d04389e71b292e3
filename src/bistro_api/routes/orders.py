"""
Orders API - placement, kitchen status and payment.
"""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, jsonify, request

from bistro_api.decorators import get_current_user, login_required, public, staff_required
from bistro_api.extensions import get_services
from bistro_api.routes._helpers import json_body
from bistro_shared.schemas import (
    AddOrderItemsRequest,
    CreateOrderRequest,
    UpdateOrderStatusRequest,
    UpdatePaymentStatusRequest,
)
from bistro_shared.validation import parse_int, parse_payload

orders_bp = Blueprint("orders", __name__)


@orders_bp.get("/orders")
@staff_required
def list_orders():
    """
    Query params:
    - status: one or more statuses, comma separated
    - tableNumber: exact table number
    """
    orders = get_services().orders.list_orders(
        status=request.args.get("status"),
        table_number=parse_int(request.args.get("tableNumber"), "tableNumber"),
    )
    return jsonify(orders)


@orders_bp.post("/orders")
@public
def create_order():
    """
    Place an order. Customers order without a token; a waiter's token
    assigns the order to that waiter.
    """
    payload = parse_payload(CreateOrderRequest, json_body())
    order = get_services().orders.create_order(
        payload.table_number,
        [line.model_dump() for line in payload.items],
        caller=get_current_user(),
    )
    return jsonify(order), HTTPStatus.CREATED


@orders_bp.get("/orders/<int:order_id>")
@login_required
def get_order(order_id: int):
    return jsonify(get_services().orders.get_order(order_id))


@orders_bp.put("/orders/<int:order_id>")
@login_required
def add_order_items(order_id: int):
    payload = parse_payload(AddOrderItemsRequest, json_body())
    order = get_services().orders.add_items(
        order_id, [line.model_dump() for line in payload.items]
    )
    return jsonify(order)


@orders_bp.put("/orders/<int:order_id>/status")
@staff_required
def update_order_status(order_id: int):
    payload = parse_payload(UpdateOrderStatusRequest, json_body())
    return jsonify(get_services().orders.advance_status(order_id, payload.status))


@orders_bp.put("/orders/<int:order_id>/payment")
@staff_required
def update_payment_status(order_id: int):
    payload = parse_payload(UpdatePaymentStatusRequest, json_body())
    return jsonify(get_services().orders.set_payment_status(order_id, payload.payment_status))


__all__ = ["orders_bp"]
