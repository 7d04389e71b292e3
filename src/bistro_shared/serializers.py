"""
Serializers for consistent API responses.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from bistro_shared.datetime_utils import isoformat
from bistro_shared.models import MenuItem, Order, OrderItem, RestaurantTable, User

CENT = Decimal("0.01")


def money(value) -> float:
    """Round a monetary amount to cents and emit it as a JSON number."""
    if value is None:
        return 0.0
    try:
        return float(Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP))
    except (InvalidOperation, TypeError, ValueError):
        return 0.0


def serialize_user(user: User) -> dict[str, Any]:
    """Serialize a User without its password hash."""
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "role": user.role,
        "isActive": user.is_active,
        "createdAt": isoformat(user.created_at),
    }


def serialize_user_summary(user: User) -> dict[str, Any]:
    return {"id": user.id, "name": user.name, "email": user.email, "role": user.role}


def serialize_menu_item(item: MenuItem) -> dict[str, Any]:
    return {
        "id": item.id,
        "name": item.name,
        "description": item.description or "",
        "price": money(item.price),
        "category": item.category,
        "image": item.image or "",
        "isAvailable": item.is_available,
        "createdAt": isoformat(item.created_at),
    }


def serialize_order_item(order_item: OrderItem) -> dict[str, Any]:
    """Serialize an order line from its snapshot, never from the live menu."""
    return {
        "id": order_item.id,
        "menuItem": order_item.menu_item_id,
        "name": order_item.name,
        "price": money(order_item.price),
        "image": order_item.image or "",
        "quantity": order_item.quantity,
        "specialInstructions": order_item.special_instructions or "",
    }


def serialize_order(order: Order) -> dict[str, Any]:
    return {
        "id": order.id,
        "tableNumber": order.table_number,
        "items": [serialize_order_item(item) for item in order.items],
        "status": order.status,
        "totalAmount": money(order.total_amount),
        "paymentStatus": order.payment_status,
        "waiter": {"id": order.waiter.id, "name": order.waiter.name} if order.waiter else None,
        "createdAt": isoformat(order.created_at),
        "updatedAt": isoformat(order.updated_at),
        "completedAt": isoformat(order.completed_at),
    }


def serialize_table(
    table: RestaurantTable,
    status: str | None = None,
    current_order_id: int | None = None,
) -> dict[str, Any]:
    """
    Serialize a table. ``status``/``current_order_id`` override the stored
    values when the caller derived them from the order ledger.
    """
    return {
        "id": table.id,
        "number": table.number,
        "capacity": table.capacity,
        "status": status or table.status,
        "currentOrder": current_order_id if current_order_id is not None else table.current_order_id,
        "createdAt": isoformat(table.created_at),
    }


def error_response(
    message: str, error: str | None = None, details: Any = None
) -> dict[str, Any]:
    """Create a standardized error response."""
    response: dict[str, Any] = {"message": message}
    if error:
        response["error"] = error
    if details is not None:
        response["details"] = details
    return response
