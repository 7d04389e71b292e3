"""
Order ledger.

Orders carry two independent axes: the kitchen ``status`` driven by
:class:`~bistro_shared.services.order_state_machine.OrderStateMachine` and the
``payment_status``. Every line item is a snapshot of the menu item taken when
the line was added, so menu edits never rewrite order history.

Order writes and the table cache refresh share one database transaction.
Realtime events are published after the commit and may be lost.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from bistro_shared.constants import OrderEventType, PaymentStatus, Roles
from bistro_shared.datetime_utils import utcnow
from bistro_shared.db import Database
from bistro_shared.errors import (
    MenuItemNotFound,
    MenuItemUnavailable,
    NotFound,
    ValidationError,
)
from bistro_shared.logging_config import get_logger
from bistro_shared.models import MenuItem, Order, OrderItem, User
from bistro_shared.realtime import Notifier
from bistro_shared.serializers import serialize_order
from bistro_shared.services.order_state_machine import OrderStateMachine, parse_status
from bistro_shared.services.table_service import refresh_table_cache

logger = get_logger(__name__)


def snapshot_line(
    menu_item: MenuItem, quantity: int, special_instructions: str = "", position: int = 0
) -> OrderItem:
    """Copy the display fields of a menu item into a new order line."""
    return OrderItem(
        position=position,
        menu_item_id=menu_item.id,
        name=menu_item.name,
        price=menu_item.price,
        image=menu_item.image or "",
        quantity=quantity,
        special_instructions=special_instructions or "",
    )


def parse_payment_status(value: str | None) -> PaymentStatus:
    try:
        return PaymentStatus((value or "").strip().lower())
    except ValueError as exc:
        raise ValidationError(
            f"Invalid payment status '{value}'. Allowed: paid, unpaid"
        ) from exc


def parse_status_filter(raw: str | None) -> list[str]:
    """Split a comma separated status filter, validating each value."""
    if not raw:
        return []
    return [parse_status(part).value for part in raw.split(",") if part.strip()]


class OrderService:
    def __init__(
        self,
        db: Database,
        notifier: Notifier,
        state_machine: OrderStateMachine | None = None,
    ):
        self.db = db
        self.notifier = notifier
        self.state_machine = state_machine or OrderStateMachine()

    def _get(self, session: Session, order_id: int) -> Order:
        order = session.get(Order, order_id)
        if order is None:
            raise NotFound("Order not found")
        return order

    def _build_lines(self, session: Session, lines: Iterable[dict[str, Any]]) -> list[OrderItem]:
        """
        Resolve every requested line before anything is written.

        Raises:
            MenuItemNotFound: A line references an unknown menu item
            MenuItemUnavailable: A line references an unavailable menu item
        """
        built = []
        for position, line in enumerate(lines):
            menu_item = session.get(MenuItem, line["menu_item"])
            if menu_item is None:
                raise MenuItemNotFound(f"Menu item {line['menu_item']} not found")
            if not menu_item.is_available:
                raise MenuItemUnavailable(f"Menu item {menu_item.name} is not available")
            built.append(
                snapshot_line(
                    menu_item,
                    line.get("quantity", 1),
                    line.get("special_instructions", ""),
                    position,
                )
            )
        return built

    def create_order(
        self,
        table_number: int,
        items: list[dict[str, Any]],
        caller: User | None = None,
    ) -> dict[str, Any]:
        """
        Place a new order for a table.

        Args:
            table_number: Table the order belongs to (>= 1)
            items: Lines as ``{"menu_item", "quantity", "special_instructions"}``
            caller: Authenticated user placing the order, if any. Waiters
                become the order's waiter.

        Returns:
            The serialized order
        """
        if table_number < 1:
            raise ValidationError("Valid table number is required")
        if not items:
            raise ValidationError("At least one item is required")

        with self.db.session() as session:
            order_items = self._build_lines(session, items)

            order = Order(
                table_number=table_number,
                items=order_items,
                waiter_id=caller.id if caller and caller.role == Roles.WAITER.value else None,
            )
            order.recompute_total()
            session.add(order)
            session.flush()

            table = refresh_table_cache(session, table_number)
            table_status = table.status if table else None
            data = serialize_order(order)

        logger.info(
            "Order %s created for table %s (total %s)",
            data["id"],
            table_number,
            data["totalAmount"],
        )
        self.notifier.emit_order_updated(OrderEventType.NEW, data)
        if table_status:
            self.notifier.emit_table_updated(table_number, table_status)
        return data

    def get_order(self, order_id: int) -> dict[str, Any]:
        with self.db.session() as session:
            return serialize_order(self._get(session, order_id))

    def add_items(self, order_id: int, items: list[dict[str, Any]]) -> dict[str, Any]:
        """
        Append lines to an existing order.

        Unknown or unavailable menu items are skipped rather than rejected,
        since the order already exists and the remaining lines still apply.
        """
        with self.db.session() as session:
            order = self._get(session, order_id)
            position = len(order.items)
            added = 0
            for line in items:
                menu_item = session.get(MenuItem, line["menu_item"])
                if menu_item is None or not menu_item.is_available:
                    logger.info(
                        "Skipping menu item %s for order %s", line["menu_item"], order_id
                    )
                    continue
                order.items.append(
                    snapshot_line(
                        menu_item,
                        line.get("quantity", 1),
                        line.get("special_instructions", ""),
                        position,
                    )
                )
                position += 1
                added += 1

            if added:
                order.recompute_total()
                order.updated_at = utcnow()
                session.flush()
            data = serialize_order(order)

        self.notifier.emit_order_updated(OrderEventType.UPDATED, data)
        return data

    def advance_status(self, order_id: int, status: str) -> dict[str, Any]:
        target = parse_status(status)
        with self.db.session() as session:
            order = self._get(session, order_id)
            self.state_machine.apply(order, target)
            session.flush()
            data = serialize_order(order)

        logger.info("Order %s moved to %s", order_id, target.value)
        self.notifier.emit_order_updated(OrderEventType.STATUS_CHANGE, data)
        return data

    def set_payment_status(self, order_id: int, payment_status: str) -> dict[str, Any]:
        """
        Record a payment change. Paying an order frees its table unless
        another unpaid order still holds it.
        """
        target = parse_payment_status(payment_status)
        table_status = None
        with self.db.session() as session:
            order = self._get(session, order_id)
            order.payment_status = target.value
            order.updated_at = utcnow()
            session.flush()

            if target == PaymentStatus.PAID:
                table = refresh_table_cache(session, order.table_number)
                table_status = table.status if table else None
            data = serialize_order(order)

        logger.info("Order %s payment marked %s", order_id, target.value)
        if table_status:
            self.notifier.emit_table_updated(data["tableNumber"], table_status)
        self.notifier.emit_order_updated(OrderEventType.PAYMENT, data)
        return data

    def list_orders(
        self, status: str | None = None, table_number: int | None = None
    ) -> list[dict[str, Any]]:
        """Orders matching any of the given statuses, newest first."""
        statuses = parse_status_filter(status)
        stmt = select(Order)
        if statuses:
            stmt = stmt.where(Order.status.in_(statuses))
        if table_number is not None:
            stmt = stmt.where(Order.table_number == table_number)
        stmt = stmt.order_by(Order.created_at.desc(), Order.id.desc())

        with self.db.session() as session:
            orders = session.execute(stmt).unique().scalars().all()
            return [serialize_order(order) for order in orders]
