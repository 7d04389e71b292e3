"""
Table registry.

The ``status`` column of a table is a cache. Whenever tables are read the
effective status is derived from the order ledger: a table with at least one
unpaid order is ``occupied`` whatever the stored value says. Order mutations
call :func:`refresh_table_cache` so the stored value stays close to the
derived one.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from bistro_shared.constants import ACTIVE_ORDER_STATUSES, PaymentStatus, TableStatus
from bistro_shared.db import Database
from bistro_shared.errors import Conflict, NotFound, ValidationError
from bistro_shared.logging_config import get_logger
from bistro_shared.models import Order, RestaurantTable
from bistro_shared.realtime import Notifier
from bistro_shared.serializers import serialize_table

logger = get_logger(__name__)


def _active_orders_query():
    return (
        select(Order.table_number, func.max(Order.id))
        .where(Order.payment_status == PaymentStatus.UNPAID.value)
        .where(Order.status.in_(ACTIVE_ORDER_STATUSES))
        .group_by(Order.table_number)
    )


def active_orders_by_table(session: Session, table_number: int | None = None) -> dict[int, int]:
    """Map table number -> newest unpaid active order id."""
    stmt = _active_orders_query()
    if table_number is not None:
        stmt = stmt.where(Order.table_number == table_number)
    return {number: order_id for number, order_id in session.execute(stmt).all()}


def derive_table_state(
    table: RestaurantTable, active_orders: dict[int, int]
) -> tuple[str, int | None]:
    """Return the effective ``(status, current_order_id)`` of a table."""
    order_id = active_orders.get(table.number)
    if order_id is not None:
        return TableStatus.OCCUPIED.value, order_id
    return table.status, table.current_order_id


def refresh_table_cache(session: Session, table_number: int) -> RestaurantTable | None:
    """
    Recompute the stored status of a table from its unpaid orders.

    Returns the table, or None when no table carries that number (orders may
    reference tables that were never registered).
    """
    table = session.execute(
        select(RestaurantTable).where(RestaurantTable.number == table_number)
    ).scalar_one_or_none()
    if table is None:
        return None

    order_id = active_orders_by_table(session, table_number).get(table_number)
    if order_id is not None:
        table.status = TableStatus.OCCUPIED.value
        table.current_order_id = order_id
    else:
        table.status = TableStatus.FREE.value
        table.current_order_id = None
    return table


def parse_table_status(value: str) -> TableStatus:
    try:
        return TableStatus(value.strip().lower())
    except ValueError as exc:
        allowed = ", ".join(TableStatus.all_values())
        raise ValidationError(f"Invalid table status '{value}'. Allowed: {allowed}") from exc


class TableService:
    def __init__(self, db: Database, notifier: Notifier):
        self.db = db
        self.notifier = notifier

    def _get(self, session: Session, table_id: int) -> RestaurantTable:
        table = session.get(RestaurantTable, table_id)
        if table is None:
            raise NotFound("Table not found")
        return table

    def _number_taken(self, session: Session, number: int, exclude_id: int | None = None) -> bool:
        stmt = select(RestaurantTable.id).where(RestaurantTable.number == number)
        if exclude_id is not None:
            stmt = stmt.where(RestaurantTable.id != exclude_id)
        return session.execute(stmt).first() is not None

    def _effective(self, session: Session, table: RestaurantTable) -> tuple[str, int | None]:
        return derive_table_state(table, active_orders_by_table(session, table.number))

    def _serialize(self, session: Session, table: RestaurantTable) -> dict[str, Any]:
        status, order_id = self._effective(session, table)
        return serialize_table(table, status=status, current_order_id=order_id)

    def list_tables(self) -> list[dict[str, Any]]:
        with self.db.session() as session:
            tables = session.execute(
                select(RestaurantTable).order_by(RestaurantTable.number.asc())
            ).scalars().all()
            active = active_orders_by_table(session)
            result = []
            for table in tables:
                status, order_id = derive_table_state(table, active)
                result.append(serialize_table(table, status=status, current_order_id=order_id))
            return result

    def get_table(self, table_id: int) -> dict[str, Any]:
        with self.db.session() as session:
            return self._serialize(session, self._get(session, table_id))

    def create_table(self, number: int, capacity: int) -> dict[str, Any]:
        with self.db.session() as session:
            if self._number_taken(session, number):
                raise Conflict("Table number already exists")
            table = RestaurantTable(
                number=number, capacity=capacity, status=TableStatus.FREE.value
            )
            session.add(table)
            try:
                session.flush()
            except IntegrityError as exc:
                raise Conflict("Table number already exists") from exc
            logger.info("Table %s created (capacity %s)", number, capacity)
            return self._serialize(session, table)

    def update_table(
        self,
        table_id: int,
        number: int | None = None,
        capacity: int | None = None,
        status: str | None = None,
    ) -> dict[str, Any]:
        """
        Update a table; a change of its effective status is broadcast as
        ``table-updated``.

        Renumbering recomputes the cached status from the orders of the new
        number, since the cache of the old number no longer applies.
        """
        new_status = parse_table_status(status) if status is not None else None

        with self.db.session() as session:
            table = self._get(session, table_id)
            previous_status, _ = self._effective(session, table)

            if number is not None and number != table.number:
                if self._number_taken(session, number, exclude_id=table.id):
                    raise Conflict("Table number already exists")
                table.number = number
                session.flush()
                refresh_table_cache(session, number)
            if capacity is not None:
                table.capacity = capacity
            if new_status is not None:
                table.status = new_status.value
                if new_status == TableStatus.FREE:
                    table.current_order_id = None

            session.flush()
            data = self._serialize(session, table)

        if data["status"] != previous_status:
            self.notifier.emit_table_updated(data["number"], data["status"])
        return data

    def delete_table(self, table_id: int) -> None:
        with self.db.session() as session:
            table = self._get(session, table_id)
            session.delete(table)
            logger.info("Table %s deleted", table.number)
