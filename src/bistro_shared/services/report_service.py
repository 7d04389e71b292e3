"""
Sales reports.

Reports are computed on demand from the order ledger; nothing is stored.
Which orders count towards revenue is a deployment setting:

* ``paid`` (default): only paid orders, for financial figures.
* ``all``: every order, for kitchen throughput.

Calendar days and months are evaluated in the configured report time zone.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import select

from bistro_shared.constants import (
    DEFAULT_HISTORY_LIMIT,
    DEFAULT_TOP_SELLING_LIMIT,
    PaymentStatus,
    ReportPolicy,
)
from bistro_shared.datetime_utils import (
    get_zone,
    local_day_bounds,
    local_month_bounds,
    to_local,
    utcnow,
)
from bistro_shared.db import Database
from bistro_shared.errors import ValidationError
from bistro_shared.models import Order
from bistro_shared.serializers import money, serialize_order
from bistro_shared.services.order_service import parse_status_filter
from bistro_shared.validation import validate_limit

REPORT_TYPES = ("daily", "monthly", "top-selling", "history")


def summarize_revenue(orders: Iterable[Order]) -> tuple[Decimal, int]:
    total = Decimal("0")
    count = 0
    for order in orders:
        total += Decimal(order.total_amount or 0)
        count += 1
    return total, count


def bucket_by_day(orders: Iterable[Order], zone) -> dict[int, dict[str, Any]]:
    """Group revenue and order counts by local day of month."""
    buckets: dict[int, dict[str, Any]] = {}
    for order in orders:
        day = to_local(order.created_at, zone).day
        bucket = buckets.setdefault(day, {"revenue": Decimal("0"), "orders": 0})
        bucket["revenue"] += Decimal(order.total_amount or 0)
        bucket["orders"] += 1
    return {
        day: {"revenue": money(bucket["revenue"]), "orders": bucket["orders"]}
        for day, bucket in sorted(buckets.items())
    }


def rank_items(orders: Iterable[Order], limit: int) -> list[dict[str, Any]]:
    """
    Total quantity and revenue per menu item across all lines, sorted by
    quantity descending. Names come from the first snapshot seen.
    """
    totals: dict[int, dict[str, Any]] = {}
    for order in orders:
        for line in order.items:
            entry = totals.setdefault(
                line.menu_item_id,
                {
                    "menuItem": line.menu_item_id,
                    "name": line.name,
                    "quantity": 0,
                    "revenue": Decimal("0"),
                },
            )
            entry["quantity"] += line.quantity
            entry["revenue"] += line.line_total

    ranked = sorted(totals.values(), key=lambda entry: (-entry["quantity"], entry["menuItem"]))
    return [{**entry, "revenue": money(entry["revenue"])} for entry in ranked[:limit]]


class ReportService:
    def __init__(
        self,
        db: Database,
        policy: ReportPolicy | str = ReportPolicy.PAID,
        timezone_name: str = "UTC",
    ):
        self.db = db
        self.policy = ReportPolicy(policy)
        self.timezone_name = timezone_name
        self.zone = get_zone(timezone_name)

    def _revenue_orders(self, start: datetime | None, end: datetime | None):
        stmt = select(Order)
        if start is not None:
            stmt = stmt.where(Order.created_at >= start)
        if end is not None:
            stmt = stmt.where(Order.created_at < end)
        if self.policy == ReportPolicy.PAID:
            stmt = stmt.where(Order.payment_status == PaymentStatus.PAID.value)
        return stmt.order_by(Order.created_at.asc(), Order.id.asc())

    def _today(self) -> date:
        return to_local(utcnow(), self.zone).date()

    def _range(
        self, start_date: date | None, end_date: date | None
    ) -> tuple[datetime | None, datetime | None]:
        """UTC bounds covering the local days from ``start_date`` through ``end_date``."""
        if start_date and end_date and start_date > end_date:
            raise ValidationError("startDate must not be after endDate")
        start = local_day_bounds(start_date, self.zone)[0] if start_date else None
        end = local_day_bounds(end_date, self.zone)[1] if end_date else None
        return start, end

    def daily(self, day: date | None = None) -> dict[str, Any]:
        day = day or self._today()
        start, end = local_day_bounds(day, self.zone)
        with self.db.session() as session:
            orders = session.execute(self._revenue_orders(start, end)).unique().scalars().all()
            total, count = summarize_revenue(orders)
            return {
                "date": day.isoformat(),
                "policy": self.policy.value,
                "timezone": self.timezone_name,
                "totalRevenue": money(total),
                "totalOrders": count,
                "orders": [serialize_order(order) for order in orders],
            }

    def monthly(self, year: int | None = None, month: int | None = None) -> dict[str, Any]:
        today = self._today()
        year = year or today.year
        month = month or today.month
        if not 1 <= month <= 12:
            raise ValidationError("month must be between 1 and 12")
        if not 1 <= year <= 9999:
            raise ValidationError("year is out of range")

        start, end = local_month_bounds(year, month, self.zone)
        with self.db.session() as session:
            orders = session.execute(self._revenue_orders(start, end)).unique().scalars().all()
            total, count = summarize_revenue(orders)
            return {
                "year": year,
                "month": month,
                "policy": self.policy.value,
                "timezone": self.timezone_name,
                "totalRevenue": money(total),
                "totalOrders": count,
                "dailyBreakdown": bucket_by_day(orders, self.zone),
            }

    def top_selling(
        self,
        limit: int | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> dict[str, Any]:
        limit = validate_limit(limit, DEFAULT_TOP_SELLING_LIMIT)
        start, end = self._range(start_date, end_date)
        with self.db.session() as session:
            orders = session.execute(self._revenue_orders(start, end)).unique().scalars().all()
            return {
                "policy": self.policy.value,
                "limit": limit,
                "startDate": start_date.isoformat() if start_date else None,
                "endDate": end_date.isoformat() if end_date else None,
                "items": rank_items(orders, limit),
            }

    def history(
        self,
        limit: int | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
        status: str | None = None,
    ) -> list[dict[str, Any]]:
        """Most recent orders regardless of payment, newest first."""
        limit = validate_limit(limit, DEFAULT_HISTORY_LIMIT)
        start, end = self._range(start_date, end_date)
        statuses = parse_status_filter(status)

        stmt = select(Order)
        if start is not None:
            stmt = stmt.where(Order.created_at >= start)
        if end is not None:
            stmt = stmt.where(Order.created_at < end)
        if statuses:
            stmt = stmt.where(Order.status.in_(statuses))
        stmt = stmt.order_by(Order.created_at.desc(), Order.id.desc()).limit(limit)

        with self.db.session() as session:
            return [serialize_order(order) for order in session.execute(stmt).unique().scalars()]
