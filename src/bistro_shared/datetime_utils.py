"""
Datetime helpers.

Timestamps are stored as naive UTC datetimes. Reports work in a configured
"server" time zone and convert their boundaries back to UTC before querying.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


def utcnow() -> datetime:
    """Current UTC time as a naive datetime, matching the DB columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def get_zone(name: str | None) -> ZoneInfo:
    try:
        return ZoneInfo(name or "UTC")
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Unknown time zone '{name}'") from exc


def to_utc_naive(value: datetime) -> datetime:
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def to_local(value: datetime, zone: ZoneInfo) -> datetime:
    """Interpret a stored naive UTC datetime in the given zone."""
    return value.replace(tzinfo=timezone.utc).astimezone(zone)


def local_day_bounds(day: date, zone: ZoneInfo) -> tuple[datetime, datetime]:
    """Return the [start, end) UTC range of a local calendar day."""
    start = datetime.combine(day, time.min, tzinfo=zone)
    end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=zone)
    return to_utc_naive(start), to_utc_naive(end)


def local_month_bounds(year: int, month: int, zone: ZoneInfo) -> tuple[datetime, datetime]:
    """Return the [start, end) UTC range of a local calendar month."""
    start = datetime(year, month, 1, tzinfo=zone)
    if month == 12:
        end = datetime(year + 1, 1, 1, tzinfo=zone)
    else:
        end = datetime(year, month + 1, 1, tzinfo=zone)
    return to_utc_naive(start), to_utc_naive(end)


def isoformat(value: datetime | None) -> str | None:
    if value is None:
        return None
    return value.isoformat() + "Z"


def parse_date(value: str | None, field: str = "date") -> date | None:
    """Parse a YYYY-MM-DD string; empty values give None."""
    if not value:
        return None
    try:
        return datetime.strptime(value.strip(), "%Y-%m-%d").date()
    except ValueError as exc:
        raise ValueError(f"{field} must use the YYYY-MM-DD format") from exc
