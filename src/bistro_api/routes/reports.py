"""
Reports API - revenue and sales figures for admins.
"""

from __future__ import annotations

from flask import Blueprint, jsonify, request

from bistro_api.decorators import admin_required
from bistro_api.extensions import get_services
from bistro_api.routes._helpers import query_date
from bistro_shared.errors import ValidationError
from bistro_shared.services.report_service import REPORT_TYPES
from bistro_shared.validation import parse_int

reports_bp = Blueprint("reports", __name__)


def _daily():
    return get_services().reports.daily(query_date("date"))


def _monthly():
    return get_services().reports.monthly(
        year=parse_int(request.args.get("year"), "year"),
        month=parse_int(request.args.get("month"), "month"),
    )


def _top_selling():
    return get_services().reports.top_selling(
        limit=parse_int(request.args.get("limit"), "limit"),
        start_date=query_date("startDate"),
        end_date=query_date("endDate"),
    )


def _history():
    return get_services().reports.history(
        limit=parse_int(request.args.get("limit"), "limit"),
        start_date=query_date("startDate"),
        end_date=query_date("endDate"),
        status=request.args.get("status"),
    )


_BUILDERS = {
    "daily": _daily,
    "monthly": _monthly,
    "top-selling": _top_selling,
    "history": _history,
}


@reports_bp.get("/reports")
@admin_required
def report_by_type():
    """Dispatch ``?type=daily|monthly|top-selling|history``."""
    report_type = (request.args.get("type") or "").strip().lower()
    if report_type not in REPORT_TYPES:
        raise ValidationError(f"type must be one of: {', '.join(REPORT_TYPES)}")
    return jsonify(_BUILDERS[report_type]())


@reports_bp.get("/reports/daily")
@admin_required
def daily_report():
    """Query params: date (YYYY-MM-DD, defaults to today)."""
    return jsonify(_daily())


@reports_bp.get("/reports/monthly")
@admin_required
def monthly_report():
    """Query params: year, month (1-12); default to the current month."""
    return jsonify(_monthly())


@reports_bp.get("/reports/top-selling")
@admin_required
def top_selling_report():
    """Query params: limit (default 10), startDate, endDate."""
    return jsonify(_top_selling())


@reports_bp.get("/reports/history")
@admin_required
def order_history():
    """Query params: limit (default 50), startDate, endDate, status."""
    return jsonify(_history())


__all__ = ["reports_bp"]
