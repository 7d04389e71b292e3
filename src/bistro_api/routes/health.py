"""
Health checks.
"""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, jsonify

from bistro_api.extensions import get_services

health_bp = Blueprint("health", __name__)


@health_bp.get("/health")
def health():
    services = get_services()
    database_ok = services.db.ping()
    body = {
        "status": "ok" if database_ok else "degraded",
        "service": services.config.app_name,
        "database": "ok" if database_ok else "unavailable",
        "realtime": "push" if services.notifier.supports_push else "poll",
    }
    return jsonify(body), HTTPStatus.OK if database_ok else HTTPStatus.SERVICE_UNAVAILABLE


__all__ = ["health_bp"]
