"""
Realtime API - event stream for kitchen, waiter and customer screens.

With a push backend the stream relays ``order-updated`` and ``table-updated``
events as Server-Sent Events. Without one the stream answers 503 and clients
poll the REST endpoints at the advertised interval.
"""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, Response, jsonify, request, stream_with_context

from bistro_api.decorators import public
from bistro_api.extensions import get_services
from bistro_shared.serializers import error_response

realtime_bp = Blueprint("realtime", __name__)


@realtime_bp.get("/realtime/config")
@public
def realtime_config():
    services = get_services()
    return jsonify(
        {
            "mode": "push" if services.notifier.supports_push else "poll",
            "pollIntervalSeconds": services.config.poll_interval_seconds,
        }
    )


@realtime_bp.get("/realtime/stream")
@public
def realtime_stream():
    """
    Query params:
    - room: optional role name (kitchen, waiter, ...) used to group events
    """
    notifier = get_services().notifier
    if not notifier.supports_push:
        body = error_response("Realtime push is not available; poll instead", "REALTIME_DISABLED")
        return jsonify(body), HTTPStatus.SERVICE_UNAVAILABLE

    room = request.args.get("room") or None
    return Response(
        stream_with_context(notifier.stream(room)),
        mimetype="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )


__all__ = ["realtime_bp"]
