"""
Realtime event fan-out.

Services publish ``order-updated`` and ``table-updated`` events through a
:class:`Notifier`. Two backends exist:

* :class:`RedisNotifier` publishes JSON envelopes on a Redis pub/sub channel;
  the API turns that channel into a Server-Sent Events stream.
* :class:`NullNotifier` drops every event. Clients of such deployments poll.

Delivery is best effort: publish failures are logged, never raised, and a
client that connects after an event was published never sees it.
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from datetime import UTC, datetime
from typing import Any

from redis import Redis
from redis.exceptions import RedisError

from bistro_shared.config import AppConfig
from bistro_shared.constants import ORDER_UPDATED_EVENT, TABLE_UPDATED_EVENT, OrderEventType
from bistro_shared.logging_config import get_logger

logger = get_logger(__name__)

KEEPALIVE_SECONDS = 15


def _serialize_value(value: Any) -> Any:
    """Ensure payloads can be JSON serialised."""
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (set, tuple)):
        return list(value)
    return str(value)


def _timestamp() -> str:
    return datetime.now(UTC).isoformat()


def build_envelope(event: str, payload: dict[str, Any], room: str | None = None) -> dict[str, Any]:
    return {"event": event, "room": room, "payload": payload, "timestamp": _timestamp()}


def format_sse(event: str, data: dict[str, Any]) -> str:
    return f"event: {event}\ndata: {json.dumps(data, default=_serialize_value)}\n\n"


class Notifier:
    """Interface shared by every realtime backend."""

    supports_push = False

    def publish(self, event: str, payload: dict[str, Any], room: str | None = None) -> None:
        raise NotImplementedError

    def emit_order_updated(self, kind: OrderEventType | str, order: dict[str, Any]) -> None:
        kind_value = kind.value if isinstance(kind, OrderEventType) else kind
        self.publish(ORDER_UPDATED_EVENT, {"type": kind_value, "order": order})

    def emit_table_updated(self, table_number: int, status: str) -> None:
        self.publish(TABLE_UPDATED_EVENT, {"tableNumber": table_number, "status": status})

    def stream(self, room: str | None = None) -> Iterator[str]:
        raise NotImplementedError(f"{type(self).__name__} does not support streaming")

    def close(self) -> None:
        """Release backend resources."""


class NullNotifier(Notifier):
    """Publishing is a no-op; clients fall back to polling."""

    def publish(self, event: str, payload: dict[str, Any], room: str | None = None) -> None:
        logger.debug("Realtime disabled, dropping %s event", event)


class RedisNotifier(Notifier):
    supports_push = True

    def __init__(self, client: Redis, channel: str, keepalive_seconds: int = KEEPALIVE_SECONDS):
        self._client = client
        self.channel = channel
        self.keepalive_seconds = keepalive_seconds

    def publish(self, event: str, payload: dict[str, Any], room: str | None = None) -> None:
        message = build_envelope(event, payload, room)
        try:
            self._client.publish(self.channel, json.dumps(message, default=_serialize_value))
        except RedisError as exc:
            logger.warning("Failed to publish redis event %s: %s", event, exc)

    def stream(self, room: str | None = None) -> Iterator[str]:
        """
        Yield Server-Sent Event frames for messages published from now on.

        Events addressed to a room are only relayed to subscribers of that
        room; events without a room reach everyone. Rooms are a grouping
        hint, not an authorization boundary.
        """
        pubsub = self._client.pubsub(ignore_subscribe_messages=True)
        pubsub.subscribe(self.channel)
        try:
            yield ": connected\n\n"
            while True:
                message = pubsub.get_message(timeout=self.keepalive_seconds)
                if message is None:
                    yield ": keep-alive\n\n"
                    continue
                envelope = self._decode(message.get("data"))
                if envelope is None:
                    continue
                target = envelope.get("room")
                if target and room and target != room:
                    continue
                yield format_sse(envelope.get("event", "message"), envelope.get("payload", {}))
        except RedisError as exc:
            logger.warning("Realtime stream interrupted: %s", exc)
        finally:
            pubsub.close()

    @staticmethod
    def _decode(raw: Any) -> dict[str, Any] | None:
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        try:
            envelope = json.loads(raw)
        except (TypeError, ValueError):
            logger.warning("Ignoring malformed realtime message")
            return None
        return envelope if isinstance(envelope, dict) else None

    def close(self) -> None:
        self._client.close()


def build_notifier(config: AppConfig) -> Notifier:
    """Select the realtime backend for this deployment."""
    if config.push_enabled:
        client = Redis.from_url(config.redis_url, decode_responses=True)
        logger.info("Realtime push enabled on channel %s", config.redis_events_channel)
        return RedisNotifier(client, config.redis_events_channel)
    logger.info("Realtime push disabled; clients poll every %ss", config.poll_interval_seconds)
    return NullNotifier()
