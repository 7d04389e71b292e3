"""
Order State Machine - status transitions for orders.

The kitchen workflow runs ``pending -> preparing -> ready -> served``. By
default any of the four statuses may be set from any other one, because the
waiter and kitchen screens occasionally need to correct a mis-click. With
``strict=True`` only forward moves (or re-setting the current status) are
accepted.

Payment is a separate axis and is not handled here.
"""

from __future__ import annotations

from datetime import datetime

from bistro_shared.constants import ORDER_STATUS_SEQUENCE, OrderStatus
from bistro_shared.datetime_utils import utcnow
from bistro_shared.errors import InvalidStatus, InvalidTransition
from bistro_shared.models import Order


def parse_status(value: str | None) -> OrderStatus:
    """Convert user input into an ``OrderStatus``, rejecting unknown values."""
    try:
        return OrderStatus((value or "").strip().lower())
    except ValueError as exc:
        allowed = ", ".join(OrderStatus.all_values())
        raise InvalidStatus(f"Invalid status '{value}'. Allowed: {allowed}") from exc


class OrderStateMachine:
    def __init__(self, strict: bool = False):
        self.strict = strict

    @staticmethod
    def _rank(status: OrderStatus) -> int:
        return ORDER_STATUS_SEQUENCE.index(status)

    def can_transition(self, current: OrderStatus, target: OrderStatus) -> bool:
        if not self.strict:
            return True
        return self._rank(target) >= self._rank(current)

    def apply(self, order: Order, target: OrderStatus, now: datetime | None = None) -> None:
        """
        Move ``order`` to ``target``.

        Entering ``served`` stamps ``completed_at``; no other transition
        touches it.

        Raises:
            InvalidTransition: In strict mode, when the move goes backwards
        """
        current = parse_status(order.status)
        if not self.can_transition(current, target):
            raise InvalidTransition(
                f"Cannot move order {order.id} from {current.value} back to {target.value}",
                details={"from": current.value, "to": target.value},
            )

        order.status = target.value
        if target == OrderStatus.SERVED:
            order.completed_at = now or utcnow()
        order.updated_at = now or utcnow()
