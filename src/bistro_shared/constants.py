"""
Application constants and enums.
"""

from enum import Enum


class OrderStatus(str, Enum):
    PENDING = "pending"
    PREPARING = "preparing"
    READY = "ready"
    SERVED = "served"

    @classmethod
    def all_values(cls) -> list[str]:
        return [member.value for member in cls]


class PaymentStatus(str, Enum):
    UNPAID = "unpaid"
    PAID = "paid"

    @classmethod
    def all_values(cls) -> list[str]:
        return [member.value for member in cls]


class TableStatus(str, Enum):
    FREE = "free"
    OCCUPIED = "occupied"
    AWAITING_PAYMENT = "awaiting-payment"

    @classmethod
    def all_values(cls) -> list[str]:
        return [member.value for member in cls]


class Roles(str, Enum):
    ADMIN = "admin"
    WAITER = "waiter"
    KITCHEN = "kitchen"
    CASHIER = "cashier"

    @classmethod
    def all_values(cls) -> list[str]:
        return [member.value for member in cls]


class Access(str, Enum):
    """Who may call an endpoint."""

    PUBLIC = "public"
    AUTHENTICATED = "authenticated"
    STAFF = "staff"
    ADMIN = "admin"


class ReportPolicy(str, Enum):
    """Which orders count towards revenue reports."""

    PAID = "paid"
    ALL = "all"


class OrderEventType(str, Enum):
    NEW = "new"
    STATUS_CHANGE = "status-change"
    PAYMENT = "payment"
    UPDATED = "updated"


# Realtime event names
ORDER_UPDATED_EVENT = "order-updated"
TABLE_UPDATED_EVENT = "table-updated"

# Forward order of the kitchen workflow
ORDER_STATUS_SEQUENCE = [
    OrderStatus.PENDING,
    OrderStatus.PREPARING,
    OrderStatus.READY,
    OrderStatus.SERVED,
]

# An unpaid order in any of these statuses keeps its table occupied
ACTIVE_ORDER_STATUSES = {status.value for status in ORDER_STATUS_SEQUENCE}

STAFF_ROLES = set(Roles.all_values())

DEFAULT_HISTORY_LIMIT = 50
MAX_HISTORY_LIMIT = 500
DEFAULT_TOP_SELLING_LIMIT = 10

ALLOWED_IMAGE_EXTENSIONS = {"png", "jpg", "jpeg", "gif", "webp"}
