"""
Test doubles and shortcuts shared by the test modules.
"""

from datetime import datetime

from bistro_shared.config import AppConfig
from bistro_shared.models import Order
from bistro_shared.realtime import Notifier

TEST_SECRET = "test-secret-key-with-enough-entropy"
DEFAULT_PASSWORD = "secret123"


class RecordingNotifier(Notifier):
    """Collects published events for assertions."""

    supports_push = False

    def __init__(self):
        self.events = []

    def publish(self, event, payload, room=None):
        self.events.append((event, payload))

    def of(self, event):
        return [payload for name, payload in self.events if name == event]


def build_config(tmp_path, **overrides) -> AppConfig:
    values = {
        "app_name": "bistro-test",
        "database_url": "sqlite://",
        "jwt_secret": TEST_SECRET,
        "app_env": "development",
        "log_level": "WARNING",
        "upload_folder": str(tmp_path / "uploads"),
    }
    values.update(overrides)
    return AppConfig(**values)


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def create_user(
    services, role="waiter", email=None, password=DEFAULT_PASSWORD, name=None, active=True
):
    return services.users.create_user(
        name=name or role.title(),
        email=email or f"{role}@bistro.test",
        password=password,
        role=role,
        is_active=active,
    )


def login(services, email, password=DEFAULT_PASSWORD) -> str:
    return services.auth.login(email, password)["token"]


def backdate(services, order_id: int, created_at: datetime) -> None:
    """Move an order's creation time (naive UTC)."""
    with services.db.session() as session:
        order = session.get(Order, order_id)
        order.created_at = created_at
