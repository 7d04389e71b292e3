"""
Pytest fixtures for the bistro API tests.

Every test gets a fresh app backed by an in-memory SQLite database and a
notifier that records events instead of publishing them.
"""

from decimal import Decimal

import pytest

from bistro_api.app import create_app
from tests.helpers import RecordingNotifier, bearer, build_config, create_user, login


@pytest.fixture
def make_app(tmp_path):
    """Factory for apps with custom configuration."""
    created = []

    def _make(**overrides):
        app = create_app(build_config(tmp_path, **overrides), RecordingNotifier())
        app.config["TESTING"] = True
        created.append(app)
        return app

    yield _make

    for app in created:
        app.extensions["bistro"].db.dispose()


@pytest.fixture
def app(make_app):
    return make_app()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def services(app):
    return app.extensions["bistro"]


@pytest.fixture
def notifier(services):
    return services.notifier


@pytest.fixture
def admin(services):
    return create_user(services, role="admin", email="admin@bistro.test")


@pytest.fixture
def admin_headers(services, admin):
    return bearer(login(services, admin["email"]))


@pytest.fixture
def waiter(services):
    return create_user(services, role="waiter", email="waiter@bistro.test")


@pytest.fixture
def waiter_headers(services, waiter):
    return bearer(login(services, waiter["email"]))


@pytest.fixture
def make_menu_item(services):
    def _make(name="Pasta", price="16.99", category="Main Course", available=True, image=""):
        return services.menu.create_item(
            {
                "name": name,
                "description": f"{name} of the day",
                "price": Decimal(price),
                "category": category,
                "image": image,
                "is_available": available,
            }
        )

    return _make


@pytest.fixture
def make_table(services):
    def _make(number=5, capacity=4):
        return services.tables.create_table(number, capacity)

    return _make
