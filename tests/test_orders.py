"""
Tests for the order ledger: placement, snapshots, status and payment.
"""

from datetime import datetime, timedelta

import pytest

from bistro_shared.constants import ORDER_UPDATED_EVENT, TABLE_UPDATED_EVENT
from bistro_shared.datetime_utils import utcnow
from tests.helpers import bearer, create_user, login


def _place(client, table_number, *lines, headers=None):
    items = [{"menuItem": item_id, "quantity": quantity} for item_id, quantity in lines]
    return client.post(
        "/api/orders", json={"tableNumber": table_number, "items": items}, headers=headers
    )


def _parse_ts(value):
    return datetime.fromisoformat(value.rstrip("Z"))


# ==============================================================================
# ORDER PLACEMENT
# ==============================================================================


class TestCreateOrder:
    """Tests for POST /api/orders."""

    def test_total_is_sum_of_lines(self, client, make_menu_item, make_table):
        """Two pastas at 16.99 cost 33.98."""
        make_table(number=5)
        pasta = make_menu_item(name="Pasta", price="16.99")

        response = _place(client, 5, (pasta["id"], 2))

        assert response.status_code == 201
        order = response.get_json()
        assert order["totalAmount"] == 33.98
        assert order["status"] == "pending"
        assert order["paymentStatus"] == "unpaid"
        assert order["completedAt"] is None
        assert order["waiter"] is None
        assert order["items"][0]["name"] == "Pasta"
        assert order["items"][0]["price"] == 16.99
        assert order["items"][0]["quantity"] == 2

    def test_table_becomes_occupied(self, client, make_menu_item, make_table):
        table = make_table(number=5)
        pasta = make_menu_item()

        order = _place(client, 5, (pasta["id"], 1)).get_json()

        tables = {t["number"]: t for t in client.get("/api/tables").get_json()}
        assert tables[5]["status"] == "occupied"
        assert tables[5]["currentOrder"] == order["id"]
        assert tables[5]["id"] == table["id"]

    def test_emits_new_order_and_table_events(self, client, notifier, make_menu_item, make_table):
        make_table(number=3)
        pasta = make_menu_item()

        order = _place(client, 3, (pasta["id"], 1)).get_json()

        order_events = notifier.of(ORDER_UPDATED_EVENT)
        assert order_events[-1]["type"] == "new"
        assert order_events[-1]["order"]["id"] == order["id"]
        assert notifier.of(TABLE_UPDATED_EVENT)[-1] == {"tableNumber": 3, "status": "occupied"}

    def test_order_for_unregistered_table(self, client, notifier, make_menu_item):
        """Orders may name a table that was never registered."""
        pasta = make_menu_item()

        response = _place(client, 42, (pasta["id"], 1))

        assert response.status_code == 201
        assert notifier.of(TABLE_UPDATED_EVENT) == []

    def test_special_instructions_are_kept(self, client, make_menu_item):
        pasta = make_menu_item()
        response = client.post(
            "/api/orders",
            json={
                "tableNumber": 1,
                "items": [
                    {"menuItem": pasta["id"], "quantity": 1, "specialInstructions": "no cheese"}
                ],
            },
        )
        assert response.get_json()["items"][0]["specialInstructions"] == "no cheese"

    def test_waiter_token_assigns_waiter(self, client, make_menu_item, waiter, waiter_headers):
        pasta = make_menu_item()

        order = _place(client, 2, (pasta["id"], 1), headers=waiter_headers).get_json()

        assert order["waiter"] == {"id": waiter["id"], "name": waiter["name"]}

    def test_non_waiter_token_does_not_assign(self, client, make_menu_item, admin_headers):
        pasta = make_menu_item()
        order = _place(client, 2, (pasta["id"], 1), headers=admin_headers).get_json()
        assert order["waiter"] is None


class TestCreateOrderRejections:
    """A rejected order writes nothing: no order and no table change."""

    def _assert_nothing_written(self, client, services, notifier):
        assert services.orders.list_orders() == []
        tables = {t["number"]: t for t in client.get("/api/tables").get_json()}
        assert tables[5]["status"] == "free"
        assert tables[5]["currentOrder"] is None
        assert notifier.events == []

    def test_empty_items(self, client, services, notifier, make_table):
        make_table(number=5)
        response = client.post("/api/orders", json={"tableNumber": 5, "items": []})
        assert response.status_code == 400
        assert response.get_json()["error"] == "VALIDATION_ERROR"
        self._assert_nothing_written(client, services, notifier)

    def test_invalid_table_number(self, client, make_menu_item):
        pasta = make_menu_item()
        response = _place(client, 0, (pasta["id"], 1))
        assert response.status_code == 400

    def test_zero_quantity(self, client, make_menu_item):
        pasta = make_menu_item()
        response = _place(client, 1, (pasta["id"], 0))
        assert response.status_code == 400

    def test_missing_menu_item(self, client, services, notifier, make_menu_item, make_table):
        make_table(number=5)
        pasta = make_menu_item()
        notifier.events.clear()

        response = _place(client, 5, (pasta["id"], 1), (9999, 1))

        assert response.status_code == 400
        assert response.get_json()["error"] == "MENU_ITEM_NOT_FOUND"
        self._assert_nothing_written(client, services, notifier)

    def test_unavailable_menu_item(self, client, services, notifier, make_menu_item, make_table):
        make_table(number=5)
        pasta = make_menu_item()
        soup = make_menu_item(name="Soup", price="5.00", available=False)
        notifier.events.clear()

        response = _place(client, 5, (pasta["id"], 1), (soup["id"], 1))

        assert response.status_code == 400
        body = response.get_json()
        assert body["error"] == "MENU_ITEM_UNAVAILABLE"
        assert "Soup" in body["message"]
        self._assert_nothing_written(client, services, notifier)


# ==============================================================================
# SNAPSHOTS
# ==============================================================================


class TestLineItemSnapshot:
    """Orders keep the menu data captured when they were placed."""

    def test_menu_edit_does_not_change_history(
        self, client, services, make_menu_item, waiter_headers
    ):
        pasta = make_menu_item(name="Pasta", price="16.99", image="https://img.test/pasta.png")
        order = _place(client, 5, (pasta["id"], 2)).get_json()

        services.menu.update_item(pasta["id"], {"name": "Fancy Pasta", "price": "30.00"})

        fetched = client.get(f"/api/orders/{order['id']}", headers=waiter_headers).get_json()
        assert fetched["items"] == order["items"]
        assert fetched["items"][0]["name"] == "Pasta"
        assert fetched["items"][0]["image"] == "https://img.test/pasta.png"
        assert fetched["totalAmount"] == 33.98

    def test_menu_delete_does_not_change_history(
        self, client, services, make_menu_item, waiter_headers
    ):
        pasta = make_menu_item()
        order = _place(client, 5, (pasta["id"], 1)).get_json()

        services.menu.delete_item(pasta["id"])

        fetched = client.get(f"/api/orders/{order['id']}", headers=waiter_headers)
        assert fetched.status_code == 200
        assert fetched.get_json()["items"] == order["items"]


# ==============================================================================
# STATUS
# ==============================================================================


class TestAdvanceStatus:
    """Tests for PUT /api/orders/<id>/status."""

    @pytest.fixture
    def order(self, client, make_menu_item):
        pasta = make_menu_item()
        return _place(client, 5, (pasta["id"], 1)).get_json()

    def test_served_sets_completed_at(self, client, order):
        client.put(f"/api/orders/{order['id']}/status", json={"status": "ready"})

        response = client.put(f"/api/orders/{order['id']}/status", json={"status": "served"})

        assert response.status_code == 200
        body = response.get_json()
        assert body["status"] == "served"
        assert abs(_parse_ts(body["completedAt"]) - utcnow()) < timedelta(seconds=1)

    def test_other_statuses_leave_completed_at_empty(self, client, order):
        for status in ("preparing", "ready"):
            body = client.put(
                f"/api/orders/{order['id']}/status", json={"status": status}
            ).get_json()
            assert body["status"] == status
            assert body["completedAt"] is None

    def test_emits_status_change(self, client, notifier, order):
        client.put(f"/api/orders/{order['id']}/status", json={"status": "preparing"})
        event = notifier.of(ORDER_UPDATED_EVENT)[-1]
        assert event["type"] == "status-change"
        assert event["order"]["status"] == "preparing"

    def test_invalid_status(self, client, order):
        response = client.put(f"/api/orders/{order['id']}/status", json={"status": "cooking"})
        assert response.status_code == 400
        assert response.get_json()["error"] == "INVALID_STATUS"

    def test_unknown_order(self, client):
        response = client.put("/api/orders/999/status", json={"status": "ready"})
        assert response.status_code == 404

    def test_backward_move_allowed_by_default(self, client, order):
        client.put(f"/api/orders/{order['id']}/status", json={"status": "ready"})
        response = client.put(f"/api/orders/{order['id']}/status", json={"status": "pending"})
        assert response.status_code == 200
        assert response.get_json()["status"] == "pending"


class TestStrictTransitions:
    """STRICT_ORDER_TRANSITIONS only allows forward moves."""

    @pytest.fixture
    def strict_client(self, make_app):
        return make_app(strict_order_transitions=True).test_client()

    @pytest.fixture
    def order(self, strict_client):
        services = strict_client.application.extensions["bistro"]
        pasta = services.menu.create_item(
            {"name": "Pasta", "price": "16.99", "category": "Main Course"}
        )
        return _place(strict_client, 5, (pasta["id"], 1)).get_json()

    def test_forward_and_repeat_allowed(self, strict_client, order):
        url = f"/api/orders/{order['id']}/status"
        assert strict_client.put(url, json={"status": "ready"}).status_code == 200
        assert strict_client.put(url, json={"status": "ready"}).status_code == 200

    def test_backward_rejected(self, strict_client, order):
        url = f"/api/orders/{order['id']}/status"
        strict_client.put(url, json={"status": "ready"})

        response = strict_client.put(url, json={"status": "preparing"})

        assert response.status_code == 400
        body = response.get_json()
        assert body["error"] == "INVALID_TRANSITION"
        assert body["details"] == {"from": "ready", "to": "preparing"}


# ==============================================================================
# PAYMENT
# ==============================================================================


class TestPayment:
    """Tests for PUT /api/orders/<id>/payment."""

    def test_paid_frees_table(self, client, notifier, make_menu_item, make_table):
        make_table(number=5)
        pasta = make_menu_item()
        order = _place(client, 5, (pasta["id"], 1)).get_json()

        response = client.put(f"/api/orders/{order['id']}/payment", json={"paymentStatus": "paid"})

        assert response.status_code == 200
        assert response.get_json()["paymentStatus"] == "paid"
        tables = {t["number"]: t for t in client.get("/api/tables").get_json()}
        assert tables[5]["status"] == "free"
        assert tables[5]["currentOrder"] is None
        assert notifier.of(TABLE_UPDATED_EVENT)[-1] == {"tableNumber": 5, "status": "free"}
        assert notifier.of(ORDER_UPDATED_EVENT)[-1]["type"] == "payment"

    def test_other_unpaid_order_keeps_table_occupied(self, client, make_menu_item, make_table):
        make_table(number=5)
        pasta = make_menu_item()
        first = _place(client, 5, (pasta["id"], 1)).get_json()
        second = _place(client, 5, (pasta["id"], 1)).get_json()

        client.put(f"/api/orders/{first['id']}/payment", json={"paymentStatus": "paid"})

        tables = {t["number"]: t for t in client.get("/api/tables").get_json()}
        assert tables[5]["status"] == "occupied"
        assert tables[5]["currentOrder"] == second["id"]

    def test_payment_is_independent_of_status(self, client, make_menu_item):
        pasta = make_menu_item()
        order = _place(client, 5, (pasta["id"], 1)).get_json()

        paid = client.put(
            f"/api/orders/{order['id']}/payment", json={"paymentStatus": "paid"}
        ).get_json()

        assert paid["status"] == "pending"
        assert paid["completedAt"] is None

    def test_invalid_payment_status(self, client, make_menu_item):
        pasta = make_menu_item()
        order = _place(client, 5, (pasta["id"], 1)).get_json()
        response = client.put(
            f"/api/orders/{order['id']}/payment", json={"paymentStatus": "refunded"}
        )
        assert response.status_code == 400

    def test_unknown_order(self, client):
        response = client.put("/api/orders/999/payment", json={"paymentStatus": "paid"})
        assert response.status_code == 404


# ==============================================================================
# QUERIES AND UPDATES
# ==============================================================================


class TestQueryOrders:
    """Tests for GET /api/orders."""

    @pytest.fixture
    def orders(self, client, make_menu_item):
        pasta = make_menu_item()
        placed = [_place(client, n, (pasta["id"], 1)).get_json() for n in (1, 2, 1)]
        client.put(f"/api/orders/{placed[0]['id']}/status", json={"status": "ready"})
        return placed

    def test_newest_first(self, client, orders):
        ids = [o["id"] for o in client.get("/api/orders").get_json()]
        assert ids == [o["id"] for o in reversed(orders)]

    def test_filter_by_multiple_statuses(self, client, orders):
        result = client.get("/api/orders?status=ready,served").get_json()
        assert [o["id"] for o in result] == [orders[0]["id"]]

        result = client.get("/api/orders?status=pending,ready").get_json()
        assert len(result) == 3

    def test_filter_by_table(self, client, orders):
        result = client.get("/api/orders?tableNumber=1").get_json()
        assert [o["id"] for o in result] == [orders[2]["id"], orders[0]["id"]]

    def test_invalid_filter(self, client, orders):
        assert client.get("/api/orders?status=cooking").status_code == 400
        assert client.get("/api/orders?tableNumber=abc").status_code == 400


class TestGetAndUpdateOrder:
    """Tests for GET/PUT /api/orders/<id>."""

    def test_requires_token(self, client, make_menu_item):
        pasta = make_menu_item()
        order = _place(client, 1, (pasta["id"], 1)).get_json()
        assert client.get(f"/api/orders/{order['id']}").status_code == 401

    def test_unknown_order(self, client, waiter_headers):
        assert client.get("/api/orders/999", headers=waiter_headers).status_code == 404

    def test_add_items_skips_unavailable(
        self, client, notifier, make_menu_item, waiter_headers
    ):
        pasta = make_menu_item(price="16.99")
        cola = make_menu_item(name="Cola", price="2.50", category="Beverages")
        soup = make_menu_item(name="Soup", price="5.00", available=False)
        order = _place(client, 1, (pasta["id"], 1)).get_json()

        response = client.put(
            f"/api/orders/{order['id']}",
            json={
                "items": [
                    {"menuItem": cola["id"], "quantity": 2},
                    {"menuItem": soup["id"], "quantity": 1},
                    {"menuItem": 9999, "quantity": 1},
                ]
            },
            headers=waiter_headers,
        )

        assert response.status_code == 200
        body = response.get_json()
        assert [item["name"] for item in body["items"]] == ["Pasta", "Cola"]
        assert body["totalAmount"] == 21.99
        assert notifier.of(ORDER_UPDATED_EVENT)[-1]["type"] == "updated"

    def test_inactive_user_token_rejected(self, client, services):
        user = create_user(services, role="kitchen", email="cook@bistro.test")
        headers = bearer(login(services, user["email"]))
        services.users.update_user(user["id"], {"is_active": False})

        assert client.get("/api/orders/1", headers=headers).status_code == 401
