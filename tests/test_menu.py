"""
Tests for the menu catalog.
"""

import io

import pytest
from werkzeug.datastructures import FileStorage

from bistro_shared.services import menu_service


class TestPublicMenu:
    """Tests for the public menu reads."""

    @pytest.fixture(autouse=True)
    def menu(self, make_menu_item):
        make_menu_item(name="Tiramisu", price="7.99", category="Desserts")
        make_menu_item(name="Pasta", price="16.99", category="Main Course")
        make_menu_item(name="Cheesecake", price="8.99", category="Desserts")
        make_menu_item(name="Soup", price="5.00", category="Starters", available=False)

    def test_sorted_by_category_then_name(self, client):
        names = [item["name"] for item in client.get("/api/menu").get_json()]
        assert names == ["Cheesecake", "Tiramisu", "Pasta"]

    def test_filter_by_category(self, client):
        items = client.get("/api/menu", query_string={"category": "Desserts"}).get_json()
        assert {item["category"] for item in items} == {"Desserts"}
        assert len(items) == 2

    def test_unavailable_hidden_from_public(self, client):
        names = [i["name"] for i in client.get("/api/menu?includeUnavailable=true").get_json()]
        assert "Soup" not in names

    def test_admin_can_include_unavailable(self, client, admin_headers):
        items = client.get("/api/menu?includeUnavailable=true", headers=admin_headers).get_json()
        assert "Soup" in [item["name"] for item in items]

    def test_categories(self, client):
        categories = client.get("/api/menu/categories").get_json()
        assert sorted(categories) == ["Desserts", "Main Course", "Starters"]

    def test_menu_item_shape(self, client):
        item = client.get("/api/menu", query_string={"category": "Main Course"}).get_json()[0]
        assert item["price"] == 16.99
        assert item["isAvailable"] is True
        assert item["image"] == ""
        assert item["createdAt"].endswith("Z")


class TestMenuMutations:
    """Admin edits of the catalog."""

    def test_create_json(self, client, admin_headers):
        response = client.post(
            "/api/menu",
            json={
                "name": "Burger",
                "price": 11.5,
                "category": "Main Course",
                "image": "https://img.test/burger.png",
            },
            headers=admin_headers,
        )
        assert response.status_code == 201
        body = response.get_json()
        assert body["price"] == 11.5
        assert body["image"] == "https://img.test/burger.png"

    def test_negative_price_rejected(self, client, admin_headers):
        response = client.post(
            "/api/menu",
            json={"name": "Burger", "price": -1, "category": "Main Course"},
            headers=admin_headers,
        )
        assert response.status_code == 400

    def test_requires_admin(self, client, waiter_headers):
        response = client.post(
            "/api/menu",
            json={"name": "Burger", "price": 5, "category": "Main Course"},
            headers=waiter_headers,
        )
        assert response.status_code == 403

    def test_upload_and_replace_image(self, client, app, admin_headers, tmp_path):
        response = client.post(
            "/api/menu",
            data={
                "name": "Pizza",
                "price": "14.99",
                "category": "Main Course",
                "image": (io.BytesIO(b"first"), "pizza.png"),
            },
            headers=admin_headers,
            content_type="multipart/form-data",
        )
        assert response.status_code == 201
        item = response.get_json()
        assert item["image"].startswith("/uploads/")
        first_file = tmp_path / "uploads" / item["image"].rsplit("/", 1)[1]
        assert first_file.read_bytes() == b"first"
        assert client.get(item["image"]).data == b"first"

        response = client.put(
            f"/api/menu/{item['id']}",
            data={"image": (io.BytesIO(b"second"), "pizza2.jpg")},
            headers=admin_headers,
            content_type="multipart/form-data",
        )

        assert response.status_code == 200
        updated = response.get_json()
        assert updated["image"] != item["image"]
        assert updated["name"] == "Pizza"
        assert not first_file.exists()

    def test_upload_rejects_other_extensions(self, client, admin_headers):
        response = client.post(
            "/api/menu",
            data={
                "name": "Pizza",
                "price": "14.99",
                "category": "Main Course",
                "image": (io.BytesIO(b"#!/bin/sh"), "pizza.sh"),
            },
            headers=admin_headers,
            content_type="multipart/form-data",
        )
        assert response.status_code == 400

    def test_rejected_create_leaves_no_upload(self, client, admin_headers, tmp_path):
        response = client.post(
            "/api/menu",
            data={
                "name": "Pizza",
                "price": "inf",
                "category": "Main Course",
                "image": (io.BytesIO(b"first"), "pizza.png"),
            },
            headers=admin_headers,
            content_type="multipart/form-data",
        )

        assert response.status_code == 400
        assert list((tmp_path / "uploads").glob("*")) == []

    def test_failed_update_removes_new_upload(
        self, services, make_menu_item, monkeypatch, tmp_path
    ):
        item = make_menu_item()

        def broken(menu_item):
            raise RuntimeError("serializer down")

        monkeypatch.setattr(menu_service, "serialize_menu_item", broken)
        upload = FileStorage(io.BytesIO(b"new"), filename="pasta.png")

        with pytest.raises(RuntimeError):
            services.menu.update_item(item["id"], {}, upload)

        assert list((tmp_path / "uploads").glob("*")) == []
        monkeypatch.undo()
        assert services.menu.get_item(item["id"])["image"] == ""

    def test_partial_update(self, client, admin_headers, make_menu_item):
        item = make_menu_item(name="Pasta", price="16.99")

        response = client.put(
            f"/api/menu/{item['id']}",
            json={"price": 18, "isAvailable": False},
            headers=admin_headers,
        )

        body = response.get_json()
        assert body["price"] == 18.0
        assert body["isAvailable"] is False
        assert body["name"] == "Pasta"

    def test_delete(self, client, admin_headers, make_menu_item):
        item = make_menu_item()

        assert client.delete(f"/api/menu/{item['id']}", headers=admin_headers).status_code == 200
        assert client.get(f"/api/menu/{item['id']}").status_code == 404

    def test_unknown_item(self, client, admin_headers):
        response = client.put("/api/menu/999", json={"price": 1}, headers=admin_headers)
        assert response.status_code == 404
