"""
HTTP tests for /api/orders.
"""

import pytest

from pos_api.extensions import db
from pos_api.models import Item

pytestmark = pytest.mark.orders


def _stock(item_id):
    return db.session.get(Item, item_id, populate_existing=True).stock_quantity


class TestCreateOrderRoute:
    def test_creates_order(self, client, admin_headers, make_item, customer):
        item = make_item("Latte", "4.50", 10)

        resp = client.post(
            "/api/orders",
            json={"customerid": customer.customerid, "items": [{"itemid": item.itemid, "quantity": 2}]},
            headers=admin_headers,
        )

        assert resp.status_code == 201
        body = resp.get_json()
        assert body["success"] is True
        assert body["message"] == "Order created successfully"
        assert body["data"]["total_amount"] == "9.00"
        assert body["data"]["status"] == "pending"
        assert body["data"]["customer_email"] == "jane@example.com"
        assert body["data"]["items"] == [
            {"itemid": item.itemid, "quantity": 2, "price": "4.50", "name": "Latte", "category": "General"}
        ]
        assert _stock(item.itemid) == 8

    def test_client_supplied_prices_are_ignored(self, client, admin_headers, make_item):
        item = make_item("Latte", "4.50", 10)

        resp = client.post(
            "/api/orders",
            json={
                "items": [{"itemid": item.itemid, "quantity": 1, "price": "0.01"}],
                "total_amount": "0.01",
            },
            headers=admin_headers,
        )

        assert resp.status_code == 201
        assert resp.get_json()["data"]["total_amount"] == "4.50"

    def test_insufficient_stock(self, client, admin_headers, make_item):
        item = make_item("Latte", "4.50", 1)

        resp = client.post(
            "/api/orders",
            json={"items": [{"itemid": item.itemid, "quantity": 2}]},
            headers=admin_headers,
        )

        assert resp.status_code == 400
        body = resp.get_json()
        assert body["success"] is False
        assert body["message"] == "Insufficient stock for item: Latte"
        assert body["data"]["available"] == 1
        assert body["data"]["requested"] == 2
        assert _stock(item.itemid) == 1

    def test_unknown_item(self, client, admin_headers):
        resp = client.post(
            "/api/orders", json={"items": [{"itemid": 31337, "quantity": 1}]}, headers=admin_headers
        )
        assert resp.status_code == 400
        assert resp.get_json()["message"] == "Item with ID 31337 not found"

    def test_unknown_customer(self, client, admin_headers, make_item):
        item = make_item()
        resp = client.post(
            "/api/orders",
            json={"customerid": 999, "items": [{"itemid": item.itemid, "quantity": 1}]},
            headers=admin_headers,
        )
        assert resp.status_code == 400
        assert resp.get_json()["message"] == "Customer with ID 999 not found"

    @pytest.mark.parametrize(
        "payload,field",
        [
            ({}, "items"),
            ({"items": []}, "items"),
            ({"items": [{"itemid": 1, "quantity": 0}]}, "items[0].quantity"),
            ({"items": [{"quantity": 1}]}, "items[0].itemid"),
            ({"customerid": "abc", "items": [{"itemid": 1, "quantity": 1}]}, "customerid"),
            ({"items": [{"itemid": "²", "quantity": 1}]}, "items[0].itemid"),
            ({"items": [{"itemid": 1, "quantity": "--5"}]}, "items[0].quantity"),
            ({"customerid": "٣", "items": [{"itemid": 1, "quantity": 1}]}, "customerid"),
        ],
    )
    def test_validation_errors(self, client, admin_headers, payload, field):
        resp = client.post("/api/orders", json=payload, headers=admin_headers)
        assert resp.status_code == 400
        errors = resp.get_json()["data"]["errors"]
        assert field in [e["field"] for e in errors]

    def test_cashier_cannot_place_orders(self, client, cashier_headers, make_item):
        item = make_item()
        resp = client.post(
            "/api/orders", json={"items": [{"itemid": item.itemid, "quantity": 1}]}, headers=cashier_headers
        )
        assert resp.status_code == 403
        assert _stock(item.itemid) == 10


class TestReadOrders:
    def test_list_and_get(self, client, admin_headers, make_item):
        item = make_item()
        created = client.post(
            "/api/orders", json={"items": [{"itemid": item.itemid, "quantity": 1}]}, headers=admin_headers
        ).get_json()["data"]

        listed = client.get("/api/orders", headers=admin_headers).get_json()["data"]
        assert [o["orderid"] for o in listed] == [created["orderid"]]

        resp = client.get(f"/api/orders/{created['orderid']}", headers=admin_headers)
        assert resp.status_code == 200
        assert resp.get_json()["data"]["items"][0]["itemid"] == item.itemid

    def test_get_missing(self, client, admin_headers):
        resp = client.get("/api/orders/404", headers=admin_headers)
        assert resp.status_code == 404
        assert resp.get_json()["message"] == "Order not found"

    def test_list_rejects_unknown_status(self, client, admin_headers):
        resp = client.get("/api/orders?status=shipped", headers=admin_headers)
        assert resp.status_code == 400


class TestStatusAndDelete:
    def test_status_update_does_not_restock(self, client, admin_headers, make_item):
        item = make_item(stock=5)
        order_id = client.post(
            "/api/orders", json={"items": [{"itemid": item.itemid, "quantity": 2}]}, headers=admin_headers
        ).get_json()["data"]["orderid"]

        resp = client.put(f"/api/orders/{order_id}", json={"status": "cancelled"}, headers=admin_headers)

        assert resp.status_code == 200
        assert resp.get_json()["data"]["status"] == "cancelled"
        assert _stock(item.itemid) == 3

    def test_invalid_status(self, client, admin_headers):
        resp = client.put("/api/orders/1", json={"status": "shipped"}, headers=admin_headers)
        assert resp.status_code == 400
        assert resp.get_json()["data"]["errors"][0]["field"] == "status"

    def test_status_on_missing_order(self, client, admin_headers):
        resp = client.put("/api/orders/99", json={"status": "completed"}, headers=admin_headers)
        assert resp.status_code == 404

    def test_delete_restores_stock(self, client, admin_headers, make_item):
        item = make_item(stock=5)
        order_id = client.post(
            "/api/orders", json={"items": [{"itemid": item.itemid, "quantity": 5}]}, headers=admin_headers
        ).get_json()["data"]["orderid"]
        assert _stock(item.itemid) == 0

        resp = client.delete(f"/api/orders/{order_id}", headers=admin_headers)

        assert resp.status_code == 200
        assert resp.get_json()["message"] == "Order deleted successfully"
        assert _stock(item.itemid) == 5
        assert client.get(f"/api/orders/{order_id}", headers=admin_headers).status_code == 404

    def test_delete_missing(self, client, admin_headers):
        resp = client.delete("/api/orders/5", headers=admin_headers)
        assert resp.status_code == 404
