"""
Tests for the public order endpoints: checkout and payment status sync.
"""

from types import SimpleNamespace
from unittest.mock import patch

import stripe

from storefront.models.discount_code import DiscountCode
from storefront.models.order import Order

RETRIEVE = "storefront.services.stripe_service.retrieve_payment_intent"


def create(client, payload):
    resp = client.post("/api/orders", json=payload)
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]


class TestCreateOrderEndpoint:
    def test_creates_order_with_items(self, client, order_payload):
        data = create(client, order_payload())

        assert data["order_number"].startswith("ORD-")
        assert data["status"] == "pending"
        assert data["subtotal"] == 40.0
        assert data["shipping"] == 10.0
        assert data["tax"] == 8.4
        assert data["total"] == 58.4
        assert data["customer_email"] == "jane@mailbox.org"
        assert len(data["order_items"]) == 1
        assert data["order_items"][0]["quantity"] == 2

    def test_with_discount_code(self, client, db, make_code, order_payload):
        code = make_code("SAVE10")
        data = create(client, order_payload(discount_code="SAVE10", total=54.4))

        assert data["discount_code"] == "SAVE10"
        assert data["discount_amount"] == 4.0
        assert data["original_total"] == 58.4
        db.expire_all()
        assert db.get(DiscountCode, code.id).used_count == 1

    def test_blank_discount_code_ignored(self, client, order_payload):
        data = create(client, order_payload(discount_code="  "))
        assert data["discount_code"] is None

    def test_invalid_discount_code(self, client, db, order_payload):
        resp = client.post("/api/orders", json=order_payload(discount_code="NOPE"))

        assert resp.status_code == 400
        assert resp.json()["error"] == "Invalid discount code"
        assert db.query(Order).count() == 0

    def test_total_mismatch(self, client, order_payload):
        resp = client.post("/api/orders", json=order_payload(total=10))
        assert resp.status_code == 400
        assert "total" in resp.json()["error"]

    def test_empty_cart(self, client, order_payload):
        payload = order_payload()
        payload["items"] = []
        resp = client.post("/api/orders", json=payload)
        assert resp.status_code == 400
        assert resp.json()["success"] is False

    def test_duplicate_payment_intent(self, client, order_payload):
        create(client, order_payload(payment_intent_id="pi_123"))
        resp = client.post("/api/orders", json=order_payload(payment_intent_id="pi_123"))

        assert resp.status_code == 400
        assert resp.json()["error"] == "An order already exists for this payment"


class TestGetOrderEndpoint:
    def test_by_id(self, client, order_payload):
        order = create(client, order_payload())
        resp = client.get("/api/orders", params={"orderId": order["id"]})
        assert resp.status_code == 200
        assert resp.json()["data"]["order_number"] == order["order_number"]

    def test_by_payment_intent(self, client, order_payload):
        order = create(client, order_payload(payment_intent_id="pi_abc"))
        resp = client.get("/api/orders", params={"payment_intent_id": "pi_abc"})
        assert resp.json()["data"]["id"] == order["id"]

    def test_requires_key(self, client):
        assert client.get("/api/orders").status_code == 400

    def test_unknown(self, client):
        resp = client.get("/api/orders", params={"orderId": 404})
        assert resp.status_code == 404
        assert resp.json() == {"success": False, "error": "Order not found"}


class TestPaymentStatusEndpoint:
    def test_status_read_from_stripe(self, client, order_payload):
        order = create(client, order_payload(payment_intent_id="pi_1"))

        with patch(RETRIEVE, return_value=SimpleNamespace(id="pi_1", status="succeeded")) as retrieve:
            resp = client.put(
                f"/api/orders/{order['id']}/payment-status",
                json={"payment_status": "canceled"},
            )

        retrieve.assert_called_once_with("pi_1")
        data = resp.json()["data"]
        assert data["stripe_payment_status"] == "succeeded"
        assert data["status"] == "confirmed"

    def test_attaches_intent_to_order(self, client, order_payload):
        order = create(client, order_payload())

        with patch(RETRIEVE, return_value=SimpleNamespace(id="pi_9", status="processing")):
            resp = client.put(
                f"/api/orders/{order['id']}/payment-status", json={"payment_intent_id": "pi_9"},
            )

        data = resp.json()["data"]
        assert data["payment_intent_id"] == "pi_9"
        assert data["status"] == "pending"

    def test_foreign_intent_rejected(self, client, order_payload):
        order = create(client, order_payload(payment_intent_id="pi_1"))

        with patch(RETRIEVE) as retrieve:
            resp = client.put(
                f"/api/orders/{order['id']}/payment-status", json={"payment_intent_id": "pi_other"},
            )

        assert resp.status_code == 400
        retrieve.assert_not_called()

    def test_stripe_error(self, client, order_payload):
        order = create(client, order_payload(payment_intent_id="pi_1"))

        with patch(RETRIEVE, side_effect=stripe.InvalidRequestError("No such payment_intent", "id")):
            resp = client.put(f"/api/orders/{order['id']}/payment-status", json={})

        assert resp.status_code == 400

    def test_by_intent_id(self, client, order_payload):
        create(client, order_payload(payment_intent_id="pi_7"))

        with patch(RETRIEVE, return_value=SimpleNamespace(id="pi_7", status="canceled")):
            resp = client.put("/api/orders/payment-status", json={"payment_intent_id": "pi_7"})

        assert resp.json()["data"]["status"] == "cancelled"

    def test_by_unknown_intent_id(self, client):
        resp = client.put("/api/orders/payment-status", json={"payment_intent_id": "pi_missing"})
        assert resp.status_code == 404
