"""
Tests for the Stripe and Resend backed endpoints, plus health.

Covers:
- PaymentIntent creation
- Order emails
- Stripe webhook handling and idempotency
- Health check
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest
import stripe

from storefront.core.config import settings
from storefront.models.order import Order
from storefront.models.processed_stripe_event import ProcessedStripeEvent

CONSTRUCT_EVENT = "storefront.services.stripe_service.construct_webhook_event"


# =============================================================================
# Payment intents
# =============================================================================


class TestCreatePaymentIntent:
    body = {
        "amount": 5840,
        "currency": "EUR",
        "customer": "jane@mailbox.org",
        "customerName": "Jane Doe",
        "items": [{"id": "tee-1", "quantity": 2}],
        "shippingAddress": {"city": "Madrid", "country": "ES"},
    }

    def test_creates_intent(self, client):
        intent = SimpleNamespace(id="pi_1", client_secret="pi_1_secret_x", amount=5840)
        with patch("stripe.PaymentIntent.create", return_value=intent) as create:
            resp = client.post("/api/create-payment-intent", json=self.body)

        assert resp.status_code == 200
        assert resp.json() == {"success": True, "client_secret": "pi_1_secret_x", "amount": 5840}

        params = create.call_args.kwargs
        assert params["amount"] == 5840
        assert params["currency"] == "eur"
        assert params["receipt_email"] == "jane@mailbox.org"
        assert params["automatic_payment_methods"] == {"enabled": True}
        assert params["metadata"]["customerName"] == "Jane Doe"
        assert '"tee-1"' in params["metadata"]["items"]

    def test_metadata_values_truncated(self, client):
        body = dict(self.body, items=[{"id": f"item-{i}", "name": "x" * 50} for i in range(50)])
        intent = SimpleNamespace(id="pi_1", client_secret="s", amount=5840)
        with patch("stripe.PaymentIntent.create", return_value=intent) as create:
            client.post("/api/create-payment-intent", json=body)

        assert len(create.call_args.kwargs["metadata"]["items"]) == 500

    def test_invalid_secret_key(self, client):
        with patch.object(settings, "STRIPE_SECRET_KEY", "pk_live_wrong"), \
                patch("stripe.PaymentIntent.create") as create:
            resp = client.post("/api/create-payment-intent", json=self.body)

        assert resp.status_code == 500
        assert resp.json()["error"] == "Payment configuration error"
        create.assert_not_called()

    def test_stripe_error(self, client):
        error = stripe.CardError("Your card was declined.", None, "card_declined")
        with patch("stripe.PaymentIntent.create", side_effect=error):
            resp = client.post("/api/create-payment-intent", json=self.body)

        assert resp.status_code == 400
        assert "declined" in resp.json()["error"]

    @pytest.mark.parametrize("amount", [0, -100])
    def test_amount_must_be_positive(self, client, amount):
        resp = client.post("/api/create-payment-intent", json=dict(self.body, amount=amount))
        assert resp.status_code == 400


# =============================================================================
# Order emails
# =============================================================================


class TestSendOrderEmails:
    body = {
        "orderDetails": {
            "orderId": "ORD-1700000000000-ABC123",
            "customerName": "Jane <Doe>",
            "customerEmail": "jane@mailbox.org",
            "orderDate": "2026-10-19",
            "items": [{"name": "T-shirt", "quantity": 2, "price": 20}],
            "totalAmount": 58.4,
            "shippingAddress": {
                "line1": "Calle Mayor 1", "city": "Madrid", "postal_code": "28013", "country": "ES",
            },
        }
    }

    def test_sends_both_emails(self, client):
        with patch("resend.Emails.send", side_effect=[{"id": "em_customer"}, {"id": "em_admin"}]) as send:
            resp = client.post("/api/send-order-emails", json=self.body)

        assert resp.status_code == 200
        assert resp.json() == {
            "success": True, "customerEmailId": "em_customer", "adminEmailId": "em_admin",
        }

        customer_mail, admin_mail = (c.args[0] for c in send.call_args_list)
        assert customer_mail["to"] == ["jane@mailbox.org"]
        assert "ORD-1700000000000-ABC123" in customer_mail["subject"]
        assert "€40.00" in customer_mail["html"]
        assert "Jane &lt;Doe&gt;" in customer_mail["html"]
        assert admin_mail["to"] == ["orders@shop.io"]
        assert "€58.40" in admin_mail["subject"]

    def test_missing_api_key(self, client):
        with patch.object(settings, "RESEND_API_KEY", ""), patch("resend.Emails.send") as send:
            resp = client.post("/api/send-order-emails", json=self.body)

        assert resp.status_code == 500
        send.assert_not_called()

    def test_provider_failure(self, client):
        with patch("resend.Emails.send", side_effect=RuntimeError("provider down")):
            resp = client.post("/api/send-order-emails", json=self.body)

        assert resp.status_code == 500
        assert resp.json()["error"] == "Failed to send order emails"

    def test_requires_items(self, client):
        body = {"orderDetails": dict(self.body["orderDetails"], items=[])}
        assert client.post("/api/send-order-emails", json=body).status_code == 400


# =============================================================================
# Stripe webhook
# =============================================================================


def stripe_event(event_id, event_type, intent_id, status):
    return {
        "id": event_id,
        "type": event_type,
        "data": {"object": {"id": intent_id, "object": "payment_intent", "status": status}},
    }


class TestStripeWebhook:
    def _post(self, client, event):
        with patch(CONSTRUCT_EVENT, return_value=event) as construct:
            resp = client.post(
                "/api/webhooks/stripe", content=b"{}", headers={"stripe-signature": "t=1,v1=abc"},
            )
        construct.assert_called_once_with(b"{}", "t=1,v1=abc", "whsec_test")
        return resp

    def test_payment_succeeded_confirms_order(self, client, db, order_payload):
        client.post("/api/orders", json=order_payload(payment_intent_id="pi_1"))

        resp = self._post(client, stripe_event("evt_1", "payment_intent.succeeded", "pi_1", "succeeded"))

        assert resp.json() == {"received": True}
        db.expire_all()
        order = db.query(Order).one()
        assert order.status == "confirmed"
        assert order.stripe_payment_status == "succeeded"

    def test_duplicate_event_skipped(self, client, db, order_payload):
        client.post("/api/orders", json=order_payload(payment_intent_id="pi_1"))
        self._post(client, stripe_event("evt_1", "payment_intent.succeeded", "pi_1", "succeeded"))

        # Replay of the same event id with a different payload must be ignored
        self._post(client, stripe_event("evt_1", "payment_intent.canceled", "pi_1", "canceled"))

        db.expire_all()
        assert db.query(Order).one().status == "confirmed"
        assert db.query(ProcessedStripeEvent).count() == 1

    def test_payment_failed_keeps_order_pending(self, client, db, order_payload):
        client.post("/api/orders", json=order_payload(payment_intent_id="pi_2"))
        self._post(
            client,
            stripe_event("evt_2", "payment_intent.payment_failed", "pi_2", "requires_payment_method"),
        )

        db.expire_all()
        order = db.query(Order).one()
        assert order.status == "pending"
        assert order.stripe_payment_status == "requires_payment_method"

    def test_unknown_intent_recorded(self, client, db):
        resp = self._post(client, stripe_event("evt_3", "payment_intent.succeeded", "pi_x", "succeeded"))

        assert resp.status_code == 200
        assert db.query(ProcessedStripeEvent).one().payment_intent_id == "pi_x"

    def test_unhandled_event_type(self, client, db):
        resp = self._post(client, {"id": "evt_4", "type": "charge.refunded", "data": {"object": {}}})

        assert resp.status_code == 200
        assert db.query(ProcessedStripeEvent).count() == 0

    def test_invalid_signature(self, client):
        with patch(CONSTRUCT_EVENT, side_effect=ValueError("bad signature")):
            resp = client.post("/api/webhooks/stripe", content=b"{}", headers={"stripe-signature": "x"})

        assert resp.status_code == 401


# =============================================================================
# Health
# =============================================================================


@pytest.mark.parametrize("path", ["/health", "/api/health"])
def test_health(client, path):
    with patch("storefront.routers.health.check_redis_connection", AsyncMock(return_value=True)):
        resp = client.get(path)

    body = resp.json()
    assert body["status"] == "ok"
    assert body["db"] == "connected"
    assert body["redis"] == "connected"
