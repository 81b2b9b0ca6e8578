"""Stripe API calls"""
import json
from typing import Optional
import stripe

from storefront.core.config import settings
from storefront.core.logging import get_logger

logger = get_logger(__name__)

SECRET_KEY_PREFIXES = ("sk_live_", "sk_test_")
# Stripe rejects metadata values longer than this
METADATA_VALUE_MAX = 500


class PaymentConfigError(Exception):
    """Stripe is not configured correctly on this server"""


def _init_stripe():
    key = (settings.STRIPE_SECRET_KEY or "").strip()
    if not key:
        raise PaymentConfigError("Stripe secret key not configured")
    if not key.startswith(SECRET_KEY_PREFIXES):
        raise PaymentConfigError("Invalid Stripe secret key format")
    stripe.api_key = key


def _metadata_value(value) -> str:
    if value is None:
        return ""
    text = value if isinstance(value, str) else json.dumps(value, ensure_ascii=False, default=str)
    return text[:METADATA_VALUE_MAX]


def create_payment_intent(
    amount: int,
    currency: str,
    receipt_email: Optional[str] = None,
    customer_name: Optional[str] = None,
    items: Optional[list] = None,
    shipping_address: Optional[dict] = None,
):
    """PaymentIntent with automatic payment methods; amount in cents"""
    _init_stripe()
    params = {
        "amount": int(amount),
        "currency": currency.lower(),
        "automatic_payment_methods": {"enabled": True},
        "metadata": {
            "customer": _metadata_value(receipt_email),
            "customerName": _metadata_value(customer_name),
            "items": _metadata_value(items or []),
            "shippingAddress": _metadata_value(shipping_address or {}),
        },
    }
    if receipt_email:
        params["receipt_email"] = receipt_email

    intent = stripe.PaymentIntent.create(**params)
    logger.info(f"PaymentIntent created: {intent.id}, amount={intent.amount} {currency}")
    return intent


def retrieve_payment_intent(payment_intent_id: str):
    _init_stripe()
    return stripe.PaymentIntent.retrieve(payment_intent_id)


def construct_webhook_event(payload: bytes, sig_header: str, secret: str):
    """Verify the signature and parse a webhook event"""
    return stripe.Webhook.construct_event(payload, sig_header, secret)
