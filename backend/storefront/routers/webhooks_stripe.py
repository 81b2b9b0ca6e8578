"""Stripe webhook: PaymentIntent lifecycle -> order payment status"""
import stripe
from fastapi import APIRouter, Request, HTTPException, Depends
from sqlalchemy.orm import Session

from storefront.core.config import settings
from storefront.core.database import get_db
from storefront.core.logging import get_logger, log_event
from storefront.models.processed_stripe_event import ProcessedStripeEvent
from storefront.services import order_service, stripe_service

logger = get_logger(__name__)

router = APIRouter(tags=["webhooks"])

PAYMENT_INTENT_EVENTS = {
    "payment_intent.succeeded",
    "payment_intent.processing",
    "payment_intent.payment_failed",
    "payment_intent.canceled",
}


@router.post("/api/webhooks/stripe")
async def stripe_webhook(request: Request, db: Session = Depends(get_db)):
    """Signature-verified Stripe webhook"""
    payload = await request.body()
    sig_header = request.headers.get("stripe-signature", "")

    try:
        event = stripe_service.construct_webhook_event(
            payload, sig_header, settings.STRIPE_WEBHOOK_SECRET
        )
    except (ValueError, stripe.SignatureVerificationError) as e:
        logger.error(f"Stripe webhook signature check failed: {e}")
        raise HTTPException(status_code=401, detail="Invalid signature")

    event_id = event["id"]
    event_type = event["type"]
    data = event["data"]["object"]

    if _is_event_processed(db, event_id):
        logger.info(f"Stripe webhook duplicate skipped: {event_id} ({event_type})")
        return {"received": True}

    if event_type not in PAYMENT_INTENT_EVENTS:
        logger.info(f"Unhandled Stripe event: {event_type}")
        return {"received": True}

    intent_id = data.get("id")
    try:
        order = order_service.get_order_by_payment_intent(db, intent_id)
        if order is None:
            logger.warning(f"Stripe webhook: no order for {intent_id} ({event_type})")
        else:
            order_service.apply_payment_status(order, data.get("status"))
            log_event(
                logger,
                f"Stripe webhook applied: {event_type}",
                order_number=order.order_number,
                payment_intent_id=intent_id,
                status=order.status,
            )
        db.add(ProcessedStripeEvent(event_id=event_id, event_type=event_type, payment_intent_id=intent_id))
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"Stripe webhook processing error: {event_type} - {e}")
        raise

    return {"received": True}


def _is_event_processed(db: Session, event_id: str) -> bool:
    return db.query(ProcessedStripeEvent).filter(
        ProcessedStripeEvent.event_id == event_id
    ).first() is not None
