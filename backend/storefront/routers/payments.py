"""Stripe PaymentIntent creation for checkout"""
import stripe
from fastapi import APIRouter, HTTPException, Request

from storefront.core.rate_limit import limiter, PAYMENT_INTENT_RATE_LIMIT
from storefront.core.logging import get_logger
from storefront.schemas.payment import PaymentIntentRequest
from storefront.services import stripe_service
from storefront.services.stripe_service import PaymentConfigError

router = APIRouter(prefix="/api", tags=["payments"])
logger = get_logger(__name__)


@router.post("/create-payment-intent")
@limiter.limit(PAYMENT_INTENT_RATE_LIMIT)
async def create_payment_intent(request: Request, req: PaymentIntentRequest):
    try:
        intent = stripe_service.create_payment_intent(
            amount=req.amount,
            currency=req.currency,
            receipt_email=req.customer,
            customer_name=req.customer_name,
            items=req.items,
            shipping_address=req.shipping_address,
        )
    except PaymentConfigError as e:
        logger.error(f"Stripe configuration error: {e}")
        raise HTTPException(status_code=500, detail="Payment configuration error")
    except stripe.StripeError as e:
        logger.warning(f"PaymentIntent creation failed: {e}")
        raise HTTPException(status_code=400, detail=e.user_message or str(e))

    return {
        "success": True,
        "client_secret": intent.client_secret,
        "amount": intent.amount,
    }
