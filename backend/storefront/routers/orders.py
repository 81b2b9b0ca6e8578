"""Public order endpoints: checkout and payment status"""
from typing import Optional
import stripe
from fastapi import APIRouter, Depends, HTTPException, Request, Query
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.core.database import get_db
from storefront.core.rate_limit import get_client_ip
from storefront.core.logging import get_logger
from storefront.models.order import Order
from storefront.schemas.order import OrderCreate, PaymentStatusUpdate
from storefront.services import order_service, stripe_service
from storefront.services.discount_service import DiscountError
from storefront.services.order_service import OrderError
from storefront.services.stripe_service import PaymentConfigError

router = APIRouter(prefix="/api/orders", tags=["orders"])
logger = get_logger(__name__)


@router.post("", status_code=201)
async def create_order(request: Request, req: OrderCreate, db: Session = Depends(get_db)):
    """Create an order from the checkout cart"""
    try:
        order = order_service.create_order(
            db,
            req,
            ip_address=get_client_ip(request),
            user_agent=request.headers.get("user-agent"),
        )
    except (DiscountError, OrderError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except IntegrityError:
        raise HTTPException(status_code=400, detail="An order already exists for this payment")
    return {"success": True, "data": order_service.serialize_order(order)}


@router.get("")
async def get_order(
    order_id: Optional[int] = Query(None, alias="orderId"),
    payment_intent_id: Optional[str] = None,
    db: Session = Depends(get_db),
):
    """Look up an order by id or PaymentIntent id"""
    if order_id is None and not payment_intent_id:
        raise HTTPException(status_code=400, detail="Order ID or payment intent ID is required")

    if order_id is not None:
        order = order_service.get_order(db, order_id)
    else:
        order = order_service.get_order_by_payment_intent(db, payment_intent_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return {"success": True, "data": order_service.serialize_order(order)}


def _sync_payment_status(db: Session, order: Order, payment_intent_id: Optional[str]) -> dict:
    """Read the PaymentIntent from Stripe and mirror its status onto the order"""
    intent_id = payment_intent_id or order.payment_intent_id
    if not intent_id:
        raise HTTPException(status_code=400, detail="Order ID or payment intent ID is required")
    if order.payment_intent_id and order.payment_intent_id != intent_id:
        raise HTTPException(status_code=400, detail="Payment intent does not belong to this order")

    try:
        intent = stripe_service.retrieve_payment_intent(intent_id)
    except PaymentConfigError as e:
        logger.error(f"Stripe configuration error: {e}")
        raise HTTPException(status_code=500, detail="Payment configuration error")
    except stripe.StripeError as e:
        logger.warning(f"PaymentIntent lookup failed: {intent_id} - {e}")
        raise HTTPException(status_code=400, detail="Payment intent could not be verified")

    order.payment_intent_id = intent_id
    order_service.apply_payment_status(order, intent.status)
    db.commit()
    db.refresh(order)
    logger.info(
        f"Payment status synced: order={order.order_number}, "
        f"stripe={order.stripe_payment_status}, status={order.status}"
    )
    return {"success": True, "data": order_service.serialize_order(order)}


@router.put("/payment-status")
async def update_payment_status_by_intent(req: PaymentStatusUpdate, db: Session = Depends(get_db)):
    if not req.payment_intent_id:
        raise HTTPException(status_code=400, detail="Order ID or payment intent ID is required")
    order = order_service.get_order_by_payment_intent(db, req.payment_intent_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return _sync_payment_status(db, order, req.payment_intent_id)


@router.put("/{order_id}/payment-status")
async def update_payment_status(order_id: int, req: PaymentStatusUpdate, db: Session = Depends(get_db)):
    order = order_service.get_order(db, order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return _sync_payment_status(db, order, req.payment_intent_id)
