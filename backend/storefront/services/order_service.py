"""Orders: creation, payment status, admin status changes, reporting"""
import secrets
import string
import threading
import time
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import func as sa_func
from sqlalchemy.orm import Session

from storefront.models.order import Order, ORDER_STATUSES
from storefront.models.order_item import OrderItem
from storefront.schemas.order import OrderCreate
from storefront.services import discount_service, pricing
from storefront.services.pricing import D, ZERO, money_json
from storefront.core.logging import get_logger, log_event

logger = get_logger(__name__)

# Client-side totals may differ from ours by floating point noise only
AMOUNT_TOLERANCE = pricing.CENT

ALLOWED_TRANSITIONS = {
    "draft": {"pending", "cancelled"},
    "pending": {"confirmed", "cancelled"},
    "confirmed": {"in_production", "shipped", "cancelled"},
    "in_production": {"shipped", "cancelled"},
    "shipped": {"delivered"},
    "delivered": set(),
    "cancelled": set(),
}

# Order status implied by a Stripe PaymentIntent status
PAYMENT_STATUS_TO_ORDER_STATUS = {
    "succeeded": "confirmed",
    "canceled": "cancelled",
}

ANALYTICS_PERIODS = {
    "7d": timedelta(days=7),
    "30d": timedelta(days=30),
    "90d": timedelta(days=90),
    "1y": timedelta(days=365),
}


class OrderError(Exception):
    """Order request rejected by a business rule"""


# =========================================================
# Order number
# =========================================================

_ORDER_NO_ALPHABET = string.ascii_uppercase + string.digits
_order_no_lock = threading.Lock()
_last_order_ms = 0


def generate_order_number() -> str:
    """ORD-<epoch ms>-<6 random chars>; the ms part never repeats within a process"""
    global _last_order_ms
    with _order_no_lock:
        now_ms = int(time.time() * 1000)
        _last_order_ms = max(now_ms, _last_order_ms + 1)
        stamp = _last_order_ms
    suffix = "".join(secrets.choice(_ORDER_NO_ALPHABET) for _ in range(6))
    return f"ORD-{stamp}-{suffix}"


# =========================================================
# Status state machine
# =========================================================

def can_transition(current: str, new: str) -> bool:
    if current == new:
        return True
    return new in ALLOWED_TRANSITIONS.get(current, set())


def change_status(order: Order, new_status: str) -> None:
    """Move an order to a new status; raises OrderError for illegal moves"""
    if new_status not in ORDER_STATUSES:
        raise OrderError("Invalid order status")
    if not can_transition(order.status, new_status):
        raise OrderError(f"Cannot change order status from {order.status} to {new_status}")
    order.status = new_status


def apply_payment_status(order: Order, stripe_status: str) -> None:
    """
    Mirror a Stripe PaymentIntent status onto the order.
    The order status follows only where the state machine allows it.
    """
    order.stripe_payment_status = stripe_status
    target = PAYMENT_STATUS_TO_ORDER_STATUS.get(stripe_status)
    if target and order.status != target:
        if can_transition(order.status, target):
            order.status = target
        else:
            logger.warning(
                f"Payment status {stripe_status} ignored for order status: "
                f"order={order.order_number}, status={order.status}"
            )


# =========================================================
# Creation
# =========================================================

def _check_client_amount(label: str, client_value, server_value) -> None:
    if client_value is None:
        return
    if abs(D(client_value) - server_value) > AMOUNT_TOLERANCE:
        raise OrderError(
            f"Order {label} does not match the items "
            f"(expected {pricing.round_money(server_value)}, got {client_value})"
        )


def create_order(
    db: Session,
    data: OrderCreate,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> Order:
    """
    Create an order with its items, and redeem its discount code if any.

    Everything is written in one transaction: when any step fails nothing is
    persisted and the error propagates to the caller.
    """
    policy = pricing.get_policy(data.pricing_policy)
    subtotal = pricing.items_subtotal(data.items)
    _check_client_amount("subtotal", data.subtotal, subtotal)

    discount = None
    discount_amount = ZERO
    if data.discount_code:
        discount, result = discount_service.resolve_discount(db, data.discount_code, subtotal)
        discount_amount = result.discount_amount

    shipping = pricing.shipping_cost(policy, data.shipping_address.country, subtotal)
    totals = pricing.calculate_totals(data.items, shipping, policy.tax_rate, discount_amount)
    _check_client_amount("total", data.total, totals.total)

    customer_email = data.customer_info.email.lower()
    order = Order(
        order_number=generate_order_number(),
        status="pending",
        customer_info=data.customer_info.model_dump(),
        customer_email=customer_email,
        shipping_address=data.shipping_address.model_dump(),
        pricing_policy=policy.name,
        currency=data.currency,
        subtotal=totals.subtotal,
        discount_amount=totals.discount_amount,
        shipping=totals.shipping,
        tax=totals.tax,
        total=totals.total,
        original_total=totals.original_total,
        discount_code=discount.code if discount else None,
        discount_code_id=discount.id if discount else None,
        discount_type=discount.discount_type if discount else None,
        payment_intent_id=data.payment_intent_id,
        stripe_payment_status="pending",
    )

    try:
        db.add(order)
        db.flush()

        for item in data.items:
            unit_price = D(item.price)
            variants = {k: v for k, v in (("size", item.size), ("color", item.color)) if v}
            db.add(OrderItem(
                order_id=order.id,
                product_id=item.id,
                name=item.name,
                design_file_id=item.design_file_id,
                variants=variants or None,
                customizations=item.customizations,
                image=item.image,
                quantity=item.quantity,
                unit_price=unit_price,
                total_price=unit_price * item.quantity,
            ))

        if discount is not None and totals.discount_amount > ZERO:
            discount_service.redeem_discount(
                db,
                discount,
                discount_amount=totals.discount_amount,
                order_amount=totals.subtotal,
                customer_email=customer_email,
                order_id=order.id,
                ip_address=ip_address,
                user_agent=user_agent,
            )

        db.commit()
    except Exception:
        db.rollback()
        logger.error(f"Order creation rolled back: email={customer_email}", exc_info=True)
        raise

    db.refresh(order)
    log_event(
        logger,
        f"Order created: {order.order_number}",
        order_id=order.id,
        total=pricing.round_money(order.total),
        discount_code=order.discount_code,
        discount_amount=pricing.round_money(order.discount_amount),
        pricing_policy=order.pricing_policy,
    )
    return order


# =========================================================
# Queries
# =========================================================

def get_order(db: Session, order_id: int) -> Optional[Order]:
    return db.query(Order).filter(Order.id == order_id).first()


def get_order_by_payment_intent(db: Session, payment_intent_id: str) -> Optional[Order]:
    return db.query(Order).filter(Order.payment_intent_id == payment_intent_id).first()


def _filtered(db: Session, status: Optional[str], start_date: Optional[datetime], end_date: Optional[datetime]):
    q = db.query(Order)
    if status:
        q = q.filter(Order.status == status)
    if start_date:
        q = q.filter(Order.created_at >= start_date)
    if end_date:
        q = q.filter(Order.created_at <= end_date)
    return q


def list_orders(
    db: Session,
    status: Optional[str] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    limit: int = 50,
    offset: int = 0,
) -> tuple[list[Order], int]:
    q = _filtered(db, status, start_date, end_date)
    total = q.count()
    orders = q.order_by(Order.created_at.desc(), Order.id.desc()).offset(offset).limit(limit).all()
    return orders, total


def order_summary(
    db: Session, start_date: Optional[datetime] = None, end_date: Optional[datetime] = None
) -> dict:
    """Order counts per status plus revenue and discounts (cancelled excluded)"""
    q = _filtered(db, None, start_date, end_date)
    counts = dict(
        q.with_entities(Order.status, sa_func.count(Order.id)).group_by(Order.status).all()
    )
    revenue, discounts = (
        q.filter(Order.status != "cancelled")
        .with_entities(sa_func.sum(Order.total), sa_func.sum(Order.discount_amount))
        .one()
    )
    return {
        "total_orders": sum(counts.values()),
        "pending_orders": counts.get("pending", 0),
        "confirmed_orders": counts.get("confirmed", 0),
        "shipped_orders": counts.get("shipped", 0),
        "delivered_orders": counts.get("delivered", 0),
        "cancelled_orders": counts.get("cancelled", 0),
        "total_revenue": money_json(revenue or 0),
        "total_discounts": money_json(discounts or 0),
    }


def order_analytics(db: Session, period: str = "30d", now: Optional[datetime] = None) -> dict:
    if period not in ANALYTICS_PERIODS:
        raise OrderError("period must be one of: " + ", ".join(ANALYTICS_PERIODS))
    now = now or discount_service.utcnow()
    since = now - ANALYTICS_PERIODS[period]

    orders = (
        db.query(Order)
        .filter(Order.created_at >= since, Order.status != "cancelled")
        .all()
    )
    total_revenue = sum((D(o.total) for o in orders), ZERO)
    total_discount = sum((D(o.discount_amount) for o in orders), ZERO)
    order_count = len(orders)

    status_breakdown: dict[str, int] = {}
    code_counts: dict[str, int] = {}
    for o in orders:
        status_breakdown[o.status] = status_breakdown.get(o.status, 0) + 1
        if o.discount_code:
            code_counts[o.discount_code] = code_counts.get(o.discount_code, 0) + 1

    top_codes = sorted(code_counts.items(), key=lambda kv: kv[1], reverse=True)[:10]
    return {
        "period": period,
        "totalRevenue": money_json(total_revenue),
        "totalDiscount": money_json(total_discount),
        "orderCount": order_count,
        "avgOrderValue": money_json(total_revenue / order_count if order_count else 0),
        "statusBreakdown": status_breakdown,
        "topDiscountCodes": [{"code": c, "count": n} for c, n in top_codes],
    }


# =========================================================
# Serialization
# =========================================================

def serialize_item(item: OrderItem) -> dict:
    return {
        "id": item.id,
        "product_id": item.product_id,
        "name": item.name,
        "design_file_id": item.design_file_id,
        "variants": item.variants or {},
        "customizations": item.customizations or {},
        "image": item.image,
        "quantity": item.quantity,
        "unit_price": money_json(item.unit_price),
        "total_price": money_json(item.total_price),
    }


def serialize_order(order: Order) -> dict:
    return {
        "id": order.id,
        "order_number": order.order_number,
        "status": order.status,
        "customer_info": order.customer_info,
        "customer_email": order.customer_email,
        "shipping_address": order.shipping_address,
        "pricing_policy": order.pricing_policy,
        "currency": order.currency,
        "subtotal": money_json(order.subtotal),
        "discount_amount": money_json(order.discount_amount),
        "shipping": money_json(order.shipping),
        "tax": money_json(order.tax),
        "total": money_json(order.total),
        "original_total": money_json(order.original_total),
        "discount_code": order.discount_code,
        "discount_type": order.discount_type,
        "payment_intent_id": order.payment_intent_id,
        "stripe_payment_status": order.stripe_payment_status,
        "notes": order.notes,
        "created_at": order.created_at.isoformat() if order.created_at else None,
        "updated_at": order.updated_at.isoformat() if order.updated_at else None,
        "order_items": [serialize_item(i) for i in order.items],
    }

