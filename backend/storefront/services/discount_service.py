"""Discount codes: lookup, eligibility, amount calculation, redemption"""
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from storefront.models.discount_code import DiscountCode
from storefront.models.discount_usage import DiscountUsage
from storefront.services.pricing import CENT, D, ZERO, format_money, money_json
from storefront.core.logging import get_logger, log_event

logger = get_logger(__name__)

INVALID_CODE = "Invalid discount code"


class DiscountError(Exception):
    """A discount code cannot be used; the message is shown to the customer"""


@dataclass(frozen=True)
class DiscountResult:
    discount_amount: Decimal
    final_amount: Decimal


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def normalize_code(code: str) -> str:
    return (code or "").strip().upper()


def get_discount_code(db: Session, code: str) -> Optional[DiscountCode]:
    """Codes are stored uppercase, so lookup is case-insensitive"""
    normalized = normalize_code(code)
    if not normalized:
        return None
    return db.query(DiscountCode).filter(DiscountCode.code == normalized).first()


def check_availability(discount: DiscountCode, now: Optional[datetime] = None) -> Optional[str]:
    """None when the code is currently valid, otherwise the reason it is not"""
    now = now or utcnow()
    if not discount.is_active:
        return "This discount code is no longer active"
    if discount.valid_from and now < discount.valid_from:
        return "This discount code is not valid yet"
    if discount.valid_until and now > discount.valid_until:
        return "This discount code has expired"
    if discount.usage_limit is not None and discount.used_count >= discount.usage_limit:
        return "This discount code has reached its usage limit"
    return None


def calculate_discount(discount: DiscountCode, subtotal) -> DiscountResult:
    """
    Discount for a subtotal.

    percentage:   subtotal * value / 100, capped by maximum_discount_amount
    fixed_amount: value
    Either way the discount never exceeds the subtotal.
    """
    subtotal = max(ZERO, D(subtotal))
    minimum = D(discount.minimum_order_amount)
    if subtotal < minimum:
        raise DiscountError(
            f"Minimum order amount of {format_money(minimum)} required for this code"
        )

    value = D(discount.discount_value)
    if discount.discount_type == "percentage":
        amount = subtotal * value / Decimal(100)
        if discount.maximum_discount_amount is not None:
            amount = min(amount, D(discount.maximum_discount_amount))
    elif discount.discount_type == "fixed_amount":
        amount = value
    else:
        raise DiscountError(INVALID_CODE)

    amount = max(ZERO, min(amount, subtotal))
    return DiscountResult(discount_amount=amount, final_amount=subtotal - amount)


def resolve_discount(
    db: Session, code: str, subtotal, now: Optional[datetime] = None
) -> tuple[DiscountCode, DiscountResult]:
    """Lookup + eligibility + calculation; raises DiscountError"""
    discount = get_discount_code(db, code)
    if discount is None:
        raise DiscountError(INVALID_CODE)
    reason = check_availability(discount, now)
    if reason:
        raise DiscountError(reason)
    return discount, calculate_discount(discount, subtotal)


def validate_discount(
    db: Session,
    code: str,
    order_amount,
    customer_email: Optional[str] = None,
    now: Optional[datetime] = None,
) -> dict:
    """Checkout preview of a code against an order amount"""
    normalized = normalize_code(code)
    try:
        discount, result = resolve_discount(db, normalized, order_amount, now)
    except DiscountError as e:
        logger.info(f"Discount rejected: code={normalized}, email={customer_email}, reason={e}")
        discount = get_discount_code(db, normalized)
        validation = {"valid": False, "code": normalized, "error": str(e)}
        if discount is not None:
            validation.update({
                "name": discount.name,
                "description": discount.description,
                "discount_type": discount.discount_type,
                "discount_value": money_json(discount.discount_value),
            })
        return validation

    return {
        "valid": True,
        "code": discount.code,
        "name": discount.name,
        "description": discount.description,
        "discount_type": discount.discount_type,
        "discount_value": money_json(discount.discount_value),
        "discount_amount": money_json(result.discount_amount),
        "original_amount": money_json(order_amount),
        "final_amount": money_json(result.final_amount),
        "savings": money_json(result.discount_amount),
        "error": None,
    }


def check_client_discount(client_amount, result: DiscountResult) -> None:
    """Reject a client-reported discount that the code does not produce"""
    if abs(D(client_amount) - result.discount_amount) > CENT:
        raise DiscountError(
            f"Discount amount does not match this code (expected {format_money(result.discount_amount)})"
        )


def order_has_usage(db: Session, order_id: int) -> bool:
    return db.query(DiscountUsage.id).filter(DiscountUsage.order_id == order_id).first() is not None


def redeem_discount(
    db: Session,
    discount: DiscountCode,
    discount_amount,
    order_amount,
    customer_email: Optional[str] = None,
    order_id: Optional[int] = None,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
    now: Optional[datetime] = None,
) -> DiscountUsage:
    """
    Count one use of a code and append it to the usage ledger.

    The counter is bumped with a single conditional UPDATE, so concurrent
    redemptions cannot push used_count past usage_limit, and a code that is
    inactive or outside its validity window is never counted. Does not
    commit; the caller owns the transaction.
    """
    now = now or utcnow()
    updated = (
        db.query(DiscountCode)
        .filter(
            DiscountCode.id == discount.id,
            DiscountCode.is_active == True,
            or_(
                DiscountCode.usage_limit.is_(None),
                DiscountCode.used_count < DiscountCode.usage_limit,
            ),
            or_(DiscountCode.valid_from.is_(None), DiscountCode.valid_from <= now),
            or_(DiscountCode.valid_until.is_(None), DiscountCode.valid_until >= now),
        )
        .update({DiscountCode.used_count: DiscountCode.used_count + 1}, synchronize_session=False)
    )
    if updated != 1:
        db.expire(discount)
        reason = check_availability(discount, now)
        raise DiscountError(reason or "This discount code has reached its usage limit")

    usage = DiscountUsage(
        discount_code_id=discount.id,
        order_id=order_id,
        customer_email=customer_email,
        discount_amount=D(discount_amount),
        order_amount=D(order_amount),
        ip_address=ip_address,
        user_agent=(user_agent or "")[:512] or None,
    )
    db.add(usage)
    db.flush()
    db.expire(discount, ["used_count"])
    log_event(
        logger,
        f"Discount redeemed: {discount.code}",
        discount_code_id=discount.id,
        order_id=order_id,
        discount_amount=D(discount_amount),
    )
    return usage


def serialize_discount_code(d: DiscountCode) -> dict:
    return {
        "id": d.id,
        "code": d.code,
        "name": d.name,
        "description": d.description,
        "discount_type": d.discount_type,
        "discount_value": money_json(d.discount_value),
        "minimum_order_amount": money_json(d.minimum_order_amount),
        "maximum_discount_amount": money_json(d.maximum_discount_amount),
        "usage_limit": d.usage_limit,
        "used_count": d.used_count,
        "is_active": d.is_active,
        "valid_from": d.valid_from.isoformat() if d.valid_from else None,
        "valid_until": d.valid_until.isoformat() if d.valid_until else None,
        "created_at": d.created_at.isoformat() if d.created_at else None,
        "updated_at": d.updated_at.isoformat() if d.updated_at else None,
    }


def serialize_usage(u: DiscountUsage) -> dict:
    code = u.discount_code
    return {
        "id": u.id,
        "discount_code_id": u.discount_code_id,
        "order_id": u.order_id,
        "customer_email": u.customer_email,
        "discount_amount": money_json(u.discount_amount),
        "order_amount": money_json(u.order_amount),
        "ip_address": u.ip_address,
        "user_agent": u.user_agent,
        "used_at": u.used_at.isoformat() if u.used_at else None,
        "discount_codes": {
            "code": code.code,
            "name": code.name,
            "discount_type": code.discount_type,
            "discount_value": money_json(code.discount_value),
        } if code else None,
    }
