"""Public discount endpoints used by checkout"""
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from storefront.core.database import get_db
from storefront.core.rate_limit import limiter, get_client_ip, VALIDATE_DISCOUNT_RATE_LIMIT
from storefront.core.logging import get_logger
from storefront.schemas.discount import ValidateDiscountRequest, ApplyDiscountRequest
from storefront.services import discount_service, order_service
from storefront.services.discount_service import DiscountError

router = APIRouter(prefix="/api", tags=["discounts"])
logger = get_logger(__name__)


@router.post("/validate-discount")
@limiter.limit(VALIDATE_DISCOUNT_RATE_LIMIT)
async def validate_discount(request: Request, req: ValidateDiscountRequest, db: Session = Depends(get_db)):
    """Preview a code against an order amount; invalid codes are not an HTTP error"""
    validation = discount_service.validate_discount(
        db, req.code, req.order_amount, customer_email=req.customer_email
    )
    return {"success": True, "validation": validation}


@router.post("/apply-discount")
async def apply_discount(request: Request, req: ApplyDiscountRequest, db: Session = Depends(get_db)):
    """Record one use of a code; the amount is recomputed from the code"""
    discount = discount_service.get_discount_code(db, req.code)
    if discount is None:
        raise HTTPException(status_code=400, detail=discount_service.INVALID_CODE)

    if req.order_id is not None:
        order = order_service.get_order(db, req.order_id)
        if order is None:
            raise HTTPException(status_code=404, detail="Order not found")
        if order.discount_code_id is not None and order.discount_code_id != discount.id:
            raise HTTPException(status_code=400, detail="This order was placed with a different discount code")
        if discount_service.order_has_usage(db, order.id):
            raise HTTPException(status_code=400, detail="A discount has already been applied to this order")

    try:
        _, result = discount_service.resolve_discount(db, discount.code, req.order_amount)
        discount_service.check_client_discount(req.discount_amount, result)
        usage = discount_service.redeem_discount(
            db,
            discount,
            discount_amount=result.discount_amount,
            order_amount=req.order_amount,
            customer_email=req.customer_email.lower(),
            order_id=req.order_id,
            ip_address=req.ip_address or get_client_ip(request),
            user_agent=req.user_agent or request.headers.get("user-agent"),
        )
        db.commit()
    except DiscountError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))
    except Exception:
        db.rollback()
        raise

    logger.info(f"Discount applied: code={discount.code}, order_id={req.order_id}")
    return {"success": True, "data": discount_service.serialize_usage(usage)}
