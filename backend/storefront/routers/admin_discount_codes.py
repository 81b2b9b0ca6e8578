"""Admin: discount code management and usage ledger"""
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from storefront.core.database import get_db
from storefront.core.logging import get_logger
from storefront.models.discount_code import DiscountCode
from storefront.models.discount_usage import DiscountUsage
from storefront.schemas.discount import DiscountCodeCreate, DiscountCodeUpdate
from storefront.services.discount_service import serialize_discount_code, serialize_usage
from storefront.routers.deps import require_admin

router = APIRouter(prefix="/api/admin", tags=["admin-discount-codes"])
logger = get_logger(__name__)


def _get_code_or_404(db: Session, code_id: int) -> DiscountCode:
    discount = db.query(DiscountCode).filter(DiscountCode.id == code_id).first()
    if not discount:
        raise HTTPException(status_code=404, detail="Discount code not found")
    return discount


@router.get("/discount-codes")
async def list_discount_codes(db: Session = Depends(get_db), _=Depends(require_admin)):
    codes = db.query(DiscountCode).order_by(DiscountCode.created_at.desc(), DiscountCode.id.desc()).all()
    return {"success": True, "data": [serialize_discount_code(d) for d in codes]}


@router.post("/discount-codes", status_code=201)
async def create_discount_code(
    data: DiscountCodeCreate,
    db: Session = Depends(get_db),
    admin=Depends(require_admin),
):
    existing = db.query(DiscountCode).filter(DiscountCode.code == data.code).first()
    if existing:
        raise HTTPException(status_code=400, detail="Discount code already exists")

    discount = DiscountCode(**data.model_dump(), used_count=0, created_by=admin.id)
    db.add(discount)
    db.commit()
    db.refresh(discount)

    logger.info(f"Discount code created: {discount.code} by {admin.email}")
    return {"success": True, "data": serialize_discount_code(discount)}


@router.put("/discount-codes/{code_id}")
async def update_discount_code(
    code_id: int,
    data: DiscountCodeUpdate,
    db: Session = Depends(get_db),
    admin=Depends(require_admin),
):
    discount = _get_code_or_404(db, code_id)
    changes = data.model_dump(exclude_unset=True)

    if "code" in changes and changes["code"] != discount.code:
        clash = db.query(DiscountCode).filter(DiscountCode.code == changes["code"]).first()
        if clash:
            raise HTTPException(status_code=400, detail="Discount code already exists")

    discount_type = changes.get("discount_type", discount.discount_type)
    discount_value = changes.get("discount_value", discount.discount_value)
    if discount_type == "percentage" and discount_value is not None and discount_value > 100:
        raise HTTPException(status_code=400, detail="A percentage discount cannot exceed 100")

    valid_from = changes.get("valid_from", discount.valid_from)
    valid_until = changes.get("valid_until", discount.valid_until)
    if valid_from and valid_until and valid_from >= valid_until:
        raise HTTPException(status_code=400, detail="valid_until must be after valid_from")

    usage_limit = changes.get("usage_limit", discount.usage_limit)
    if usage_limit is not None and usage_limit < discount.used_count:
        raise HTTPException(
            status_code=400,
            detail=f"usage_limit cannot be lower than the current used count ({discount.used_count})",
        )

    for key, value in changes.items():
        setattr(discount, key, value)
    db.commit()
    db.refresh(discount)

    logger.info(f"Discount code updated: {discount.code} by {admin.email} fields={sorted(changes)}")
    return {"success": True, "data": serialize_discount_code(discount)}


@router.delete("/discount-codes/{code_id}")
async def delete_discount_code(
    code_id: int,
    db: Session = Depends(get_db),
    admin=Depends(require_admin),
):
    """Codes with recorded usage are kept for the ledger; deactivate those instead"""
    discount = _get_code_or_404(db, code_id)
    has_usage = db.query(DiscountUsage.id).filter(DiscountUsage.discount_code_id == code_id).first()
    if has_usage:
        raise HTTPException(
            status_code=400,
            detail="Discount code has been used and cannot be deleted. Deactivate it instead.",
        )

    db.delete(discount)
    db.commit()
    logger.info(f"Discount code deleted: {discount.code} by {admin.email}")
    return {"success": True, "message": "Discount code deleted"}


# =========================================================
# Usage ledger
# =========================================================

@router.get("/discount-usage")
async def list_discount_usage(
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    _=Depends(require_admin),
):
    q = db.query(DiscountUsage)
    total = q.count()
    usages = q.order_by(DiscountUsage.used_at.desc(), DiscountUsage.id.desc()).offset(offset).limit(limit).all()
    return {"success": True, "data": [serialize_usage(u) for u in usages], "total": total}


@router.get("/discount-usage/{code_id}")
async def list_code_usage(code_id: int, db: Session = Depends(get_db), _=Depends(require_admin)):
    discount = _get_code_or_404(db, code_id)
    usages = (
        db.query(DiscountUsage)
        .filter(DiscountUsage.discount_code_id == discount.id)
        .order_by(DiscountUsage.used_at.desc(), DiscountUsage.id.desc())
        .all()
    )
    return {
        "success": True,
        "code": serialize_discount_code(discount),
        "data": [serialize_usage(u) for u in usages],
    }
