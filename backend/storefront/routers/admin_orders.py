"""Admin: order management"""
from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from storefront.core.database import get_db
from storefront.core.logging import get_logger
from storefront.models.order import ORDER_STATUSES
from storefront.schemas.order import OrderStatusUpdate
from storefront.services import order_service
from storefront.services.order_service import OrderError
from storefront.schemas.discount import to_naive_utc
from storefront.routers.deps import require_admin

router = APIRouter(prefix="/api/admin", tags=["admin-orders"])
logger = get_logger(__name__)


@router.get("/orders")
async def list_orders(
    status: Optional[str] = None,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    analytics: bool = False,
    db: Session = Depends(get_db),
    _=Depends(require_admin),
):
    """Order list, or a status/revenue summary with analytics=true"""
    if status and status not in ORDER_STATUSES:
        raise HTTPException(status_code=400, detail="Invalid order status")
    start_date, end_date = to_naive_utc(start_date), to_naive_utc(end_date)

    if analytics:
        return {"success": True, "analytics": order_service.order_summary(db, start_date, end_date)}

    orders, total = order_service.list_orders(
        db, status=status, start_date=start_date, end_date=end_date, limit=limit, offset=offset
    )
    return {
        "success": True,
        "data": [order_service.serialize_order(o) for o in orders],
        "total": total,
        "limit": limit,
        "offset": offset,
    }


@router.get("/orders/{order_id}")
async def get_order(order_id: int, db: Session = Depends(get_db), _=Depends(require_admin)):
    order = order_service.get_order(db, order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return {"success": True, "data": order_service.serialize_order(order)}


@router.put("/orders/{order_id}/status")
async def update_order_status(
    order_id: int,
    data: OrderStatusUpdate,
    db: Session = Depends(get_db),
    admin=Depends(require_admin),
):
    """Status change along the order state machine"""
    order = order_service.get_order(db, order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")

    old_status = order.status
    try:
        order_service.change_status(order, data.status)
    except OrderError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if data.notes is not None:
        order.notes = data.notes
    db.commit()
    db.refresh(order)

    logger.info(
        f"Order status changed: {order.order_number} {old_status} -> {order.status} by {admin.email}"
    )
    return {"success": True, "data": order_service.serialize_order(order)}


@router.get("/order-analytics")
async def order_analytics(
    period: str = "30d",
    db: Session = Depends(get_db),
    _=Depends(require_admin),
):
    try:
        analytics = order_service.order_analytics(db, period)
    except OrderError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"success": True, "data": analytics}
