"""Admin: dashboard statistics"""
from datetime import timedelta
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sqlalchemy import func as sa_func

from storefront.core.database import get_db
from storefront.models.discount_code import DiscountCode
from storefront.models.discount_usage import DiscountUsage
from storefront.models.order import Order
from storefront.services.discount_service import utcnow
from storefront.services.pricing import money_json
from storefront.routers.deps import require_admin

router = APIRouter(prefix="/api/admin", tags=["admin-dashboard"])

RECENT_DAYS = 30


@router.get("/dashboard-stats")
async def get_dashboard_stats(db: Session = Depends(get_db), _=Depends(require_admin)):
    since = utcnow() - timedelta(days=RECENT_DAYS)

    # --- Discount codes ---
    total_codes = db.query(sa_func.count(DiscountCode.id)).scalar()
    active_codes = db.query(sa_func.count(DiscountCode.id)).filter(DiscountCode.is_active == True).scalar()
    recent_usage = db.query(sa_func.count(DiscountUsage.id)).filter(DiscountUsage.used_at >= since).scalar()
    total_savings = db.query(sa_func.sum(DiscountUsage.discount_amount)).scalar()

    # --- Orders (revenue excludes cancelled) ---
    total_orders = db.query(sa_func.count(Order.id)).scalar()
    recent_orders = db.query(sa_func.count(Order.id)).filter(Order.created_at >= since).scalar()
    total_revenue = db.query(sa_func.sum(Order.total)).filter(Order.status != "cancelled").scalar()

    return {
        "success": True,
        "data": {
            "totalCodes": total_codes or 0,
            "activeCodes": active_codes or 0,
            "recentUsage": recent_usage or 0,
            "totalSavingsAmount": money_json(total_savings or 0),
            "totalOrders": total_orders or 0,
            "recentOrders": recent_orders or 0,
            "totalRevenue": money_json(total_revenue or 0),
        },
    }
