from datetime import datetime, timezone
from fastapi import APIRouter
from storefront.core.database import check_db_connection
from storefront.core.redis import check_redis_connection

router = APIRouter()


@router.get("/health")
@router.get("/api/health")
async def health_check():
    db_ok = check_db_connection()
    redis_ok = await check_redis_connection()

    return {
        "success": db_ok and redis_ok,
        "status": "ok" if (db_ok and redis_ok) else "degraded",
        "db": "connected" if db_ok else "disconnected",
        "redis": "connected" if redis_ok else "disconnected",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
