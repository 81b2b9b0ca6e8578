"""Admin authentication: login, logout, current user"""
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from storefront.core.database import get_db
from storefront.core.redis import get_redis
from storefront.core.session import create_session, destroy_session
from storefront.core.rate_limit import limiter, LOGIN_RATE_LIMIT
from storefront.core.logging import get_logger
from storefront.models.user import User
from storefront.schemas.auth import LoginRequest, UserInfo
from storefront.services import auth_service
from storefront.routers.deps import get_bearer_token, require_admin

router = APIRouter(prefix="/api/admin", tags=["admin-auth"])
logger = get_logger(__name__)


@router.post("/login")
@limiter.limit(LOGIN_RATE_LIMIT)
async def login(request: Request, req: LoginRequest, db: Session = Depends(get_db), r=Depends(get_redis)):
    """Exchange admin credentials for a bearer token"""
    user = auth_service.authenticate(db, req.email, req.password)
    if user is None:
        raise HTTPException(status_code=401, detail="Invalid email or password")
    if user.role != "admin":
        raise HTTPException(status_code=403, detail="Access denied. Admin privileges required.")

    token = await create_session(r, user.id, user.role, user.email)
    logger.info(f"Admin login: user_id={user.id}")
    return {
        "success": True,
        "access_token": token,
        "token_type": "bearer",
        "user": UserInfo.model_validate(user).model_dump(),
    }


@router.post("/logout")
async def logout(request: Request, _: User = Depends(require_admin), r=Depends(get_redis)):
    await destroy_session(r, get_bearer_token(request))
    return {"success": True}


@router.get("/me")
async def me(user: User = Depends(require_admin)):
    return {"success": True, "data": UserInfo.model_validate(user).model_dump()}
