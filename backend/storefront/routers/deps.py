"""Shared dependencies: bearer-token auth and role checks"""
from typing import Optional
from fastapi import Request, HTTPException, Depends
from sqlalchemy.orm import Session

from storefront.core.database import get_db
from storefront.core.redis import get_redis
from storefront.core.session import get_session
from storefront.models.user import User


def get_bearer_token(request: Request) -> Optional[str]:
    auth = request.headers.get("Authorization", "")
    scheme, _, token = auth.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def get_current_user(
    request: Request,
    db: Session = Depends(get_db),
    r=Depends(get_redis),
) -> Optional[User]:
    """Bearer token -> Redis session -> active user, or None"""
    token = get_bearer_token(request)
    if not token:
        return None

    session_data = await get_session(r, token)
    if not session_data:
        return None

    user_id = int(session_data.get("user_id", 0))
    if not user_id:
        return None

    return db.query(User).filter(User.id == user_id, User.is_active == True).first()


async def require_login(
    user: Optional[User] = Depends(get_current_user),
) -> User:
    """401 unless a valid bearer token is presented"""
    if user is None:
        raise HTTPException(status_code=401, detail="Authorization required")
    return user


async def require_admin(
    user: User = Depends(require_login),
) -> User:
    """403 unless the user holds the admin role"""
    if user.role != "admin":
        raise HTTPException(status_code=403, detail="Access denied. Admin privileges required.")
    return user
