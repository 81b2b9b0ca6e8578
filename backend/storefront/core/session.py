"""Bearer-token sessions for the admin API, stored as Redis hashes"""
import secrets
import time
from typing import Optional
import redis.asyncio as aioredis
from storefront.core.config import settings

SESSION_PREFIX = "session:"
SESSION_TTL = settings.SESSION_TIMEOUT_MINUTES * 60  # seconds


async def create_session(
    r: aioredis.Redis,
    user_id: int,
    role: str,
    email: str,
) -> str:
    """Create a session and return its token"""
    token = secrets.token_hex(32)
    key = f"{SESSION_PREFIX}{token}"
    now = str(int(time.time()))
    data = {
        "user_id": str(user_id),
        "role": role,
        "email": email,
        "created_at": now,
        "last_accessed": now,
    }
    await r.hset(key, mapping=data)
    await r.expire(key, SESSION_TTL)
    return token


async def get_session(r: aioredis.Redis, token: str) -> Optional[dict]:
    """Look up a session; every access resets the idle timeout"""
    if not token:
        return None
    key = f"{SESSION_PREFIX}{token}"
    data = await r.hgetall(key)
    if not data:
        return None
    await r.expire(key, SESSION_TTL)
    await r.hset(key, "last_accessed", str(int(time.time())))
    return data


async def destroy_session(r: aioredis.Redis, token: str) -> None:
    if token:
        await r.delete(f"{SESSION_PREFIX}{token}")
