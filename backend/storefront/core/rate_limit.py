"""Rate limiting (slowapi)"""
from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from starlette.requests import Request
from starlette.responses import JSONResponse
from storefront.core.config import settings


def get_client_ip(request: Request) -> str:
    """
    Client IP address.
    Behind a proxy the first X-Forwarded-For entry wins.
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return get_remote_address(request)


limiter = Limiter(
    key_func=get_client_ip,
    default_limits=["100/minute"],
    storage_uri="memory://",
    enabled=settings.RATE_LIMIT_ENABLED,
)


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    return JSONResponse(
        status_code=429,
        content={
            "success": False,
            "error": "Too many requests. Please wait a moment and try again.",
            "retry_after": exc.detail,
        },
    )


LOGIN_RATE_LIMIT = "5/minute"
VALIDATE_DISCOUNT_RATE_LIMIT = settings.VALIDATE_DISCOUNT_RATE_LIMIT
PAYMENT_INTENT_RATE_LIMIT = "10/minute"
