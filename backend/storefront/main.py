from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException
from storefront.core.config import settings
from storefront.core.logging import setup_logging, get_logger
from storefront.core.security_headers import SecurityHeadersMiddleware
from storefront.core.rate_limit import limiter, rate_limit_exceeded_handler
from storefront.routers import health, discounts, orders, payments, emails, webhooks_stripe
from storefront.routers import auth, admin_orders, admin_discount_codes, admin_dashboard

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle"""
    setup_logging(debug=settings.DEBUG)
    logger.info("Application startup")
    yield
    logger.info("Application shutdown")


app = FastAPI(
    title=f"{settings.STORE_NAME} API",
    lifespan=lifespan,
    docs_url="/api/docs" if settings.DEBUG else None,
    redoc_url="/api/redoc" if settings.DEBUG else None,
)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)


# --- Error responses: {"success": false, "error": "..."} ---
_FIELD_LABELS = {
    "email": "Email",
    "password": "Password",
    "code": "Discount code",
    "orderAmount": "Order amount",
    "customerEmail": "Customer email",
    "customer_info": "Customer information",
    "shipping_address": "Shipping address",
    "items": "Items",
    "quantity": "Quantity",
    "price": "Price",
    "amount": "Amount",
    "currency": "Currency",
    "discount_type": "Discount type",
    "discount_value": "Discount value",
    "usage_limit": "Usage limit",
    "status": "Status",
    "orderDetails": "Order details",
}


def _translate_error(err: dict) -> str:
    t = err.get("type", "")
    ctx = err.get("ctx", {})
    loc = err.get("loc", [])
    field = str(loc[-1]) if loc else ""
    label = _FIELD_LABELS.get(field, field)

    if "email" in t or ("value" in t and "email" in err.get("msg", "").lower()):
        return f"{label} must be a valid email address"
    if t == "missing":
        return f"{label} is required"
    if t == "string_too_short":
        return f"{label} must be at least {ctx.get('min_length', '')} characters"
    if t == "string_too_long":
        return f"{label} must be at most {ctx.get('max_length', '')} characters"
    if t == "too_short":
        return f"{label} must contain at least {ctx.get('min_length', '')} entries"
    if t in ("int_parsing", "int_type", "decimal_parsing", "decimal_type", "float_parsing"):
        return f"{label} must be a number"
    if t == "greater_than":
        return f"{label} must be greater than {ctx.get('gt', '')}"
    if t == "greater_than_equal":
        return f"{label} must be at least {ctx.get('ge', '')}"
    if t == "less_than_equal":
        return f"{label} must be at most {ctx.get('le', '')}"
    if t == "decimal_max_places":
        return f"{label} must have at most {ctx.get('decimal_places', '')} decimal places"
    if t == "literal_error":
        return f"{label} must be one of {ctx.get('expected', '')}"
    if t == "value_error":
        return str(ctx.get("error", err.get("msg", "")))
    return f"{label}: invalid value"


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    messages = [_translate_error(e) for e in exc.errors()]
    return JSONResponse(status_code=400, content={"success": False, "error": "; ".join(messages)})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error: {request.method} {request.url.path} - {exc}", exc_info=exc)
    return JSONResponse(status_code=500, content={"success": False, "error": "Internal server error"})


# Middleware (last registered runs first)
app.add_middleware(SecurityHeadersMiddleware)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(health.router)
app.include_router(discounts.router)
app.include_router(orders.router)
app.include_router(payments.router)
app.include_router(emails.router)
app.include_router(webhooks_stripe.router)
app.include_router(auth.router)
app.include_router(admin_orders.router)
app.include_router(admin_discount_codes.router)
app.include_router(admin_dashboard.router)
