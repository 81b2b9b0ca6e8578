from decimal import Decimal
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings"""

    # Database
    DATABASE_URL: str = "mysql+pymysql://storefront:storefront@db:3306/storefront?charset=utf8mb4"

    # Redis (admin sessions)
    REDIS_URL: str = "redis://redis:6379/0"

    # Stripe
    STRIPE_SECRET_KEY: str = ""
    STRIPE_WEBHOOK_SECRET: str = ""

    # Resend
    RESEND_API_KEY: str = ""
    RESEND_FROM_EMAIL: str = "noreply@example.com"

    # Store
    STORE_NAME: str = "Storefront"
    SUPPORT_EMAIL: str = "support@example.com"
    ADMIN_NOTIFICATION_EMAIL: str = "orders@example.com"
    ALLOWED_ORIGINS: str = "http://localhost:8000,http://localhost:5173"
    CURRENCY: str = "eur"

    # Initial admin account (create_admin.py only)
    ADMIN_EMAIL: str = "admin@example.com"
    ADMIN_PASSWORD: str = ""

    # Sessions
    SESSION_TIMEOUT_MINUTES: int = 60

    # Pricing: main storefront
    STOREFRONT_TAX_RATE: Decimal = Decimal("0.21")
    STOREFRONT_FREE_SHIPPING_THRESHOLD: Decimal = Decimal("150")
    STOREFRONT_SHIPPING_RATE: Decimal = Decimal("15")
    STOREFRONT_SHIPPING_OVERRIDES: str = "es:10,spain:10"

    # Pricing: custom print flow
    CUSTOM_PRINT_TAX_RATE: Decimal = Decimal("0.08")
    CUSTOM_PRINT_FREE_SHIPPING_THRESHOLD: Decimal = Decimal("50")
    CUSTOM_PRINT_SHIPPING_RATE: Decimal = Decimal("9.99")

    # Rate limiting
    RATE_LIMIT_ENABLED: bool = True
    VALIDATE_DISCOUNT_RATE_LIMIT: str = "20/minute"

    # Debug mode: SQL echo and API docs
    DEBUG: bool = True

    @property
    def allowed_origins_list(self) -> list[str]:
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",") if o.strip()]

    @property
    def storefront_shipping_overrides(self) -> dict[str, Decimal]:
        """"es:10,spain:10" -> {"es": Decimal("10"), "spain": Decimal("10")}"""
        overrides = {}
        for pair in self.STOREFRONT_SHIPPING_OVERRIDES.split(","):
            if ":" not in pair:
                continue
            country, rate = pair.split(":", 1)
            overrides[country.strip().lower()] = Decimal(rate.strip())
        return overrides

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
