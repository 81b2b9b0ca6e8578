from decimal import Decimal
from typing import Literal, Optional
from pydantic import BaseModel, EmailStr, Field, field_validator

from storefront.core.config import settings


class CustomerInfo(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    email: EmailStr
    phone: Optional[str] = Field(default=None, max_length=50)
    company: Optional[str] = Field(default=None, max_length=200)


class ShippingAddress(BaseModel):
    line1: str = Field(min_length=1, max_length=255)
    line2: Optional[str] = Field(default=None, max_length=255)
    city: str = Field(min_length=1, max_length=100)
    postal_code: str = Field(min_length=1, max_length=20)
    country: str = Field(min_length=2, max_length=100)


class CartItem(BaseModel):
    id: str = Field(min_length=1, max_length=100)
    name: str = Field(min_length=1, max_length=255)
    price: Decimal = Field(ge=0)
    quantity: int = Field(ge=1, le=1000)
    size: Optional[str] = None
    color: Optional[str] = None
    image: Optional[str] = None
    customizations: Optional[dict] = None
    design_file_id: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v):
        # Product ids arrive as numbers from some clients
        return str(v) if isinstance(v, int) else v


class OrderCreate(BaseModel):
    customer_info: CustomerInfo
    items: list[CartItem] = Field(min_length=1)
    subtotal: Decimal = Field(ge=0)
    shipping: Optional[Decimal] = Field(default=None, ge=0)
    tax: Optional[Decimal] = Field(default=None, ge=0)
    discount_code: Optional[str] = Field(default=None, max_length=64)
    payment_intent_id: Optional[str] = Field(default=None, max_length=255)
    shipping_address: ShippingAddress
    total: Decimal = Field(ge=0)
    pricing_policy: Literal["storefront", "custom_print"] = "storefront"
    currency: str = Field(default=settings.CURRENCY, min_length=3, max_length=3)

    @field_validator("discount_code")
    @classmethod
    def blank_code_is_none(cls, v):
        if v is not None and not v.strip():
            return None
        return v


class PaymentStatusUpdate(BaseModel):
    payment_intent_id: Optional[str] = None
    # Informational only; the authoritative status is read from Stripe
    payment_status: Optional[str] = None


class OrderStatusUpdate(BaseModel):
    status: str
    notes: Optional[str] = Field(default=None, max_length=5000)
