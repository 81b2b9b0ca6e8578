from datetime import datetime, timezone
from decimal import Decimal
from typing import Literal, Optional
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator


def to_naive_utc(v: Optional[datetime]) -> Optional[datetime]:
    """Timestamps are stored as naive UTC"""
    if v is None or v.tzinfo is None:
        return v
    return v.astimezone(timezone.utc).replace(tzinfo=None)


class ValidateDiscountRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    code: str = Field(min_length=1, max_length=64)
    order_amount: Decimal = Field(alias="orderAmount", ge=0)
    customer_email: Optional[EmailStr] = Field(default=None, alias="customerEmail")


class ApplyDiscountRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    code: str = Field(min_length=1, max_length=64)
    order_id: Optional[int] = Field(default=None, alias="orderId")
    customer_email: EmailStr = Field(alias="customerEmail")
    discount_amount: Decimal = Field(alias="discountAmount", ge=0)
    order_amount: Decimal = Field(alias="orderAmount", ge=0)
    ip_address: Optional[str] = Field(default=None, alias="ipAddress", max_length=64)
    user_agent: Optional[str] = Field(default=None, alias="userAgent")


class DiscountCodeCreate(BaseModel):
    code: str = Field(min_length=1, max_length=64)
    name: Optional[str] = Field(default=None, max_length=200)
    description: Optional[str] = None
    discount_type: Literal["percentage", "fixed_amount"]
    discount_value: Decimal = Field(gt=0, decimal_places=2)
    minimum_order_amount: Decimal = Field(default=Decimal("0"), ge=0, decimal_places=2)
    maximum_discount_amount: Optional[Decimal] = Field(default=None, gt=0, decimal_places=2)
    usage_limit: Optional[int] = Field(default=None, ge=1)
    valid_from: Optional[datetime] = None
    valid_until: Optional[datetime] = None
    is_active: bool = True

    @field_validator("code")
    @classmethod
    def code_upper(cls, v):
        v = v.strip().upper()
        if not v:
            raise ValueError("code must not be blank")
        return v

    @field_validator("valid_from", "valid_until")
    @classmethod
    def naive_utc(cls, v):
        return to_naive_utc(v)

    @model_validator(mode="after")
    def check_rules(self):
        if self.discount_type == "percentage" and self.discount_value > 100:
            raise ValueError("A percentage discount cannot exceed 100")
        if self.valid_from and self.valid_until and self.valid_from >= self.valid_until:
            raise ValueError("valid_until must be after valid_from")
        return self


# Columns an update may set but never clear
UPDATE_NOT_NULL_FIELDS = ("code", "discount_type", "discount_value", "minimum_order_amount", "is_active")


class DiscountCodeUpdate(BaseModel):
    code: Optional[str] = Field(default=None, min_length=1, max_length=64)
    name: Optional[str] = Field(default=None, max_length=200)
    description: Optional[str] = None
    discount_type: Optional[Literal["percentage", "fixed_amount"]] = None
    discount_value: Optional[Decimal] = Field(default=None, gt=0, decimal_places=2)
    minimum_order_amount: Optional[Decimal] = Field(default=None, ge=0, decimal_places=2)
    maximum_discount_amount: Optional[Decimal] = Field(default=None, gt=0, decimal_places=2)
    usage_limit: Optional[int] = Field(default=None, ge=1)
    valid_from: Optional[datetime] = None
    valid_until: Optional[datetime] = None
    is_active: Optional[bool] = None

    @field_validator("code")
    @classmethod
    def code_upper(cls, v):
        if v is None:
            return v
        v = v.strip().upper()
        if not v:
            raise ValueError("code must not be blank")
        return v

    @field_validator("valid_from", "valid_until")
    @classmethod
    def naive_utc(cls, v):
        return to_naive_utc(v)

    @model_validator(mode="after")
    def required_fields_not_cleared(self):
        for field in UPDATE_NOT_NULL_FIELDS:
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{field} cannot be null")
        return self
