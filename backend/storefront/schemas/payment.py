from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field

from storefront.core.config import settings


class PaymentIntentRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    amount: int = Field(gt=0, description="Amount in the smallest currency unit (cents)")
    currency: str = Field(default=settings.CURRENCY, min_length=3, max_length=3)
    items: Optional[list[Any]] = None
    customer: Optional[str] = Field(default=None, description="Receipt email")
    customer_name: Optional[str] = Field(default=None, alias="customerName")
    shipping_address: Optional[dict] = Field(default=None, alias="shippingAddress")
