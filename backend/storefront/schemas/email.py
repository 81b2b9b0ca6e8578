from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, ConfigDict, EmailStr, Field


class EmailAddress(BaseModel):
    line1: str
    line2: Optional[str] = None
    city: str
    postal_code: str
    country: str


class EmailItem(BaseModel):
    name: str
    quantity: int = Field(ge=1)
    price: Decimal = Field(ge=0)


class OrderDetails(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    order_id: str = Field(alias="orderId", min_length=1)
    customer_name: str = Field(alias="customerName")
    customer_email: EmailStr = Field(alias="customerEmail")
    order_date: str = Field(alias="orderDate")
    payment_status: str = Field(default="Paid", alias="paymentStatus")
    items: list[EmailItem] = Field(min_length=1)
    total_amount: Decimal = Field(alias="totalAmount", ge=0)
    shipping_address: Optional[EmailAddress] = Field(default=None, alias="shippingAddress")


class SendOrderEmailsRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    order_details: OrderDetails = Field(alias="orderDetails")
