# Import every model (Alembic autogenerate)
from storefront.models.user import User
from storefront.models.discount_code import DiscountCode
from storefront.models.discount_usage import DiscountUsage
from storefront.models.order import Order
from storefront.models.order_item import OrderItem
from storefront.models.processed_stripe_event import ProcessedStripeEvent

__all__ = [
    "User",
    "DiscountCode",
    "DiscountUsage",
    "Order",
    "OrderItem",
    "ProcessedStripeEvent",
]
