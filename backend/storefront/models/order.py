from sqlalchemy import Column, Integer, String, Text, DateTime, JSON, Numeric, ForeignKey, Enum as SAEnum, func
from sqlalchemy.orm import relationship
from storefront.core.database import Base

ORDER_STATUSES = ("draft", "pending", "confirmed", "in_production", "shipped", "delivered", "cancelled")


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_number = Column(String(40), unique=True, nullable=False, index=True)
    status = Column(SAEnum(*ORDER_STATUSES, name="order_status"), nullable=False, default="pending", index=True)
    customer_info = Column(JSON, nullable=False, comment="name / email / phone / company")
    customer_email = Column(String(255), nullable=False, index=True)
    shipping_address = Column(JSON, nullable=False)
    pricing_policy = Column(String(32), nullable=False, default="storefront")
    currency = Column(String(3), nullable=False, default="eur")

    # Amounts are stored unrounded; rounding happens when displayed
    subtotal = Column(Numeric(16, 6), nullable=False)
    discount_amount = Column(Numeric(16, 6), nullable=False, default=0)
    shipping = Column(Numeric(16, 6), nullable=False, default=0)
    tax = Column(Numeric(16, 6), nullable=False, default=0)
    total = Column(Numeric(16, 6), nullable=False)
    original_total = Column(Numeric(16, 6), nullable=False, comment="Total before discount")

    discount_code = Column(String(64), nullable=True)
    discount_code_id = Column(Integer, ForeignKey("discount_codes.id", ondelete="SET NULL"), nullable=True)
    discount_type = Column(String(20), nullable=True)

    payment_intent_id = Column(String(255), unique=True, nullable=True, index=True)
    stripe_payment_status = Column(String(40), nullable=False, default="pending")
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now(), index=True)
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())

    items = relationship(
        "OrderItem", back_populates="order", lazy="selectin",
        cascade="all, delete-orphan", order_by="OrderItem.id",
    )
