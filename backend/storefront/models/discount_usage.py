from sqlalchemy import Column, Integer, String, DateTime, Numeric, ForeignKey, func
from sqlalchemy.orm import relationship
from storefront.core.database import Base


class DiscountUsage(Base):
    """One redemption of a discount code. Rows are never updated or deleted."""
    __tablename__ = "discount_code_usage"

    id = Column(Integer, primary_key=True, autoincrement=True)
    discount_code_id = Column(
        Integer, ForeignKey("discount_codes.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="SET NULL"), nullable=True, index=True)
    customer_email = Column(String(255), nullable=True, index=True)
    discount_amount = Column(Numeric(16, 6), nullable=False)
    order_amount = Column(Numeric(16, 6), nullable=False, comment="Subtotal at time of use")
    ip_address = Column(String(64), nullable=True)
    user_agent = Column(String(512), nullable=True)
    used_at = Column(DateTime, nullable=False, server_default=func.now(), index=True)

    discount_code = relationship("DiscountCode", back_populates="usages")
