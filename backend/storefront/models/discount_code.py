from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, Numeric, ForeignKey, Enum as SAEnum, func
from sqlalchemy.orm import relationship
from storefront.core.database import Base


class DiscountCode(Base):
    __tablename__ = "discount_codes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    code = Column(String(64), unique=True, nullable=False, index=True, comment="Always stored uppercase")
    name = Column(String(200), nullable=True)
    description = Column(Text, nullable=True)
    discount_type = Column(
        SAEnum("percentage", "fixed_amount", name="discount_type"), nullable=False
    )
    discount_value = Column(Numeric(12, 2), nullable=False, comment="Percent or EUR")
    minimum_order_amount = Column(Numeric(12, 2), nullable=False, default=0)
    maximum_discount_amount = Column(Numeric(12, 2), nullable=True, comment="Cap for percentage codes")
    usage_limit = Column(Integer, nullable=True, comment="NULL = unlimited")
    used_count = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    valid_from = Column(DateTime, nullable=True)
    valid_until = Column(DateTime, nullable=True)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())

    usages = relationship("DiscountUsage", back_populates="discount_code", lazy="dynamic")
