from sqlalchemy import Column, Integer, String, DateTime, JSON, Numeric, ForeignKey, func
from sqlalchemy.orm import relationship
from storefront.core.database import Base


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(String(100), nullable=False)
    name = Column(String(255), nullable=False)
    design_file_id = Column(String(255), nullable=True, comment="Custom print uploads")
    variants = Column(JSON, nullable=True, comment="size / color")
    customizations = Column(JSON, nullable=True)
    image = Column(String(1024), nullable=True)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(16, 6), nullable=False)
    total_price = Column(Numeric(16, 6), nullable=False)
    created_at = Column(DateTime, nullable=False, server_default=func.now())

    order = relationship("Order", back_populates="items")
