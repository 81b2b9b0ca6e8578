from sqlalchemy import Column, Integer, String, DateTime, func
from storefront.core.database import Base


class ProcessedStripeEvent(Base):
    """Stripe webhook events already handled"""
    __tablename__ = "processed_stripe_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    event_id = Column(String(255), unique=True, nullable=False)
    event_type = Column(String(100), nullable=False)
    payment_intent_id = Column(String(255), nullable=True, index=True)
    processed_at = Column(DateTime, nullable=False, server_default=func.now())
