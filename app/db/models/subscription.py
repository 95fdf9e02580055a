from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime, ForeignKey, JSON, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.db.base import Base

PAYMENT_METHODS = ("stripe", "paypal", "razorpay")


class Subscription(Base):
    """
    A company's paid subscription.

    Status and days remaining are derived from the stored dates by
    app.core.subscription_lifecycle; expiry never rewrites the row.
    """
    __tablename__ = "subscriptions"

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)

    number_of_days = Column(Integer, nullable=False)
    number_of_users = Column(Integer, nullable=False)
    selected_modules = Column(JSON, nullable=False, default=list)  # [{"module_name": ..., "cost": ...}]
    total_amount = Column(Float, nullable=False)

    subscription_start_date = Column(DateTime(timezone=True), nullable=False)
    subscription_end_date = Column(DateTime(timezone=True), nullable=False)
    grace_period_end = Column(DateTime(timezone=True), nullable=True)

    payment_status = Column(String, nullable=False, default="pending")  # pending | completed | failed | refunded
    payment_method = Column(String, nullable=True)  # stripe | paypal | razorpay
    payment_transaction_id = Column(String, nullable=True)

    is_renewal = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    company = relationship("Company", back_populates="subscriptions")

    __table_args__ = (
        Index("idx_subscription_company_payment", "company_id", "payment_status"),
        Index("idx_subscription_dates", "subscription_start_date", "subscription_end_date"),
    )
