"""SQLAlchemy ORM models for the transaction and subscription stores"""

from sqlalchemy import CheckConstraint, Column, Date, DateTime, Float, Integer, Text
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class TransactionRecord(Base):
    """Income or expense entry"""

    __tablename__ = "transactions"
    __table_args__ = (CheckConstraint("type IN ('income', 'expense')", name="ck_transaction_type"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    owner_id = Column(Integer, nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    vendor = Column(Text, nullable=False)
    description = Column(Text, nullable=False, default="")
    amount = Column(Float, nullable=False)
    category = Column(Text, nullable=False)
    type = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class SubscriptionRecord(Base):
    """Recurring charge confirmed by the owner"""

    __tablename__ = "subscriptions"
    __table_args__ = (
        CheckConstraint("frequency IN ('monthly', 'yearly')", name="ck_subscription_frequency"),
        CheckConstraint("status IN ('active', 'trial', 'forgotten')", name="ck_subscription_status"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    owner_id = Column(Integer, nullable=False, index=True)
    name = Column(Text, nullable=False)
    amount = Column(Float, nullable=False)
    frequency = Column(Text, nullable=False)
    next_billing = Column(Date, nullable=False)
    category = Column(Text, nullable=False)
    status = Column(Text, nullable=False, default="active")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
