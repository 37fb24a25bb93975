"""SQLAlchemy ORM models for the cash-flow dashboard tables read by the forecast"""

import uuid
from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    JSON,
    Numeric,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


class RawTransactionRecord(Base):
    """Imported bank transaction"""

    __tablename__ = "raw_transactions"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    date = Column(Date, nullable=False, index=True)
    amount = Column(Numeric(14, 2), nullable=False)
    name = Column(Text, nullable=True)
    description = Column(Text, nullable=True)
    qb_account_name = Column(Text, nullable=True)  # GL account label
    source_system = Column(Text, nullable=False, default="quickbooks")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    classification = relationship(
        "ClassifiedBankTransaction",
        back_populates="transaction",
        uselist=False,
        cascade="all, delete-orphan",
    )


class ClassifiedBankTransaction(Base):
    """Category assignment for a raw transaction (at most one per transaction)"""

    __tablename__ = "classified_bank_transactions"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    transaction_id = Column(
        UUID(as_uuid=True),
        ForeignKey("raw_transactions.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    category_code = Column(Text, nullable=False, index=True)
    is_verified = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    transaction = relationship("RawTransactionRecord", back_populates="classification")


class DisplayCategoryRecord(Base):
    """Display metadata keyed by category code"""

    __tablename__ = "display_categories"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    category_code = Column(Text, nullable=False, unique=True)
    display_group = Column(Text, nullable=False)
    display_label = Column(Text, nullable=False)
    display_label2 = Column(Text, nullable=True)
    cash_direction = Column(Text, nullable=False)  # Cashin | Cashout
    sort_order = Column(Integer, nullable=False, default=0)


class PaymentRuleRecord(Base):
    """Reusable recurrence rule"""

    __tablename__ = "payment_rules"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    rule_name = Column(Text, nullable=False, unique=True)
    frequency = Column(Text, nullable=False)
    anchor_days = Column(JSON, nullable=False)
    exception_rule = Column(Text, nullable=False, default="move_later")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    forecast_items = relationship("ForecastItemRecord", back_populates="rule")


class ForecastItemRecord(Base):
    """Vendor bound to a payment rule with an estimated amount"""

    __tablename__ = "forecast_items"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    vendor_name = Column(Text, nullable=False)
    estimated_amount = Column(Numeric(14, 2), nullable=False)
    rule_id = Column(UUID(as_uuid=True), ForeignKey("payment_rules.id"), nullable=False)
    category_code = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    rule = relationship("PaymentRuleRecord", back_populates="forecast_items")


class ARForecastRecord(Base):
    """Manual AR collections estimate, one per week"""

    __tablename__ = "ar_forecast"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    week_ending = Column(Date, nullable=False, unique=True)
    forecasted_amount = Column(Numeric(14, 2), nullable=False)
    notes = Column(Text, nullable=True)


class CashBalanceRecord(Base):
    """Manual bank balance snapshot"""

    __tablename__ = "cash_balances"
    __table_args__ = (UniqueConstraint("bank_account", "as_of_date"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    bank_account = Column(Text, nullable=False, default="Operating")
    as_of_date = Column(Date, nullable=False, index=True)
    balance = Column(Numeric(14, 2), nullable=False)
    notes = Column(Text, nullable=True)
