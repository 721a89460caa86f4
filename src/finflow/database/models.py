"""SQLAlchemy models for finflow database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    Boolean,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


def _now() -> datetime:
    return datetime.now(UTC)


class Account(Base):
    """Account model."""

    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    type = Column(String, nullable=False)
    balance = Column(Numeric(14, 2), default=0, nullable=False)
    current_debt = Column(Numeric(14, 2), default=0, nullable=False)
    credit_limit = Column(Numeric(14, 2), nullable=True)
    include_in_total_balance = Column(Boolean, default=True, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)
    updated_at = Column(DateTime, default=_now, onupdate=_now, nullable=False)

    # Relationships
    transactions = relationship("Transaction", back_populates="account")
    recurring_payments = relationship("RecurringPayment", back_populates="account")


class Transaction(Base):
    """Transaction model."""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    type = Column(String, nullable=False)
    category = Column(String, nullable=False)
    category_icon = Column(String, default="", nullable=False)
    description = Column(String, default="", nullable=False)
    date = Column(Date, nullable=False, index=True)
    # Magnitude actually moved on the account; a card payment is capped at the debt.
    applied_amount = Column(Numeric(14, 2), nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)
    updated_at = Column(DateTime, default=_now, onupdate=_now, nullable=False)

    # Relationships
    account = relationship("Account", back_populates="transactions")


class RecurringPayment(Base):
    """Recurring payment model."""

    __tablename__ = "recurring_payments"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    description = Column(String, default="", nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    category = Column(String, nullable=False)
    category_icon = Column(String, default="", nullable=False)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False)
    frequency = Column(String, nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)
    next_payment_date = Column(Date, nullable=False, index=True)
    last_payment_date = Column(Date, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    auto_create_transaction = Column(Boolean, default=True, nullable=False)
    reminder_days = Column(Integer, default=3, nullable=False)
    total_paid = Column(Numeric(14, 2), default=0, nullable=False)
    payment_count = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)
    updated_at = Column(DateTime, default=_now, onupdate=_now, nullable=False)

    # Relationships
    account = relationship("Account", back_populates="recurring_payments")


class Budget(Base):
    """Budget model."""

    __tablename__ = "budgets"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    category_name = Column(String, nullable=False)
    category_icon = Column(String, default="", nullable=False)
    period = Column(String, nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    budgeted_amount = Column(Numeric(14, 2), nullable=False)
    spent_amount = Column(Numeric(14, 2), default=0, nullable=False)
    remaining_amount = Column(Numeric(14, 2), default=0, nullable=False)
    progress_percentage = Column(Numeric(8, 2), default=0, nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)
    updated_at = Column(DateTime, default=_now, onupdate=_now, nullable=False)


class ProcessingCheck(Base):
    """When a user's due payments were last checked on app start."""

    __tablename__ = "processing_checks"

    user_id = Column(String, primary_key=True)
    last_checked_at = Column(DateTime, nullable=False)


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
