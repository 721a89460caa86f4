"""Domain model entities for finflow.

These are pure data classes representing business concepts, independent of
database schema. Services receive and return these; the database layer maps
its ORM rows onto them.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional


class TransactionType(str, Enum):
    """Direction of a ledger entry."""

    INCOME = "income"
    EXPENSE = "expense"


class AccountType(str, Enum):
    """Kinds of accounts a user can hold."""

    CASH = "cash"
    DEBIT_CARD = "debit_card"
    CREDIT_CARD = "credit_card"
    SAVINGS = "savings"
    INVESTMENT = "investment"
    GOLD = "gold"


class Frequency(str, Enum):
    """Recurring payment schedule frequencies."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class BudgetPeriod(str, Enum):
    """Budget window lengths."""

    MONTHLY = "monthly"
    WEEKLY = "weekly"


class BalanceDirection(str, Enum):
    """Whether a transaction's effect is being applied or reverted."""

    APPLY = "apply"
    REVERT = "revert"


# Budgets with this category name match every expense category.
ALL_CATEGORIES = "all categories"

# Icon used when a recurring payment carries no icon of its own.
DEFAULT_CATEGORY_ICON = "help-circle-outline"


@dataclass(frozen=True)
class Account:
    """Account domain entity.

    Credit card accounts track what is owed in ``current_debt``; ``balance``
    is not touched for them by transaction postings.
    """

    id: int
    user_id: str
    name: str
    type: str
    balance: Decimal
    current_debt: Decimal
    credit_limit: Optional[Decimal]
    include_in_total_balance: bool
    is_active: bool
    created_at: datetime
    updated_at: datetime

    @property
    def is_credit_card(self) -> bool:
        return self.type == AccountType.CREDIT_CARD


@dataclass(frozen=True)
class Transaction:
    """Transaction (ledger entry) domain entity."""

    id: int
    user_id: str
    account_id: int
    amount: Decimal
    type: str
    category: str
    category_icon: str
    description: str
    date: date
    created_at: datetime
    updated_at: datetime
    applied_amount: Optional[Decimal] = None


@dataclass(frozen=True)
class RecurringPayment:
    """Scheduled obligation (or income) and its rollforward state."""

    id: int
    user_id: str
    name: str
    description: str
    amount: Decimal
    category: str
    category_icon: str
    account_id: int
    frequency: str
    start_date: date
    end_date: Optional[date]
    next_payment_date: date
    last_payment_date: Optional[date]
    is_active: bool
    auto_create_transaction: bool
    reminder_days: int
    total_paid: Decimal
    payment_count: int
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class Budget:
    """Spending ceiling for a category over a fixed window."""

    id: int
    user_id: str
    category_name: str
    category_icon: str
    period: str
    start_date: date
    end_date: date
    budgeted_amount: Decimal
    spent_amount: Decimal
    remaining_amount: Decimal
    progress_percentage: Decimal
    created_at: datetime
    updated_at: datetime

    @property
    def covers_all_categories(self) -> bool:
        return self.category_name == ALL_CATEGORIES


@dataclass(frozen=True)
class RecurringPaymentSummary:
    """Aggregate view over a user's active recurring payments."""

    total_monthly_amount: Decimal
    total_yearly_amount: Decimal
    active_count: int
    upcoming_count: int
    overdue_count: int


@dataclass(frozen=True)
class AccountSummary:
    """Per-type balance totals for a user's active accounts."""

    total_balance: Decimal
    by_type: dict[str, Decimal]


@dataclass
class ProcessingReport:
    """Outcome of one due-payment scanning run."""

    processed: list[int] = field(default_factory=list)
    failed: dict[int, str] = field(default_factory=dict)
    transaction_ids: list[int] = field(default_factory=list)

    @property
    def processed_count(self) -> int:
        return len(self.processed)

    @property
    def failed_count(self) -> int:
        return len(self.failed)

    def merge(self, other: "ProcessingReport") -> None:
        """Fold another report into this one."""
        self.processed.extend(other.processed)
        self.failed.update(other.failed)
        self.transaction_ids.extend(other.transaction_ids)
