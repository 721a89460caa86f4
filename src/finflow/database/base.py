"""Abstract database interface."""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

# Import entities directly to avoid circular import through domain/__init__.py
from finflow.domain.entities import (
    Account,
    Budget,
    RecurringPayment,
    Transaction,
)


class Database(ABC):
    """Abstract database interface for finflow.

    Update methods take partial field sets. Every write is committed on its
    own unless it runs inside ``atomic()``, in which case the outermost block
    commits or rolls back all of them together.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    @abstractmethod
    def atomic(self) -> AbstractContextManager[None]:
        """Group the writes made inside the block into one unit of work."""
        pass

    # Account operations
    @abstractmethod
    def create_account(
        self,
        user_id: str,
        name: str,
        type: str,
        balance: Decimal = Decimal("0"),
        current_debt: Decimal = Decimal("0"),
        credit_limit: Optional[Decimal] = None,
        include_in_total_balance: bool = True,
    ) -> int:
        """Create a new account. Returns account ID."""
        pass

    @abstractmethod
    def get_account(self, account_id: int) -> Optional[Account]:
        """Get account by ID."""
        pass

    @abstractmethod
    def list_accounts(self, user_id: str, include_inactive: bool = False) -> list[Account]:
        """List a user's accounts, oldest first."""
        pass

    @abstractmethod
    def update_account(self, account_id: int, **fields: Any) -> None:
        """Update the given account fields."""
        pass

    @abstractmethod
    def delete_account(self, account_id: int) -> None:
        """Delete an account."""
        pass

    @abstractmethod
    def get_account_transaction_count(self, account_id: int) -> int:
        """Get count of transactions posted to an account."""
        pass

    @abstractmethod
    def get_account_recurring_count(self, account_id: int) -> int:
        """Get count of recurring payments drawing on an account."""
        pass

    # Transaction operations
    @abstractmethod
    def create_transaction(
        self,
        user_id: str,
        account_id: int,
        amount: Decimal,
        type: str,
        category: str,
        date: date,
        description: str = "",
        category_icon: str = "",
    ) -> int:
        """Create a transaction. Returns transaction ID."""
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def update_transaction(self, transaction_id: int, **fields: Any) -> None:
        """Update the given transaction fields."""
        pass

    @abstractmethod
    def delete_transaction(self, transaction_id: int) -> None:
        """Delete a transaction."""
        pass

    @abstractmethod
    def list_transactions(
        self,
        user_id: Optional[str] = None,
        account_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        type: Optional[str] = None,
        category: Optional[str] = None,
    ) -> list[Transaction]:
        """List transactions with optional filters, newest first.

        Args:
            user_id: Optional owner filter
            account_id: Optional account ID filter
            start_date: Optional start date filter (inclusive)
            end_date: Optional end date filter (inclusive)
            type: Optional income/expense filter
            category: Optional exact category name filter
        """
        pass

    # Recurring payment operations
    @abstractmethod
    def create_recurring_payment(
        self,
        user_id: str,
        name: str,
        amount: Decimal,
        category: str,
        account_id: int,
        frequency: str,
        start_date: date,
        next_payment_date: date,
        end_date: Optional[date] = None,
        description: str = "",
        category_icon: str = "",
        is_active: bool = True,
        auto_create_transaction: bool = True,
        reminder_days: int = 3,
    ) -> int:
        """Create a recurring payment. Returns recurring payment ID."""
        pass

    @abstractmethod
    def get_recurring_payment(self, payment_id: int) -> Optional[RecurringPayment]:
        """Get recurring payment by ID."""
        pass

    @abstractmethod
    def list_recurring_payments(
        self, user_id: str, active_only: bool = False
    ) -> list[RecurringPayment]:
        """List a user's recurring payments ordered by next payment date."""
        pass

    @abstractmethod
    def list_due_recurring_payments(
        self, as_of: date, user_id: Optional[str] = None
    ) -> list[RecurringPayment]:
        """List active, auto-posting payments with next_payment_date <= as_of.

        Args:
            as_of: Processing day
            user_id: Optional owner filter; None scans every user
        """
        pass

    @abstractmethod
    def update_recurring_payment(self, payment_id: int, **fields: Any) -> None:
        """Update the given recurring payment fields."""
        pass

    @abstractmethod
    def delete_recurring_payment(self, payment_id: int) -> None:
        """Delete a recurring payment."""
        pass

    # Budget operations
    @abstractmethod
    def create_budget(
        self,
        user_id: str,
        category_name: str,
        period: str,
        start_date: date,
        end_date: date,
        budgeted_amount: Decimal,
        category_icon: str = "",
    ) -> int:
        """Create a budget with nothing spent. Returns budget ID."""
        pass

    @abstractmethod
    def get_budget(self, budget_id: int) -> Optional[Budget]:
        """Get budget by ID."""
        pass

    @abstractmethod
    def list_budgets(self, user_id: str) -> list[Budget]:
        """List a user's budgets, newest first."""
        pass

    @abstractmethod
    def list_active_budgets(self, user_id: str, as_of: date) -> list[Budget]:
        """List budgets whose window contains as_of."""
        pass

    @abstractmethod
    def update_budget(self, budget_id: int, **fields: Any) -> None:
        """Update the given budget fields."""
        pass

    @abstractmethod
    def delete_budget(self, budget_id: int) -> None:
        """Delete a budget."""
        pass

    # Processing check markers
    @abstractmethod
    def get_last_processing_check(self, user_id: str) -> Optional[datetime]:
        """Get when the user's due payments were last checked, if ever."""
        pass

    @abstractmethod
    def set_last_processing_check(self, user_id: str, checked_at: datetime) -> None:
        """Record when the user's due payments were last checked."""
        pass
