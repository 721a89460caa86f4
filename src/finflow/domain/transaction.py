"""Transaction domain service."""

import calendar
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Optional

from finflow.database.base import Database
from finflow.domain.balance import BalanceAdjuster
from finflow.domain.budget import BudgetService
from finflow.domain.entities import (
    BalanceDirection,
    Transaction as TransactionEntity,
    TransactionType,
)
from finflow.domain.errors import (
    NotFoundError,
    ValidationError,
    account_not_found,
    transaction_not_found,
)
from finflow.logging_config import get_logger

logger = get_logger(__name__)


def _validate_type(type: str) -> str:
    try:
        return TransactionType(type).value
    except ValueError as e:
        raise ValidationError(
            f"Unknown transaction type: '{type}'. Supported types: income, expense"
        ) from e


def _validate_amount(amount: Decimal) -> None:
    if amount < 0:
        raise ValidationError("Transaction amount cannot be negative")


def _applied(txn: TransactionEntity) -> Decimal:
    # Rows written straight through the store never recorded an applied amount.
    return txn.applied_amount if txn.applied_amount is not None else txn.amount


class TransactionService:
    """Service for managing transactions.

    Every create, update and delete moves the owning account's balance (or a
    credit card's debt) in the same unit of work as the transaction write.
    """

    def __init__(self, db: Database):
        """Initialize transaction service.

        Args:
            db: Database instance
        """
        self.db = db
        self.adjuster = BalanceAdjuster(db)
        self.budgets = BudgetService(db)

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
        """Create a transaction and apply it to its account.

        The transaction row is written before the account is touched. Expenses
        are then reconciled against the user's budgets. Nothing is kept if any
        step fails.

        Args:
            user_id: Owner
            account_id: Account the money moves in or out of
            amount: Non-negative magnitude
            type: income or expense
            category: Category name
            date: Value date
            description: Optional free text
            category_icon: Optional display hint

        Returns:
            Transaction ID

        Raises:
            ValidationError: If amount, type or category is invalid
            NotFoundError: If the account doesn't exist for this user
        """
        _validate_amount(amount)
        type = _validate_type(type)
        if not category or not category.strip():
            raise ValidationError("Transaction category cannot be empty")
        self._require_account(account_id, user_id)

        with self.db.atomic():
            transaction_id = self.db.create_transaction(
                user_id=user_id,
                account_id=account_id,
                amount=amount,
                type=type,
                category=category.strip(),
                date=date,
                description=description,
                category_icon=category_icon,
            )
            applied = self.adjuster.adjust(account_id, amount, type, BalanceDirection.APPLY)
            self.db.update_transaction(transaction_id, applied_amount=applied)
            if type == TransactionType.EXPENSE.value:
                self.budgets.reconcile_expense(user_id, category.strip(), amount, date)

        logger.info(
            "Created %s transaction %s of %s on account %s", type, transaction_id, amount, account_id
        )
        return transaction_id

    def get_transaction(self, transaction_id: int) -> Optional[TransactionEntity]:
        """Get transaction by ID.

        Args:
            transaction_id: Transaction ID

        Returns:
            Transaction entity or None if not found
        """
        return self.db.get_transaction(transaction_id)

    def update_transaction(
        self,
        transaction_id: int,
        account_id: Optional[int] = None,
        amount: Optional[Decimal] = None,
        type: Optional[str] = None,
        category: Optional[str] = None,
        date: Optional[date] = None,
        description: Optional[str] = None,
        category_icon: Optional[str] = None,
    ) -> None:
        """Update transaction fields.

        The effect recorded at the last apply is reverted on the old account
        and the new effect applied on the (possibly different) new account.
        Budgets are not touched.

        Raises:
            NotFoundError: If the transaction or new account doesn't exist
            ValidationError: If a new value is invalid
        """
        txn = self.db.get_transaction(transaction_id)
        if txn is None:
            raise NotFoundError(transaction_not_found(transaction_id))

        if amount is not None:
            _validate_amount(amount)
        if type is not None:
            type = _validate_type(type)
        if category is not None and not category.strip():
            raise ValidationError("Transaction category cannot be empty")
        if account_id is not None:
            self._require_account(account_id, txn.user_id)

        fields: dict[str, Any] = {}
        for name, value in (
            ("account_id", account_id),
            ("amount", amount),
            ("type", type),
            ("category", category.strip() if category is not None else None),
            ("date", date),
            ("description", description),
            ("category_icon", category_icon),
        ):
            if value is not None:
                fields[name] = value
        if not fields:
            return

        new_account_id = fields.get("account_id", txn.account_id)
        new_amount = fields.get("amount", txn.amount)
        new_type = fields.get("type", txn.type)

        with self.db.atomic():
            self.adjuster.adjust(
                txn.account_id, _applied(txn), txn.type, BalanceDirection.REVERT
            )
            fields["applied_amount"] = self.adjuster.adjust(
                new_account_id, new_amount, new_type, BalanceDirection.APPLY
            )
            self.db.update_transaction(transaction_id, **fields)

        logger.info("Updated transaction %s", transaction_id)

    def delete_transaction(self, transaction_id: int) -> None:
        """Delete a transaction, reverting its effect on the account.

        Raises:
            NotFoundError: If the transaction doesn't exist
        """
        txn = self.db.get_transaction(transaction_id)
        if txn is None:
            raise NotFoundError(transaction_not_found(transaction_id))

        with self.db.atomic():
            self.adjuster.adjust(
                txn.account_id, _applied(txn), txn.type, BalanceDirection.REVERT
            )
            self.db.delete_transaction(transaction_id)

        logger.info("Deleted transaction %s", transaction_id)

    def list_transactions(
        self,
        user_id: str,
        account_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        type: Optional[str] = None,
        category: Optional[str] = None,
    ) -> list[TransactionEntity]:
        """List a user's transactions, newest first.

        Args:
            user_id: Owner
            account_id: Optional account filter
            start_date: Optional start date filter (inclusive)
            end_date: Optional end date filter (inclusive)
            type: Optional income/expense filter
            category: Optional category filter

        Returns:
            List of transaction entities
        """
        if type is not None:
            type = _validate_type(type)
        return self.db.list_transactions(
            user_id=user_id,
            account_id=account_id,
            start_date=start_date,
            end_date=end_date,
            type=type,
            category=category,
        )

    def get_monthly_stats(self, user_id: str, year: int, month: int) -> dict[str, Any]:
        """Get income, expense and net totals for one calendar month.

        Returns:
            Dict with income, expenses, net and transaction_count
        """
        if not 1 <= month <= 12:
            raise ValidationError(f"Invalid month: {month}")
        start = date(year, month, 1)
        end = date(year, month, calendar.monthrange(year, month)[1])

        income = Decimal("0")
        expenses = Decimal("0")
        transactions = self.db.list_transactions(user_id=user_id, start_date=start, end_date=end)
        for txn in transactions:
            if txn.type == TransactionType.INCOME.value:
                income += txn.amount
            else:
                expenses += txn.amount

        return {
            "income": income,
            "expenses": expenses,
            "net": income - expenses,
            "transaction_count": len(transactions),
        }

    def get_category_breakdown(
        self,
        user_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        type: str = TransactionType.EXPENSE.value,
    ) -> list[dict[str, Any]]:
        """Get per-category totals for a date range, largest first.

        Returns:
            List of dicts with category, total, count and percentage
        """
        type = _validate_type(type)
        transactions = self.db.list_transactions(
            user_id=user_id, start_date=start_date, end_date=end_date, type=type
        )

        totals: dict[str, dict[str, Any]] = {}
        for txn in transactions:
            entry = totals.setdefault(
                txn.category, {"category": txn.category, "total": Decimal("0"), "count": 0}
            )
            entry["total"] += txn.amount
            entry["count"] += 1

        grand_total = sum((e["total"] for e in totals.values()), Decimal("0"))
        for entry in totals.values():
            if grand_total > 0:
                entry["percentage"] = (entry["total"] * 100 / grand_total).quantize(
                    Decimal("0.01"), ROUND_HALF_UP
                )
            else:
                entry["percentage"] = Decimal("0")

        return sorted(totals.values(), key=lambda e: (-e["total"], e["category"]))

    def _require_account(self, account_id: int, user_id: str) -> None:
        account = self.db.get_account(account_id)
        if account is None or account.user_id != user_id:
            raise NotFoundError(account_not_found(account_id))
