"""Account domain service."""

from dataclasses import replace
from decimal import Decimal
from typing import Optional

from finflow.database.base import Database
from finflow.domain.balance import compute_adjustment
from finflow.domain.entities import (
    Account as AccountEntity,
    AccountSummary,
    AccountType,
    BalanceDirection,
)
from finflow.domain.errors import (
    ConflictError,
    DependencyError,
    NotFoundError,
    ValidationError,
    account_delete_blocked,
    account_not_found,
)
from finflow.logging_config import get_logger

logger = get_logger(__name__)


def _validate_type(type: str) -> str:
    try:
        return AccountType(type).value
    except ValueError as e:
        supported = ", ".join(t.value for t in AccountType)
        raise ValidationError(
            f"Unknown account type: '{type}'. Supported types: {supported}"
        ) from e


class AccountService:
    """Service for managing accounts."""

    def __init__(self, db: Database):
        """Initialize account service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_account(
        self,
        user_id: str,
        name: str,
        type: str = AccountType.CASH.value,
        balance: Decimal = Decimal("0"),
        current_debt: Decimal = Decimal("0"),
        credit_limit: Optional[Decimal] = None,
        include_in_total_balance: bool = True,
    ) -> int:
        """Create a new account.

        Args:
            user_id: Owner
            name: Account name
            type: Account type (cash, debit_card, credit_card, ...)
            balance: Opening balance
            current_debt: Opening debt, credit cards only
            credit_limit: Optional credit card limit
            include_in_total_balance: Whether totals count this account

        Returns:
            Account ID

        Raises:
            ValidationError: If the type is unknown or amounts are invalid
            ConflictError: If the user already has an active account with this name
        """
        type = _validate_type(type)
        if not name or not name.strip():
            raise ValidationError("Account name cannot be empty")
        if current_debt < 0:
            raise ValidationError("Current debt cannot be negative")
        if type != AccountType.CREDIT_CARD.value and current_debt != 0:
            raise ValidationError("Only credit card accounts can carry debt")

        name = name.strip()
        for acc in self.db.list_accounts(user_id):
            if acc.name == name:
                raise ConflictError(f"Account with name '{name}' already exists")

        account_id = self.db.create_account(
            user_id=user_id,
            name=name,
            type=type,
            balance=balance,
            current_debt=current_debt,
            credit_limit=credit_limit,
            include_in_total_balance=include_in_total_balance,
        )
        logger.info("Created %s account %s '%s'", type, account_id, name)
        return account_id

    def get_account(self, account_id: int) -> Optional[AccountEntity]:
        """Get account by ID.

        Args:
            account_id: Account ID

        Returns:
            Account entity or None if not found
        """
        return self.db.get_account(account_id)

    def list_accounts(self, user_id: str, include_inactive: bool = False) -> list[AccountEntity]:
        """List a user's accounts.

        Args:
            user_id: Owner
            include_inactive: If True, include deactivated accounts

        Returns:
            List of account entities
        """
        return self.db.list_accounts(user_id, include_inactive=include_inactive)

    def update_account(
        self,
        account_id: int,
        name: Optional[str] = None,
        credit_limit: Optional[Decimal] = None,
        include_in_total_balance: Optional[bool] = None,
    ) -> None:
        """Update an account's details.

        Balance and debt are not editable here; they only move with
        transactions or recalculate_balance.

        Raises:
            NotFoundError: If the account doesn't exist
            ConflictError: If the new name is taken
        """
        account = self._require_account(account_id)

        fields: dict = {}
        if name is not None:
            name = name.strip()
            if not name:
                raise ValidationError("Account name cannot be empty")
            for acc in self.db.list_accounts(account.user_id):
                if acc.id != account_id and acc.name == name:
                    raise ConflictError(f"Account with name '{name}' already exists")
            fields["name"] = name
        if credit_limit is not None:
            if not account.is_credit_card:
                raise ValidationError("Only credit card accounts have a credit limit")
            fields["credit_limit"] = credit_limit
        if include_in_total_balance is not None:
            fields["include_in_total_balance"] = include_in_total_balance

        if fields:
            self.db.update_account(account_id, **fields)

    def deactivate_account(self, account_id: int) -> None:
        """Soft-delete an account. Its history stays in place.

        Raises:
            NotFoundError: If the account doesn't exist
        """
        self._require_account(account_id)
        self.db.update_account(account_id, is_active=False)
        logger.info("Deactivated account %s", account_id)

    def delete_account(self, account_id: int) -> None:
        """Delete an account.

        Args:
            account_id: Account ID to delete

        Raises:
            NotFoundError: If the account doesn't exist
            DependencyError: If transactions or recurring payments reference it
        """
        self._require_account(account_id)

        transaction_count = self.db.get_account_transaction_count(account_id)
        recurring_count = self.db.get_account_recurring_count(account_id)
        if transaction_count > 0 or recurring_count > 0:
            raise DependencyError(
                account_delete_blocked(account_id, transaction_count, recurring_count)
            )

        self.db.delete_account(account_id)
        logger.info("Deleted account %s", account_id)

    def get_total_balance(self, user_id: str) -> Decimal:
        """Sum the active accounts that count towards the total.

        Credit cards contribute their debt as a negative amount.
        """
        total = Decimal("0")
        for account in self.db.list_accounts(user_id):
            if account.include_in_total_balance:
                total += self._net_value(account)
        return total

    def get_account_summary(self, user_id: str) -> AccountSummary:
        """Get the total balance and per-type totals of a user's active accounts."""
        by_type: dict[str, Decimal] = {}
        for account in self.db.list_accounts(user_id):
            if not account.include_in_total_balance:
                continue
            by_type[account.type] = by_type.get(account.type, Decimal("0")) + self._net_value(
                account
            )
        return AccountSummary(
            total_balance=sum(by_type.values(), Decimal("0")),
            by_type=by_type,
        )

    def recalculate_balance(
        self, account_id: int, opening_balance: Decimal = Decimal("0")
    ) -> AccountEntity:
        """Rebuild an account's balance (or debt) by replaying its transactions.

        Each transaction's applied amount is rewritten to match the replay.

        Args:
            account_id: Account to rebuild
            opening_balance: Balance, or debt for credit cards, before the
                first transaction

        Returns:
            The updated account

        Raises:
            NotFoundError: If the account doesn't exist
        """
        account = self._require_account(account_id)
        if account.is_credit_card:
            replay = replace(account, current_debt=max(Decimal("0"), opening_balance))
        else:
            replay = replace(account, balance=opening_balance)

        # Oldest first, so the debt floor is hit in the same order as live postings.
        transactions = sorted(
            self.db.list_transactions(account_id=account_id), key=lambda t: (t.date, t.id)
        )
        with self.db.atomic():
            for txn in transactions:
                balance, current_debt = compute_adjustment(
                    replay, txn.amount, txn.type, BalanceDirection.APPLY
                )
                applied = abs(balance - replay.balance) + abs(current_debt - replay.current_debt)
                if applied != txn.applied_amount:
                    self.db.update_transaction(txn.id, applied_amount=applied)
                replay = replace(replay, balance=balance, current_debt=current_debt)

            if account.is_credit_card:
                self.db.update_account(account_id, current_debt=replay.current_debt)
            else:
                self.db.update_account(account_id, balance=replay.balance)
        logger.info(
            "Recalculated account %s from %d transactions", account_id, len(transactions)
        )
        return self._require_account(account_id)

    @staticmethod
    def _net_value(account: AccountEntity) -> Decimal:
        if account.is_credit_card:
            return -account.current_debt
        return account.balance

    def _require_account(self, account_id: int) -> AccountEntity:
        account = self.db.get_account(account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))
        return account
