"""Account balance adjustment shared by manual and scheduled postings."""

from decimal import Decimal
from typing import Union

from finflow.database.base import Database
from finflow.domain.entities import (
    Account,
    BalanceDirection,
    TransactionType,
)
from finflow.domain.errors import NotFoundError, ValidationError, account_not_found
from finflow.logging_config import get_logger

logger = get_logger(__name__)

ZERO = Decimal("0")


def compute_adjustment(
    account: Account,
    amount: Decimal,
    transaction_type: Union[TransactionType, str],
    direction: Union[BalanceDirection, str] = BalanceDirection.APPLY,
) -> tuple[Decimal, Decimal]:
    """Compute an account's (balance, current_debt) after a transaction effect.

    Credit cards move only current_debt: expenses add to it, income pays it
    down, and it never goes below zero. Every other account type moves
    balance, which may go negative.

    Args:
        account: Account the transaction belongs to
        amount: Transaction magnitude
        transaction_type: income or expense
        direction: apply or revert

    Returns:
        Tuple of new (balance, current_debt)

    Raises:
        ValidationError: If type or direction is unknown
    """
    try:
        transaction_type = TransactionType(transaction_type)
    except ValueError as e:
        raise ValidationError(f"Unknown transaction type: '{transaction_type}'") from e
    try:
        direction = BalanceDirection(direction)
    except ValueError as e:
        raise ValidationError(f"Unknown balance direction: '{direction}'") from e

    # Revert is apply with the sign flipped.
    sign = 1 if direction == BalanceDirection.APPLY else -1

    if account.is_credit_card:
        delta = amount if transaction_type == TransactionType.EXPENSE else -amount
        return account.balance, max(ZERO, account.current_debt + sign * delta)

    delta = amount if transaction_type == TransactionType.INCOME else -amount
    return account.balance + sign * delta, account.current_debt


class BalanceAdjuster:
    """Applies and reverts the effect of transactions on accounts."""

    def __init__(self, db: Database):
        """Initialize balance adjuster.

        Args:
            db: Database instance
        """
        self.db = db

    def adjust(
        self,
        account_id: int,
        amount: Decimal,
        transaction_type: Union[TransactionType, str],
        direction: Union[BalanceDirection, str] = BalanceDirection.APPLY,
    ) -> Decimal:
        """Apply or revert a transaction's effect on its account.

        Reverting with the magnitude an earlier apply returned restores the
        account exactly, even when a credit card payment was capped at the
        outstanding debt.

        Args:
            account_id: Account to adjust
            amount: Transaction magnitude
            transaction_type: income or expense
            direction: apply or revert

        Returns:
            Magnitude actually moved on the balance or debt

        Raises:
            NotFoundError: If the account doesn't exist
            ValidationError: If type or direction is unknown
        """
        account = self.db.get_account(account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))

        balance, current_debt = compute_adjustment(
            account, amount, transaction_type, direction
        )
        if account.is_credit_card:
            self.db.update_account(account_id, current_debt=current_debt)
            moved = abs(current_debt - account.current_debt)
        else:
            self.db.update_account(account_id, balance=balance)
            moved = abs(balance - account.balance)

        logger.debug(
            "Adjusted account %s: %s %s %s",
            account_id,
            BalanceDirection(direction).value,
            TransactionType(transaction_type).value,
            moved,
        )
        return moved
