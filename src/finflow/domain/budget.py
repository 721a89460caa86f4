"""Budget domain service."""

from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from finflow.database.base import Database
from finflow.domain.entities import ALL_CATEGORIES, Budget as BudgetEntity, BudgetPeriod
from finflow.domain.errors import NotFoundError, ValidationError, budget_not_found
from finflow.domain.schedule import budget_period_bounds
from finflow.logging_config import get_logger

logger = get_logger(__name__)

_CENT = Decimal("0.01")


def compute_progress(budgeted_amount: Decimal, spent_amount: Decimal) -> tuple[Decimal, Decimal]:
    """Return (remaining_amount, progress_percentage) for a budget.

    Remaining is floored at zero; progress is 0 when nothing was budgeted.
    """
    remaining = max(Decimal("0"), budgeted_amount - spent_amount)
    if budgeted_amount > 0:
        progress = (spent_amount * 100 / budgeted_amount).quantize(_CENT, ROUND_HALF_UP)
    else:
        progress = Decimal("0")
    return remaining, progress


class BudgetService:
    """Service for managing budgets and keeping their spend current."""

    def __init__(self, db: Database):
        """Initialize budget service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_budget(
        self,
        user_id: str,
        category_name: str,
        budgeted_amount: Decimal,
        period: str = BudgetPeriod.MONTHLY.value,
        today: Optional[date] = None,
        category_icon: str = "",
    ) -> int:
        """Create a budget for the period containing today.

        The window is fixed at creation and never re-derived.

        Args:
            user_id: Owner
            category_name: Category to track, or ALL_CATEGORIES
            budgeted_amount: Spending ceiling
            period: monthly or weekly
            today: Day used to pick the window (defaults to today)
            category_icon: Display hint

        Returns:
            Budget ID

        Raises:
            ValidationError: If the amount is negative or the period unknown
        """
        if budgeted_amount < 0:
            raise ValidationError("Budgeted amount cannot be negative")
        if not category_name or not category_name.strip():
            raise ValidationError("Budget category cannot be empty")

        today = today or date.today()
        try:
            start_date, end_date = budget_period_bounds(period, today)
        except ValueError as e:
            raise ValidationError(str(e)) from e

        budget_id = self.db.create_budget(
            user_id=user_id,
            category_name=category_name.strip(),
            period=getattr(period, "value", period),
            start_date=start_date,
            end_date=end_date,
            budgeted_amount=budgeted_amount,
            category_icon=category_icon,
        )
        logger.info(
            "Created budget %s for '%s' (%s to %s)", budget_id, category_name, start_date, end_date
        )
        return budget_id

    def get_budget(self, budget_id: int) -> Optional[BudgetEntity]:
        """Get budget by ID.

        Args:
            budget_id: Budget ID

        Returns:
            Budget entity or None if not found
        """
        return self.db.get_budget(budget_id)

    def list_budgets(self, user_id: str) -> list[BudgetEntity]:
        """List all budgets of a user, newest first."""
        return self.db.list_budgets(user_id)

    def get_active_budgets(self, user_id: str, as_of: Optional[date] = None) -> list[BudgetEntity]:
        """List budgets whose window contains as_of (defaults to today)."""
        return self.db.list_active_budgets(user_id, as_of or date.today())

    def update_budget(
        self,
        budget_id: int,
        category_name: Optional[str] = None,
        budgeted_amount: Optional[Decimal] = None,
        category_icon: Optional[str] = None,
    ) -> None:
        """Update a budget's details.

        Changing the ceiling recomputes remaining amount and progress.

        Raises:
            NotFoundError: If the budget doesn't exist
            ValidationError: If the new amount is negative
        """
        budget = self._require_budget(budget_id)

        fields: dict = {}
        if category_name is not None:
            if not category_name.strip():
                raise ValidationError("Budget category cannot be empty")
            fields["category_name"] = category_name.strip()
        if category_icon is not None:
            fields["category_icon"] = category_icon
        if budgeted_amount is not None:
            if budgeted_amount < 0:
                raise ValidationError("Budgeted amount cannot be negative")
            remaining, progress = compute_progress(budgeted_amount, budget.spent_amount)
            fields.update(
                budgeted_amount=budgeted_amount,
                remaining_amount=remaining,
                progress_percentage=progress,
            )

        if fields:
            self.db.update_budget(budget_id, **fields)

    def update_budget_progress(self, budget_id: int, spent_amount: Decimal) -> None:
        """Set a budget's spent amount, recomputing remaining and progress with it.

        Raises:
            NotFoundError: If the budget doesn't exist
        """
        budget = self._require_budget(budget_id)
        remaining, progress = compute_progress(budget.budgeted_amount, spent_amount)
        self.db.update_budget(
            budget_id,
            spent_amount=spent_amount,
            remaining_amount=remaining,
            progress_percentage=progress,
        )

    def delete_budget(self, budget_id: int) -> None:
        """Delete a budget.

        Raises:
            NotFoundError: If the budget doesn't exist
        """
        self._require_budget(budget_id)
        self.db.delete_budget(budget_id)

    def reconcile_expense(
        self,
        user_id: str,
        category: str,
        amount: Decimal,
        transaction_date: date,
    ) -> list[int]:
        """Add a newly created expense to every matching budget.

        A budget matches when its window contains the transaction's own date
        and it tracks the transaction's category or all categories. Spend is
        only ever added here; edits and deletes of transactions leave budgets
        untouched.

        Args:
            user_id: Owner of the transaction
            category: Transaction category
            amount: Expense amount
            transaction_date: Value date of the transaction

        Returns:
            IDs of the budgets that were updated
        """
        updated = []
        for budget in self.db.list_active_budgets(user_id, transaction_date):
            if budget.category_name != category and budget.category_name != ALL_CATEGORIES:
                continue
            self.update_budget_progress(budget.id, budget.spent_amount + amount)
            updated.append(budget.id)

        if updated:
            logger.debug(
                "Reconciled expense of %s in '%s' against budgets %s", amount, category, updated
            )
        return updated

    def _require_budget(self, budget_id: int) -> BudgetEntity:
        budget = self.db.get_budget(budget_id)
        if budget is None:
            raise NotFoundError(budget_not_found(budget_id))
        return budget
