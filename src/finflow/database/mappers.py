"""Mapper functions to convert SQLAlchemy models into domain entities.

Amounts are normalised to Decimal here so services never see the float a
SQLite backend may hand back.
"""

from decimal import Decimal
from typing import Any, Optional

from finflow.domain import entities as domain
from finflow.database.models import (
    Account as ORMAccount,
    Budget as ORMBudget,
    RecurringPayment as ORMRecurringPayment,
    Transaction as ORMTransaction,
)


def _money(value: Any) -> Decimal:
    if value is None:
        return Decimal("0")
    return Decimal(str(value))


def _optional_money(value: Any) -> Optional[Decimal]:
    return None if value is None else Decimal(str(value))


def account_to_domain(orm_account: ORMAccount) -> domain.Account:
    """Convert SQLAlchemy Account model to domain Account entity."""
    return domain.Account(
        id=orm_account.id,
        user_id=orm_account.user_id,
        name=orm_account.name,
        type=orm_account.type,
        balance=_money(orm_account.balance),
        current_debt=_money(orm_account.current_debt),
        credit_limit=_optional_money(orm_account.credit_limit),
        include_in_total_balance=orm_account.include_in_total_balance,
        is_active=orm_account.is_active,
        created_at=orm_account.created_at,
        updated_at=orm_account.updated_at,
    )


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        user_id=orm_transaction.user_id,
        account_id=orm_transaction.account_id,
        amount=_money(orm_transaction.amount),
        type=orm_transaction.type,
        category=orm_transaction.category,
        category_icon=orm_transaction.category_icon,
        description=orm_transaction.description,
        date=orm_transaction.date,
        created_at=orm_transaction.created_at,
        updated_at=orm_transaction.updated_at,
        applied_amount=_optional_money(orm_transaction.applied_amount),
    )


def recurring_payment_to_domain(orm_payment: ORMRecurringPayment) -> domain.RecurringPayment:
    """Convert SQLAlchemy RecurringPayment model to domain RecurringPayment entity."""
    return domain.RecurringPayment(
        id=orm_payment.id,
        user_id=orm_payment.user_id,
        name=orm_payment.name,
        description=orm_payment.description,
        amount=_money(orm_payment.amount),
        category=orm_payment.category,
        category_icon=orm_payment.category_icon,
        account_id=orm_payment.account_id,
        frequency=orm_payment.frequency,
        start_date=orm_payment.start_date,
        end_date=orm_payment.end_date,
        next_payment_date=orm_payment.next_payment_date,
        last_payment_date=orm_payment.last_payment_date,
        is_active=orm_payment.is_active,
        auto_create_transaction=orm_payment.auto_create_transaction,
        reminder_days=orm_payment.reminder_days,
        total_paid=_money(orm_payment.total_paid),
        payment_count=orm_payment.payment_count,
        created_at=orm_payment.created_at,
        updated_at=orm_payment.updated_at,
    )


def budget_to_domain(orm_budget: ORMBudget) -> domain.Budget:
    """Convert SQLAlchemy Budget model to domain Budget entity."""
    return domain.Budget(
        id=orm_budget.id,
        user_id=orm_budget.user_id,
        category_name=orm_budget.category_name,
        category_icon=orm_budget.category_icon,
        period=orm_budget.period,
        start_date=orm_budget.start_date,
        end_date=orm_budget.end_date,
        budgeted_amount=_money(orm_budget.budgeted_amount),
        spent_amount=_money(orm_budget.spent_amount),
        remaining_amount=_money(orm_budget.remaining_amount),
        progress_percentage=_money(orm_budget.progress_percentage),
        created_at=orm_budget.created_at,
        updated_at=orm_budget.updated_at,
    )
