"""Date arithmetic for recurring payment schedules and budget windows."""

from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Union

from dateutil.relativedelta import relativedelta

from finflow.domain.entities import BudgetPeriod, Frequency

_STEPS = {
    Frequency.DAILY.value: relativedelta(days=1),
    Frequency.WEEKLY.value: relativedelta(days=7),
    # relativedelta clamps to the last day of a shorter month:
    # Jan 31 + 1 month -> Feb 29 (2024), Feb 29 + 1 year -> Feb 28.
    Frequency.MONTHLY.value: relativedelta(months=1),
    Frequency.YEARLY.value: relativedelta(years=1),
}


def is_known_frequency(frequency: object) -> bool:
    """Return True if frequency is one of the supported schedule frequencies."""
    return getattr(frequency, "value", frequency) in _STEPS


def next_payment_date(current: date, frequency: Union[Frequency, str]) -> date:
    """Return the next occurrence after current for the given frequency.

    Unknown frequencies return current unchanged. Callers that must not stall
    on bad data validate with is_known_frequency first.

    Args:
        current: Current due date
        frequency: One of daily, weekly, monthly, yearly

    Returns:
        Next due date
    """
    step = _STEPS.get(getattr(frequency, "value", frequency))
    if step is None:
        return current
    return current + step


def start_of_day(value: Union[date, datetime]) -> date:
    """Truncate a datetime to its calendar day."""
    if isinstance(value, datetime):
        return value.date()
    return value


def budget_period_bounds(period: Union[BudgetPeriod, str], today: date) -> tuple[date, date]:
    """Get start and end dates of the budget window containing today.

    Monthly windows run from the first to the last day of the month; weekly
    windows run Monday through Sunday.

    Raises:
        ValueError: If period is not monthly or weekly
    """
    period = getattr(period, "value", period)
    if period == BudgetPeriod.MONTHLY.value:
        start = today.replace(day=1)
        end = start + relativedelta(months=1) - timedelta(days=1)
        return (start, end)
    if period == BudgetPeriod.WEEKLY.value:
        start = today - timedelta(days=today.weekday())
        return (start, start + timedelta(days=6))
    raise ValueError(f"Unknown budget period: '{period}'. Supported periods: monthly, weekly")


def monthly_equivalent(amount: Decimal, frequency: Union[Frequency, str]) -> Decimal:
    """Approximate monthly cost of a recurring amount.

    Daily amounts count 30 times a month and weekly amounts 4.33 times.
    Unknown frequencies contribute nothing.
    """
    frequency = getattr(frequency, "value", frequency)
    if frequency == Frequency.DAILY.value:
        return amount * 30
    if frequency == Frequency.WEEKLY.value:
        return amount * Decimal("4.33")
    if frequency == Frequency.MONTHLY.value:
        return amount
    if frequency == Frequency.YEARLY.value:
        return amount / 12
    return Decimal("0")
