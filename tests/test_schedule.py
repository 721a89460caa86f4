"""Tests for schedule and budget window date arithmetic."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from finflow.domain.entities import Frequency
from finflow.domain.schedule import (
    budget_period_bounds,
    is_known_frequency,
    monthly_equivalent,
    next_payment_date,
    start_of_day,
)


@pytest.mark.parametrize(
    "current, frequency, expected",
    [
        (date(2024, 1, 15), "daily", date(2024, 1, 16)),
        (date(2024, 12, 31), "daily", date(2025, 1, 1)),
        (date(2024, 2, 28), "daily", date(2024, 2, 29)),
        (date(2024, 2, 26), "weekly", date(2024, 3, 4)),
        (date(2024, 1, 1), "monthly", date(2024, 2, 1)),
        (date(2024, 12, 15), "monthly", date(2025, 1, 15)),
        (date(2024, 3, 1), "yearly", date(2025, 3, 1)),
    ],
)
def test_next_payment_date_offsets(current, frequency, expected):
    assert next_payment_date(current, frequency) == expected


def test_monthly_from_month_end_clamps_to_last_day():
    assert next_payment_date(date(2024, 1, 31), "monthly") == date(2024, 2, 29)
    assert next_payment_date(date(2023, 1, 31), "monthly") == date(2023, 2, 28)
    assert next_payment_date(date(2024, 3, 31), "monthly") == date(2024, 4, 30)


def test_yearly_from_leap_day_lands_on_feb_28():
    assert next_payment_date(date(2024, 2, 29), "yearly") == date(2025, 2, 28)


def test_accepts_frequency_enum():
    assert next_payment_date(date(2024, 1, 1), Frequency.WEEKLY) == date(2024, 1, 8)


def test_unknown_frequency_returns_input_unchanged():
    assert next_payment_date(date(2024, 5, 5), "fortnightly") == date(2024, 5, 5)
    assert next_payment_date(date(2024, 5, 5), None) == date(2024, 5, 5)


def test_is_known_frequency():
    assert is_known_frequency("monthly")
    assert is_known_frequency(Frequency.YEARLY)
    assert not is_known_frequency("Monthly")
    assert not is_known_frequency("")


def test_start_of_day():
    assert start_of_day(datetime(2024, 1, 2, 23, 59)) == date(2024, 1, 2)
    assert start_of_day(date(2024, 1, 2)) == date(2024, 1, 2)


def test_monthly_budget_bounds():
    assert budget_period_bounds("monthly", date(2024, 2, 15)) == (
        date(2024, 2, 1),
        date(2024, 2, 29),
    )
    assert budget_period_bounds("monthly", date(2024, 12, 31)) == (
        date(2024, 12, 1),
        date(2024, 12, 31),
    )


def test_weekly_budget_bounds_run_monday_to_sunday():
    # 2024-03-06 is a Wednesday
    assert budget_period_bounds("weekly", date(2024, 3, 6)) == (
        date(2024, 3, 4),
        date(2024, 3, 10),
    )
    assert budget_period_bounds("weekly", date(2024, 3, 4)) == (
        date(2024, 3, 4),
        date(2024, 3, 10),
    )


def test_unknown_budget_period_raises():
    with pytest.raises(ValueError, match="Unknown budget period"):
        budget_period_bounds("yearly", date(2024, 1, 1))


def test_monthly_equivalent():
    assert monthly_equivalent(Decimal("10"), "daily") == Decimal("300")
    assert monthly_equivalent(Decimal("100"), "weekly") == Decimal("433.00")
    assert monthly_equivalent(Decimal("50"), "monthly") == Decimal("50")
    assert monthly_equivalent(Decimal("1200"), "yearly") == Decimal("100")
    assert monthly_equivalent(Decimal("99"), "hourly") == Decimal("0")
