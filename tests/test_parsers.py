"""Tests for date, amount and account parsing utilities."""

from datetime import date
from decimal import Decimal

import pytest

from finflow.domain.errors import NotFoundError
from finflow.utils import parse_amount, parse_date, resolve_account
from finflow.utils.date_parser import get_date_range

USER_ID = "user-1"
# A Wednesday
TODAY = date(2024, 3, 6)


class TestParseDate:
    def test_absolute_dates(self):
        assert parse_date("2024-01-15") == date(2024, 1, 15)
        assert parse_date("January 15, 2024") == date(2024, 1, 15)

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("today", date(2024, 3, 6)),
            ("Yesterday", date(2024, 3, 5)),
            ("tomorrow", date(2024, 3, 7)),
            ("this week", date(2024, 3, 4)),
            ("next week", date(2024, 3, 11)),
            ("this month", date(2024, 3, 1)),
            ("next month", date(2024, 4, 1)),
        ],
    )
    def test_named_days(self, text, expected):
        assert parse_date(text, today=TODAY) == expected

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("3 days ago", date(2024, 3, 3)),
            ("in 2 weeks", date(2024, 3, 20)),
            ("+1 month", date(2024, 4, 6)),
            ("-10 days", date(2024, 2, 25)),
            ("1 year ago", date(2023, 3, 6)),
        ],
    )
    def test_offsets(self, text, expected):
        assert parse_date(text, today=TODAY) == expected

    def test_invalid(self):
        with pytest.raises(ValueError, match="Could not parse date"):
            parse_date("not a date at all")


class TestParseAmount:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("1200", Decimal("1200.00")),
            ("1,200.50", Decimal("1200.50")),
            ("1,234", Decimal("1234.00")),
            ("12,50", Decimal("12.50")),
            ("$45", Decimal("45.00")),
            ("₺45", Decimal("45.00")),
            ("45 TRY", Decimal("45.00")),
            ("19.999", Decimal("20.00")),
        ],
    )
    def test_formats(self, text, expected):
        assert parse_amount(text) == expected

    def test_negative(self):
        with pytest.raises(ValueError, match="cannot be negative"):
            parse_amount("-5")
        assert parse_amount("-5", allow_negative=True) == Decimal("-5.00")

    @pytest.mark.parametrize("text", ["", "   ", "abc", "NaN", "1.2.3"])
    def test_invalid(self, text):
        with pytest.raises(ValueError):
            parse_amount(text)


class TestDateRange:
    def test_this_month(self):
        assert get_date_range("this-month", TODAY) == (date(2024, 3, 1), TODAY)

    def test_last_month(self):
        assert get_date_range("last-month", TODAY) == (date(2024, 2, 1), date(2024, 2, 29))

    def test_this_week_and_year(self):
        assert get_date_range("this-week", TODAY) == (date(2024, 3, 4), TODAY)
        assert get_date_range("this-year", TODAY) == (date(2024, 1, 1), TODAY)

    def test_unknown(self):
        with pytest.raises(ValueError, match="Unknown period"):
            get_date_range("fortnight", TODAY)


class TestResolveAccount:
    def test_by_name_and_id(self, account_service, cash_account):
        assert resolve_account(account_service, USER_ID, "Wallet") == cash_account.id
        assert resolve_account(account_service, USER_ID, str(cash_account.id)) == cash_account.id
        assert resolve_account(account_service, USER_ID, cash_account.id) == cash_account.id

    def test_unknown_name(self, account_service, cash_account):
        with pytest.raises(NotFoundError, match="'Savings' not found"):
            resolve_account(account_service, USER_ID, "Savings")

    def test_other_users_account(self, account_service, cash_account):
        with pytest.raises(NotFoundError):
            resolve_account(account_service, "user-2", "Wallet")
        with pytest.raises(NotFoundError):
            resolve_account(account_service, "user-2", cash_account.id)

    def test_inactive_account_only_by_id(self, account_service, cash_account):
        account_service.deactivate_account(cash_account.id)
        assert resolve_account(account_service, USER_ID, cash_account.id) == cash_account.id
        with pytest.raises(NotFoundError):
            resolve_account(account_service, USER_ID, "Wallet")
