"""Date parsing utilities."""

import re
from datetime import date, timedelta
from typing import Optional

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

_OFFSET_RE = re.compile(r"^(?:in\s+)?([+-]?\d+)\s*(day|week|month|year)s?(\s+ago)?$")


def parse_date(date_str: str, today: Optional[date] = None) -> date:
    """Parse a date string into a date object.

    Supports:
    - Absolute dates: "2024-01-15", "January 15, 2024", etc.
    - Named days: "today", "yesterday", "tomorrow"
    - Offsets: "3 days ago", "in 2 weeks", "+1 month", "-10 days"
    - Period starts: "this month", "next month", "this week", "next week"

    Args:
        date_str: Date string in one of the formats above
        today: Reference day for relative dates (defaults to today)

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    text = date_str.strip().lower()
    today = today or date.today()

    named = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
        "this week": today - timedelta(days=today.weekday()),
        "next week": today + timedelta(days=7 - today.weekday()),
        "this month": today.replace(day=1),
        "next month": today.replace(day=1) + relativedelta(months=1),
    }
    if text in named:
        return named[text]

    match = _OFFSET_RE.match(text)
    if match:
        count = int(match.group(1))
        if match.group(3):
            count = -count
        return today + relativedelta(**{f"{match.group(2)}s": count})

    try:
        return date_parser.parse(text).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}") from e


def get_date_range(period: str, today: Optional[date] = None) -> tuple[date, date]:
    """Get start and end dates for a named period.

    Args:
        period: One of this-month, last-month, this-week, this-year

    Returns:
        Tuple of (start_date, end_date), both inclusive

    Raises:
        ValueError: If period string is not recognized
    """
    period = period.strip().lower()
    today = today or date.today()

    if period == "this-month":
        return (today.replace(day=1), today)
    if period == "last-month":
        first_of_month = today.replace(day=1)
        return (first_of_month - relativedelta(months=1), first_of_month - timedelta(days=1))
    if period == "this-week":
        return (today - timedelta(days=today.weekday()), today)
    if period == "this-year":
        return (today.replace(month=1, day=1), today)

    raise ValueError(
        f"Unknown period: '{period}'. Supported periods: this-month, last-month, this-week, this-year"
    )
