"""Parsing helpers for command-line input."""

from finflow.utils.account_resolver import resolve_account
from finflow.utils.amount_parser import parse_amount
from finflow.utils.date_parser import get_date_range, parse_date

__all__ = ["get_date_range", "parse_amount", "parse_date", "resolve_account"]
