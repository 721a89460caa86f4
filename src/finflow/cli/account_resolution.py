"""Account lookup for CLI commands."""

from __future__ import annotations

import click

from finflow.cli.error_handling import handle_domain_error
from finflow.domain.account import AccountService
from finflow.domain.errors import DomainError
from finflow.utils.account_resolver import resolve_account


def resolve_account_or_exit(
    ctx: click.Context, account_service: AccountService, account: str | int
) -> int:
    """Resolve one of the current user's accounts by name or ID, exiting if there is none."""
    try:
        return resolve_account(account_service, ctx.obj["user_id"], account)
    except DomainError as exc:
        handle_domain_error(ctx, exc)
