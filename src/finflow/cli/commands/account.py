"""Account management commands."""

import click

from finflow.cli.account_resolution import resolve_account_or_exit
from finflow.cli.error_handling import handle_domain_error
from finflow.domain.account import AccountService
from finflow.domain.entities import AccountType
from finflow.domain.errors import DomainError
from finflow.utils.amount_parser import parse_amount


def _parse_money(ctx, value: str | None, allow_negative: bool = False):
    if value is None:
        return None
    try:
        return parse_amount(value, allow_negative=allow_negative)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)


@click.group()
def account_group():
    """Manage accounts."""
    pass


@account_group.command("create")
@click.argument("name", metavar="ACCOUNT_NAME")
@click.option(
    "--type",
    "account_type",
    type=click.Choice([t.value for t in AccountType]),
    default=AccountType.CASH.value,
    show_default=True,
    help="Account type",
)
@click.option("--balance", default="0", help="Opening balance")
@click.option("--debt", default="0", help="Opening debt (credit cards only)")
@click.option("--limit", "credit_limit", help="Credit limit (credit cards only)")
@click.option(
    "--exclude-from-total", is_flag=True, help="Leave this account out of the total balance"
)
@click.pass_context
def create_account(
    ctx,
    name: str,
    account_type: str,
    balance: str,
    debt: str,
    credit_limit: str | None,
    exclude_from_total: bool,
):
    """Create a new account.

    Examples:
        finflow account create "Wallet"
        finflow account create "Checking" --type debit_card --balance 5000
        finflow account create "Visa" --type credit_card --debt 250 --limit 10000
    """
    service = AccountService(ctx.obj["db"])
    try:
        account_id = service.create_account(
            user_id=ctx.obj["user_id"],
            name=name,
            type=account_type,
            balance=_parse_money(ctx, balance, allow_negative=True),
            current_debt=_parse_money(ctx, debt),
            credit_limit=_parse_money(ctx, credit_limit),
            include_in_total_balance=not exclude_from_total,
        )
        click.echo(f"Created account '{name}' (ID: {account_id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@account_group.command("list")
@click.option("--all", "show_all", is_flag=True, help="Include deactivated accounts")
@click.pass_context
def list_accounts(ctx, show_all: bool):
    """List accounts."""
    service = AccountService(ctx.obj["db"])

    accounts = service.list_accounts(ctx.obj["user_id"], include_inactive=show_all)
    if not accounts:
        click.echo("No accounts found.")
        return

    click.echo("\nAccounts:")
    click.echo("-" * 72)
    for acc in accounts:
        if acc.is_credit_card:
            amount = f"Debt: {acc.current_debt:>12,.2f}"
        else:
            amount = f"Balance: {acc.balance:>9,.2f}"
        flags = "" if acc.is_active else " (inactive)"
        click.echo(f"ID: {acc.id:3d} | {acc.name:20s} | {acc.type:12s} | {amount}{flags}")


@account_group.command("update")
@click.argument("account", metavar="ACCOUNT")
@click.option("--name", help="New account name")
@click.option("--limit", "credit_limit", help="New credit limit (credit cards only)")
@click.option(
    "--include-in-total/--exclude-from-total",
    default=None,
    help="Whether the account counts towards the total balance",
)
@click.pass_context
def update_account(
    ctx, account: str, name: str | None, credit_limit: str | None, include_in_total: bool | None
) -> None:
    """Update an account's details.

    ACCOUNT can be an account name or ID.
    """
    service = AccountService(ctx.obj["db"])
    account_id = resolve_account_or_exit(ctx, service, account)

    try:
        service.update_account(
            account_id,
            name=name,
            credit_limit=_parse_money(ctx, credit_limit),
            include_in_total_balance=include_in_total,
        )
        click.echo(f"Updated account {account_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@account_group.command("deactivate")
@click.argument("account", metavar="ACCOUNT")
@click.pass_context
def deactivate_account(ctx, account: str) -> None:
    """Deactivate an account, keeping its history."""
    service = AccountService(ctx.obj["db"])
    account_id = resolve_account_or_exit(ctx, service, account)
    try:
        service.deactivate_account(account_id)
        click.echo(f"Deactivated account {account_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@account_group.command("delete")
@click.argument("account", metavar="ACCOUNT")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_account(ctx, account: str, yes: bool) -> None:
    """Delete an account.

    ACCOUNT can be an account name or ID.

    The account can only be deleted if no transactions or recurring payments
    reference it. Use 'account deactivate' to hide it instead.
    """
    service = AccountService(ctx.obj["db"])
    account_id = resolve_account_or_exit(ctx, service, account)
    account_obj = service.get_account(account_id)

    if not yes and not click.confirm(
        f"Are you sure you want to delete account '{account_obj.name}' (ID: {account_id})?"
    ):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_account(account_id)
        click.echo(f"Deleted account '{account_obj.name}'")
    except DomainError as e:
        handle_domain_error(ctx, e)


@account_group.command("summary")
@click.pass_context
def account_summary(ctx) -> None:
    """Show total balance and totals per account type."""
    service = AccountService(ctx.obj["db"])
    summary = service.get_account_summary(ctx.obj["user_id"])

    click.echo("\nBalance by type:")
    click.echo("-" * 40)
    for account_type, amount in sorted(summary.by_type.items()):
        click.echo(f"{account_type:20s} {amount:>15,.2f}")
    click.echo("-" * 40)
    click.echo(f"{'Total':20s} {summary.total_balance:>15,.2f}")


@account_group.command("recalculate")
@click.argument("account", metavar="ACCOUNT")
@click.option("--opening", default="0", help="Balance (or debt) before the first transaction")
@click.pass_context
def recalculate_account(ctx, account: str, opening: str) -> None:
    """Rebuild an account's balance from its transactions."""
    service = AccountService(ctx.obj["db"])
    account_id = resolve_account_or_exit(ctx, service, account)
    try:
        updated = service.recalculate_balance(
            account_id, _parse_money(ctx, opening, allow_negative=True)
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    if updated.is_credit_card:
        click.echo(f"Recalculated debt: {updated.current_debt:,.2f}")
    else:
        click.echo(f"Recalculated balance: {updated.balance:,.2f}")


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
