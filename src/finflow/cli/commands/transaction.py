"""Transaction commands."""

from datetime import date as date_type

import click

from finflow.cli.account_resolution import resolve_account_or_exit
from finflow.cli.error_handling import handle_domain_error
from finflow.domain.account import AccountService
from finflow.domain.entities import TransactionType
from finflow.domain.errors import DomainError
from finflow.domain.transaction import TransactionService
from finflow.utils.amount_parser import parse_amount
from finflow.utils.date_parser import get_date_range, parse_date

_TYPES = [t.value for t in TransactionType]


def _parse_date_or_exit(ctx, value: str | None, label: str = "date"):
    if value is None:
        return None
    try:
        return parse_date(value)
    except ValueError as e:
        click.echo(f"Error: Invalid {label}: {e}", err=True)
        ctx.exit(1)


def _parse_amount_or_exit(ctx, value: str | None):
    if value is None:
        return None
    try:
        return parse_amount(value)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)


@click.group()
def transaction_group():
    """Manage transactions."""
    pass


@transaction_group.command("add")
@click.option("--account", required=True, help="Account name or ID")
@click.option("--amount", required=True, help="Transaction amount (e.g., 45.90)")
@click.option("--type", "txn_type", type=click.Choice(_TYPES), default="expense", show_default=True)
@click.option("--category", required=True, help="Category name")
@click.option("--date", "txn_date", default="today", show_default=True, help="Transaction date")
@click.option("--description", default="", help="Transaction description")
@click.pass_context
def add_transaction(
    ctx,
    account: str,
    amount: str,
    txn_type: str,
    category: str,
    txn_date: str,
    description: str,
):
    """Add a transaction and update the account balance.

    Examples:
        finflow transaction add --account Wallet --amount 45.90 --category Groceries
        finflow transaction add --account 1 --amount 3000 --type income --category Salary
    """
    db = ctx.obj["db"]
    account_id = resolve_account_or_exit(ctx, AccountService(db), account)
    parsed_date = _parse_date_or_exit(ctx, txn_date)
    parsed_amount = _parse_amount_or_exit(ctx, amount)

    try:
        transaction_id = TransactionService(db).create_transaction(
            user_id=ctx.obj["user_id"],
            account_id=account_id,
            amount=parsed_amount,
            type=txn_type,
            category=category,
            date=parsed_date,
            description=description,
        )
        click.echo(f"Created transaction {transaction_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@transaction_group.command("list")
@click.option("--account", help="Account name or ID")
@click.option("--type", "txn_type", type=click.Choice(_TYPES), help="Only income or expenses")
@click.option("--category", help="Only this category")
@click.option("--start-date", help="Start date (inclusive)")
@click.option("--end-date", help="End date (inclusive)")
@click.option("--this-month", is_flag=True, help="Only this month")
@click.option("--last-month", is_flag=True, help="Only last month")
@click.pass_context
def list_transactions(
    ctx,
    account: str | None,
    txn_type: str | None,
    category: str | None,
    start_date: str | None,
    end_date: str | None,
    this_month: bool,
    last_month: bool,
):
    """List transactions, newest first."""
    db = ctx.obj["db"]
    account_id = None
    if account is not None:
        account_id = resolve_account_or_exit(ctx, AccountService(db), account)

    if this_month and last_month:
        click.echo("Error: --this-month and --last-month cannot be combined.", err=True)
        ctx.exit(1)
    if (this_month or last_month) and (start_date or end_date):
        click.echo(
            "Error: Period options cannot be combined with --start-date or --end-date.", err=True
        )
        ctx.exit(1)

    if this_month or last_month:
        start, end = get_date_range("this-month" if this_month else "last-month")
    else:
        start = _parse_date_or_exit(ctx, start_date, "start date")
        end = _parse_date_or_exit(ctx, end_date, "end date")

    transactions = TransactionService(db).list_transactions(
        user_id=ctx.obj["user_id"],
        account_id=account_id,
        start_date=start,
        end_date=end,
        type=txn_type,
        category=category,
    )
    if not transactions:
        click.echo("No transactions found.")
        return

    for txn in transactions:
        sign = "+" if txn.type == TransactionType.INCOME.value else "-"
        click.echo(
            f"{txn.id:5d} | {txn.date.isoformat()} | {sign}{txn.amount:>10,.2f} | "
            f"{txn.category:15s} | {txn.description}"
        )


@transaction_group.command("edit")
@click.argument("transaction_id", type=int)
@click.option("--account", help="New account name or ID")
@click.option("--amount", help="New amount")
@click.option("--type", "txn_type", type=click.Choice(_TYPES), help="New type")
@click.option("--category", help="New category")
@click.option("--date", "txn_date", help="New date")
@click.option("--description", help="New description")
@click.pass_context
def edit_transaction(
    ctx,
    transaction_id: int,
    account: str | None,
    amount: str | None,
    txn_type: str | None,
    category: str | None,
    txn_date: str | None,
    description: str | None,
):
    """Edit a transaction, moving its effect on account balances."""
    db = ctx.obj["db"]
    account_id = None
    if account is not None:
        account_id = resolve_account_or_exit(ctx, AccountService(db), account)

    try:
        TransactionService(db).update_transaction(
            transaction_id,
            account_id=account_id,
            amount=_parse_amount_or_exit(ctx, amount),
            type=txn_type,
            category=category,
            date=_parse_date_or_exit(ctx, txn_date),
            description=description,
        )
        click.echo(f"Updated transaction {transaction_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@transaction_group.command("delete")
@click.argument("transaction_id", type=int)
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_transaction(ctx, transaction_id: int, yes: bool):
    """Delete a transaction and revert its balance effect."""
    if not yes and not click.confirm(f"Delete transaction {transaction_id}?"):
        click.echo("Deletion cancelled.")
        return
    try:
        TransactionService(ctx.obj["db"]).delete_transaction(transaction_id)
        click.echo(f"Deleted transaction {transaction_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@transaction_group.command("stats")
@click.option("--year", type=int, help="Year (defaults to the current year)")
@click.option("--month", type=click.IntRange(1, 12), help="Month (defaults to the current month)")
@click.pass_context
def monthly_stats(ctx, year: int | None, month: int | None):
    """Show income, expenses and net for a month."""
    today = date_type.today()
    year = year or today.year
    month = month or today.month
    stats = TransactionService(ctx.obj["db"]).get_monthly_stats(ctx.obj["user_id"], year, month)

    click.echo(f"\n{year}-{month:02d}")
    click.echo(f"Income:   {stats['income']:>12,.2f}")
    click.echo(f"Expenses: {stats['expenses']:>12,.2f}")
    click.echo(f"Net:      {stats['net']:>12,.2f}")
    click.echo(f"Transactions: {stats['transaction_count']}")


@transaction_group.command("breakdown")
@click.option("--type", "txn_type", type=click.Choice(_TYPES), default="expense", show_default=True)
@click.option("--start-date", help="Start date (inclusive)")
@click.option("--end-date", help="End date (inclusive)")
@click.pass_context
def category_breakdown(ctx, txn_type: str, start_date: str | None, end_date: str | None):
    """Show totals per category."""
    rows = TransactionService(ctx.obj["db"]).get_category_breakdown(
        ctx.obj["user_id"],
        start_date=_parse_date_or_exit(ctx, start_date, "start date"),
        end_date=_parse_date_or_exit(ctx, end_date, "end date"),
        type=txn_type,
    )
    if not rows:
        click.echo("No transactions found.")
        return
    for row in rows:
        click.echo(
            f"{row['category']:20s} {row['total']:>12,.2f} {row['percentage']:>7}% "
            f"({row['count']} transaction{'s' if row['count'] != 1 else ''})"
        )


def register_commands(cli):
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
