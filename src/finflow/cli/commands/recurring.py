"""Recurring payment commands."""

from datetime import datetime

import click

from finflow.cli.account_resolution import resolve_account_or_exit
from finflow.cli.error_handling import handle_domain_error
from finflow.domain.account import AccountService
from finflow.domain.entities import Frequency
from finflow.domain.errors import DomainError
from finflow.domain.recurring import RecurringPaymentService
from finflow.utils.amount_parser import parse_amount
from finflow.utils.date_parser import parse_date

_FREQUENCIES = [f.value for f in Frequency]


def _print_payment(payment) -> None:
    flags = []
    if not payment.is_active:
        flags.append("paused")
    if not payment.auto_create_transaction:
        flags.append("manual")
    suffix = f" [{', '.join(flags)}]" if flags else ""
    click.echo(
        f"ID: {payment.id:3d} | {payment.name:20s} | {payment.amount:>10,.2f} "
        f"{payment.frequency:8s} | next {payment.next_payment_date} | "
        f"paid {payment.payment_count}x ({payment.total_paid:,.2f}){suffix}"
    )


def _parse_or_exit(ctx, parser, value, label):
    if value is None:
        return None
    try:
        return parser(value)
    except ValueError as e:
        click.echo(f"Error: Invalid {label}: {e}", err=True)
        ctx.exit(1)


@click.group()
def recurring_group():
    """Manage recurring payments."""
    pass


@recurring_group.command("create")
@click.argument("name")
@click.option("--amount", required=True, help="Amount posted each period")
@click.option("--category", required=True, help="Category of posted transactions")
@click.option("--account", required=True, help="Account name or ID")
@click.option("--frequency", type=click.Choice(_FREQUENCIES), default="monthly", show_default=True)
@click.option("--start", "start_date", default="today", show_default=True, help="First due date")
@click.option("--end", "end_date", help="Last day a payment may fall on")
@click.option("--description", default="", help="Description of posted transactions")
@click.option("--manual", is_flag=True, help="Do not post automatically when due")
@click.option("--reminder-days", type=click.IntRange(min=0), default=3, show_default=True)
@click.pass_context
def create_payment(
    ctx,
    name: str,
    amount: str,
    category: str,
    account: str,
    frequency: str,
    start_date: str,
    end_date: str | None,
    description: str,
    manual: bool,
    reminder_days: int,
):
    """Create a recurring payment.

    Examples:
        finflow recurring create Rent --amount 1200 --category Housing --account Checking --start 2024-01-01
        finflow recurring create Gym --amount 40 --category Health --account Visa --end 2024-12-31
    """
    db = ctx.obj["db"]
    account_id = resolve_account_or_exit(ctx, AccountService(db), account)
    try:
        payment_id = RecurringPaymentService(db).create_recurring_payment(
            user_id=ctx.obj["user_id"],
            name=name,
            amount=_parse_or_exit(ctx, parse_amount, amount, "amount"),
            category=category,
            account_id=account_id,
            frequency=frequency,
            start_date=_parse_or_exit(ctx, parse_date, start_date, "start date"),
            end_date=_parse_or_exit(ctx, parse_date, end_date, "end date"),
            description=description,
            auto_create_transaction=not manual,
            reminder_days=reminder_days,
        )
        click.echo(f"Created recurring payment '{name}' (ID: {payment_id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@recurring_group.command("list")
@click.option("--active", is_flag=True, help="Only active payments")
@click.pass_context
def list_payments(ctx, active: bool):
    """List recurring payments, soonest first."""
    service = RecurringPaymentService(ctx.obj["db"])
    if active:
        payments = service.list_active_recurring_payments(ctx.obj["user_id"])
    else:
        payments = service.list_recurring_payments(ctx.obj["user_id"])
    if not payments:
        click.echo("No recurring payments found.")
        return
    for payment in payments:
        _print_payment(payment)


@recurring_group.command("edit")
@click.argument("payment_id", type=int)
@click.option("--name", help="New name")
@click.option("--amount", help="New amount")
@click.option("--category", help="New category")
@click.option("--account", help="New account name or ID")
@click.option("--frequency", type=click.Choice(_FREQUENCIES), help="New frequency")
@click.option("--start", "start_date", help="New start date (only before the first payment)")
@click.option("--end", "end_date", help="New end date")
@click.option("--description", help="New description")
@click.option("--auto/--manual", "auto_create", default=None, help="Post automatically when due")
@click.pass_context
def edit_payment(
    ctx,
    payment_id: int,
    name: str | None,
    amount: str | None,
    category: str | None,
    account: str | None,
    frequency: str | None,
    start_date: str | None,
    end_date: str | None,
    description: str | None,
    auto_create: bool | None,
):
    """Edit a recurring payment."""
    db = ctx.obj["db"]
    account_id = None
    if account is not None:
        account_id = resolve_account_or_exit(ctx, AccountService(db), account)
    try:
        RecurringPaymentService(db).update_recurring_payment(
            payment_id,
            name=name,
            amount=_parse_or_exit(ctx, parse_amount, amount, "amount"),
            category=category,
            account_id=account_id,
            frequency=frequency,
            start_date=_parse_or_exit(ctx, parse_date, start_date, "start date"),
            end_date=_parse_or_exit(ctx, parse_date, end_date, "end date"),
            description=description,
            auto_create_transaction=auto_create,
        )
        click.echo(f"Updated recurring payment {payment_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@recurring_group.command("delete")
@click.argument("payment_id", type=int)
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_payment(ctx, payment_id: int, yes: bool):
    """Delete a recurring payment. Posted transactions are kept."""
    if not yes and not click.confirm(f"Delete recurring payment {payment_id}?"):
        click.echo("Deletion cancelled.")
        return
    try:
        RecurringPaymentService(ctx.obj["db"]).delete_recurring_payment(payment_id)
        click.echo(f"Deleted recurring payment {payment_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@recurring_group.command("toggle")
@click.argument("payment_id", type=int)
@click.pass_context
def toggle_payment(ctx, payment_id: int):
    """Pause or resume a recurring payment."""
    try:
        is_active = RecurringPaymentService(ctx.obj["db"]).toggle_active(payment_id)
        click.echo(f"Recurring payment {payment_id} {'resumed' if is_active else 'paused'}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@recurring_group.command("process")
@click.argument("payment_id", type=int)
@click.pass_context
def process_payment(ctx, payment_id: int):
    """Post the next occurrence of a payment now."""
    try:
        transaction_id = RecurringPaymentService(ctx.obj["db"]).process_payment(payment_id)
        click.echo(f"Posted recurring payment {payment_id} as transaction {transaction_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@recurring_group.command("skip")
@click.argument("payment_id", type=int)
@click.pass_context
def skip_payment(ctx, payment_id: int):
    """Skip the next occurrence of a payment without posting it."""
    try:
        next_date = RecurringPaymentService(ctx.obj["db"]).skip_payment(payment_id)
        click.echo(f"Skipped recurring payment {payment_id}; next payment on {next_date}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@recurring_group.command("process-due")
@click.option("--date", "as_of", help="Processing date (defaults to today)")
@click.option("--all-users", is_flag=True, help="Process every user's payments")
@click.pass_context
def process_due(ctx, as_of: str | None, all_users: bool):
    """Post every payment that is due."""
    now = _parse_or_exit(ctx, parse_date, as_of, "date") or datetime.now()
    user_id = None if all_users else ctx.obj["user_id"]
    try:
        report = RecurringPaymentService(ctx.obj["db"]).process_due_payments(user_id, now)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Processed {report.processed_count} payment(s), {report.failed_count} failed")
    for payment_id, reason in report.failed.items():
        click.echo(f"  Payment {payment_id}: {reason}", err=True)
    if report.failed:
        ctx.exit(1)


@recurring_group.command("upcoming")
@click.option("--days", type=click.IntRange(min=0), default=7, show_default=True)
@click.pass_context
def upcoming_payments(ctx, days: int):
    """List payments falling due soon."""
    payments = RecurringPaymentService(ctx.obj["db"]).get_upcoming_payments(
        ctx.obj["user_id"], days=days
    )
    if not payments:
        click.echo("No upcoming payments.")
        return
    for payment in payments:
        _print_payment(payment)


@recurring_group.command("overdue")
@click.pass_context
def overdue_payments(ctx):
    """List payments whose due date has passed."""
    payments = RecurringPaymentService(ctx.obj["db"]).get_overdue_payments(ctx.obj["user_id"])
    if not payments:
        click.echo("No overdue payments.")
        return
    for payment in payments:
        _print_payment(payment)


@recurring_group.command("summary")
@click.pass_context
def payment_summary(ctx):
    """Show monthly and yearly cost of active recurring payments."""
    summary = RecurringPaymentService(ctx.obj["db"]).get_summary(ctx.obj["user_id"])
    click.echo(f"Active payments: {summary.active_count}")
    click.echo(f"Monthly total:   {summary.total_monthly_amount:>12,.2f}")
    click.echo(f"Yearly total:    {summary.total_yearly_amount:>12,.2f}")
    click.echo(f"Upcoming (7 days): {summary.upcoming_count}")
    click.echo(f"Overdue: {summary.overdue_count}")


def register_commands(cli):
    """Register recurring payment commands with main CLI."""
    cli.add_command(recurring_group, name="recurring")
