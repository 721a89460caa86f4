"""Budget commands."""

import click

from finflow.cli.error_handling import handle_domain_error
from finflow.domain.budget import BudgetService
from finflow.domain.entities import ALL_CATEGORIES, BudgetPeriod
from finflow.domain.errors import DomainError
from finflow.utils.amount_parser import parse_amount


def _print_budget(budget) -> None:
    category = "All categories" if budget.covers_all_categories else budget.category_name
    click.echo(
        f"ID: {budget.id:3d} | {category:18s} | {budget.start_date} to {budget.end_date} | "
        f"{budget.spent_amount:,.2f} / {budget.budgeted_amount:,.2f} "
        f"({budget.progress_percentage}%) | left {budget.remaining_amount:,.2f}"
    )


@click.group()
def budget_group():
    """Manage budgets."""
    pass


@budget_group.command("create")
@click.argument("category")
@click.option("--amount", required=True, help="Budgeted amount")
@click.option(
    "--period",
    type=click.Choice([p.value for p in BudgetPeriod]),
    default=BudgetPeriod.MONTHLY.value,
    show_default=True,
)
@click.pass_context
def create_budget(ctx, category: str, amount: str, period: str):
    """Create a budget for the current month or week.

    Use "all" as CATEGORY to track every expense.

    Examples:
        finflow budget create Groceries --amount 400
        finflow budget create all --amount 2500
        finflow budget create Coffee --amount 25 --period weekly
    """
    try:
        parsed = parse_amount(amount)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)

    if category.strip().lower() in ("all", ALL_CATEGORIES):
        category = ALL_CATEGORIES
    try:
        budget_id = BudgetService(ctx.obj["db"]).create_budget(
            user_id=ctx.obj["user_id"],
            category_name=category,
            budgeted_amount=parsed,
            period=period,
        )
        click.echo(f"Created budget {budget_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@budget_group.command("list")
@click.option("--active", is_flag=True, help="Only budgets covering today")
@click.pass_context
def list_budgets(ctx, active: bool):
    """List budgets."""
    service = BudgetService(ctx.obj["db"])
    if active:
        budgets = service.get_active_budgets(ctx.obj["user_id"])
    else:
        budgets = service.list_budgets(ctx.obj["user_id"])

    if not budgets:
        click.echo("No budgets found.")
        return
    for budget in budgets:
        _print_budget(budget)


@budget_group.command("edit")
@click.argument("budget_id", type=int)
@click.option("--category", help="New category")
@click.option("--amount", help="New budgeted amount")
@click.pass_context
def edit_budget(ctx, budget_id: int, category: str | None, amount: str | None):
    """Change a budget's category or amount."""
    parsed = None
    if amount is not None:
        try:
            parsed = parse_amount(amount)
        except ValueError as e:
            click.echo(f"Error: Invalid amount format: {e}", err=True)
            ctx.exit(1)
    try:
        BudgetService(ctx.obj["db"]).update_budget(
            budget_id, category_name=category, budgeted_amount=parsed
        )
        click.echo(f"Updated budget {budget_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@budget_group.command("delete")
@click.argument("budget_id", type=int)
@click.pass_context
def delete_budget(ctx, budget_id: int):
    """Delete a budget."""
    try:
        BudgetService(ctx.obj["db"]).delete_budget(budget_id)
        click.echo(f"Deleted budget {budget_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register budget commands with main CLI."""
    cli.add_command(budget_group, name="budget")
