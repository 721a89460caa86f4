"""Main CLI entry point."""

import click

from finflow.config import load_settings
from finflow.database.factories import create_sqlite_database
from finflow.logging_config import setup_logging
from finflow.scheduler import ForegroundCheck

# Import and register all commands at module level
from finflow.cli.commands import (
    account,
    budget,
    recurring,
    scheduler,
    transaction,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides FINFLOW_DB_PATH environment variable)",
    envvar="FINFLOW_DB_PATH",
)
@click.option(
    "--user",
    "user_id",
    default="default",
    show_default=True,
    envvar="FINFLOW_USER",
    help="User whose data the command works on",
)
@click.option("-v", "--verbose", is_flag=True, help="Log progress to the console")
@click.option(
    "--no-due-check",
    is_flag=True,
    help="Do not post due recurring payments on start",
)
@click.pass_context
def cli(ctx, db_path: str | None, user_id: str, verbose: bool, no_due_check: bool):
    """Finflow - Personal finance tracking.

    Track accounts, transactions and budgets, and let recurring payments
    post themselves when they fall due. Each command first posts the
    user's due recurring payments, at most once a day.
    """
    ctx.ensure_object(dict)
    try:
        settings = load_settings()
    except ValueError as e:
        raise click.UsageError(str(e))

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        setup_logging(
            level=settings.log_level,
            log_file=settings.log_file,
            console_level=settings.log_level if verbose else "WARNING",
        )
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.call_on_close(db.disconnect)
        ctx.obj["db"] = db
        ctx.obj["user_id"] = user_id
        ctx.obj["settings"] = settings
        ctx.obj["db_path"] = db_path

        # The scheduler command processes every user itself.
        if not no_due_check and ctx.invoked_subcommand != "scheduler":
            report = ForegroundCheck(db).maybe_process(user_id)
            if report is not None and report.processed_count:
                click.echo(
                    f"Posted {report.processed_count} due recurring payment(s)", err=True
                )


# Register all commands
account.register_commands(cli)
transaction.register_commands(cli)
budget.register_commands(cli)
recurring.register_commands(cli)
scheduler.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
