"""Background scheduler command."""

import time

import click

from finflow.database.factories import create_sqlite_database
from finflow.scheduler import RecurringPaymentScheduler


@click.group()
def scheduler_group():
    """Run the recurring payment scheduler."""
    pass


@scheduler_group.command("run")
@click.option("--hour", type=click.IntRange(0, 23), help="Hour of the daily run")
@click.option("--minute", type=click.IntRange(0, 59), help="Minute of the daily run")
@click.option("--now", "run_now", is_flag=True, help="Also process due payments on start")
@click.pass_context
def run_scheduler(ctx, hour: int | None, minute: int | None, run_now: bool):
    """Post due recurring payments every day until interrupted.

    Processes every user. Defaults come from FINFLOW_SCHEDULE_HOUR and
    FINFLOW_SCHEDULE_MINUTE (05:00).
    """
    settings = ctx.obj["settings"]
    db_path = ctx.obj["db_path"]
    scheduler = RecurringPaymentScheduler(
        database_factory=lambda: create_sqlite_database(database_path=db_path),
        hour=settings.schedule_hour if hour is None else hour,
        minute=settings.schedule_minute if minute is None else minute,
    )

    if run_now:
        report = scheduler.run_once()
        if report is not None:
            click.echo(
                f"Processed {report.processed_count} payment(s), {report.failed_count} failed"
            )

    scheduler.start()
    click.echo(f"Scheduler running daily at {scheduler.hour:02d}:{scheduler.minute:02d}. Press Ctrl+C to stop.")
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        click.echo("Stopping scheduler...")
    finally:
        scheduler.stop()


def register_commands(cli):
    """Register scheduler commands with main CLI."""
    cli.add_command(scheduler_group, name="scheduler")
