"""Triggers for due recurring payment processing.

Two entry points run the scanner: a daily background job and an
opportunistic check when a user opens the app, throttled per user.
"""

from datetime import date, datetime, time, timedelta
from typing import Callable, Optional, Union

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

from finflow.cache import TTLCache, make_key
from finflow.database.base import Database
from finflow.domain.entities import ProcessingReport
from finflow.domain.recurring import RecurringPaymentService
from finflow.logging_config import get_logger

logger = get_logger(__name__)

PROCESS_JOB_ID = "process_recurring_payments"
PURGE_JOB_ID = "purge_cache"
CACHE_PURGE_MINUTES = 5
FOREGROUND_CHECK_INTERVAL = timedelta(hours=24)


def run_scheduled_processing(
    db: Database,
    now: Union[date, datetime, None] = None,
    user_id: Optional[str] = None,
) -> Optional[ProcessingReport]:
    """Run the due-payment scanner without ever raising.

    The host scheduler must not retry a failing batch, so every error is
    logged and swallowed here.

    Args:
        db: Database instance
        now: Processing time (defaults to now)
        user_id: Restrict to one user; None processes every user

    Returns:
        The processing report, or None if the batch could not run
    """
    try:
        service = RecurringPaymentService(db)
        return service.process_due_payments(user_id, now)
    except Exception as exc:
        logger.error("Scheduled recurring payment processing failed: %s", exc, exc_info=True)
        return None


class RecurringPaymentScheduler:
    """Background scheduler posting due recurring payments every day."""

    def __init__(
        self,
        database_factory: Callable[[], Database],
        cache: Optional[TTLCache] = None,
        hour: int = 5,
        minute: int = 0,
    ):
        """Initialize the scheduler.

        Args:
            database_factory: Creates a database for each job run; jobs run
                on a worker thread and do not share a session
            cache: Cache whose expired entries are purged periodically
            hour: Hour of the daily processing job
            minute: Minute of the daily processing job
        """
        self.database_factory = database_factory
        self.cache = cache
        self.hour = hour
        self.minute = minute
        self.scheduler: Optional[BackgroundScheduler] = None

    @property
    def running(self) -> bool:
        return self.scheduler is not None

    def start(self) -> None:
        """Start the background scheduler."""
        if self.scheduler is not None:
            logger.warning("Scheduler already running")
            return

        self.scheduler = BackgroundScheduler()
        self.scheduler.add_job(
            func=self.run_once,
            trigger=CronTrigger(hour=self.hour, minute=self.minute),
            id=PROCESS_JOB_ID,
            name="Process Due Recurring Payments",
            replace_existing=True,
        )
        logger.info("Scheduled recurring payment processing at %02d:%02d", self.hour, self.minute)

        if self.cache is not None:
            self.scheduler.add_job(
                func=self.cache.purge_expired,
                trigger=IntervalTrigger(minutes=CACHE_PURGE_MINUTES),
                id=PURGE_JOB_ID,
                name="Purge Expired Cache Entries",
                replace_existing=True,
            )

        self.scheduler.start()
        logger.info("Background scheduler started")

    def stop(self) -> None:
        """Stop the background scheduler gracefully."""
        if self.scheduler is not None:
            self.scheduler.shutdown(wait=True)
            self.scheduler = None
            logger.info("Background scheduler stopped")

    def run_once(self, now: Union[date, datetime, None] = None) -> Optional[ProcessingReport]:
        """Process every user's due payments with a fresh database."""
        db = self.database_factory()
        try:
            db.connect()
            return run_scheduled_processing(db, now)
        finally:
            db.disconnect()


class ForegroundCheck:
    """Processes a user's due payments at most once per rolling day when the app opens.

    The last-checked marker lives in the database, so the throttle holds
    across restarts. A long-running host can pass a cache to keep markers in
    memory between checks.
    """

    def __init__(
        self,
        db: Database,
        cache: Optional[TTLCache] = None,
        interval: timedelta = FOREGROUND_CHECK_INTERVAL,
    ):
        """Initialize the check.

        Args:
            db: Database instance holding the per-user markers
            cache: Optional cache in front of the stored markers
            interval: Minimum time between two checks for one user
        """
        self.db = db
        self.cache = cache
        self.interval = interval

    @staticmethod
    def marker_key(user_id: str) -> str:
        return make_key("last_recurring_check", user_id)

    def last_checked(self, user_id: str) -> Optional[datetime]:
        """Get when the user's due payments were last checked, if ever."""
        key = self.marker_key(user_id)
        if self.cache is not None and self.cache.has(key):
            return self.cache.get(key)
        checked_at = self.db.get_last_processing_check(user_id)
        if checked_at is not None and self.cache is not None:
            self.cache.set(key, checked_at, ttl=self.interval.total_seconds())
        return checked_at

    def maybe_process(
        self, user_id: str, now: Union[date, datetime, None] = None
    ) -> Optional[ProcessingReport]:
        """Process the user's due payments unless that already happened recently.

        Only more than `interval` after the last check does a new one run;
        both ends are measured on `now`. Never raises.

        Returns:
            The processing report, or None if throttled or the batch failed
        """
        now = _as_datetime(now)
        try:
            last = self.last_checked(user_id)
        except Exception as exc:
            logger.error("Could not read last recurring check for %s: %s", user_id, exc)
            return None
        if last is not None and now - last <= self.interval:
            logger.debug("Skipping recurring payment check for %s: last checked %s", user_id, last)
            return None

        report = run_scheduled_processing(self.db, now, user_id=user_id)
        try:
            self.db.set_last_processing_check(user_id, now)
        except Exception as exc:
            logger.error("Could not record recurring check for %s: %s", user_id, exc)
            return report
        if self.cache is not None:
            self.cache.set(self.marker_key(user_id), now, ttl=self.interval.total_seconds())
        return report


def _as_datetime(value: Union[date, datetime, None]) -> datetime:
    if value is None:
        return datetime.now()
    if isinstance(value, datetime):
        # Stored markers are naive local time.
        return value.astimezone().replace(tzinfo=None) if value.tzinfo else value
    return datetime.combine(value, time())
