"""Tests for the scheduled and foreground processing triggers."""

import logging
from datetime import date, datetime
from decimal import Decimal

import pytest

from finflow.cache import TTLCache
from finflow.database.factories import create_sqlite_database
from finflow.scheduler import (
    PROCESS_JOB_ID,
    PURGE_JOB_ID,
    ForegroundCheck,
    RecurringPaymentScheduler,
    run_scheduled_processing,
)

USER_ID = "user-1"


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return TTLCache(clock=clock)


def test_run_scheduled_processing_returns_report(temp_db, rent_payment):
    report = run_scheduled_processing(temp_db, date(2024, 1, 2))
    assert report.processed == [rent_payment.id]


def test_run_scheduled_processing_never_raises(temp_db, rent_payment, monkeypatch, caplog):
    def unavailable(*args, **kwargs):
        raise RuntimeError("database is locked")

    monkeypatch.setattr(temp_db, "list_due_recurring_payments", unavailable)
    with caplog.at_level(logging.ERROR, logger="finflow"):
        assert run_scheduled_processing(temp_db, date(2024, 1, 2)) is None
    assert "Scheduled recurring payment processing failed" in caplog.text


class TestForegroundCheck:
    def test_throttles_on_the_given_time(self, temp_db, recurring_service, rent_payment):
        check = ForegroundCheck(temp_db)

        report = check.maybe_process(USER_ID, datetime(2024, 1, 2, 9, 0))
        assert report.processed == [rent_payment.id]

        # Payment is due again, but the check ran recently.
        temp_db.update_recurring_payment(rent_payment.id, next_payment_date=date(2024, 1, 1))
        assert check.maybe_process(USER_ID, datetime(2024, 1, 3, 9, 0)) is None

        report = check.maybe_process(USER_ID, datetime(2024, 1, 3, 9, 1))
        assert report.processed == [rent_payment.id]
        assert recurring_service.get_recurring_payment(rent_payment.id).payment_count == 2

    def test_marker_survives_a_new_check_and_session(self, temp_db, rent_payment):
        ForegroundCheck(temp_db).maybe_process(USER_ID, datetime(2024, 1, 2, 9, 0))
        temp_db.disconnect()

        check = ForegroundCheck(temp_db)
        assert check.last_checked(USER_ID) == datetime(2024, 1, 2, 9, 0)
        assert check.maybe_process(USER_ID, datetime(2024, 1, 2, 18, 0)) is None

    def test_date_counts_as_midnight(self, temp_db, rent_payment):
        check = ForegroundCheck(temp_db)
        check.maybe_process(USER_ID, date(2024, 1, 2))
        assert temp_db.get_last_processing_check(USER_ID) == datetime(2024, 1, 2)

    def test_cache_holds_marker(self, temp_db, cache, rent_payment):
        check = ForegroundCheck(temp_db, cache)
        check.maybe_process(USER_ID, datetime(2024, 1, 2, 9, 0))

        assert cache.get(ForegroundCheck.marker_key(USER_ID)) == datetime(2024, 1, 2, 9, 0)
        assert not cache.has(ForegroundCheck.marker_key("user-2"))

    def test_cache_is_filled_from_stored_marker(self, temp_db, cache):
        temp_db.set_last_processing_check(USER_ID, datetime(2024, 1, 2, 9, 0))
        check = ForegroundCheck(temp_db, cache)

        assert check.maybe_process(USER_ID, datetime(2024, 1, 2, 10, 0)) is None
        assert cache.has(ForegroundCheck.marker_key(USER_ID))

    def test_throttles_each_user_separately(self, temp_db, account_service, rent_payment):
        check = ForegroundCheck(temp_db)
        check.maybe_process(USER_ID, date(2024, 1, 2))

        assert temp_db.get_last_processing_check("user-2") is None
        assert check.maybe_process("user-2", date(2024, 1, 2)).processed == []

    def test_only_processes_the_given_user(self, temp_db, recurring_service, account_service, rent_payment):
        their_account = account_service.create_account("user-2", "Bank", balance=Decimal("100"))
        theirs = recurring_service.create_recurring_payment(
            user_id="user-2",
            name="Phone",
            amount=Decimal("20"),
            category="Utilities",
            account_id=their_account,
            frequency="monthly",
            start_date=date(2024, 1, 1),
        )
        ForegroundCheck(temp_db).maybe_process(USER_ID, date(2024, 1, 2))
        assert recurring_service.get_recurring_payment(theirs).payment_count == 0

    def test_unreadable_marker_is_logged(self, temp_db, monkeypatch, caplog):
        def unavailable(user_id):
            raise RuntimeError("database is locked")

        monkeypatch.setattr(temp_db, "get_last_processing_check", unavailable)
        with caplog.at_level(logging.ERROR, logger="finflow"):
            assert ForegroundCheck(temp_db).maybe_process(USER_ID, date(2024, 1, 2)) is None
        assert "Could not read last recurring check" in caplog.text


class TestRecurringPaymentScheduler:
    def test_start_registers_daily_and_purge_jobs(self, cache):
        scheduler = RecurringPaymentScheduler(lambda: None, cache=cache, hour=6, minute=30)
        scheduler.start()
        try:
            assert scheduler.running
            job = scheduler.scheduler.get_job(PROCESS_JOB_ID)
            assert job is not None
            assert job.next_run_time.hour == 6
            assert job.next_run_time.minute == 30
            assert scheduler.scheduler.get_job(PURGE_JOB_ID) is not None
        finally:
            scheduler.stop()
        assert not scheduler.running

    def test_no_purge_job_without_cache(self):
        scheduler = RecurringPaymentScheduler(lambda: None)
        scheduler.start()
        try:
            assert scheduler.scheduler.get_job(PURGE_JOB_ID) is None
        finally:
            scheduler.stop()

    def test_stop_when_not_started_is_noop(self):
        RecurringPaymentScheduler(lambda: None).stop()

    def test_run_once_uses_fresh_database(self, temp_db, rent_payment):
        path = temp_db.database_path
        temp_db.disconnect()

        scheduler = RecurringPaymentScheduler(lambda: create_sqlite_database(database_path=path))
        report = scheduler.run_once(date(2024, 1, 2))

        assert report.processed == [rent_payment.id]
        assert temp_db.get_recurring_payment(rent_payment.id).payment_count == 1
