"""Shared pytest fixtures for finflow tests."""

import logging
import os
import tempfile
from datetime import date
from decimal import Decimal

import pytest

from finflow.database.factories import create_sqlite_database
from finflow.domain.account import AccountService
from finflow.domain.budget import BudgetService
from finflow.domain.recurring import RecurringPaymentService
from finflow.domain.transaction import TransactionService
from finflow.logging_config import ROOT_LOGGER_NAME

USER_ID = "user-1"


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers the CLI installs so they don't outlive the runner's streams."""
    yield
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def user_id():
    return USER_ID


@pytest.fixture
def account_service(temp_db):
    """Create an AccountService with a temporary database."""
    return AccountService(temp_db)


@pytest.fixture
def transaction_service(temp_db):
    """Create a TransactionService with a temporary database."""
    return TransactionService(temp_db)


@pytest.fixture
def budget_service(temp_db):
    """Create a BudgetService with a temporary database."""
    return BudgetService(temp_db)


@pytest.fixture
def recurring_service(temp_db):
    """Create a RecurringPaymentService with a temporary database."""
    return RecurringPaymentService(temp_db)


@pytest.fixture
def cash_account(account_service):
    """A cash account holding 5000."""
    account_id = account_service.create_account(
        user_id=USER_ID, name="Wallet", type="cash", balance=Decimal("5000")
    )
    return account_service.get_account(account_id)


@pytest.fixture
def credit_card(account_service):
    """A credit card owing 200."""
    account_id = account_service.create_account(
        user_id=USER_ID,
        name="Visa",
        type="credit_card",
        current_debt=Decimal("200"),
        credit_limit=Decimal("10000"),
    )
    return account_service.get_account(account_id)


@pytest.fixture
def rent_payment(recurring_service, cash_account):
    """A monthly rent of 1200 first due on 2024-01-01."""
    payment_id = recurring_service.create_recurring_payment(
        user_id=USER_ID,
        name="Rent",
        amount=Decimal("1200"),
        category="Housing",
        account_id=cash_account.id,
        frequency="monthly",
        start_date=date(2024, 1, 1),
    )
    return recurring_service.get_recurring_payment(payment_id)


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
