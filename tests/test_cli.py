"""End-to-end tests for the finflow CLI."""

from datetime import date
from decimal import Decimal

import pytest

from finflow.cli.main import cli

USER_ID = "user-1"


@pytest.fixture
def run(cli_runner, temp_db):
    """Invoke the CLI against the temporary database as USER_ID."""

    def invoke(*args, user=USER_ID, due_check=False):
        options = ["--db-path", temp_db.database_path, "--user", user]
        if not due_check:
            options.append("--no-due-check")
        # The CLI opens its own session; drop ours so reads afterwards are fresh.
        temp_db.disconnect()
        result = cli_runner.invoke(cli, [*options, *args])
        temp_db.disconnect()
        return result

    return invoke


def test_help_does_not_touch_database(cli_runner, tmp_path):
    result = cli_runner.invoke(cli, ["--db-path", str(tmp_path / "x.db"), "--help"])
    assert result.exit_code == 0
    assert "recurring" in result.output
    assert not (tmp_path / "x.db").exists()


def test_account_create_and_list(run, account_service):
    result = run("account", "create", "Checking", "--type", "debit_card", "--balance", "1,250.00")
    assert result.exit_code == 0
    assert "Created account 'Checking'" in result.output

    result = run("account", "list")
    assert result.exit_code == 0
    assert "Checking" in result.output
    assert "1,250.00" in result.output

    [account] = account_service.list_accounts(USER_ID)
    assert account.balance == Decimal("1250.00")


def test_accounts_are_scoped_to_user(run, cash_account):
    result = run("account", "list", user="user-2")
    assert result.exit_code == 0
    assert "No accounts found." in result.output


def test_duplicate_account_fails(run, cash_account):
    result = run("account", "create", "Wallet")
    assert result.exit_code == 1
    assert "Error:" in result.output
    assert "already exists" in result.output


def test_transaction_add_updates_balance(run, account_service, cash_account):
    result = run(
        "transaction", "add",
        "--account", "Wallet",
        "--amount", "45.90",
        "--category", "Food",
        "--date", "2024-01-15",
    )
    assert result.exit_code == 0
    assert "Created transaction" in result.output
    assert account_service.get_account(cash_account.id).balance == Decimal("4954.10")


def test_transaction_add_unknown_account(run, cash_account):
    result = run("transaction", "add", "--account", "Nope", "--amount", "5", "--category", "Food")
    assert result.exit_code == 1
    assert "Error: Account 'Nope' not found" in result.output


def test_transaction_add_invalid_amount(run, cash_account):
    result = run("transaction", "add", "--account", "Wallet", "--amount", "lots", "--category", "Food")
    assert result.exit_code == 1
    assert "Invalid amount format" in result.output


def test_recurring_create_and_process_due(
    run, account_service, transaction_service, recurring_service, cash_account
):
    result = run(
        "recurring", "create", "Rent",
        "--amount", "1200",
        "--category", "Housing",
        "--account", "Wallet",
        "--start", "2024-01-01",
    )
    assert result.exit_code == 0
    assert "Created recurring payment 'Rent'" in result.output

    result = run("recurring", "process-due", "--date", "2024-01-02")
    assert result.exit_code == 0
    assert "Processed 1 payment(s), 0 failed" in result.output

    assert account_service.get_account(cash_account.id).balance == Decimal("3800")
    [txn] = transaction_service.list_transactions(USER_ID)
    assert txn.date == date(2024, 1, 1)
    [payment] = recurring_service.list_recurring_payments(USER_ID)
    assert payment.next_payment_date == date(2024, 2, 1)


def test_commands_post_due_payments_once_a_day(
    run, account_service, recurring_service, cash_account, rent_payment
):
    result = run("account", "list", due_check=True)
    assert result.exit_code == 0
    assert "Posted 1 due recurring payment(s)" in result.output
    assert recurring_service.get_recurring_payment(rent_payment.id).payment_count == 1

    # Still due, but the marker from the first run is stored in the database.
    result = run("account", "list", due_check=True)
    assert result.exit_code == 0
    assert "Posted" not in result.output
    assert recurring_service.get_recurring_payment(rent_payment.id).payment_count == 1
    assert account_service.get_account(cash_account.id).balance == Decimal("3800")


def test_process_due_reports_failures(run, temp_db, rent_payment):
    temp_db.update_recurring_payment(rent_payment.id, frequency="fortnightly")
    result = run("recurring", "process-due", "--date", "2024-01-02")
    assert result.exit_code == 1
    assert "Processed 0 payment(s), 1 failed" in result.output
    assert f"Payment {rent_payment.id}: Unknown frequency" in result.output


def test_recurring_skip_and_toggle(run, recurring_service, rent_payment):
    result = run("recurring", "skip", str(rent_payment.id))
    assert result.exit_code == 0
    assert "next payment on 2024-02-01" in result.output

    result = run("recurring", "toggle", str(rent_payment.id))
    assert result.exit_code == 0
    assert "paused" in result.output

    result = run("recurring", "process", str(rent_payment.id))
    assert result.exit_code == 1
    assert "not active" in result.output


def test_recurring_summary(run, rent_payment):
    result = run("recurring", "summary")
    assert result.exit_code == 0
    assert "Active payments: 1" in result.output
    assert "1,200.00" in result.output
    assert "14,400.00" in result.output


def test_budget_for_all_categories(run, budget_service):
    result = run("budget", "create", "all", "--amount", "2500")
    assert result.exit_code == 0
    assert "Created budget" in result.output

    [budget] = budget_service.list_budgets(USER_ID)
    assert budget.covers_all_categories

    result = run("budget", "list")
    assert "All categories" in result.output


def test_account_delete_blocked(run, cash_account, rent_payment):
    result = run("account", "delete", "Wallet", "--yes")
    assert result.exit_code == 1
    assert "recurring payment" in result.output
