"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or malformed stored data."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as editing a field owned by the scheduler."""


class DependencyError(DomainError):
    """Operation blocked due to dependent domain data."""


class StoreWriteError(DomainError):
    """The backing store rejected or failed a write."""


class BatchError(DomainError):
    """A whole processing batch could not run."""


def account_not_found(account_id: int) -> str:
    """Return message for missing account."""
    return f"Account {account_id} not found"


def transaction_not_found(transaction_id: int) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def recurring_payment_not_found(payment_id: int) -> str:
    """Return message for missing recurring payment."""
    return f"Recurring payment {payment_id} not found"


def budget_not_found(budget_id: int) -> str:
    """Return message for missing budget."""
    return f"Budget {budget_id} not found"


def unknown_frequency(frequency: object) -> str:
    """Return message for a frequency outside the supported set."""
    return f"Unknown frequency '{frequency}'. Supported: daily, weekly, monthly, yearly"


def account_delete_blocked(
    account_id: int, transaction_count: int, recurring_count: int
) -> str:
    """Return message when account has dependent transactions or recurring payments."""
    parts = []
    if transaction_count > 0:
        parts.append(
            f"{transaction_count} transaction{'s' if transaction_count != 1 else ''}"
        )
    if recurring_count > 0:
        parts.append(
            f"{recurring_count} recurring payment{'s' if recurring_count != 1 else ''}"
        )
    return (
        f"Cannot delete account {account_id}: it has {', '.join(parts)}. "
        "Deactivate it instead, or delete them first."
    )
