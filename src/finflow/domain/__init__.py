"""Domain layer for finflow application."""

__all__ = [
    "AccountService",
    "BalanceAdjuster",
    "BudgetService",
    "RecurringPaymentService",
    "TransactionService",
]

_SERVICES = {
    "AccountService": "finflow.domain.account",
    "BalanceAdjuster": "finflow.domain.balance",
    "BudgetService": "finflow.domain.budget",
    "RecurringPaymentService": "finflow.domain.recurring",
    "TransactionService": "finflow.domain.transaction",
}


# Services import the database layer, which imports domain entities, so they
# are loaded lazily to avoid a circular import.
def __getattr__(name):
    if name in _SERVICES:
        import importlib

        return getattr(importlib.import_module(_SERVICES[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
