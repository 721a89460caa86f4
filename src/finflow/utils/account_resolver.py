"""Utility for resolving account names to IDs."""

from finflow.domain.account import AccountService
from finflow.domain.errors import NotFoundError


def resolve_account(account_service: AccountService, user_id: str, account: str | int) -> int:
    """Resolve a user's account name or ID to an account ID.

    Numeric strings are treated as IDs. Deactivated accounts resolve by ID
    but not by name.

    Args:
        account_service: AccountService instance
        user_id: Owner of the account
        account: Account name or ID

    Returns:
        Account ID

    Raises:
        NotFoundError: If no such account belongs to the user
    """
    try:
        account_id = int(account)
    except (ValueError, TypeError):
        account_id = None

    if account_id is not None:
        account_obj = account_service.get_account(account_id)
        if account_obj is None or account_obj.user_id != user_id:
            raise NotFoundError(f"Account ID {account_id} not found")
        return account_id

    for acc in account_service.list_accounts(user_id):
        if acc.name == account:
            return acc.id

    raise NotFoundError(f"Account '{account}' not found")
