"""
Account Directory

Registry of local accounts persisted in the record store.

Lookups trim and lower-case usernames, so "Alice", " alice " and "ALICE"
are the same account. Passwords are compared exactly.
"""

from typing import Optional

from smartexpense.audit import AuditLogger
from smartexpense.errors import SmartExpenseError
from smartexpense.models.finance import Account, normalize_username
from smartexpense.services.storage import RecordStore


class UsernameTakenError(SmartExpenseError):
    """An account with this username already exists."""

    user_message = "Username already exists."

    def __init__(self, username: str):
        self.username = username
        super().__init__(f"Username '{username}' already exists.")


class InvalidCredentialsError(SmartExpenseError):
    """Unknown username or wrong password."""

    user_message = "Invalid username or password."


class AccountNotFoundError(SmartExpenseError):
    """No account matches the given username."""

    user_message = "No account found with that username."

    def __init__(self, username: str):
        self.username = username
        super().__init__(f"No account found for '{username}'.")


class AccountDirectory:
    """Create, find and update registered accounts."""

    def __init__(
        self,
        store: RecordStore,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._audit_logger = audit_logger

    def all_accounts(self) -> list[Account]:
        return self._store.load_accounts()

    def find(self, username: str) -> Optional[Account]:
        """Case-insensitive lookup; None when absent."""
        key = normalize_username(username)
        for account in self._store.load_accounts():
            if account.username_key == key:
                return account
        return None

    def exists(self, username: str) -> bool:
        return self.find(username) is not None

    def register(self, candidate: Account) -> Account:
        """
        Add a new account.

        Raises:
            UsernameTakenError: If the username is already registered
        """
        if self.exists(candidate.username):
            raise UsernameTakenError(candidate.username)

        self._store.upsert_account(candidate)
        if self._audit_logger:
            self._audit_logger.log_account_registered(candidate.username)
        return candidate

    def verify(self, username: str, password: str) -> Account:
        """
        Check credentials.

        Raises:
            InvalidCredentialsError: Unknown username or wrong password
                (both raise the same error)
        """
        account = self.find(username)
        if account is None or account.password != password:
            raise InvalidCredentialsError()
        return account

    def reset_password(self, username: str, new_password: str) -> None:
        """
        Replace the password of an existing account.

        Raises:
            AccountNotFoundError: If no account matches
        """
        account = self.find(username)
        if account is None:
            raise AccountNotFoundError(username)

        updated = Account.model_validate({**account.model_dump(), "password": new_password})
        self._store.upsert_account(updated)
        if self._audit_logger:
            self._audit_logger.log_password_reset(account.username)

    def update_profile(self, account: Account) -> None:
        """Upsert by username; the stored entry is replaced wholesale."""
        self._store.upsert_account(account)
