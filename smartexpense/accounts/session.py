"""
Session Manager

Drives the login / signup / password-recovery state machine:

    LOGGED_OUT --login--------------------------> LOGGED_IN
    LOGGED_OUT --request_signup-----------------> AWAITING_VERIFICATION
    AWAITING_VERIFICATION --submit_code(ok)-----> LOGGED_IN
    LOGGED_OUT --start_recovery-----------------> AWAITING_RECOVERY_USERNAME
    AWAITING_RECOVERY_USERNAME --found----------> AWAITING_NEW_PASSWORD
    AWAITING_NEW_PASSWORD --submit_new_password-> LOGGED_OUT
    LOGGED_IN --logout--------------------------> LOGGED_OUT

A rejected user action keeps the current state and sets `error` to a
message for the UI. Calling an operation from a state that does not
allow it raises InvalidTransitionError.

CRITICAL: The verification code is a fixed value from configuration.
Nothing is delivered out of band; this only models the signup flow.

The session persists a copy of the account. Profile changes go through
update_avatar(), which writes both the session and the directory entry.
Transaction history is not touched by any transition.
"""

from enum import Enum
from typing import Optional

from pydantic import ValidationError

from smartexpense.accounts.directory import (
    AccountDirectory,
    AccountNotFoundError,
    InvalidCredentialsError,
    UsernameTakenError,
)
from smartexpense.audit import AuditLogger
from smartexpense.errors import SmartExpenseError
from smartexpense.models.finance import Account
from smartexpense.services.storage import RecordStore


class SessionState(str, Enum):
    """Where the user is in the authentication flow."""
    LOGGED_OUT = "logged_out"
    AWAITING_VERIFICATION = "awaiting_verification"
    LOGGED_IN = "logged_in"
    AWAITING_RECOVERY_USERNAME = "awaiting_recovery_username"
    AWAITING_NEW_PASSWORD = "awaiting_new_password"


class InvalidVerificationCodeError(SmartExpenseError):
    """The submitted signup code does not match."""

    user_message = "Invalid verification code."


class InvalidTransitionError(SmartExpenseError):
    """An operation was called from a state that does not accept it."""

    def __init__(self, operation: str, state: SessionState):
        self.operation = operation
        self.state = state
        super().__init__(f"Cannot {operation} while {state.value}")


def _first_validation_message(error: ValidationError) -> str:
    first = error.errors()[0]
    field = ".".join(str(part) for part in first.get("loc", ()))
    message = first.get("msg", "Invalid value")
    return f"{field}: {message}" if field else message


class SessionManager:
    """
    Tracks the active user and the pending signup/recovery flow.

    Construct one per application run; it restores a persisted session
    so a page reload keeps the user logged in.
    """

    def __init__(
        self,
        store: RecordStore,
        directory: AccountDirectory,
        verification_code: str = "123456",
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._directory = directory
        self._verification_code = verification_code
        self._audit_logger = audit_logger

        self._state = SessionState.LOGGED_OUT
        self._current: Optional[Account] = None
        self._pending: Optional[Account] = None
        self._expected_code: Optional[str] = None
        self._recovery_username: Optional[str] = None

        self.error: Optional[str] = None
        self.notice: Optional[str] = None

        restored = store.load_session()
        if restored is not None:
            self._current = restored
            self._state = SessionState.LOGGED_IN

    # -------------------------------------------------------------------------
    # Read-only view
    # -------------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_logged_in(self) -> bool:
        return self._state == SessionState.LOGGED_IN

    @property
    def current_account(self) -> Optional[Account]:
        return self._current

    @property
    def pending_account(self) -> Optional[Account]:
        return self._pending

    @property
    def expected_code(self) -> Optional[str]:
        return self._expected_code

    @property
    def recovery_username(self) -> Optional[str]:
        return self._recovery_username

    def consume_messages(self) -> tuple[Optional[str], Optional[str]]:
        """
        Return (error, notice) and clear both.

        The UI calls this once per render so each message is shown once.
        """
        messages = (self.error, self.notice)
        self.error = None
        self.notice = None
        return messages

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _require(self, operation: str, *states: SessionState) -> None:
        if self._state not in states:
            raise InvalidTransitionError(operation, self._state)

    def _fail(self, message: str) -> bool:
        self.error = message
        self.notice = None
        return False

    def _succeed(self, state: SessionState, notice: Optional[str] = None) -> bool:
        self._state = state
        self.error = None
        self.notice = notice
        return True

    def _reset_pending(self) -> None:
        self._pending = None
        self._expected_code = None
        self._recovery_username = None

    # -------------------------------------------------------------------------
    # Login / logout
    # -------------------------------------------------------------------------

    def login(self, username: str, password: str) -> bool:
        self._require("log in", SessionState.LOGGED_OUT)

        try:
            account = self._directory.verify(username, password)
        except InvalidCredentialsError as e:
            if self._audit_logger:
                self._audit_logger.log_login_failed(username.strip())
            return self._fail(e.message)

        self._current = account
        self._store.save_session(account)
        if self._audit_logger:
            self._audit_logger.log_login_succeeded(account.username)
        return self._succeed(SessionState.LOGGED_IN)

    def logout(self) -> None:
        """Clear the session. Accounts and transactions stay on disk."""
        self._require("log out", SessionState.LOGGED_IN)

        username = self._current.username if self._current else ""
        self._store.save_session(None)
        self._current = None
        self._reset_pending()
        if self._audit_logger:
            self._audit_logger.log_logged_out(username)
        self._succeed(SessionState.LOGGED_OUT)

    # -------------------------------------------------------------------------
    # Signup
    # -------------------------------------------------------------------------

    def request_signup(
        self,
        name: str,
        username: str,
        email: str,
        password: str,
    ) -> bool:
        """Validate the form and wait for the verification code."""
        self._require("sign up", SessionState.LOGGED_OUT)

        try:
            candidate = Account(
                name=name,
                username=username,
                email=email,
                password=password,
            )
        except ValidationError as e:
            return self._fail(_first_validation_message(e))

        if self._directory.exists(candidate.username):
            return self._fail(UsernameTakenError(candidate.username).message)

        self._pending = candidate
        self._expected_code = self._verification_code
        if self._audit_logger:
            self._audit_logger.log_signup_requested(candidate.username)
        return self._succeed(
            SessionState.AWAITING_VERIFICATION,
            notice=f"Verification code sent to {candidate.email}",
        )

    def submit_code(self, code: str) -> bool:
        """Finish signup: register the pending account and log it in."""
        self._require("verify", SessionState.AWAITING_VERIFICATION)

        if code.strip() != self._expected_code:
            if self._audit_logger:
                self._audit_logger.log_verification_failed(self._pending.username)
            return self._fail(InvalidVerificationCodeError().message)

        try:
            account = self._directory.register(self._pending)
        except UsernameTakenError as e:
            # Someone registered the name between request and verification
            return self._fail(e.message)

        self._current = account
        self._store.save_session(account)
        self._reset_pending()
        return self._succeed(SessionState.LOGGED_IN)

    # -------------------------------------------------------------------------
    # Password recovery
    # -------------------------------------------------------------------------

    def start_recovery(self) -> None:
        self._require("recover a password", SessionState.LOGGED_OUT)
        self._succeed(SessionState.AWAITING_RECOVERY_USERNAME)

    def submit_recovery_username(self, username: str) -> bool:
        self._require("look up an account", SessionState.AWAITING_RECOVERY_USERNAME)

        account = self._directory.find(username)
        if account is None:
            return self._fail(AccountNotFoundError(username.strip()).message)

        self._recovery_username = account.username
        return self._succeed(SessionState.AWAITING_NEW_PASSWORD)

    def submit_new_password(self, password: str) -> bool:
        self._require("set a new password", SessionState.AWAITING_NEW_PASSWORD)

        if not password:
            return self._fail("Password cannot be empty.")

        try:
            self._directory.reset_password(self._recovery_username, password)
        except AccountNotFoundError as e:
            return self._fail(e.message)

        self._reset_pending()
        return self._succeed(
            SessionState.LOGGED_OUT,
            notice="Password updated. Please log in.",
        )

    def cancel(self) -> None:
        """Abandon a pending signup or recovery."""
        self._require(
            "cancel",
            SessionState.LOGGED_OUT,
            SessionState.AWAITING_VERIFICATION,
            SessionState.AWAITING_RECOVERY_USERNAME,
            SessionState.AWAITING_NEW_PASSWORD,
        )
        self._reset_pending()
        self._succeed(SessionState.LOGGED_OUT)

    # -------------------------------------------------------------------------
    # Profile
    # -------------------------------------------------------------------------

    def update_avatar(self, avatar_url: Optional[str]) -> bool:
        """Change the profile picture in both the session and the directory."""
        self._require("update the profile", SessionState.LOGGED_IN)

        try:
            updated = Account.model_validate(
                {**self._current.model_dump(), "avatar_url": avatar_url}
            )
        except ValidationError as e:
            return self._fail(_first_validation_message(e))

        self._directory.update_profile(updated)
        self._store.save_session(updated)
        self._current = updated
        if self._audit_logger:
            self._audit_logger.log_profile_updated(updated.username, ["avatar_url"])
        return self._succeed(SessionState.LOGGED_IN, notice="Profile updated.")
