"""Local accounts and session state."""

from smartexpense.accounts.directory import (
    AccountDirectory,
    AccountNotFoundError,
    InvalidCredentialsError,
    UsernameTakenError,
)
from smartexpense.accounts.session import (
    InvalidTransitionError,
    InvalidVerificationCodeError,
    SessionManager,
    SessionState,
)

__all__ = [
    "AccountDirectory",
    "AccountNotFoundError",
    "InvalidCredentialsError",
    "InvalidTransitionError",
    "InvalidVerificationCodeError",
    "SessionManager",
    "SessionState",
    "UsernameTakenError",
]
