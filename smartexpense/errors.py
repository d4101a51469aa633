"""
Exception hierarchy root.

Each component defines its own exceptions next to its code (storage,
accounts, session, advisor, exports). They all derive from
SmartExpenseError so the UI can catch one type and show its message.
"""


class SmartExpenseError(Exception):
    """Base exception for all recoverable application errors."""

    user_message = "Something went wrong. Please try again."

    def __init__(self, message: str = ""):
        super().__init__(message or self.user_message)

    @property
    def message(self) -> str:
        return str(self)
