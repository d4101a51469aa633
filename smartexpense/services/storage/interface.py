"""
Abstract Storage Interface

DESIGN DECISION: The record store talks to a tiny key-value port
instead of a concrete backend. This allows us to:
1. Use in-memory storage for testing
2. Keep everything in one JSON file on disk for daily use
3. Add another backend without touching accounts, ledger or analytics

Values are JSON text, one document per key, like browser local storage.
"""

from abc import ABC, abstractmethod
from typing import Optional

from smartexpense.errors import SmartExpenseError


class KeyValueBackend(ABC):
    """
    Abstract interface for a flat string key-value namespace.

    Any backend (memory, JSON file, ...) must implement these methods.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """
        Read the raw value stored under a key.

        Returns:
            The stored text, or None if the key is absent

        Raises:
            StorageCorruptedError: If the backend itself cannot be parsed
                (strict backends only)
        """
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """
        Store text under a key, replacing any previous value.

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove a key. Removing an absent key is a no-op."""
        pass

    @abstractmethod
    def keys(self) -> list[str]:
        """All keys currently present."""
        pass


class StorageError(SmartExpenseError):
    """Base exception for storage operations."""

    user_message = "Your data could not be saved."


class StorageCorruptedError(StorageError):
    """Persisted data could not be decoded."""

    user_message = "Saved data is unreadable."

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Corrupt data under '{key}': {reason}")
