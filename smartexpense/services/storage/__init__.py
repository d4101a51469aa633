"""
Storage Services Package

Provides the key-value port, its concrete backends and the typed
record store built on top of them.
"""

from smartexpense.services.storage.interface import (
    KeyValueBackend,
    StorageCorruptedError,
    StorageError,
)
from smartexpense.services.storage.backends import (
    InMemoryBackend,
    JsonFileBackend,
)
from smartexpense.services.storage.record_store import RecordStore

__all__ = [
    # Interfaces
    "KeyValueBackend",
    # Exceptions
    "StorageCorruptedError",
    "StorageError",
    # Backends
    "InMemoryBackend",
    "JsonFileBackend",
    # Typed store
    "RecordStore",
]
