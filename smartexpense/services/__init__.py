"""Services package."""

from smartexpense.services.storage import (
    InMemoryBackend,
    JsonFileBackend,
    KeyValueBackend,
    RecordStore,
    StorageCorruptedError,
    StorageError,
)
from smartexpense.services.export import (
    ExportError,
    StorageAccessDeniedError,
    backup_mailto_link,
    export_transactions_xlsx,
    write_backup,
)

__all__ = [
    # Storage services
    "InMemoryBackend",
    "JsonFileBackend",
    "KeyValueBackend",
    "RecordStore",
    "StorageCorruptedError",
    "StorageError",
    # Export services
    "ExportError",
    "StorageAccessDeniedError",
    "backup_mailto_link",
    "export_transactions_xlsx",
    "write_backup",
]
