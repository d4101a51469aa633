"""
Concrete key-value backends.

InMemoryBackend keeps everything in a dict and is used by the tests and
by throwaway sessions. JsonFileBackend persists the whole namespace as a
single JSON object on disk:

    {"transactions": "[...]", "accounts": "[...]", "currentSession": "{...}"}

Each value is itself JSON text, so a damaged entry can be detected and
dropped on its own without losing the rest of the file.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Optional

from smartexpense.audit import get_logger
from smartexpense.services.storage.interface import (
    KeyValueBackend,
    StorageCorruptedError,
    StorageError,
)


logger = get_logger(__name__)


class InMemoryBackend(KeyValueBackend):
    """Dict-backed namespace. Nothing survives the process."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)


class JsonFileBackend(KeyValueBackend):
    """
    Single JSON file holding the whole namespace.

    Writes go to a temporary sibling file which then replaces the real
    one, so a crash mid-write leaves the previous version intact.

    If the file is not a JSON object, lenient mode moves it aside to
    "<name>.corrupt-<timestamp>" and starts from an empty namespace;
    strict mode raises StorageCorruptedError instead.
    """

    def __init__(self, path: Path, strict: bool = False):
        self._path = Path(path)
        self._strict = strict

    @property
    def path(self) -> Path:
        return self._path

    def _load_document(self) -> dict[str, str]:
        if not self._path.exists():
            return {}

        try:
            with self._path.open("r", encoding="utf-8") as f:
                document = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            return self._handle_corrupt_document(str(e))
        except OSError as e:
            raise StorageError(f"Failed to read {self._path}: {e}")

        if not isinstance(document, dict):
            return self._handle_corrupt_document("top-level value is not an object")

        # Non-string values are left for the record store to reject per key
        return document

    def _handle_corrupt_document(self, reason: str) -> dict[str, str]:
        if self._strict:
            raise StorageCorruptedError(str(self._path), reason)

        stamp = datetime.utcnow().strftime("%Y%m%dT%H%M%SZ")
        quarantine = self._path.with_name(f"{self._path.name}.corrupt-{stamp}")
        try:
            self._path.replace(quarantine)
        except OSError as e:
            raise StorageError(f"Failed to move corrupt file aside: {e}")

        logger.warning(
            "storage_file_quarantined",
            path=str(self._path),
            moved_to=str(quarantine),
            reason=reason,
        )
        return {}

    def _write_document(self, document: dict[str, str]) -> None:
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with tmp.open("w", encoding="utf-8") as f:
                json.dump(document, f, ensure_ascii=False, indent=2)
            tmp.replace(self._path)
        except OSError as e:
            raise StorageError(f"Failed to write {self._path}: {e}")

    def get(self, key: str) -> Optional[str]:
        return self._load_document().get(key)

    def set(self, key: str, value: str) -> None:
        document = self._load_document()
        document[key] = value
        self._write_document(document)

    def delete(self, key: str) -> None:
        document = self._load_document()
        if key in document:
            del document[key]
            self._write_document(document)

    def keys(self) -> list[str]:
        return list(self._load_document())
