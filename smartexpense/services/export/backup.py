"""
Snapshot backups.

Two targets: a JSON file in a folder the user picked, or an email draft
(mailto: link) with the JSON in the body. Both take a Snapshot produced
by RecordStore.export_snapshot() and never touch the store themselves.
"""

from pathlib import Path
from typing import Optional
from urllib.parse import quote

from smartexpense.errors import SmartExpenseError
from smartexpense.models.finance import Snapshot
from smartexpense.services.export.spreadsheet import ExportError


BACKUP_SUBJECT = "SmartExpense backup"


class StorageAccessDeniedError(SmartExpenseError):
    """No folder was chosen, or the chosen folder cannot be written."""

    user_message = "Backup folder is not accessible."


def backup_file_name(snapshot: Snapshot) -> str:
    stamp = snapshot.export_date.strftime("%Y%m%dT%H%M%SZ")
    return f"smartexpense-backup-{stamp}.json"


def write_backup(snapshot: Snapshot, directory: Optional[Path]) -> Path:
    """
    Write the snapshot as JSON into `directory`.

    Raises:
        StorageAccessDeniedError: No directory, not a directory, or not writable
        ExportError: Any other failure while writing
    """
    if directory is None:
        raise StorageAccessDeniedError("No backup folder selected.")

    directory = Path(directory).expanduser()
    if not directory.is_dir():
        raise StorageAccessDeniedError(f"Backup folder does not exist: {directory}")

    target = directory / backup_file_name(snapshot)
    try:
        target.write_text(snapshot.to_json(), encoding="utf-8")
    except PermissionError as e:
        raise StorageAccessDeniedError(f"Cannot write to {directory}: {e}") from e
    except OSError as e:
        raise ExportError(f"Failed to write backup: {e}") from e
    return target


def backup_mailto_link(snapshot: Snapshot, recipient: str = "") -> str:
    """
    mailto: URL opening a draft with the snapshot JSON as the body.

    The JSON is compact to keep the URL short.
    """
    subject = f"{BACKUP_SUBJECT} {snapshot.export_date.date().isoformat()}"
    body = snapshot.to_json(indent=None)
    return (
        f"mailto:{quote(recipient.strip(), safe='@')}"
        f"?subject={quote(subject)}&body={quote(body)}"
    )


def load_backup(text: str) -> Snapshot:
    """
    Parse a backup file.

    Raises:
        ExportError: If the text is not a valid snapshot
    """
    try:
        return Snapshot.model_validate_json(text)
    except ValueError as e:
        raise ExportError(f"Not a valid backup file: {e}") from e
