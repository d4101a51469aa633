"""Export and backup collaborators."""

from smartexpense.services.export.spreadsheet import (
    EXPORT_COLUMNS,
    EXPORT_FILE_NAME,
    EXPORT_SHEET_NAME,
    XLSX_MIME_TYPE,
    ExportError,
    export_transactions_csv,
    export_transactions_xlsx,
    transactions_frame,
)
from smartexpense.services.export.backup import (
    StorageAccessDeniedError,
    backup_file_name,
    backup_mailto_link,
    load_backup,
    write_backup,
)

__all__ = [
    "EXPORT_COLUMNS",
    "EXPORT_FILE_NAME",
    "EXPORT_SHEET_NAME",
    "XLSX_MIME_TYPE",
    "ExportError",
    "StorageAccessDeniedError",
    "backup_file_name",
    "backup_mailto_link",
    "export_transactions_csv",
    "export_transactions_xlsx",
    "load_backup",
    "transactions_frame",
    "write_backup",
]
