"""
Spreadsheet export of the transaction list.

One row per transaction with the columns date, type, category, amount,
note, in ledger order (newest first).
"""

from io import BytesIO
from typing import Sequence

import pandas as pd

from smartexpense.errors import SmartExpenseError
from smartexpense.models.finance import Transaction


EXPORT_COLUMNS = ["date", "type", "category", "amount", "note"]
EXPORT_SHEET_NAME = "Transactions"
EXPORT_FILE_NAME = "ExpenseTracker_Export.xlsx"
XLSX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


class ExportError(SmartExpenseError):
    """The export file could not be produced."""

    user_message = "Export failed."


def transactions_frame(transactions: Sequence[Transaction]) -> pd.DataFrame:
    """Transactions as a DataFrame with the export columns."""
    rows = [
        {
            "date": t.date,
            "type": t.type.value,
            "category": t.category.value,
            "amount": float(t.amount),
            "note": t.note,
        }
        for t in transactions
    ]
    return pd.DataFrame(rows, columns=EXPORT_COLUMNS)


def export_transactions_xlsx(transactions: Sequence[Transaction]) -> bytes:
    """
    Excel workbook bytes ready for download.

    Raises:
        ExportError: If the workbook cannot be written
    """
    out = BytesIO()
    try:
        with pd.ExcelWriter(out, engine="xlsxwriter") as writer:
            transactions_frame(transactions).to_excel(
                writer, index=False, sheet_name=EXPORT_SHEET_NAME
            )
    except Exception as e:
        raise ExportError(f"Failed to build spreadsheet: {e}") from e
    return out.getvalue()


def export_transactions_csv(transactions: Sequence[Transaction]) -> bytes:
    """CSV fallback with the same columns."""
    try:
        return transactions_frame(transactions).to_csv(index=False).encode("utf-8")
    except Exception as e:
        raise ExportError(f"Failed to build CSV: {e}") from e
