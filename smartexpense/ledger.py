"""
Ledger

Transaction entry and deletion on top of the record store.

Every operation loads the full collection, changes it in memory and
saves it back within the same call. The ledger is shared by every local
account: switching users shows the same history.
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from smartexpense.analytics import compute_stats
from smartexpense.audit import AuditLogger
from smartexpense.models.finance import (
    Category,
    FinancialStats,
    Transaction,
    TransactionType,
)
from smartexpense.services.storage import RecordStore


class Ledger:
    """Newest-first list of transactions."""

    def __init__(
        self,
        store: RecordStore,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._audit_logger = audit_logger

    def transactions(self) -> list[Transaction]:
        return self._store.load_transactions()

    def add(
        self,
        amount: Decimal,
        type: TransactionType,
        category: Category,
        date: date,
        note: str = "",
    ) -> Transaction:
        """
        Record a new transaction with a fresh id and creation time.

        Raises:
            pydantic.ValidationError: Non-positive amount or a category
                that does not belong to the transaction type
        """
        transaction = Transaction(
            amount=amount,
            type=type,
            category=category,
            date=date,
            note=note,
        )

        transactions = self._store.load_transactions()
        transactions.insert(0, transaction)
        self._store.save_transactions(transactions)

        if self._audit_logger:
            self._audit_logger.log_transaction_added(
                transaction_id=transaction.id,
                transaction_type=transaction.type.value,
                amount=str(transaction.amount),
            )
        return transaction

    def delete(self, transaction_id: str) -> bool:
        """
        Remove one transaction by id.

        Returns False (and writes nothing) when the id is unknown.
        """
        transactions = self._store.load_transactions()
        remaining = [t for t in transactions if t.id != transaction_id]
        if len(remaining) == len(transactions):
            return False

        self._store.save_transactions(remaining)
        if self._audit_logger:
            self._audit_logger.log_transaction_deleted(transaction_id)
        return True

    def stats(self) -> FinancialStats:
        return compute_stats(self._store.load_transactions())
