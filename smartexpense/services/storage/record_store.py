"""
Record Store

Typed access to the three persisted collections:

    transactions    -> list of Transaction
    currentSession  -> Account or absent
    accounts        -> list of Account

DESIGN DECISION: Reads never fail. A missing key or undecodable JSON
degrades to the empty default; inside a list, each record is validated
on its own and only the records that fail are dropped. Both cases are
reported through the audit log. This favours availability over
durability for a single-user tool; set strict=True (STORAGE_STRICT) to
get StorageCorruptedError instead.

Callers follow load -> mutate in memory -> save within one action.
"""

from datetime import datetime
from typing import Any, Optional, TypeVar

from pydantic import TypeAdapter, ValidationError

from smartexpense.audit import AuditLogger
from smartexpense.models.finance import (
    Account,
    Snapshot,
    Transaction,
    normalize_username,
)
from smartexpense.services.storage.interface import (
    KeyValueBackend,
    StorageCorruptedError,
)


T = TypeVar("T")
M = TypeVar("M", Transaction, Account)

_RECORDS = TypeAdapter(list[Any])
_TRANSACTIONS = TypeAdapter(list[Transaction])
_ACCOUNTS = TypeAdapter(list[Account])
_SESSION = TypeAdapter(Optional[Account])


class RecordStore:
    """
    Persistence facade used by the ledger, the account directory and
    the session manager.
    """

    TRANSACTIONS_KEY = "transactions"
    SESSION_KEY = "currentSession"
    ACCOUNTS_KEY = "accounts"

    def __init__(
        self,
        backend: KeyValueBackend,
        schema_version: str = "1.0.0",
        strict: bool = False,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._backend = backend
        self._schema_version = schema_version
        self._strict = strict
        self._audit_logger = audit_logger

    @property
    def backend(self) -> KeyValueBackend:
        return self._backend

    # -------------------------------------------------------------------------
    # Generic read/write
    # -------------------------------------------------------------------------

    def _read(self, key: str, adapter: TypeAdapter, default: T) -> T:
        try:
            raw = self._backend.get(key)
        except StorageCorruptedError as e:
            return self._corrupt(key, e.reason, default)

        if raw is None:
            return default
        if not isinstance(raw, (str, bytes)):
            return self._corrupt(key, "stored value is not JSON text", default)

        try:
            return adapter.validate_json(raw)
        except ValidationError as e:
            return self._corrupt(key, f"{e.error_count()} validation error(s)", default)

    def _corrupt(self, key: str, reason: str, default: T) -> T:
        if self._strict:
            raise StorageCorruptedError(key, reason)
        if self._audit_logger:
            self._audit_logger.log_storage_corrupted(key, reason)
        return default

    def _read_records(self, key: str, model: type[M]) -> list[M]:
        """
        Load a list, validating one record at a time.

        A record that fails validation is skipped and reported; the rest
        of the list survives and is written back on the next save.
        """
        records = []
        for index, item in enumerate(self._read(key, _RECORDS, [])):
            try:
                records.append(model.model_validate(item))
            except ValidationError as e:
                self._corrupt(
                    key,
                    f"record {index} dropped: {e.error_count()} validation error(s)",
                    None,
                )
        return records

    def _write(self, key: str, adapter: TypeAdapter, value) -> None:
        self._backend.set(key, adapter.dump_json(value, by_alias=True).decode("utf-8"))

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    def load_transactions(self) -> list[Transaction]:
        return self._read_records(self.TRANSACTIONS_KEY, Transaction)

    def save_transactions(self, transactions: list[Transaction]) -> None:
        self._write(self.TRANSACTIONS_KEY, _TRANSACTIONS, list(transactions))

    # -------------------------------------------------------------------------
    # Session
    # -------------------------------------------------------------------------

    def load_session(self) -> Optional[Account]:
        return self._read(self.SESSION_KEY, _SESSION, None)

    def save_session(self, account: Optional[Account]) -> None:
        """Persist a copy of the active account; None logs out."""
        if account is None:
            self._backend.delete(self.SESSION_KEY)
            return
        self._write(self.SESSION_KEY, _SESSION, account.model_copy())

    # -------------------------------------------------------------------------
    # Accounts
    # -------------------------------------------------------------------------

    def load_accounts(self) -> list[Account]:
        return self._read_records(self.ACCOUNTS_KEY, Account)

    def save_accounts(self, accounts: list[Account]) -> None:
        self._write(self.ACCOUNTS_KEY, _ACCOUNTS, list(accounts))

    def upsert_account(self, account: Account) -> None:
        """
        Insert or replace an account, matching usernames case-insensitively.

        A replaced account keeps its position in the list.
        """
        accounts = self.load_accounts()
        key = normalize_username(account.username)

        for index, existing in enumerate(accounts):
            if existing.username_key == key:
                accounts[index] = account
                break
        else:
            accounts.append(account)

        self.save_accounts(accounts)

    # -------------------------------------------------------------------------
    # Whole namespace
    # -------------------------------------------------------------------------

    def export_snapshot(self) -> Snapshot:
        """Point-in-time copy of everything persisted, for backups."""
        return Snapshot(
            transactions=self.load_transactions(),
            accounts=self.load_accounts(),
            current_user=self.load_session(),
            export_date=datetime.utcnow(),
            version=self._schema_version,
        )

    def clear_all(self) -> None:
        """Remove every key, including ones this version does not know."""
        for key in self._backend.keys():
            self._backend.delete(key)
