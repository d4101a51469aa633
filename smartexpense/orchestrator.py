"""
Main Orchestrator for SmartExpense

Ties the components together and defines the flows the UI calls:
1. Dashboard (transactions -> stats + chart series)
2. Data export (spreadsheet, JSON backup to a folder or an email draft)

DESIGN DECISION: Components are built once by create_app_components()
and passed explicitly. The storage backend is chosen from settings but
can be injected, which is how the tests run everything in memory.
"""

from pathlib import Path
from typing import NamedTuple, Optional

from pydantic import BaseModel

from smartexpense.accounts import AccountDirectory, SessionManager
from smartexpense.agents import FinancialAdvisor
from smartexpense.analytics import (
    Bucketer,
    aggregate_by_period,
    category_breakdown,
    compute_stats,
    month_name,
)
from smartexpense.audit import AuditLogger
from smartexpense.config import Settings, get_settings
from smartexpense.errors import SmartExpenseError
from smartexpense.ledger import Ledger
from smartexpense.models.finance import (
    CategoryTotal,
    FinancialStats,
    PeriodTotals,
    Transaction,
    TransactionType,
)
from smartexpense.services.export import (
    backup_mailto_link,
    export_transactions_xlsx,
    write_backup,
)
from smartexpense.services.storage import (
    InMemoryBackend,
    JsonFileBackend,
    KeyValueBackend,
    RecordStore,
)


class DashboardData(BaseModel):
    """Everything the dashboard renders for one refresh."""

    transactions: list[Transaction]
    stats: FinancialStats
    expense_breakdown: list[CategoryTotal]
    periods: list[PeriodTotals]


def build_dashboard(
    transactions: list[Transaction],
    bucketer: Bucketer = month_name,
) -> DashboardData:
    """Recompute every derived figure from the full transaction list."""
    return DashboardData(
        transactions=transactions,
        stats=compute_stats(transactions),
        expense_breakdown=category_breakdown(transactions, TransactionType.EXPENSE),
        periods=aggregate_by_period(transactions, bucketer),
    )


class ExportFlow:
    """
    Data leaving the application.

    Errors (ExportError, StorageAccessDeniedError) are logged as system
    errors and propagate to the UI, which shows them as a message;
    successful exports are audited.
    """

    def __init__(
        self,
        store: RecordStore,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._audit_logger = audit_logger

    def _log_failure(self, operation: str, error: SmartExpenseError) -> None:
        if self._audit_logger:
            self._audit_logger.log_error(
                error_type=type(error).__name__,
                error_message=error.message,
                details={"operation": operation},
            )

    def export_spreadsheet(self) -> bytes:
        transactions = self._store.load_transactions()
        try:
            data = export_transactions_xlsx(transactions)
        except SmartExpenseError as e:
            self._log_failure("export_spreadsheet", e)
            raise
        if self._audit_logger:
            self._audit_logger.log_export_completed(len(transactions), "xlsx")
        return data

    def backup_to_directory(self, directory: Optional[Path]) -> Path:
        snapshot = self._store.export_snapshot()
        try:
            path = write_backup(snapshot, directory)
        except SmartExpenseError as e:
            self._log_failure("backup_to_directory", e)
            raise
        if self._audit_logger:
            self._audit_logger.log_backup_completed("directory", len(snapshot.transactions))
        return path

    def backup_email_link(self, recipient: str = "") -> str:
        snapshot = self._store.export_snapshot()
        link = backup_mailto_link(snapshot, recipient)
        if self._audit_logger:
            self._audit_logger.log_backup_completed("email", len(snapshot.transactions))
        return link


class AppComponents(NamedTuple):
    store: RecordStore
    directory: AccountDirectory
    session: SessionManager
    ledger: Ledger
    advisor: FinancialAdvisor
    exports: ExportFlow
    audit_logger: AuditLogger


def create_backend(settings: Settings) -> KeyValueBackend:
    storage = settings.storage
    if storage.backend == "memory":
        return InMemoryBackend()
    return JsonFileBackend(storage.data_path, strict=storage.strict)


def create_app_components(
    settings: Optional[Settings] = None,
    backend: Optional[KeyValueBackend] = None,
    advisor: Optional[FinancialAdvisor] = None,
) -> AppComponents:
    """
    Factory function to create all application components.

    Args:
        settings: Settings to use (defaults to the cached environment settings)
        backend: Key-value backend override, e.g. InMemoryBackend() in tests
        advisor: Advisor override, e.g. one with a fake model in tests

    Returns:
        AppComponents with every service wired to the same record store
    """
    settings = settings or get_settings()
    app_settings = settings.app

    audit_logger = AuditLogger()
    store = RecordStore(
        backend or create_backend(settings),
        schema_version=app_settings.schema_version,
        strict=settings.storage.strict,
        audit_logger=audit_logger,
    )
    directory = AccountDirectory(store, audit_logger=audit_logger)
    session = SessionManager(
        store,
        directory,
        verification_code=app_settings.verification_code,
        audit_logger=audit_logger,
    )

    return AppComponents(
        store=store,
        directory=directory,
        session=session,
        ledger=Ledger(store, audit_logger=audit_logger),
        advisor=advisor or FinancialAdvisor(
            settings=settings.gemini,
            app_settings=app_settings,
            audit_logger=audit_logger,
        ),
        exports=ExportFlow(store, audit_logger=audit_logger),
        audit_logger=audit_logger,
    )
