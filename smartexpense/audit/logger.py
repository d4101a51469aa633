"""
Audit Logger

DESIGN DECISION: Every user-visible action is logged as a structured
event. The audit logger:
- Is synchronous, like the rest of the application
- Never raises into the caller (a failed log write must not break a login)
- Renders JSON lines through structlog
"""

from typing import Optional

import structlog

from smartexpense.models.audit import AuditEvent, AuditEventBuilder


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def get_logger(name: Optional[str] = None):
    """Module-level structured logger for components without an AuditLogger."""
    return structlog.get_logger(name)


class AuditLogger:
    """
    Central audit logging service.

    Keeps the events it logged in memory (bounded) so the UI can show
    a short activity history for the current run.
    """

    def __init__(self, history_size: int = 200):
        self._logger = structlog.get_logger("smartexpense.audit")
        self._history: list[AuditEvent] = []
        self._history_size = history_size

    @property
    def history(self) -> list[AuditEvent]:
        """Events logged so far, oldest first."""
        return list(self._history)

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Returns True if the event was written.
        """
        self._history.append(event)
        if len(self._history) > self._history_size:
            del self._history[0]

        log_dict = event.to_log_dict()
        try:
            if event.severity.value in ("error", "critical"):
                self._logger.error("audit_event", **log_dict)
            elif event.severity.value == "warning":
                self._logger.warning("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception:
            return False
        return True

    def log_account_registered(self, username: str) -> None:
        self.log(AuditEventBuilder.account_registered(username))

    def log_signup_requested(self, username: str) -> None:
        self.log(AuditEventBuilder.signup_requested(username))

    def log_verification_failed(self, username: str) -> None:
        self.log(AuditEventBuilder.verification_failed(username))

    def log_login_succeeded(self, username: str) -> None:
        self.log(AuditEventBuilder.login_succeeded(username))

    def log_login_failed(self, username: str) -> None:
        self.log(AuditEventBuilder.login_failed(username))

    def log_logged_out(self, username: str) -> None:
        self.log(AuditEventBuilder.logged_out(username))

    def log_password_reset(self, username: str) -> None:
        self.log(AuditEventBuilder.password_reset(username))

    def log_profile_updated(self, username: str, fields: list[str]) -> None:
        self.log(AuditEventBuilder.profile_updated(username, fields))

    def log_transaction_added(
        self,
        transaction_id: str,
        transaction_type: str,
        amount: str,
    ) -> None:
        self.log(AuditEventBuilder.transaction_added(
            transaction_id=transaction_id,
            transaction_type=transaction_type,
            amount=amount,
        ))

    def log_transaction_deleted(self, transaction_id: str) -> None:
        self.log(AuditEventBuilder.transaction_deleted(transaction_id))

    def log_export_completed(self, row_count: int, file_format: str) -> None:
        self.log(AuditEventBuilder.export_completed(row_count, file_format))

    def log_backup_completed(self, target: str, transaction_count: int) -> None:
        self.log(AuditEventBuilder.backup_completed(target, transaction_count))

    def log_storage_corrupted(self, key: str, error_message: str) -> None:
        self.log(AuditEventBuilder.storage_corrupted(key, error_message))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> None:
        """Log an error."""
        self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
        ))

    def log_external_service_error(self, service: str, error_message: str) -> None:
        """Log external service error."""
        self.log(AuditEventBuilder.external_service_error(service, error_message))
