"""Audit logging package."""

from smartexpense.audit.logger import AuditLogger, get_logger

__all__ = ["AuditLogger", "get_logger"]
