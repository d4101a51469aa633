"""
Data Models Package

This package contains all Pydantic models used in SmartExpense.
All data flowing through the system must conform to these schemas.
"""

from smartexpense.models.finance import (
    CATEGORY_COLORS,
    EXPENSE_CATEGORIES,
    INCOME_CATEGORIES,
    Account,
    Category,
    CategoryTotal,
    FinancialStats,
    PeriodTotals,
    Snapshot,
    Transaction,
    TransactionType,
    categories_for,
    normalize_username,
)
from smartexpense.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Finance models
    "CATEGORY_COLORS",
    "EXPENSE_CATEGORIES",
    "INCOME_CATEGORIES",
    "Account",
    "Category",
    "CategoryTotal",
    "FinancialStats",
    "PeriodTotals",
    "Snapshot",
    "Transaction",
    "TransactionType",
    "categories_for",
    "normalize_username",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
