"""
Aggregation Engine

Pure functions deriving dashboard figures and chart series from the
transaction list. Nothing here is cached or persisted: callers recompute
from the full list after every mutation.

Period buckets come back in first-seen order, which for a newest-first
ledger means newest period first. Use sort_periods() with a sortable
bucketer (year_month) when a chronological axis is required.
"""

from decimal import Decimal
from typing import Callable, Iterable

from smartexpense.models.finance import (
    Category,
    CategoryTotal,
    FinancialStats,
    PeriodTotals,
    Transaction,
    TransactionType,
)


Bucketer = Callable[[Transaction], str]

ZERO = Decimal("0")


def compute_stats(transactions: Iterable[Transaction]) -> FinancialStats:
    """Totals, balance and expense ratio in a single pass."""
    total_income = ZERO
    total_expense = ZERO

    for transaction in transactions:
        if transaction.type == TransactionType.INCOME:
            total_income += transaction.amount
        else:
            total_expense += transaction.amount

    return FinancialStats.from_totals(total_income, total_expense)


def aggregate_by_category(
    transactions: Iterable[Transaction],
    transaction_type: TransactionType,
) -> dict[Category, Decimal]:
    """
    Sum amounts per category for one transaction type.

    Categories with no transactions are absent, not zero.
    """
    totals: dict[Category, Decimal] = {}
    for transaction in transactions:
        if transaction.type != transaction_type:
            continue
        totals[transaction.category] = totals.get(transaction.category, ZERO) + transaction.amount
    return totals


def category_breakdown(
    transactions: Iterable[Transaction],
    transaction_type: TransactionType = TransactionType.EXPENSE,
) -> list[CategoryTotal]:
    """Pie chart rows: category totals with their display colour."""
    return [
        CategoryTotal(category=category, amount=amount)
        for category, amount in aggregate_by_category(transactions, transaction_type).items()
    ]


def aggregate_by_period(
    transactions: Iterable[Transaction],
    bucketer: Bucketer,
) -> list[PeriodTotals]:
    """Income and expense per bucket, buckets in first-seen order."""
    buckets: dict[str, PeriodTotals] = {}

    for transaction in transactions:
        key = bucketer(transaction)
        bucket = buckets.get(key)
        if bucket is None:
            bucket = buckets[key] = PeriodTotals(period=key)

        if transaction.type == TransactionType.INCOME:
            bucket.income += transaction.amount
        else:
            bucket.expense += transaction.amount

    return list(buckets.values())


def sort_periods(periods: list[PeriodTotals]) -> list[PeriodTotals]:
    """Chronological order for buckets whose labels sort lexically (YYYY-MM)."""
    return sorted(periods, key=lambda p: p.period)


# =============================================================================
# BUCKETERS
# =============================================================================

def month_name(transaction: Transaction) -> str:
    """Abbreviated month ("Jan"). Different years share a bucket."""
    return transaction.date.strftime("%b")


def year_month(transaction: Transaction) -> str:
    """Sortable month key ("2024-01")."""
    return transaction.date.strftime("%Y-%m")
