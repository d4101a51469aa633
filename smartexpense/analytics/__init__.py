"""Derived statistics and chart series."""

from smartexpense.analytics.aggregation import (
    Bucketer,
    aggregate_by_category,
    aggregate_by_period,
    category_breakdown,
    compute_stats,
    month_name,
    sort_periods,
    year_month,
)

__all__ = [
    "Bucketer",
    "aggregate_by_category",
    "aggregate_by_period",
    "category_breakdown",
    "compute_stats",
    "month_name",
    "sort_periods",
    "year_month",
]
