"""Aggregation and reporting package."""

from condo_ledger.queries.aggregation import (
    ReportQueries,
    balance,
    compute_statistics,
    current_period,
    filter_by_period,
    reporting_periods,
    select_movements,
    sum_by_kind,
)

__all__ = [
    "ReportQueries",
    "balance",
    "compute_statistics",
    "current_period",
    "filter_by_period",
    "reporting_periods",
    "select_movements",
    "sum_by_kind",
]
