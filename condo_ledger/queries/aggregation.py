"""
Aggregation Engine

DESIGN DECISION: Every report is computed from movement lists, never
stored. The functions here are pure: same movements in, same totals out.
Only ReportQueries touches the store, and it reads exactly once per call.

All totals are integer cents, so income - expense is exact.
"""

import datetime as dt
from typing import Iterable, Optional

from condo_ledger.models.ledger import (
    Movement,
    MovementFilter,
    MovementKind,
    PeriodFilter,
    ReportingPeriod,
    Statistics,
)
from condo_ledger.services.storage import LedgerStore
from condo_ledger.validation.validator import check_period


def filter_by_period(
    movements: Iterable[Movement],
    month: Optional[int] = None,
    year: Optional[int] = None,
) -> list[Movement]:
    """
    Keep movements in the given month and/or year.

    None means "any". Both given combine with AND.

    Raises:
        ValidationError: Month outside 1-12 or a non-positive year
    """
    problem = check_period(month, year)
    if problem is not None:
        problem.unwrap()

    return [
        m for m in movements
        if (month is None or m.date.month == month)
        and (year is None or m.date.year == year)
    ]


def _apply_period(
    movements: Iterable[Movement],
    period: Optional[PeriodFilter],
) -> list[Movement]:
    if period is None:
        return list(movements)
    return filter_by_period(movements, period.month, period.year)


def sum_by_kind(
    movements: Iterable[Movement],
    kind: MovementKind,
    period: Optional[PeriodFilter] = None,
) -> int:
    """Total cents of one kind within the period. Empty input sums to 0."""
    return sum(
        m.amount_minor_units
        for m in _apply_period(movements, period)
        if m.kind == kind
    )


def balance(
    movements: Iterable[Movement],
    period: Optional[PeriodFilter] = None,
) -> int:
    """Income minus expense, in cents."""
    selected = _apply_period(movements, period)
    return (
        sum_by_kind(selected, MovementKind.INCOME)
        - sum_by_kind(selected, MovementKind.EXPENSE)
    )


def compute_statistics(
    movements: Iterable[Movement],
    period: Optional[PeriodFilter] = None,
) -> Statistics:
    """Income, expense, balance and count for the period."""
    selected = _apply_period(movements, period)
    income = sum_by_kind(selected, MovementKind.INCOME)
    expense = sum_by_kind(selected, MovementKind.EXPENSE)
    return Statistics(
        income=income,
        expense=expense,
        balance=income - expense,
        count=len(selected),
    )


def select_movements(
    movements: Iterable[Movement],
    movement_filter: Optional[MovementFilter] = None,
) -> list[Movement]:
    """
    Apply period, kind and exact category filters, newest first.

    Movements on the same day keep their stored order.
    """
    movement_filter = movement_filter or MovementFilter()

    selected = _apply_period(movements, movement_filter)
    if movement_filter.kind is not None:
        selected = [m for m in selected if m.kind == movement_filter.kind]
    if movement_filter.category:
        selected = [m for m in selected if m.category == movement_filter.category]

    # sorted() is stable with reverse=True, so ties keep their order
    return sorted(selected, key=lambda m: m.date, reverse=True)


def reporting_periods(movements: Iterable[Movement]) -> list[ReportingPeriod]:
    """Distinct (year, month) pairs with movements, newest first."""
    pairs = {m.period for m in movements}
    return [
        ReportingPeriod(year=year, month=month, label=f"{month:02d}/{year}")
        for year, month in sorted(pairs, reverse=True)
    ]


def current_period(today: Optional[dt.date] = None) -> PeriodFilter:
    """Filter for the month containing `today` (default: now)."""
    today = today or dt.date.today()
    return PeriodFilter(month=today.month, year=today.year)


class ReportQueries:
    """
    Reports keyed by condominium id.

    Each method performs one read. An unknown condominium behaves like one
    with no movements.
    """

    def __init__(self, store: LedgerStore):
        self._store = store

    def statistics(
        self,
        condominium_id: int,
        period: Optional[PeriodFilter] = None,
    ) -> Statistics:
        return compute_statistics(self._store.list_movements(condominium_id), period)

    def filtered_movements(
        self,
        condominium_id: int,
        movement_filter: Optional[MovementFilter] = None,
    ) -> list[Movement]:
        return select_movements(
            self._store.list_movements(condominium_id),
            movement_filter,
        )

    def available_periods(self, condominium_id: int) -> list[ReportingPeriod]:
        return reporting_periods(self._store.list_movements(condominium_id))
