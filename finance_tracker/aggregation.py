"""Month-to-date aggregation.

Functions that derive totals, the expense breakdown per category and the
dense per-day series from a list of transactions already restricted to a
period. Sums are exact ``Decimal``; rounding happens only when presenting.
"""

from __future__ import annotations

import calendar
import datetime as dt
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Iterable, Iterator, List, Sequence

from .errors import DataIntegrityError
from .models import EXPENSE_TYPES, OTHER_CATEGORY, Transaction, TransactionType

ZERO = Decimal("0.00")

REVENUE = "revenue"
EXPENSE = "expense"


@dataclass(frozen=True)
class Period:
    start: dt.date
    end: dt.date

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ValueError(f"Period ends ({self.end}) before it starts ({self.start})")

    def __len__(self) -> int:
        return (self.end - self.start).days + 1

    def days(self) -> Iterator[dt.date]:
        for offset in range(len(self)):
            yield self.start + dt.timedelta(days=offset)

    def contains(self, txn: Transaction) -> bool:
        # Canonical YYYY-MM-DD strings order like the dates they name.
        return self.start.isoformat() <= txn.date <= self.end.isoformat()


def month_period(today: dt.date | None = None) -> Period:
    today = today or dt.date.today()
    last_day = calendar.monthrange(today.year, today.month)[1]
    return Period(dt.date(today.year, today.month, 1), dt.date(today.year, today.month, last_day))


def parse_month(value: str) -> Period:
    """``YYYY-MM`` to the matching calendar month period."""
    try:
        year_str, month_str = value.strip().split("-")
        first = dt.date(int(year_str), int(month_str), 1)
    except ValueError as exc:
        raise ValueError(f"Invalid month: {value!r} (expected YYYY-MM)") from exc
    return month_period(first)


def classify(txn: Transaction) -> str:
    """Return ``"revenue"`` or ``"expense"`` for a transaction.

    Matching is exact against the closed type set; anything else is a data
    integrity problem and is raised rather than guessed.
    """
    if txn.type == TransactionType.REVENUE.value:
        return REVENUE
    if txn.type in EXPENSE_TYPES:
        return EXPENSE
    raise DataIntegrityError(f"Transaction {txn.id} has unknown type {txn.type!r}")


@dataclass(frozen=True)
class Totals:
    total_revenue: Decimal = ZERO
    total_expenses: Decimal = ZERO

    @property
    def balance(self) -> Decimal:
        return self.total_revenue - self.total_expenses


@dataclass(frozen=True)
class DailyEntry:
    day: dt.date
    revenue: Decimal = ZERO
    expense: Decimal = ZERO


@dataclass(frozen=True)
class MonthSummary:
    period: Period
    totals: Totals
    category_breakdown: Dict[str, Decimal] = field(default_factory=dict)
    daily_series: List[DailyEntry] = field(default_factory=list)
    transaction_count: int = 0

    @property
    def balance(self) -> Decimal:
        return self.totals.balance


def summarize(txns: Iterable[Transaction]) -> Totals:
    revenue = ZERO
    expense = ZERO
    for t in txns:
        if classify(t) == REVENUE:
            revenue += t.amount
        else:
            expense += t.amount
    return Totals(total_revenue=revenue, total_expenses=expense)


def category_breakdown(txns: Iterable[Transaction]) -> Dict[str, Decimal]:
    """Expense sums keyed by category, in order of first occurrence."""
    totals: Dict[str, Decimal] = {}
    for t in txns:
        if classify(t) != EXPENSE:
            continue
        cat = t.category or OTHER_CATEGORY
        totals[cat] = totals.get(cat, ZERO) + t.amount
    return totals


def daily_series(txns: Iterable[Transaction], period: Period) -> List[DailyEntry]:
    buckets: Dict[str, List[Decimal]] = {day.isoformat(): [ZERO, ZERO] for day in period.days()}
    for t in txns:
        kind = classify(t)
        bucket = buckets.get(t.date)
        if bucket is None:
            continue
        if kind == REVENUE:
            bucket[0] += t.amount
        else:
            bucket[1] += t.amount
    return [
        DailyEntry(day=day, revenue=buckets[day.isoformat()][0], expense=buckets[day.isoformat()][1])
        for day in period.days()
    ]


def build_month_summary(txns: Sequence[Transaction], period: Period) -> MonthSummary:
    in_period = [t for t in txns if period.contains(t)]
    return MonthSummary(
        period=period,
        totals=summarize(in_period),
        category_breakdown=category_breakdown(in_period),
        daily_series=daily_series(in_period, period),
        transaction_count=len(in_period),
    )
