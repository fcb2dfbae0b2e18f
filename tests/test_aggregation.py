from __future__ import annotations

import datetime as dt
from decimal import Decimal

import pytest

from finance_tracker.aggregation import (
    Period,
    build_month_summary,
    category_breakdown,
    classify,
    daily_series,
    month_period,
    parse_month,
    summarize,
)
from finance_tracker.errors import DataIntegrityError
from finance_tracker.models import Transaction

JUNE = Period(dt.date(2024, 6, 1), dt.date(2024, 6, 30))


def _txn(n: int, type: str, amount: str, date: str, category=None) -> Transaction:
    return Transaction(
        id=str(n),
        owner_id="1",
        description=f"txn {n}",
        amount=Decimal(amount),
        date=date,
        type=type,
        category=category,
    )


@pytest.fixture
def scenario():
    return [
        _txn(1, "revenue", "1000.00", "2024-06-03"),
        _txn(2, "fixed-expense", "300.00", "2024-06-03", "Rent"),
        _txn(3, "variable-expense", "50.00", "2024-06-20"),
    ]


def test_month_scenario(scenario):
    summary = build_month_summary(scenario, JUNE)

    assert summary.totals.total_revenue == Decimal("1000.00")
    assert summary.totals.total_expenses == Decimal("350.00")
    assert summary.balance == Decimal("650.00")
    assert summary.category_breakdown == {"Rent": Decimal("300.00"), "Other": Decimal("50.00")}
    assert list(summary.category_breakdown) == ["Rent", "Other"]
    assert len(summary.daily_series) == 30

    by_day = {e.day.day: e for e in summary.daily_series}
    assert (by_day[3].revenue, by_day[3].expense) == (Decimal("1000.00"), Decimal("300.00"))
    assert (by_day[20].revenue, by_day[20].expense) == (Decimal("0"), Decimal("50.00"))
    for day, entry in by_day.items():
        if day not in (3, 20):
            assert entry.revenue == 0 and entry.expense == 0


def test_empty_input_is_dense_and_zero():
    summary = build_month_summary([], JUNE)
    assert summary.totals.total_revenue == 0
    assert summary.totals.total_expenses == 0
    assert summary.balance == 0
    assert summary.category_breakdown == {}
    assert len(summary.daily_series) == 30
    assert all(e.revenue == 0 and e.expense == 0 for e in summary.daily_series)
    assert summary.transaction_count == 0


def test_no_float_drift_on_repeated_cents():
    txns = [_txn(i, "revenue", "0.10", "2024-06-01") for i in range(10)]
    txns += [_txn(100 + i, "variable-expense", "0.20", "2024-06-02") for i in range(3)]
    totals = summarize(txns)
    assert totals.total_revenue == Decimal("1.00")
    assert totals.total_expenses == Decimal("0.60")
    assert totals.total_revenue - totals.total_expenses == totals.balance == Decimal("0.40")


def test_daily_and_category_sums_match_totals(scenario):
    summary = build_month_summary(scenario, JUNE)
    assert sum(e.revenue for e in summary.daily_series) == summary.totals.total_revenue
    assert sum(e.expense for e in summary.daily_series) == summary.totals.total_expenses
    assert sum(summary.category_breakdown.values()) == summary.totals.total_expenses


def test_boundary_days_are_included():
    txns = [
        _txn(1, "revenue", "10.00", "2024-06-01"),
        _txn(2, "fixed-expense", "4.00", "2024-06-30"),
        _txn(3, "revenue", "99.00", "2024-07-01"),
        _txn(4, "revenue", "99.00", "2024-05-31"),
    ]
    summary = build_month_summary(txns, JUNE)
    assert summary.transaction_count == 2
    assert summary.daily_series[0].revenue == Decimal("10.00")
    assert summary.daily_series[-1].expense == Decimal("4.00")
    assert summary.totals.total_revenue == Decimal("10.00")


def test_revenue_never_enters_category_breakdown():
    txns = [
        _txn(1, "revenue", "500.00", "2024-06-05", "Salary"),
        _txn(2, "variable-expense", "20.00", "2024-06-05", "food"),
        _txn(3, "variable-expense", "30.00", "2024-06-06", "Food"),
        _txn(4, "fixed-expense", "5.00", "2024-06-06", ""),
    ]
    assert category_breakdown(txns) == {
        "food": Decimal("20.00"),
        "Food": Decimal("30.00"),
        "Other": Decimal("5.00"),
    }


def test_negative_balance_is_not_clamped():
    totals = summarize([_txn(1, "fixed-expense", "80.00", "2024-06-01")])
    assert totals.balance == Decimal("-80.00")


def test_unknown_type_is_rejected():
    bad = _txn(1, "expense-typo", "10.00", "2024-06-01")
    with pytest.raises(DataIntegrityError):
        classify(bad)
    with pytest.raises(DataIntegrityError):
        build_month_summary([bad], JUNE)


def test_aggregation_is_idempotent(scenario):
    assert build_month_summary(scenario, JUNE) == build_month_summary(scenario, JUNE)


def test_daily_series_ignores_out_of_period_rows():
    series = daily_series([_txn(1, "revenue", "1.00", "2024-07-02")], JUNE)
    assert len(series) == 30
    assert all(e.revenue == 0 for e in series)


@pytest.mark.parametrize(
    "today, days",
    [
        (dt.date(2023, 2, 14), 28),
        (dt.date(2024, 2, 29), 29),
        (dt.date(2024, 4, 1), 30),
        (dt.date(2024, 12, 31), 31),
    ],
)
def test_month_period_length(today, days):
    period = month_period(today)
    assert period.start == today.replace(day=1)
    assert len(period) == days
    assert len(list(period.days())) == days


def test_parse_month():
    assert parse_month("2024-02") == Period(dt.date(2024, 2, 1), dt.date(2024, 2, 29))
    with pytest.raises(ValueError):
        parse_month("June")
