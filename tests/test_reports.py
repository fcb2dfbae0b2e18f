from __future__ import annotations

import csv
import datetime as dt
import io
from decimal import Decimal

import pytest

from finance_tracker.aggregation import Period, build_month_summary
from finance_tracker.models import Transaction
from finance_tracker.reports import (
    balance_tone,
    chart_data,
    export_summary_csv,
    format_currency,
    format_text_report,
    summary_to_dict,
)

FEB = Period(dt.date(2024, 2, 1), dt.date(2024, 2, 29))


@pytest.fixture
def summary():
    txns = [
        Transaction("1", "1", "Salário", Decimal("1234.56"), "2024-02-01", "revenue"),
        Transaction("2", "1", "Aluguel", Decimal("1500.00"), "2024-02-29", "fixed-expense", "Rent"),
    ]
    return build_month_summary(txns, FEB)


@pytest.mark.parametrize(
    "amount, expected",
    [
        (Decimal("1234.56"), "R$ 1.234,56"),
        (Decimal("0"), "R$ 0,00"),
        (Decimal("-50"), "-R$ 50,00"),
        (Decimal("1000000.005"), "R$ 1.000.000,01"),
    ],
)
def test_format_currency(amount, expected):
    assert format_currency(amount) == expected


def test_format_currency_custom_symbol():
    assert format_currency(Decimal("3.5"), "US$") == "US$ 3,50"


def test_balance_tone():
    assert balance_tone(Decimal("1")) == "positive"
    assert balance_tone(Decimal("-0.01")) == "negative"
    assert balance_tone(Decimal("0.00")) == "neutral"


def test_summary_to_dict(summary):
    data = summary_to_dict(summary)
    assert data["totals"] == {"revenue": "1234.56", "expenses": "1500.00", "balance": "-265.44"}
    assert data["category_breakdown"] == {"Rent": "1500.00"}
    assert len(data["daily"]) == 29
    assert data["daily"][-1] == {"day": "2024-02-29", "revenue": "0.00", "expense": "1500.00"}
    assert data["period"] == {"start": "2024-02-01", "end": "2024-02-29"}


def test_chart_data_labels_every_day(summary):
    chart = chart_data(summary)
    assert chart["labels"][0] == "01"
    assert len(chart["labels"]) == len(chart["revenue"]) == len(chart["expense"]) == 29
    assert chart["revenue"][0] == 1234.56


def test_export_summary_csv(summary):
    buffer = io.StringIO()
    export_summary_csv(summary, buffer)
    rows = list(csv.reader(io.StringIO(buffer.getvalue())))
    assert rows[0] == ["Section", "Item", "Metric", "Value"]
    assert ["Totals", "", "Balance", "-265.44"] in rows
    assert ["Category Expenses", "Rent", "Amount", "1500.00"] in rows
    assert ["Metadata", "Transaction Count", "", "2"] in rows


def test_export_summary_csv_to_path(summary, tmp_path):
    target = tmp_path / "out" / "summary.csv"
    export_summary_csv(summary, target)
    assert target.read_text(encoding="utf-8").startswith("Section,Item,Metric,Value")


def test_text_report_lists_only_active_days(summary):
    text = format_text_report(summary)
    assert "=== Month Summary 2024-02 ===" in text
    assert "Balance:  -R$ 265,44" in text
    assert "2024-02-29" in text
    assert "2024-02-15" not in text
