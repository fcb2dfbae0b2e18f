"""Reporting utilities.

Formats month summaries into display strings, chart series and
JSON/CSV-serializable structures.
"""

from __future__ import annotations

import csv
import json
from decimal import ROUND_HALF_UP, Decimal
from pathlib import Path
from typing import Dict, IO, List, Sequence

from .aggregation import MonthSummary
from .models import CENTS, Transaction


def _two_digits(amount: Decimal) -> Decimal:
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def amount_str(amount: Decimal) -> str:
    return f"{_two_digits(amount):.2f}"


def format_currency(amount: Decimal, symbol: str = "R$") -> str:
    """Format like ``R$ 1.234,56``; negatives get a leading minus."""
    value = _two_digits(amount)
    sign = "-" if value < 0 else ""
    grouped = f"{abs(value):,.2f}"  # 1,234.56
    grouped = grouped.replace(",", "_").replace(".", ",").replace("_", ".")
    return f"{sign}{symbol} {grouped}"


def balance_tone(balance: Decimal) -> str:
    if balance > 0:
        return "positive"
    if balance < 0:
        return "negative"
    return "neutral"


def summary_to_dict(summary: MonthSummary) -> Dict:
    totals = summary.totals
    return {
        "period": {
            "start": summary.period.start.isoformat(),
            "end": summary.period.end.isoformat(),
        },
        "totals": {
            "revenue": amount_str(totals.total_revenue),
            "expenses": amount_str(totals.total_expenses),
            "balance": amount_str(totals.balance),
        },
        "category_breakdown": {cat: amount_str(v) for cat, v in summary.category_breakdown.items()},
        "daily": [
            {
                "day": entry.day.isoformat(),
                "revenue": amount_str(entry.revenue),
                "expense": amount_str(entry.expense),
            }
            for entry in summary.daily_series
        ],
        "transaction_count": summary.transaction_count,
    }


def chart_data(summary: MonthSummary) -> Dict[str, List]:
    return {
        "labels": [f"{entry.day.day:02d}" for entry in summary.daily_series],
        "revenue": [float(_two_digits(entry.revenue)) for entry in summary.daily_series],
        "expense": [float(_two_digits(entry.expense)) for entry in summary.daily_series],
    }


def transaction_to_dict(txn: Transaction) -> Dict:
    return {
        "id": txn.id,
        "description": txn.description,
        "amount": amount_str(txn.amount),
        "date": txn.date,
        "type": txn.type,
        "category": txn.category,
        "payment_method": txn.payment_method,
        "created_at": txn.created_at,
    }


def transactions_to_list(txns: Sequence[Transaction]) -> List[Dict]:
    return [transaction_to_dict(t) for t in txns]


def format_text_report(summary: MonthSummary, symbol: str = "R$") -> str:
    lines: List[str] = []
    t = summary.totals
    start = summary.period.start
    lines.append(f"=== Month Summary {start.year:04d}-{start.month:02d} ===")
    lines.append(f"Revenue:  {format_currency(t.total_revenue, symbol)}")
    lines.append(f"Expenses: {format_currency(t.total_expenses, symbol)}")
    lines.append(f"Balance:  {format_currency(t.balance, symbol)}")
    lines.append("")

    lines.append("-- Expenses by Category --")
    for cat, amt in summary.category_breakdown.items():
        lines.append(f"{cat:20} {format_currency(amt, symbol)}")
    lines.append("")

    lines.append("-- Days with Activity --")
    for entry in summary.daily_series:
        if entry.revenue or entry.expense:
            lines.append(
                f"{entry.day.isoformat()} | Rev {format_currency(entry.revenue, symbol)}"
                f"  Exp {format_currency(entry.expense, symbol)}"
            )
    return "\n".join(lines)


def save_json(data: Dict, path: str | Path) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    with p.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


def _ensure_text_writer(target: str | Path | IO[str]):
    if hasattr(target, "write"):
        return target, None
    path = Path(target)
    path.parent.mkdir(parents=True, exist_ok=True)
    handle = path.open("w", newline="", encoding="utf-8")
    return handle, handle


def export_summary_csv(summary: MonthSummary, path: str | Path | IO[str]) -> None:
    rows: List[List[str]] = [["Section", "Item", "Metric", "Value"]]

    totals = summary.totals
    rows.append(["Totals", "", "Revenue", amount_str(totals.total_revenue)])
    rows.append(["Totals", "", "Expenses", amount_str(totals.total_expenses)])
    rows.append(["Totals", "", "Balance", amount_str(totals.balance)])

    for cat, amt in summary.category_breakdown.items():
        rows.append(["Category Expenses", cat, "Amount", amount_str(amt)])

    for entry in summary.daily_series:
        day = entry.day.isoformat()
        rows.append(["Daily", day, "Revenue", amount_str(entry.revenue)])
        rows.append(["Daily", day, "Expense", amount_str(entry.expense)])

    rows.append(["Metadata", "Period Start", "", summary.period.start.isoformat()])
    rows.append(["Metadata", "Period End", "", summary.period.end.isoformat()])
    rows.append(["Metadata", "Transaction Count", "", str(summary.transaction_count)])

    writer_target, to_close = _ensure_text_writer(path)
    try:
        writer = csv.writer(writer_target, lineterminator="\n")
        writer.writerows(rows)
    finally:
        if to_close is not None:
            to_close.close()
