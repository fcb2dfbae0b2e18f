"""Domain records for the Finance Tracker.

Transactions are read from the store into immutable ``Transaction`` values;
amounts are ``Decimal`` with exactly two fractional digits and dates are kept
as the canonical ``YYYY-MM-DD`` string the store holds.
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import FrozenSet, Optional

CENTS = Decimal("0.01")
OTHER_CATEGORY = "Other"


class TransactionType(str, Enum):
    REVENUE = "revenue"
    FIXED_EXPENSE = "fixed-expense"
    VARIABLE_EXPENSE = "variable-expense"

    @classmethod
    def values(cls) -> tuple:
        return tuple(t.value for t in cls)


EXPENSE_TYPES: FrozenSet[str] = frozenset(
    {TransactionType.FIXED_EXPENSE.value, TransactionType.VARIABLE_EXPENSE.value}
)


@dataclass(frozen=True)
class Transaction:
    id: str
    owner_id: str
    description: str
    amount: Decimal
    date: str  # YYYY-MM-DD
    type: str
    category: Optional[str] = None
    payment_method: Optional[str] = None
    created_at: Optional[str] = None

    @property
    def is_revenue(self) -> bool:
        return self.type == TransactionType.REVENUE.value

    @property
    def is_expense(self) -> bool:
        return self.type in EXPENSE_TYPES

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "Transaction":
        return cls(
            id=str(row["id"]),
            owner_id=str(row["user_id"]),
            description=row["description"],
            amount=Decimal(str(row["amount"])).quantize(CENTS),
            date=row["date"],
            type=row["type"],
            category=row["category"] or None,
            payment_method=row["payment_method"] or None,
            created_at=row["created_at"],
        )


@dataclass(frozen=True)
class TransactionInput:
    """Validated mutable fields of a transaction, ready for the store."""

    description: str
    amount: Decimal
    date: str
    type: str
    category: Optional[str] = None
    payment_method: Optional[str] = None
