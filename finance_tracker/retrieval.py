"""Filtered retrieval of an owner's transactions.

A ``TransactionFilters`` value describes what the user asked for; every change
produces a new value and a new read. ``build_query`` turns the filters into a
parameterised SELECT, appending one predicate per field that is set, and
``fetch_transactions`` runs it against the store.
"""

from __future__ import annotations

import datetime as dt
import itertools
import sqlite3
import threading
from dataclasses import dataclass, replace
from typing import Dict, List, Mapping, Optional, Tuple

from .errors import RetrievalFailed
from .logging_setup import get_logger
from .models import Transaction, TransactionType

logger = get_logger("finance_tracker.retrieval")

_SELECT = """
SELECT id, user_id, description, amount, date, type, category, payment_method, created_at
FROM transactions
"""


def _safe_iso_date(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    try:
        return dt.date.fromisoformat(value.strip()).isoformat()
    except ValueError:
        return None


@dataclass(frozen=True)
class TransactionFilters:
    date_from: Optional[str] = None
    date_to: Optional[str] = None
    description: str = ""
    type: str = ""

    @classmethod
    def from_mapping(cls, data: Mapping[str, str]) -> "TransactionFilters":
        """Build filters from request arguments.

        Unparseable dates and unknown types fall back to "unset"; ``all`` is
        the type selector's explicit "no restriction" value.
        """
        tx_type = (data.get("type") or "").strip()
        if tx_type not in TransactionType.values():
            tx_type = ""
        return cls(
            date_from=_safe_iso_date(data.get("date_from")),
            date_to=_safe_iso_date(data.get("date_to")),
            description=(data.get("description") or "").strip(),
            type=tx_type,
        )

    def cleared(self) -> "TransactionFilters":
        return replace(self, date_from=None, date_to=None, description="", type="")

    @property
    def is_empty(self) -> bool:
        return not (self.date_from or self.date_to or self.description or self.type)

    def as_query_args(self) -> Dict[str, str]:
        params: Dict[str, str] = {}
        if self.date_from:
            params["date_from"] = self.date_from
        if self.date_to:
            params["date_to"] = self.date_to
        if self.description:
            params["description"] = self.description
        if self.type:
            params["type"] = self.type
        return params


def build_query(owner_id: str, filters: TransactionFilters) -> Tuple[str, List[str]]:
    clauses = ["user_id = ?"]
    params: List[str] = [owner_id]
    if filters.date_from:
        clauses.append("date >= ?")
        params.append(filters.date_from)
    if filters.date_to:
        clauses.append("date <= ?")
        params.append(filters.date_to)
    if filters.description:
        clauses.append("instr(casefold(description), ?) > 0")
        params.append(filters.description.casefold())
    if filters.type:
        clauses.append("type = ?")
        params.append(filters.type)
    sql = _SELECT + "WHERE " + " AND ".join(clauses) + "\nORDER BY date DESC, id DESC"
    return sql, params


def fetch_transactions(
    conn: sqlite3.Connection,
    owner_id: Optional[str],
    filters: Optional[TransactionFilters] = None,
) -> List[Transaction]:
    """Return the owner's transactions matching every set filter, newest first.

    An absent owner yields an empty list without touching the store. Store
    errors are raised as ``RetrievalFailed``; nothing is retried here.
    """
    if not owner_id:
        return []
    filters = filters or TransactionFilters()
    sql, params = build_query(str(owner_id), filters)
    logger.debug("Fetching transactions for owner %s with %s", owner_id, filters)
    try:
        rows = conn.execute(sql, params).fetchall()
    except sqlite3.Error as exc:
        logger.error("Transaction read failed for owner %s: %s", owner_id, exc)
        raise RetrievalFailed(str(exc)) from exc
    return [Transaction.from_row(row) for row in rows]


def fetch_period(
    conn: sqlite3.Connection,
    owner_id: Optional[str],
    start: dt.date,
    end: dt.date,
) -> List[Transaction]:
    return fetch_transactions(
        conn,
        owner_id,
        TransactionFilters(date_from=start.isoformat(), date_to=end.isoformat()),
    )


class LatestResponseGate:
    """Tracks the newest read request of one stream so superseded responses can be dropped.

    Tokens are either issued by ``begin()`` or supplied by the caller (the
    JSON API takes the browser's ``request_id``). ``accept(token)`` is true
    only while no newer token has been seen. A caller whose own counter
    starts over passes ``restart=True`` to make its token the newest again.
    """

    def __init__(self) -> None:
        self._counter = itertools.count(1)
        self._latest = 0
        self._lock = threading.Lock()

    def begin(self, token: Optional[int] = None, restart: bool = False) -> int:
        with self._lock:
            if token is None:
                token = max(next(self._counter), self._latest + 1)
            self._latest = token if restart else max(self._latest, token)
            return token

    def accept(self, token: int) -> bool:
        with self._lock:
            return token == self._latest

    @property
    def latest(self) -> int:
        return self._latest
