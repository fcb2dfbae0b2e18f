"""Owner-scoped writes and lookups against the SQLite store.

Every statement carries ``user_id`` in its WHERE clause, so rows belonging to
another owner are never touched or returned. Store errors surface as
``WriteFailed``; callers re-read after a failure instead of patching state.
"""

from __future__ import annotations

import sqlite3
from typing import Optional

from .errors import WriteFailed
from .logging_setup import get_logger
from .models import Transaction, TransactionInput

logger = get_logger("finance_tracker.store")

NOT_FOUND = "Transaction not found."


def _amount_text(data: TransactionInput) -> str:
    return f"{data.amount:.2f}"


def create_transaction(conn: sqlite3.Connection, owner_id: str, data: TransactionInput) -> str:
    try:
        cursor = conn.execute(
            """
            INSERT INTO transactions (user_id, description, amount, date, type, category, payment_method)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                owner_id,
                data.description,
                _amount_text(data),
                data.date,
                data.type,
                data.category,
                data.payment_method,
            ),
        )
        conn.commit()
    except sqlite3.Error as exc:
        conn.rollback()
        logger.error("Create failed for owner %s: %s", owner_id, exc)
        raise WriteFailed(str(exc)) from exc
    txn_id = str(cursor.lastrowid)
    logger.info("Created transaction %s for owner %s", txn_id, owner_id)
    return txn_id


def update_transaction(
    conn: sqlite3.Connection,
    owner_id: str,
    txn_id: str,
    data: TransactionInput,
) -> None:
    """Replace every mutable field; id, owner and creation time are kept."""
    try:
        cursor = conn.execute(
            """
            UPDATE transactions
            SET description = ?, amount = ?, date = ?, type = ?, category = ?, payment_method = ?
            WHERE id = ? AND user_id = ?
            """,
            (
                data.description,
                _amount_text(data),
                data.date,
                data.type,
                data.category,
                data.payment_method,
                txn_id,
                owner_id,
            ),
        )
        conn.commit()
    except sqlite3.Error as exc:
        conn.rollback()
        logger.error("Update of %s failed for owner %s: %s", txn_id, owner_id, exc)
        raise WriteFailed(str(exc)) from exc
    if cursor.rowcount == 0:
        logger.warning("Update of %s matched no row for owner %s", txn_id, owner_id)
        raise WriteFailed(NOT_FOUND)
    logger.info("Updated transaction %s for owner %s", txn_id, owner_id)


def delete_transaction(conn: sqlite3.Connection, owner_id: str, txn_id: str) -> None:
    try:
        cursor = conn.execute(
            "DELETE FROM transactions WHERE id = ? AND user_id = ?",
            (txn_id, owner_id),
        )
        conn.commit()
    except sqlite3.Error as exc:
        conn.rollback()
        logger.error("Delete of %s failed for owner %s: %s", txn_id, owner_id, exc)
        raise WriteFailed(str(exc)) from exc
    if cursor.rowcount == 0:
        logger.warning("Delete of %s matched no row for owner %s", txn_id, owner_id)
        raise WriteFailed(NOT_FOUND)
    logger.info("Deleted transaction %s for owner %s", txn_id, owner_id)


def get_transaction(conn: sqlite3.Connection, owner_id: str, txn_id: str) -> Optional[Transaction]:
    row = conn.execute(
        """
        SELECT id, user_id, description, amount, date, type, category, payment_method, created_at
        FROM transactions
        WHERE id = ? AND user_id = ?
        """,
        (txn_id, owner_id),
    ).fetchone()
    return Transaction.from_row(row) if row else None


def create_user(conn: sqlite3.Connection, email: str, password_hash: str) -> str:
    """Insert a user; ``sqlite3.IntegrityError`` propagates for duplicate emails."""
    cursor = conn.execute(
        "INSERT INTO users (email, password_hash) VALUES (?, ?)",
        (email, password_hash),
    )
    conn.commit()
    return str(cursor.lastrowid)


def find_user_by_email(conn: sqlite3.Connection, email: str) -> Optional[sqlite3.Row]:
    return conn.execute(
        "SELECT id, email, password_hash FROM users WHERE email = ?",
        (email,),
    ).fetchone()


def find_user_by_id(conn: sqlite3.Connection, user_id: str) -> Optional[sqlite3.Row]:
    return conn.execute(
        "SELECT id, email FROM users WHERE id = ?",
        (user_id,),
    ).fetchone()
