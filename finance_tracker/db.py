"""Utility helpers for SQLite persistence."""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Optional

from flask import current_app, g

from .config import PROJECT_ROOT

_DEFAULT_DB_PATH = PROJECT_ROOT / "finance_tracker.db"

SCHEMA = """CREATE TABLE IF NOT EXISTS users (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    email TEXT NOT NULL UNIQUE,
    password_hash TEXT NOT NULL,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS transactions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id INTEGER NOT NULL,
    description TEXT NOT NULL,
    amount TEXT NOT NULL,
    date TEXT NOT NULL,
    type TEXT NOT NULL,
    category TEXT,
    payment_method TEXT,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE CASCADE
);

CREATE INDEX IF NOT EXISTS ix_transactions_user_date ON transactions (user_id, date);
"""


def _casefold(value: Optional[str]) -> Optional[str]:
    return value.casefold() if value is not None else None


def connect(path: str | Path) -> sqlite3.Connection:
    """Open a connection with row access by name and the ``casefold`` SQL function."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    # SQLite's LIKE/lower() only fold ASCII; descriptions are often accented.
    conn.create_function("casefold", 1, _casefold, deterministic=True)
    return conn


def get_database_path() -> Path:
    db_path = current_app.config.get("DATABASE") if current_app else None
    if db_path:
        return Path(db_path)
    return _DEFAULT_DB_PATH


def get_db() -> sqlite3.Connection:
    if "db" not in g:
        g.db = connect(get_database_path())
    return g.db


def close_db(_: object | None = None) -> None:
    db = g.pop("db", None)
    if db is not None:
        db.close()


def init_schema(conn: sqlite3.Connection) -> None:
    conn.executescript(SCHEMA)
    conn.commit()


def init_db() -> None:
    init_schema(get_db())
