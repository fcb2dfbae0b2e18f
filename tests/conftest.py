"""Shared fixtures.

Every test gets its own SQLite file under ``tmp_path`` so no state leaks
between tests or into the project directory.
"""

from __future__ import annotations

from decimal import Decimal
from pathlib import Path
from typing import Callable

import pytest

from finance_tracker.config import AppConfig
from finance_tracker.db import connect, init_schema
from finance_tracker.models import TransactionInput
from finance_tracker.store import create_transaction, create_user
from finance_tracker.webapp import create_app


@pytest.fixture
def conn(tmp_path: Path):
    connection = connect(tmp_path / "store.db")
    init_schema(connection)
    yield connection
    connection.close()


@pytest.fixture
def owner(conn) -> str:
    return create_user(conn, "owner@example.com", "not-a-real-hash")


@pytest.fixture
def other_owner(conn) -> str:
    return create_user(conn, "other@example.com", "not-a-real-hash")


@pytest.fixture
def add_txn(conn) -> Callable[..., str]:
    def _add(owner_id: str, description: str, amount: str, date: str, type: str, category=None) -> str:
        data = TransactionInput(
            description=description,
            amount=Decimal(amount),
            date=date,
            type=type,
            category=category,
        )
        return create_transaction(conn, owner_id, data)

    return _add


@pytest.fixture
def app(tmp_path: Path):
    cfg = AppConfig(secret_key="test", database=str(tmp_path / "app.db"))
    return create_app(cfg, {"TESTING": True})


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def signup(client):
    def _signup(email: str = "user@example.com", password: str = "secret"):
        return client.post("/signup", data={"email": email, "password": password})

    return _signup


@pytest.fixture
def logged_in(client, signup):
    signup()
    return client
