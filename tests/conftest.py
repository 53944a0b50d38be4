# retail_pos/tests/conftest.py
# ---------------------------------------------------------------------
# Ground rules:
# - pytest-qt owns QApplication (use qapp/qtbot fixtures)
# - Every test gets its own in-memory SQLite DB with schema + starter catalog
# - conn.row_factory = sqlite3.Row, PRAGMA foreign_keys=ON (via get_connection)
# - Time is fixed: tests never read the wall clock
# ---------------------------------------------------------------------

from __future__ import annotations

import os

# Headless test runs: Qt needs a platform plugin that works without a display.
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from retail_pos.config import Settings
from retail_pos.database import get_connection
from retail_pos.database.repositories import ProductsRepo, TransactionsRepo
from retail_pos.modules.pricing import Discount, LineItem, compute_totals
from retail_pos.modules.transactions.transaction import Transaction

FIXED_NOW = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)
RATE = Decimal("0.13")


# ---------- Qt: let pytest-qt own the app ----------
@pytest.fixture(scope="session")
def app(qapp):  # alias to match code that expects an `app` fixture
    return qapp


# ---------- Time ----------
@pytest.fixture()
def now() -> datetime:
    return FIXED_NOW


@pytest.fixture()
def clock():
    return lambda: FIXED_NOW


# ---------- Config ----------
@pytest.fixture()
def settings() -> Settings:
    return Settings(tax_rate=RATE, db_path=":memory:")


# ---------- Database ----------
@pytest.fixture()
def conn():
    """Fresh in-memory database per test; nothing leaks between tests."""
    con = get_connection(":memory:")
    try:
        yield con
    finally:
        con.close()


@pytest.fixture()
def products_repo(conn) -> ProductsRepo:
    return ProductsRepo(conn)


@pytest.fixture()
def tx_repo(conn) -> TransactionsRepo:
    return TransactionsRepo(conn)


# ---------- Builders ----------
def make_transaction(
    tx_id: str = "TX20250115-0001",
    items=None,
    *,
    discount: Discount | None = None,
    tax_enabled: bool = True,
    is_return: bool = False,
    payment_method: str = "card",
    status: str = "completed",
    timestamp: datetime = FIXED_NOW,
    version: int = 1,
) -> Transaction:
    """A Transaction whose totals come from the engine, as checkout would build it."""
    if items is None:
        items = [LineItem("P-COFFEE", Decimal("2.50"), 3, "Beverages", "Coffee (Medium)")]
    totals = compute_totals(items, discount, tax_enabled, is_return, RATE, timestamp)
    return Transaction(
        id=tx_id,
        items=tuple(items),
        totals=totals,
        timestamp=timestamp,
        payment_method=payment_method,
        is_return=is_return,
        status=status,
        discount=discount,
        tax_enabled=tax_enabled,
        tax_rate=RATE,
        version=version,
    )


@pytest.fixture()
def tx_factory():
    return make_transaction


class MemoryStore:
    """Dict-backed TransactionStore double; records every save call."""

    def __init__(self, *transactions: Transaction):
        self.rows = {t.id: t for t in transactions}
        self.saved: list[Transaction] = []

    def save(self, transaction: Transaction) -> None:
        self.saved.append(transaction)
        self.rows[transaction.id] = transaction

    def load_recent(self, limit: int = 50):
        return sorted(self.rows.values(), key=lambda t: t.timestamp, reverse=True)[:limit]

    def load_by_id(self, transaction_id: str):
        return self.rows.get(transaction_id)

    def list_between(self, start, end):
        return [t for t in self.load_recent(len(self.rows)) if start <= t.timestamp <= end]


class FailingStore(MemoryStore):
    """Raises PersistenceError for the next `failures` saves, then behaves normally."""

    def __init__(self, *transactions: Transaction, failures: int = 1):
        super().__init__(*transactions)
        self.failures = failures
        self.attempts = 0

    def save(self, transaction: Transaction) -> None:
        from retail_pos.errors import PersistenceError

        self.attempts += 1
        if self.failures > 0:
            self.failures -= 1
            raise PersistenceError("disk I/O error")
        super().save(transaction)


@pytest.fixture()
def memory_store():
    return MemoryStore()
