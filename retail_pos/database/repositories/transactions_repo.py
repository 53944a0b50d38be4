from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal
import json
import logging
import sqlite3
from typing import Iterable, Optional

from ...constants import MAX_RECENT_TRANSACTIONS
from ...errors import ConcurrentModificationError, PersistenceError, TransactionNotFoundError
from ...modules.pricing.discounts import Discount
from ...modules.pricing.totals import LineItem, Totals
from ...modules.transactions.transaction import Transaction
from ...utils.helpers import ensure_aware

_log = logging.getLogger(__name__)

_HEADER_COLUMNS = """
    transaction_id, timestamp, subtotal, discount_amount, tax, total, tax_applied,
    tax_rate, discount_json, payment_method, is_return, status, amount_tendered, change_due,
    currency, version
"""


def _ts_to_db(ts: datetime) -> str:
    # Stored in UTC so text ordering matches time ordering.
    return ensure_aware(ts).astimezone(timezone.utc).isoformat()


def _dec_or_none(v) -> Optional[Decimal]:
    return None if v is None else Decimal(str(v))


def _str_or_none(v: Optional[Decimal]) -> Optional[str]:
    return None if v is None else str(v)


class TransactionsRepo:
    """
    sqlite-backed transaction store.

    Key behavior:
      - Money is stored as TEXT decimals, exactly as rounded by the totals engine.
      - `total` is the non-negative magnitude; `is_return` carries the sign.
      - Optimistic concurrency: version 1 is an INSERT; version N updates only the
        row currently at N-1. A mismatch raises ConcurrentModificationError.
      - Every sqlite3.Error is re-raised as PersistenceError with the transaction id
        and the operation attached. No retries here.
    """

    def __init__(self, conn: sqlite3.Connection):
        # ensure rows behave like dicts/tuples
        conn.row_factory = sqlite3.Row
        self.conn = conn

    # ---------------------------------------------------------------------
    # IDS
    # ---------------------------------------------------------------------
    def next_transaction_id(self, when: datetime | date) -> str:
        """
        TX + yyyymmdd + -NNNN, continuing the day's highest sequence.

        The sequence is compared as a number so it keeps counting past 9999
        (TX...-10000 sorts before TX...-9999 as text).
        """
        d = when.strftime("%Y%m%d")
        prefix = f"TX{d}-"
        row = self.conn.execute(
            """
            SELECT MAX(CAST(substr(transaction_id, ?) AS INTEGER)) AS m
            FROM transactions
            WHERE transaction_id LIKE ?
            """,
            (len(prefix) + 1, prefix + "%"),
        ).fetchone()
        last = int(row["m"]) if row and row["m"] is not None else 0
        return f"{prefix}{last+1:04d}"

    # ---------------------------------------------------------------------
    # READ
    # ---------------------------------------------------------------------
    def load_by_id(self, transaction_id: str) -> Transaction | None:
        try:
            hdr = self.conn.execute(
                f"SELECT {_HEADER_COLUMNS} FROM transactions WHERE transaction_id=?",
                (transaction_id,),
            ).fetchone()
            if hdr is None:
                return None
            return self._build(hdr, self._load_items(transaction_id))
        except sqlite3.Error as e:
            raise PersistenceError(
                f"Could not load transaction: {e}", transaction_id=transaction_id, operation="load_by_id"
            ) from e

    def load_recent(self, limit: int = MAX_RECENT_TRANSACTIONS) -> list[Transaction]:
        sql = f"""
        SELECT {_HEADER_COLUMNS} FROM transactions
        ORDER BY timestamp DESC, transaction_id DESC
        LIMIT ?
        """
        return self._load_many(sql, (int(limit),), operation="load_recent")

    def list_between(self, start: datetime, end: datetime) -> list[Transaction]:
        """Transactions with start <= timestamp <= end, newest first."""
        sql = f"""
        SELECT {_HEADER_COLUMNS} FROM transactions
        WHERE timestamp >= ? AND timestamp <= ?
        ORDER BY timestamp DESC, transaction_id DESC
        """
        return self._load_many(sql, (_ts_to_db(start), _ts_to_db(end)), operation="list_between")

    def _load_many(self, sql: str, params: tuple, *, operation: str) -> list[Transaction]:
        try:
            headers = self.conn.execute(sql, params).fetchall()
            return [self._build(h, self._load_items(h["transaction_id"])) for h in headers]
        except sqlite3.Error as e:
            raise PersistenceError(f"Could not load transactions: {e}", operation=operation) from e

    def _load_items(self, transaction_id: str) -> list[LineItem]:
        rows = self.conn.execute(
            """
            SELECT product_id, product_name, price, quantity, category
            FROM transaction_items
            WHERE transaction_id = ?
            ORDER BY line_no
            """,
            (transaction_id,),
        ).fetchall()
        return [
            LineItem(
                product_id=r["product_id"],
                unit_price=Decimal(str(r["price"])),
                quantity=int(r["quantity"]),
                category=r["category"],
                name=r["product_name"],
            )
            for r in rows
        ]

    @staticmethod
    def _build(h: sqlite3.Row, items: list[LineItem]) -> Transaction:
        discount = Discount.from_dict(json.loads(h["discount_json"])) if h["discount_json"] else None
        discount_amount = Decimal(str(h["discount_amount"]))
        totals = Totals(
            subtotal=Decimal(str(h["subtotal"])),
            discount_amount=discount_amount,
            tax_applied=bool(h["tax_applied"]),
            tax=Decimal(str(h["tax"])),
            total=Decimal(str(h["total"])),
            is_return=bool(h["is_return"]),
            discount_active=discount is not None and discount_amount > 0,
        )
        return Transaction(
            id=h["transaction_id"],
            items=tuple(items),
            totals=totals,
            timestamp=datetime.fromisoformat(h["timestamp"]),
            payment_method=h["payment_method"],
            is_return=bool(h["is_return"]),
            status=h["status"],
            discount=discount,
            tax_enabled=bool(h["tax_applied"]),
            tax_rate=_dec_or_none(h["tax_rate"]),
            amount_tendered=_dec_or_none(h["amount_tendered"]),
            change_due=_dec_or_none(h["change_due"]),
            currency=h["currency"],
            version=int(h["version"]),
        )

    # ---------------------------------------------------------------------
    # WRITE
    # ---------------------------------------------------------------------
    def save(self, tx: Transaction) -> None:
        """
        Insert (version 1) or update (version > 1) a transaction and rebuild its lines.
        """
        op = "insert" if tx.version <= 1 else "update"
        try:
            with self.conn:
                if op == "insert":
                    self._insert_header(tx)
                else:
                    self._update_header(tx)
                self.conn.execute("DELETE FROM transaction_items WHERE transaction_id=?", (tx.id,))
                self._insert_items(tx.id, tx.items)
        except PersistenceError:
            raise
        except sqlite3.IntegrityError as e:
            if op == "insert" and self._exists(tx.id):
                raise ConcurrentModificationError(
                    "Transaction id already exists.", transaction_id=tx.id, operation=op
                ) from e
            _log.exception("Integrity error saving transaction %s", tx.id)
            raise PersistenceError(f"Could not save transaction: {e}", transaction_id=tx.id, operation=op) from e
        except sqlite3.Error as e:
            _log.exception("Database error saving transaction %s", tx.id)
            raise PersistenceError(f"Could not save transaction: {e}", transaction_id=tx.id, operation=op) from e
        _log.info("Saved transaction %s (version %s, %s)", tx.id, tx.version, op)

    def delete(self, transaction_id: str) -> None:
        try:
            with self.conn:
                self.conn.execute("DELETE FROM transaction_items WHERE transaction_id=?", (transaction_id,))
                self.conn.execute("DELETE FROM transactions WHERE transaction_id=?", (transaction_id,))
        except sqlite3.Error as e:
            raise PersistenceError(
                f"Could not delete transaction: {e}", transaction_id=transaction_id, operation="delete"
            ) from e

    def _exists(self, transaction_id: str) -> bool:
        return self.conn.execute(
            "SELECT 1 FROM transactions WHERE transaction_id=?", (transaction_id,)
        ).fetchone() is not None

    @staticmethod
    def _header_values(tx: Transaction) -> tuple:
        t = tx.totals
        return (
            _ts_to_db(tx.timestamp),
            str(t.subtotal),
            str(t.discount_amount),
            str(t.tax),
            str(t.total),
            int(t.tax_applied),
            _str_or_none(tx.tax_rate),
            json.dumps(tx.discount.to_dict()) if tx.discount else None,
            tx.payment_method,
            int(tx.is_return),
            tx.status,
            _str_or_none(tx.amount_tendered),
            _str_or_none(tx.change_due),
            tx.currency,
            tx.version,
        )

    def _insert_header(self, tx: Transaction) -> None:
        self.conn.execute(
            """
            INSERT INTO transactions (
                transaction_id, timestamp, subtotal, discount_amount, tax, total,
                tax_applied, tax_rate, discount_json, payment_method, is_return, status,
                amount_tendered, change_due, currency, version
            )
            VALUES (?,?,?,?,?,?,?,?,?,?,?,?,?,?,?,?)
            """,
            (tx.id, *self._header_values(tx)),
        )

    def _update_header(self, tx: Transaction) -> None:
        cur = self.conn.execute(
            """
            UPDATE transactions
               SET timestamp=?,
                   subtotal=?,
                   discount_amount=?,
                   tax=?,
                   total=?,
                   tax_applied=?,
                   tax_rate=?,
                   discount_json=?,
                   payment_method=?,
                   is_return=?,
                   status=?,
                   amount_tendered=?,
                   change_due=?,
                   currency=?,
                   version=?
             WHERE transaction_id=? AND version=?
            """,
            (*self._header_values(tx), tx.id, tx.version - 1),
        )
        if cur.rowcount == 0:
            if not self._exists(tx.id):
                raise TransactionNotFoundError("Transaction not found.", transaction_id=tx.id, operation="update")
            raise ConcurrentModificationError(
                "Transaction was changed by another session; reload and try again.",
                transaction_id=tx.id,
                operation="update",
            )

    def _insert_items(self, transaction_id: str, items: Iterable[LineItem]) -> None:
        self.conn.executemany(
            """
            INSERT INTO transaction_items (
                transaction_id, line_no, product_id, product_name, price, quantity, category
            ) VALUES (?,?,?,?,?,?,?)
            """,
            [
                (transaction_id, n, it.product_id, it.name, str(it.unit_price), it.quantity, it.category)
                for n, it in enumerate(items, start=1)
            ],
        )
