from pathlib import Path
import logging
import sqlite3
import sys

_log = logging.getLogger(__name__)

SQL = r"""
PRAGMA foreign_keys = ON;

/* ======================== CATALOG ======================== */

CREATE TABLE IF NOT EXISTS products (
    product_id   TEXT PRIMARY KEY,
    name         TEXT NOT NULL,
    price        TEXT NOT NULL,              /* decimal string, e.g. '2.50' */
    category     TEXT NOT NULL DEFAULT 'Uncategorized',
    barcode      TEXT,
    stock        INTEGER CHECK (stock IS NULL OR stock >= 0),
    quick_add    INTEGER NOT NULL DEFAULT 0 CHECK (quick_add IN (0,1)),
    is_active    INTEGER NOT NULL DEFAULT 1 CHECK (is_active IN (0,1)),
    CHECK (CAST(price AS REAL) >= 0)
);
CREATE UNIQUE INDEX IF NOT EXISTS idx_products_barcode
ON products(barcode) WHERE barcode IS NOT NULL;
CREATE INDEX IF NOT EXISTS idx_products_category ON products(category);

/* ======================== TRANSACTIONS ======================== */

CREATE TABLE IF NOT EXISTS transactions (
    transaction_id   TEXT PRIMARY KEY,
    timestamp        TEXT NOT NULL,          /* ISO-8601, UTC offset included */
    subtotal         TEXT NOT NULL,
    discount_amount  TEXT NOT NULL DEFAULT '0.00',
    tax              TEXT NOT NULL,
    total            TEXT NOT NULL,          /* always the non-negative magnitude */
    tax_applied      INTEGER NOT NULL CHECK (tax_applied IN (0,1)),
    tax_rate         TEXT,                   /* rate the totals were computed with */
    discount_json    TEXT,                   /* Discount.to_dict() or NULL */
    payment_method   TEXT NOT NULL
                     CHECK (payment_method IN ('cash','card','digital','check','store_credit')),
    is_return        INTEGER NOT NULL DEFAULT 0 CHECK (is_return IN (0,1)),
    status           TEXT NOT NULL DEFAULT 'completed'
                     CHECK (status IN ('pending','completed','cancelled','refunded','partial_refund')),
    amount_tendered  TEXT,
    change_due       TEXT,
    currency         TEXT NOT NULL DEFAULT 'CAD',
    version          INTEGER NOT NULL DEFAULT 1 CHECK (version >= 1),
    CHECK (CAST(total AS REAL) >= 0)
);
CREATE INDEX IF NOT EXISTS idx_transactions_timestamp ON transactions(timestamp);

CREATE TABLE IF NOT EXISTS transaction_items (
    item_id          INTEGER PRIMARY KEY AUTOINCREMENT,
    transaction_id   TEXT NOT NULL,
    line_no          INTEGER NOT NULL,
    product_id       TEXT NOT NULL,
    product_name     TEXT NOT NULL DEFAULT '',
    price            TEXT NOT NULL,
    quantity         INTEGER NOT NULL CHECK (quantity >= 1),
    category         TEXT NOT NULL DEFAULT 'Uncategorized',
    FOREIGN KEY (transaction_id) REFERENCES transactions(transaction_id) ON DELETE CASCADE,
    UNIQUE (transaction_id, line_no)
);
CREATE INDEX IF NOT EXISTS idx_transaction_items_tx ON transaction_items(transaction_id);
"""


def apply_schema(conn: sqlite3.Connection) -> None:
    """Apply the (idempotent) schema on an open connection."""
    conn.executescript(SQL)
    _add_missing_columns(conn)


# Columns added after the first release; CREATE IF NOT EXISTS skips old tables.
_LATE_COLUMNS = (("transactions", "tax_rate", "TEXT"),)


def _add_missing_columns(conn: sqlite3.Connection) -> None:
    for table, column, decl in _LATE_COLUMNS:
        have = {r[1] for r in conn.execute(f"PRAGMA table_info({table})").fetchall()}
        if column not in have:
            conn.execute(f"ALTER TABLE {table} ADD COLUMN {column} {decl}")
            _log.info("Added column %s.%s", table, column)


def init_schema(db_path: Path | str = "pos.db") -> None:
    db_path = Path(db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    with sqlite3.connect(db_path) as conn:
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL;")
        apply_schema(conn)
        conn.commit()
    _log.info("Schema applied to %s", db_path)


if __name__ == "__main__":
    target = sys.argv[1] if len(sys.argv) > 1 else Path(__file__).resolve().parents[1] / "data" / "pos.db"
    init_schema(target)
