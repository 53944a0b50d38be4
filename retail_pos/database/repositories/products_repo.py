# retail_pos/database/repositories/products_repo.py
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
import sqlite3

from ...constants import DEFAULT_CATEGORY
from ...errors import DomainError
from ...utils.validators import non_empty, try_parse_decimal


@dataclass
class Product:
    product_id: str
    name: str
    price: Decimal
    category: str = DEFAULT_CATEGORY
    barcode: str | None = None
    stock: int | None = None
    quick_add: bool = False
    is_active: bool = True


_COLUMNS = "product_id, name, price, category, barcode, stock, quick_add, is_active"


def _row_to_product(r: sqlite3.Row) -> Product:
    return Product(
        product_id=r["product_id"],
        name=r["name"],
        price=Decimal(str(r["price"])),
        category=r["category"] or DEFAULT_CATEGORY,
        barcode=r["barcode"],
        stock=r["stock"],
        quick_add=bool(r["quick_add"]),
        is_active=bool(r["is_active"]),
    )


class ProductsRepo:
    """
    Product catalog. Read side is what carts consult (get / find_by_barcode);
    write side keeps the catalog itself maintainable from scripts and tests.
    """

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn
        # Use Row for named access
        self.conn.row_factory = sqlite3.Row

    # ---- Internal helpers -------------------------------------------------

    @staticmethod
    def _validate(p: Product) -> Product:
        if not non_empty(p.product_id):
            raise DomainError("Product id cannot be empty.")
        if not non_empty(p.name):
            raise DomainError("Name cannot be empty.")
        ok, price = try_parse_decimal(p.price)
        if not ok or price < 0:
            raise DomainError("Price must be a non-negative number.")
        if p.stock is not None and int(p.stock) < 0:
            raise DomainError("Stock cannot be negative.")
        return Product(
            product_id=p.product_id.strip(),
            name=p.name.strip(),
            price=price,
            category=(p.category or "").strip() or DEFAULT_CATEGORY,
            barcode=(p.barcode or "").strip() or None,
            stock=None if p.stock is None else int(p.stock),
            quick_add=bool(p.quick_add),
            is_active=bool(p.is_active),
        )

    # ---- Queries ----------------------------------------------------------

    def list_products(self, active_only: bool = True) -> list[Product]:
        sql = f"SELECT {_COLUMNS} FROM products"
        if active_only:
            sql += " WHERE is_active = 1"
        sql += " ORDER BY category, name"
        return [_row_to_product(r) for r in self.conn.execute(sql).fetchall()]

    def list_quick_add(self) -> list[Product]:
        rows = self.conn.execute(
            f"SELECT {_COLUMNS} FROM products WHERE quick_add = 1 AND is_active = 1 ORDER BY name"
        ).fetchall()
        return [_row_to_product(r) for r in rows]

    def get(self, product_id: str) -> Product | None:
        r = self.conn.execute(
            f"SELECT {_COLUMNS} FROM products WHERE product_id=?",
            (product_id,),
        ).fetchone()
        return _row_to_product(r) if r else None

    def find_by_barcode(self, barcode: str) -> Product | None:
        code = (barcode or "").strip().upper()
        if not code:
            return None
        r = self.conn.execute(
            f"SELECT {_COLUMNS} FROM products WHERE UPPER(barcode)=? AND is_active = 1",
            (code,),
        ).fetchone()
        return _row_to_product(r) if r else None

    def search(self, term: str, active_only: bool = True) -> list[Product]:
        """
        Matches using LIKE on product_id, name, category and barcode.
        """
        pattern = f"%{(term or '').strip()}%"
        sql = (
            f"SELECT {_COLUMNS} FROM products "
            "WHERE (product_id LIKE ? OR name LIKE ? OR category LIKE ? OR barcode LIKE ?)"
        )
        if active_only:
            sql += " AND is_active = 1"
        sql += " ORDER BY name"
        rows = self.conn.execute(sql, (pattern, pattern, pattern, pattern)).fetchall()
        return [_row_to_product(r) for r in rows]

    # ---- Mutations --------------------------------------------------------

    def upsert(self, product: Product) -> Product:
        p = self._validate(product)
        with self.conn:
            self.conn.execute(
                f"""
                INSERT INTO products({_COLUMNS}) VALUES (?,?,?,?,?,?,?,?)
                ON CONFLICT(product_id) DO UPDATE SET
                    name=excluded.name,
                    price=excluded.price,
                    category=excluded.category,
                    barcode=excluded.barcode,
                    stock=excluded.stock,
                    quick_add=excluded.quick_add,
                    is_active=excluded.is_active
                """,
                (
                    p.product_id,
                    p.name,
                    str(p.price),
                    p.category,
                    p.barcode,
                    p.stock,
                    int(p.quick_add),
                    int(p.is_active),
                ),
            )
        return p

    def deactivate(self, product_id: str) -> None:
        """Soft-delete; historical transaction lines keep their captured name/price."""
        with self.conn:
            self.conn.execute("UPDATE products SET is_active = 0 WHERE product_id=?", (product_id,))

    def delete(self, product_id: str) -> None:
        with self.conn:
            self.conn.execute("DELETE FROM products WHERE product_id=?", (product_id,))
