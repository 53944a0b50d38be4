from __future__ import annotations

from datetime import datetime
import logging
from typing import Optional, Protocol

from ...constants import MAX_CART_LINES
from ...errors import (
    DiscountNotApplicableError,
    InvalidLineItemError,
    LineItemNotFoundError,
    ProductNotFoundError,
)
from ...utils.validators import try_parse_decimal
from ..pricing.discounts import Discount, is_applicable
from ..pricing.money import add
from ..pricing.totals import LineItem, Totals, compute_totals

_log = logging.getLogger(__name__)


class CatalogProduct(Protocol):
    product_id: str
    name: str
    price: object
    category: str


class ProductCatalog(Protocol):
    """Read-only price/category source consulted when a line is first created."""

    def get(self, product_id: str) -> Optional[CatalogProduct]: ...


class Cart:
    """
    Pre-checkout basket for one session.

    Prices are captured into each LineItem when the line is created; later catalog
    changes never reach an open cart. Every mutation validates first and only then
    replaces the line list, so a rejected call leaves the cart unchanged.
    """

    def __init__(self, *, tax_enabled: bool = True):
        self._items: list[LineItem] = []
        self.discount: Optional[Discount] = None
        self.tax_enabled = tax_enabled

    # ---- read ------------------------------------------------------------

    @property
    def items(self) -> tuple[LineItem, ...]:
        return tuple(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def is_empty(self) -> bool:
        return not self._items

    @property
    def item_count(self) -> int:
        return sum(it.quantity for it in self._items)

    def _index(self, product_id: str) -> int:
        for i, it in enumerate(self._items):
            if it.product_id == product_id:
                return i
        return -1

    def totals(self, tax_rate, now: datetime, *, is_return: bool = False) -> Totals:
        return compute_totals(self._items, self.discount, self.tax_enabled, is_return, tax_rate, now)

    # ---- lines -------------------------------------------------------------

    def add_item(self, line: LineItem) -> LineItem:
        """
        Add a line; an existing line for the same product absorbs the quantity
        and keeps the price it was first captured at.
        """
        idx = self._index(line.product_id)
        if idx >= 0:
            merged = self._items[idx].with_quantity(self._items[idx].quantity + line.quantity)
            self._items[idx] = merged
            return merged
        if len(self._items) >= MAX_CART_LINES:
            raise InvalidLineItemError(f"A cart cannot hold more than {MAX_CART_LINES} lines.")
        self._items.append(line)
        return line

    def add_product(self, product: CatalogProduct, quantity: int = 1) -> LineItem:
        line = LineItem(
            product_id=str(product.product_id),
            unit_price=product.price,
            quantity=quantity,
            category=product.category,
            name=product.name,
        )
        return self.add_item(line)

    def add_from_catalog(self, catalog: ProductCatalog, product_id: str, quantity: int = 1) -> LineItem:
        product = catalog.get(product_id)
        if product is None:
            raise ProductNotFoundError(f"Product not found: {product_id}")
        return self.add_product(product, quantity)

    def update_quantity(self, product_id: str, quantity: int) -> Optional[LineItem]:
        """quantity <= 0 removes the line. Returns the new line, or None if removed."""
        idx = self._index(product_id)
        if idx < 0:
            raise LineItemNotFoundError(f"No line for product {product_id} in the cart.")
        ok, q = try_parse_decimal(quantity)
        if ok and q <= 0:
            del self._items[idx]
            return None
        updated = self._items[idx].with_quantity(quantity)
        self._items[idx] = updated
        return updated

    def remove_item(self, product_id: str) -> LineItem:
        idx = self._index(product_id)
        if idx < 0:
            raise LineItemNotFoundError(f"No line for product {product_id} in the cart.")
        return self._items.pop(idx)

    def clear(self) -> None:
        """Empty the cart and drop any discount; the tax toggle is kept."""
        self._items = []
        self.discount = None

    def reset(self) -> None:
        self.clear()
        self.tax_enabled = True

    # ---- discount / tax ----------------------------------------------------

    def apply_discount(self, discount: Discount, now: datetime) -> None:
        """
        Attach `discount`, rejecting it up front if it would not apply to the
        current subtotal at `now`.
        """
        subtotal = add(*(it.line_total for it in self._items))
        if not is_applicable(subtotal, discount, now):
            _log.info("Rejected discount %r for subtotal %s", discount.description, subtotal)
            raise DiscountNotApplicableError(f"Discount '{discount.description}' does not apply to this order.")
        self.discount = discount

    def remove_discount(self) -> None:
        self.discount = None

    def toggle_tax(self) -> bool:
        self.tax_enabled = not self.tax_enabled
        return self.tax_enabled
