"""
pricing/totals.py

The order totals engine. Every place that shows or stores a subtotal, discount,
tax or total (cart, checkout, transaction editor, table models, receipts, ledger)
goes through compute_totals().

Order of operations (fixed):
  1. subtotal            = Σ unit_price × quantity
  2. discount_amount     = discounts.evaluate(subtotal, discount, now)
  3. discounted_subtotal = max(0, subtotal - discount_amount)
  4. tax                 = tax.compute(discounted_subtotal, rate, tax_enabled)
  5. total               = discounted_subtotal + tax
  6. Totals.total is a magnitude; the return sign is applied once, by signed_total.
  7. subtotal, discount_amount and tax are rounded once each, from full-precision
     values. total is assembled from those rounded parts so a printed receipt
     always adds up.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional

from ...constants import DEFAULT_CATEGORY, MAX_LINE_QUANTITY
from ...errors import EmptyCartError, InvalidLineItemError
from ...utils.validators import is_whole_number, non_empty, try_parse_decimal
from . import tax as tax_calc
from .discounts import Discount, evaluate, is_applicable
from .money import add, multiply_by_scalar, round_money, subtract_clamped

__all__ = [
    "LineItem",
    "Totals",
    "compute_totals",
    "signed_total",
    "ensure_not_empty",
]


@dataclass(frozen=True)
class LineItem:
    product_id: str
    unit_price: Decimal
    quantity: int
    category: str = DEFAULT_CATEGORY
    name: str = ""

    def __post_init__(self):
        if not non_empty(self.product_id):
            raise InvalidLineItemError("Product id is required.")

        ok, price = try_parse_decimal(self.unit_price)
        if not ok:
            raise InvalidLineItemError(f"Unit price for {self.product_id} must be a number, got {self.unit_price!r}.")
        if price < 0:
            raise InvalidLineItemError(f"Unit price for {self.product_id} cannot be negative.")

        if not is_whole_number(self.quantity):
            raise InvalidLineItemError(f"Quantity for {self.product_id} must be a whole number.")
        qty = int(self.quantity)
        if qty <= 0:
            raise InvalidLineItemError(f"Quantity for {self.product_id} must be at least 1.")
        if qty > MAX_LINE_QUANTITY:
            raise InvalidLineItemError(f"Quantity for {self.product_id} cannot exceed {MAX_LINE_QUANTITY}.")

        object.__setattr__(self, "product_id", str(self.product_id).strip())
        object.__setattr__(self, "unit_price", price)
        object.__setattr__(self, "quantity", qty)
        object.__setattr__(self, "category", (self.category or DEFAULT_CATEGORY).strip() or DEFAULT_CATEGORY)
        object.__setattr__(self, "name", (self.name or "").strip())

    @property
    def line_total(self) -> Decimal:
        """unit_price × quantity, unrounded."""
        return multiply_by_scalar(self.unit_price, self.quantity)

    def with_quantity(self, quantity: int) -> "LineItem":
        """A new line with the same product and captured price."""
        return replace(self, quantity=quantity)


@dataclass(frozen=True)
class Totals:
    subtotal: Decimal
    discount_amount: Decimal
    tax_applied: bool
    tax: Decimal
    total: Decimal
    is_return: bool = False
    discount_active: bool = False

    @property
    def discounted_subtotal(self) -> Decimal:
        return subtract_clamped(self.subtotal, self.discount_amount)

    @property
    def signed_total(self) -> Decimal:
        return signed_total(self)


def signed_total(totals: Totals, is_return: Optional[bool] = None) -> Decimal:
    """
    Ledger value of a transaction: -total for returns, total otherwise.

    `totals.total` is always non-negative, so the sign is applied exactly once here.
    Pass `is_return` to override the flag recorded on `totals`.
    """
    flag = totals.is_return if is_return is None else is_return
    return -totals.total if flag else totals.total


def ensure_not_empty(items: Iterable[LineItem]) -> list[LineItem]:
    """Checkout/save guard. compute_totals itself accepts an empty list."""
    lines = list(items)
    if not lines:
        raise EmptyCartError("Cannot complete a transaction with no items.")
    return lines


def compute_totals(
    items: Iterable[LineItem],
    discount: Optional[Discount],
    tax_enabled: bool,
    is_return: bool,
    tax_rate,
    now: datetime,
) -> Totals:
    """
    Derive Totals for a set of lines. Pure and deterministic for identical inputs.
    """
    subtotal = add(*(line.line_total for line in items))
    discount_amount = evaluate(subtotal, discount, now)
    discounted = subtract_clamped(subtotal, discount_amount)
    tax = tax_calc.compute(discounted, tax_rate, tax_enabled)

    r_subtotal = round_money(subtotal)
    r_discount = round_money(discount_amount)
    r_tax = round_money(tax)
    r_total = subtract_clamped(r_subtotal, r_discount) + r_tax

    return Totals(
        subtotal=r_subtotal,
        discount_amount=r_discount,
        tax_applied=bool(tax_enabled),
        tax=r_tax,
        total=round_money(r_total),
        is_return=bool(is_return),
        discount_active=is_applicable(subtotal, discount, now),
    )
