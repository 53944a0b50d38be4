"""
pricing/discounts.py

Discount value object and its evaluator.

Rules:
  - percentage: 0 < value <= 100; amount = subtotal × value / 100 (unrounded)
  - fixed:      value > 0;        amount = min(value, subtotal)
  - A discount outside its subtotal bounds or validity window evaluates to 0.
    It is still held by the cart/transaction and shown as inactive.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from ...errors import InvalidDiscountError
from ...utils.helpers import ensure_aware
from ...utils.validators import non_empty, try_parse_decimal
from .money import ZERO, to_display_string, to_money

__all__ = [
    "PERCENTAGE",
    "FIXED",
    "DISCOUNT_KINDS",
    "Discount",
    "describe",
    "is_applicable",
    "evaluate",
]

PERCENTAGE = "percentage"
FIXED = "fixed"
DISCOUNT_KINDS: tuple[str, ...] = (PERCENTAGE, FIXED)

_HUNDRED = Decimal("100")


def describe(kind: str, value) -> str:
    """Generated label: '20% discount' / '$5.00 discount'."""
    v = to_money(value)
    if kind == PERCENTAGE:
        return f"{v.normalize():f}% discount"
    return f"{to_display_string(v)} discount"


def _money_or_none(raw, field_label: str) -> Optional[Decimal]:
    if raw is None:
        return None
    ok, val = try_parse_decimal(raw)
    if not ok:
        raise InvalidDiscountError(f"{field_label} must be a number, got {raw!r}.")
    if val < 0:
        raise InvalidDiscountError(f"{field_label} cannot be negative.")
    return val


@dataclass(frozen=True)
class Discount:
    kind: str
    value: Decimal
    description: str = ""
    min_applicable_subtotal: Optional[Decimal] = None
    max_applicable_subtotal: Optional[Decimal] = None
    valid_from: Optional[datetime] = None
    valid_to: Optional[datetime] = None
    code: Optional[str] = None

    def __post_init__(self):
        kind = (self.kind or "").strip().lower()
        if kind not in DISCOUNT_KINDS:
            raise InvalidDiscountError("Discount kind must be one of: percentage, fixed")

        ok, value = try_parse_decimal(self.value)
        if not ok:
            raise InvalidDiscountError(f"Discount value must be a number, got {self.value!r}.")
        if kind == PERCENTAGE and not (ZERO < value <= _HUNDRED):
            raise InvalidDiscountError("Percentage discount must be greater than 0 and at most 100.")
        if kind == FIXED and value <= ZERO:
            raise InvalidDiscountError("Fixed discount must be greater than 0.")

        lo = _money_or_none(self.min_applicable_subtotal, "Minimum subtotal")
        hi = _money_or_none(self.max_applicable_subtotal, "Maximum subtotal")
        if lo is not None and hi is not None and lo > hi:
            raise InvalidDiscountError("Minimum subtotal cannot exceed maximum subtotal.")

        start = ensure_aware(self.valid_from) if self.valid_from is not None else None
        end = ensure_aware(self.valid_to) if self.valid_to is not None else None
        if start is not None and end is not None and start >= end:
            raise InvalidDiscountError("Valid from date must be before valid to date.")

        desc = self.description.strip() if non_empty(self.description) else describe(kind, value)

        # frozen dataclass: normalized values are written back through object.__setattr__
        object.__setattr__(self, "kind", kind)
        object.__setattr__(self, "value", value)
        object.__setattr__(self, "description", desc)
        object.__setattr__(self, "min_applicable_subtotal", lo)
        object.__setattr__(self, "max_applicable_subtotal", hi)
        object.__setattr__(self, "valid_from", start)
        object.__setattr__(self, "valid_to", end)

    # ---- constructors ---------------------------------------------------

    @classmethod
    def percentage(cls, value, description: str = "", **kw) -> "Discount":
        return cls(PERCENTAGE, value, description, **kw)

    @classmethod
    def fixed(cls, value, description: str = "", **kw) -> "Discount":
        return cls(FIXED, value, description, **kw)

    # ---- serialization --------------------------------------------------

    def to_dict(self) -> dict:
        """JSON-safe dict (decimals and datetimes as strings)."""
        return {
            "kind": self.kind,
            "value": str(self.value),
            "description": self.description,
            "min_applicable_subtotal": _str_or_none(self.min_applicable_subtotal),
            "max_applicable_subtotal": _str_or_none(self.max_applicable_subtotal),
            "valid_from": self.valid_from.isoformat() if self.valid_from else None,
            "valid_to": self.valid_to.isoformat() if self.valid_to else None,
            "code": self.code,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "Discount":
        return cls(
            kind=d["kind"],
            value=d["value"],
            description=d.get("description") or "",
            min_applicable_subtotal=d.get("min_applicable_subtotal"),
            max_applicable_subtotal=d.get("max_applicable_subtotal"),
            valid_from=_parse_ts(d.get("valid_from")),
            valid_to=_parse_ts(d.get("valid_to")),
            code=d.get("code"),
        )


def _str_or_none(v: Optional[Decimal]) -> Optional[str]:
    return None if v is None else str(v)


def _parse_ts(v) -> Optional[datetime]:
    if v is None or v == "":
        return None
    if isinstance(v, datetime):
        return v
    return datetime.fromisoformat(str(v))


# -----------------------------
# Evaluator
# -----------------------------

def is_applicable(subtotal, discount: Optional[Discount], now: datetime) -> bool:
    """
    False when the subtotal is outside [min, max] or `now` is outside [valid_from, valid_to].
    An absent discount is never applicable.
    """
    if discount is None:
        return False
    sub = to_money(subtotal)
    if discount.min_applicable_subtotal is not None and sub < discount.min_applicable_subtotal:
        return False
    if discount.max_applicable_subtotal is not None and sub > discount.max_applicable_subtotal:
        return False
    now = ensure_aware(now)
    if discount.valid_from is not None and now < discount.valid_from:
        return False
    if discount.valid_to is not None and now > discount.valid_to:
        return False
    return True


def evaluate(subtotal, discount: Optional[Discount], now: datetime) -> Decimal:
    """
    Discount amount for `subtotal`, unrounded. 0 when absent or not applicable.
    A fixed discount never exceeds the subtotal it discounts.
    """
    if not is_applicable(subtotal, discount, now):
        return ZERO
    sub = to_money(subtotal)
    if discount.kind == PERCENTAGE:
        return sub * discount.value / _HUNDRED
    return min(discount.value, sub)
