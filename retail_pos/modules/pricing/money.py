"""
pricing/money.py

Fixed-point helpers for currency math. Every amount is a Decimal; binary floats
are only accepted as input and converted through their shortest repr.

Rounding happens in exactly one place, round_money(), which callers invoke when a
value is about to be displayed or persisted. Everything else keeps full precision.
"""
from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP
from typing import Union

from ...utils.helpers import fmt_money
from ...utils.validators import try_parse_decimal

__all__ = [
    "Money",
    "ZERO",
    "CENT",
    "to_money",
    "add",
    "subtract",
    "subtract_clamped",
    "multiply_by_scalar",
    "multiply_by_rate",
    "clamp_non_negative",
    "round_money",
    "to_display_string",
]

Money = Decimal
MoneyLike = Union[Decimal, int, str, float]

ZERO = Decimal("0")
CENT = Decimal("0.01")


# -----------------------------
# Construction
# -----------------------------

def to_money(x: MoneyLike) -> Decimal:
    """Parse x into a Decimal; raises ValueError for non-numeric or non-finite input."""
    ok, val = try_parse_decimal(x)
    if not ok:
        raise ValueError(f"Could not parse {x!r} as a money amount.")
    return val  # type: ignore[return-value]


# -----------------------------
# Arithmetic (unrounded)
# -----------------------------

def add(*amounts: MoneyLike) -> Decimal:
    total = ZERO
    for a in amounts:
        total += to_money(a)
    return total


def subtract(a: MoneyLike, b: MoneyLike) -> Decimal:
    return to_money(a) - to_money(b)


def subtract_clamped(a: MoneyLike, b: MoneyLike) -> Decimal:
    """a - b, never below zero. Used for subtotal minus discount."""
    return clamp_non_negative(subtract(a, b))


def multiply_by_scalar(x: MoneyLike, n: Union[int, Decimal]) -> Decimal:
    """Price × quantity."""
    return to_money(x) * to_money(n)


def multiply_by_rate(x: MoneyLike, rate: MoneyLike) -> Decimal:
    """Amount × fractional rate (0.13 for 13%)."""
    return to_money(x) * to_money(rate)


def clamp_non_negative(x: MoneyLike) -> Decimal:
    """Return x if x > 0, else 0."""
    v = to_money(x)
    return v if v > ZERO else ZERO


# -----------------------------
# Rounding & display
# -----------------------------

def round_money(x: MoneyLike) -> Decimal:
    """Quantize to cents, half-up (0.975 -> 0.98, 0.125 -> 0.13)."""
    return to_money(x).quantize(CENT, rounding=ROUND_HALF_UP)


def to_display_string(x: MoneyLike, symbol: str = "$") -> str:
    """'$1,234.50', '-$8.48'."""
    return fmt_money(round_money(x), symbol=symbol, strict=True)
