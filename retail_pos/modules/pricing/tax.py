"""
pricing/tax.py

Flat-rate tax on a discounted subtotal. The rate always comes from configuration
(Settings.tax_rate); nothing in this package carries a rate of its own.
"""
from __future__ import annotations

from decimal import Decimal

from .money import ZERO, clamp_non_negative, multiply_by_rate, to_money

__all__ = ["validate_rate", "compute"]


def validate_rate(rate) -> Decimal:
    """Return rate as Decimal; ValueError unless 0 <= rate <= 1."""
    try:
        r = to_money(rate)
    except ValueError as e:
        raise ValueError(f"Tax rate must be a number, got {rate!r}.") from e
    if r < 0 or r > 1:
        raise ValueError(f"Tax rate must be between 0 and 1, got {rate!r}.")
    return r


def compute(discounted_subtotal, rate, enabled: bool) -> Decimal:
    """
    Tax for `discounted_subtotal`, unrounded.

    Returns 0 whenever `enabled` is False, regardless of the rate. The rate is
    still validated so a misconfigured rate surfaces on the first computation.
    """
    r = validate_rate(rate)
    if not enabled:
        return ZERO
    return multiply_by_rate(clamp_non_negative(discounted_subtotal), r)
