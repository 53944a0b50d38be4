# retail_pos/modules/pricing/__init__.py
"""
Pricing package exports.

Pure calculation only: no repos, no DB connections, no Qt.
- money:     Decimal helpers (single rounding point: round_money)
- discounts: Discount value object + evaluate()
- tax:       compute()
- totals:    LineItem, Totals, compute_totals(), signed_total()
"""

from .discounts import DISCOUNT_KINDS, FIXED, PERCENTAGE, Discount, evaluate, is_applicable
from .money import round_money, to_display_string, to_money
from .totals import LineItem, Totals, compute_totals, ensure_not_empty, signed_total

__all__ = [
    "DISCOUNT_KINDS",
    "FIXED",
    "PERCENTAGE",
    "Discount",
    "evaluate",
    "is_applicable",
    "round_money",
    "to_display_string",
    "to_money",
    "LineItem",
    "Totals",
    "compute_totals",
    "ensure_not_empty",
    "signed_total",
]
