from __future__ import annotations
from typing import Optional

from ...constants import PAYMENT_METHODS
from ...errors import PaymentError

CASH = "cash"

LABELS = {
    "cash":         "Cash",
    "card":         "Card",
    "digital":      "Digital Wallet",
    "check":        "Check",
    "store_credit": "Store Credit",
}


def normalize(method: Optional[str]) -> Optional[str]:
    """Lowercase, strip, spaces/hyphens to underscores ('Store Credit' -> 'store_credit')."""
    if method is None:
        return None
    m = str(method).strip().lower().replace("-", "_").replace(" ", "_")
    return m or None


def ensure_valid(method: str) -> str:
    m = normalize(method)
    if m not in PAYMENT_METHODS:
        raise PaymentError("payment method must be one of: " + ", ".join(PAYMENT_METHODS))
    return m  # type: ignore[return-value]


def label(method: str) -> str:
    m = normalize(method)
    return LABELS.get(m, (method or "").strip().title())
