from __future__ import annotations
from typing import Iterable, Optional

from ...constants import TRANSACTION_STATUSES
from ...errors import InvalidStatusTransitionError

# ---------- Canonical set & order ----------
VALID_STATES: tuple[str, ...] = TRANSACTION_STATUSES
STATE_ORDER: dict[str, int] = {s: i for i, s in enumerate(VALID_STATES)}  # pending=0,...,partial_refund=4

# Editing a transaction in one of these is refused.
TERMINAL_STATES: frozenset[str] = frozenset({"cancelled", "refunded"})

# ---------- Lifecycle ----------
TRANSITIONS: dict[str, frozenset[str]] = {
    "pending":        frozenset({"completed", "cancelled"}),
    "completed":      frozenset({"refunded", "partial_refund", "cancelled"}),
    "partial_refund": frozenset({"refunded"}),
    "cancelled":      frozenset(),
    "refunded":       frozenset(),
}

# ---------- Human labels ----------
LABELS = {
    "pending":        "Pending",
    "completed":      "Completed",
    "cancelled":      "Cancelled",
    "refunded":       "Refunded",
    "partial_refund": "Partially Refunded",
}

# ---------- Descriptions (UI copy / tooltips) ----------
DESCRIPTIONS = {
    "pending":        "Started but not yet paid.",
    "completed":      "Paid and closed at checkout.",
    "cancelled":      "Voided. No longer editable.",
    "refunded":       "Fully refunded. No longer editable.",
    "partial_refund": "Some of the amount was refunded.",
}

# ---------- API ----------

def normalize(state: Optional[str]) -> Optional[str]:
    """Lowercase & strip; return None if empty. Does NOT invent synonyms."""
    if state is None:
        return None
    s = str(state).strip().lower()
    return s or None


def is_valid(state: Optional[str]) -> bool:
    """Return True iff state is one of the canonical values."""
    s = normalize(state)
    return s in VALID_STATES if s is not None else False


def ensure_valid(state: str) -> str:
    """
    Return the normalized state if valid; raise ValueError if not.
    """
    s = normalize(state)
    if s not in VALID_STATES:
        raise ValueError("status must be one of: " + ", ".join(VALID_STATES))
    return s  # type: ignore[return-value]


def is_terminal(state: str) -> bool:
    return normalize(state) in TERMINAL_STATES


def can_transition(old: str, new: str) -> bool:
    o, n = normalize(old), normalize(new)
    return n in TRANSITIONS.get(o, frozenset())


def ensure_transition(old: str, new: str) -> str:
    """
    Validate old -> new and return the normalized new state.
    Setting the same state again is a no-op and allowed.
    """
    o = ensure_valid(old)
    n = ensure_valid(new)
    if o != n and n not in TRANSITIONS[o]:
        raise InvalidStatusTransitionError(f"Cannot change status from {o} to {n}.")
    return n


def label(state: str) -> str:
    """Human label ('Partially Refunded'). If unknown, returns the original string title-cased."""
    s = normalize(state)
    if s in LABELS:
        return LABELS[s]  # type: ignore[index]
    return (state or "").strip().title()


def description(state: str) -> str:
    """Short human description for tooltips; empty string if unknown."""
    s = normalize(state)
    return DESCRIPTIONS.get(s, "")


def sort_key(state: str) -> int:
    """Stable sort key using STATE_ORDER; unknown states sort after known ones."""
    s = normalize(state)
    return STATE_ORDER.get(s, 999)


def sort_states(states: Iterable[str]) -> list[str]:
    """Return a new list sorted by canonical order."""
    return sorted(states, key=sort_key)
