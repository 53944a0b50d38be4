# utils/validators.py
from decimal import Decimal, InvalidOperation


def non_empty(text: str) -> bool:
    """
    True if `text` is not None/empty after stripping whitespace.
    """
    return bool(text and str(text).strip())


# ---- Numeric parsing & validators ----

def try_parse_decimal(x):
    """
    Best-effort parse to Decimal.

    Floats go through str() first so 2.5 becomes Decimal('2.5') rather than its
    binary expansion. Booleans are rejected.

    Returns:
        (ok: bool, value: Decimal|None)
    """
    if isinstance(x, bool):
        return False, None
    if isinstance(x, Decimal):
        return (True, x) if x.is_finite() else (False, None)
    try:
        val = Decimal(str(x).strip())
    except (InvalidOperation, ValueError, TypeError):
        return False, None
    if not val.is_finite():
        return False, None
    return True, val


def is_whole_number(x) -> bool:
    """
    True iff x is an int (not bool) or an integral Decimal/str like "3".
    Floats such as 2.5 are rejected; 3.0 is accepted.
    """
    if isinstance(x, bool):
        return False
    if isinstance(x, int):
        return True
    ok, val = try_parse_decimal(x)
    return bool(ok and val is not None and val == val.to_integral_value())
