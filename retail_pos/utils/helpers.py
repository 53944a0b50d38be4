# utils/helpers.py
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
import logging
from typing import Union, Optional

NumberLike = Union[Decimal, int, str, float]

_log = logging.getLogger(__name__)


def today_str() -> str:
    """Return today's date as ISO string (YYYY-MM-DD)."""
    return date.today().isoformat()


def utc_now() -> datetime:
    """Default clock: timezone-aware current time in UTC."""
    return datetime.now(timezone.utc)


def ensure_aware(ts: datetime) -> datetime:
    """Treat naive datetimes as UTC so comparisons never mix aware and naive values."""
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts


def fmt_money(
    v: NumberLike,
    places: int = 2,
    *,
    symbol: str = "",
    strict: bool = False,
    sentinel: Optional[str] = None,
) -> str:
    """
    Format a number as money with thousands separators and a fixed number of decimals.

    Behavior on parse failure:
      - By default (strict=False, sentinel=None), returns str(v).
      - If `sentinel` is provided (e.g., "N/A"), returns that sentinel instead.
      - If `strict=True`, raises ValueError on parse failures.

    Args:
        v: Value to format; parsed with Decimal(str(v)) so floats keep their short repr.
        places: Number of decimal places (default: 2).
        symbol: Optional currency symbol placed after the sign ("-$1.00").
        strict: If True, raise on parse errors; else fall back.
        sentinel: If not None and parsing fails, return this string.
    """
    try:
        x = v if isinstance(v, Decimal) else Decimal(str(v).strip())
        if not x.is_finite():
            raise InvalidOperation(f"non-finite value {v!r}")
    except (InvalidOperation, ValueError) as e:
        # Log at debug level to aid troubleshooting without spamming user logs.
        _log.debug("fmt_money: failed to parse %r as a number: %s", v, e)
        if strict:
            raise ValueError(f"Could not parse {v!r} as a number.") from e
        return str(sentinel) if sentinel is not None else str(v)
    x = x.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)
    sign = "-" if x < 0 else ""
    return f"{sign}{symbol}{abs(x):,.{places}f}"
