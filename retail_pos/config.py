from __future__ import annotations

import os
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Mapping

from .constants import (
    BUSINESS_ADDRESS,
    BUSINESS_EMAIL,
    BUSINESS_NAME,
    BUSINESS_PHONE,
    BUSINESS_TAX_ID,
    CURRENCY_CODE,
    CURRENCY_SYMBOL,
    DATA_DIR,
    DB_FILE_NAME,
    DEFAULT_TAX_RATE,
    TEMPLATES_DIR,
)

BASE_DIR = Path(__file__).resolve().parent
DATA_PATH = BASE_DIR / DATA_DIR
DB_PATH = DATA_PATH / DB_FILE_NAME
TEMPLATES_PATH = BASE_DIR / TEMPLATES_DIR


def parse_tax_rate(raw) -> Decimal:
    """
    Parse a tax rate given as a fraction (0.13 for 13%).

    Raises ValueError when the value is not a number or lies outside [0, 1].
    """
    try:
        rate = Decimal(str(raw).strip())
    except (InvalidOperation, ValueError) as e:
        raise ValueError(f"Could not parse tax rate {raw!r}.") from e
    if not rate.is_finite() or rate < 0 or rate > 1:
        raise ValueError(f"Tax rate must be between 0 and 1, got {raw!r}.")
    return rate


@dataclass(frozen=True)
class BusinessInfo:
    name: str = BUSINESS_NAME
    address: str = BUSINESS_ADDRESS
    phone: str = BUSINESS_PHONE
    email: str = BUSINESS_EMAIL
    tax_id: str = BUSINESS_TAX_ID


@dataclass(frozen=True)
class Settings:
    """
    Runtime configuration.

    `tax_rate` is the one canonical rate every totals computation uses.
    """
    tax_rate: Decimal = Decimal(DEFAULT_TAX_RATE)
    db_path: Path = DB_PATH
    currency: str = CURRENCY_CODE
    currency_symbol: str = CURRENCY_SYMBOL
    business: BusinessInfo = field(default_factory=BusinessInfo)


def load_settings(env: Mapping[str, str] | None = None) -> Settings:
    """
    Build Settings from environment variables, falling back to constants.

    Recognized:
      - POS_TAX_RATE       fraction, e.g. "0.13"
      - POS_DB_PATH        path to the sqlite file
      - POS_CURRENCY       ISO code shown on receipts
      - POS_BUSINESS_NAME  receipt header
    """
    env = os.environ if env is None else env

    tax_rate = parse_tax_rate(env.get("POS_TAX_RATE", DEFAULT_TAX_RATE))
    db_path = Path(env["POS_DB_PATH"]) if env.get("POS_DB_PATH") else DB_PATH
    currency = (env.get("POS_CURRENCY") or CURRENCY_CODE).strip().upper()

    business = BusinessInfo()
    if env.get("POS_BUSINESS_NAME"):
        business = BusinessInfo(name=env["POS_BUSINESS_NAME"].strip())

    return Settings(
        tax_rate=tax_rate,
        db_path=db_path,
        currency=currency,
        business=business,
    )
