"""
transactions/ledger.py

Pure roll-ups over persisted transactions for summaries and reports.

Every figure starts from Transaction.signed_total, so the return sign is applied
in exactly one place (pricing.totals.signed_total). Sales and returns are then
reported as non-negative magnitudes, and net = sales - returns.

Do not open DB connections here; daily_summary() only calls the store it is given.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timezone, tzinfo
from decimal import Decimal
from typing import Iterable, Protocol, Sequence

from ..pricing.money import ZERO, round_money
from . import payment_methods
from .transaction import Transaction

__all__ = [
    "EXCLUDED_STATUSES",
    "LedgerSummary",
    "signed_total",
    "summarize",
    "daily_summary",
    "by_payment_method",
    "ProductSales",
    "by_product",
    "product_sales_report",
]

# Voided transactions never reach the books.
EXCLUDED_STATUSES: frozenset[str] = frozenset({"cancelled"})


class RangeStore(Protocol):
    def list_between(self, start: datetime, end: datetime) -> Sequence[Transaction]: ...


@dataclass(frozen=True)
class LedgerSummary:
    total_sales: Decimal
    total_returns: Decimal
    net_sales: Decimal
    transaction_count: int


def signed_total(tx: Transaction) -> Decimal:
    """-total for returns, +total for sales."""
    return tx.signed_total


def _counted(transactions: Iterable[Transaction], excluded: frozenset[str]) -> list[Transaction]:
    return [t for t in transactions if t.status not in excluded]


def summarize(
    transactions: Iterable[Transaction],
    *,
    excluded_statuses: Iterable[str] = EXCLUDED_STATUSES,
) -> LedgerSummary:
    counted = _counted(transactions, frozenset(excluded_statuses))
    sales = ZERO
    returns = ZERO
    for tx in counted:
        value = signed_total(tx)
        if value < 0:
            returns += -value
        else:
            sales += value
    return LedgerSummary(
        total_sales=round_money(sales),
        total_returns=round_money(returns),
        net_sales=round_money(sales - returns),
        transaction_count=len(counted),
    )


def daily_summary(store: RangeStore, day: date, tz: tzinfo = timezone.utc) -> LedgerSummary:
    """Summary of transactions stamped within `day` (00:00:00 to 23:59:59.999999 in `tz`)."""
    start = datetime.combine(day, time.min, tzinfo=tz)
    end = datetime.combine(day, time.max, tzinfo=tz)
    return summarize(store.list_between(start, end))


def by_payment_method(
    transactions: Iterable[Transaction],
    *,
    excluded_statuses: Iterable[str] = EXCLUDED_STATUSES,
) -> dict[str, Decimal]:
    """
    Net signed total per payment method, in canonical method order.
    Methods with no transactions are omitted.
    """
    out: dict[str, Decimal] = {}
    for tx in _counted(transactions, frozenset(excluded_statuses)):
        out[tx.payment_method] = out.get(tx.payment_method, ZERO) + signed_total(tx)
    order = {m: i for i, m in enumerate(payment_methods.LABELS)}
    return {m: round_money(out[m]) for m in sorted(out, key=lambda m: order.get(m, len(order)))}


@dataclass(frozen=True)
class ProductSales:
    product_id: str
    name: str
    category: str
    units_sold: int
    revenue: Decimal


def by_product(
    transactions: Iterable[Transaction],
    *,
    category: str | None = None,
    excluded_statuses: Iterable[str] = EXCLUDED_STATUSES,
) -> list[ProductSales]:
    """
    Units and line revenue per product, best sellers first.

    Revenue is the sum of line totals (price x quantity) before transaction-level
    discount and tax. Lines on a return count negatively, so a sale and its full
    return net to zero. `category` keeps only lines in that category.
    """
    units: dict[str, int] = {}
    revenue: dict[str, Decimal] = {}
    labels: dict[str, tuple[str, str]] = {}
    for tx in _counted(transactions, frozenset(excluded_statuses)):
        sign = -1 if tx.is_return else 1
        for line in tx.items:
            if category is not None and line.category != category:
                continue
            pid = line.product_id
            units[pid] = units.get(pid, 0) + sign * line.quantity
            revenue[pid] = revenue.get(pid, ZERO) + sign * line.line_total
            labels.setdefault(pid, (line.name or pid, line.category))
    rows = [
        ProductSales(pid, labels[pid][0], labels[pid][1], units[pid], round_money(revenue[pid]))
        for pid in units
    ]
    rows.sort(key=lambda r: (-r.revenue, -r.units_sold, r.product_id))
    return rows


def product_sales_report(
    store: RangeStore,
    start: datetime,
    end: datetime,
    *,
    category: str | None = None,
) -> list[ProductSales]:
    """by_product() over transactions stamped within [start, end]."""
    return by_product(store.list_between(start, end), category=category)
