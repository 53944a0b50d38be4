from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional, Protocol, Sequence

from ...constants import CURRENCY_CODE
from ...utils.helpers import ensure_aware
from ..pricing.discounts import Discount
from ..pricing.totals import LineItem, Totals, signed_total
from . import payment_methods, status as tx_status


@dataclass(frozen=True)
class Transaction:
    """
    A completed (or later edited) sale or return.

    `totals` is always derived from items/discount/tax_enabled by the totals engine;
    nothing writes it by hand. `version` is the stored revision: 1 after checkout,
    bumped by every successful edit. `tax_rate` is the rate `totals` was computed with
(None on rows written before it was recorded).
    """
    id: str
    items: tuple[LineItem, ...]
    totals: Totals
    timestamp: datetime
    payment_method: str
    is_return: bool = False
    status: str = "completed"
    discount: Optional[Discount] = None
    tax_enabled: bool = True
    tax_rate: Optional[Decimal] = None
    amount_tendered: Optional[Decimal] = None
    change_due: Optional[Decimal] = None
    currency: str = CURRENCY_CODE
    version: int = 1

    def __post_init__(self):
        object.__setattr__(self, "items", tuple(self.items))
        object.__setattr__(self, "timestamp", ensure_aware(self.timestamp))
        object.__setattr__(self, "payment_method", payment_methods.ensure_valid(self.payment_method))
        object.__setattr__(self, "status", tx_status.ensure_valid(self.status))

    @property
    def signed_total(self) -> Decimal:
        """Ledger value: negative for returns."""
        return signed_total(self.totals, self.is_return)

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.items)

    def line(self, product_id: str) -> Optional[LineItem]:
        for it in self.items:
            if it.product_id == product_id:
                return it
        return None


class TransactionStore(Protocol):
    """
    Persistence collaborator. Implementations raise PersistenceError (or a subclass)
    on failure and return normally on success.
    """

    def save(self, transaction: Transaction) -> None: ...

    def load_recent(self, limit: int) -> Sequence[Transaction]: ...

    def load_by_id(self, transaction_id: str) -> Optional[Transaction]: ...
