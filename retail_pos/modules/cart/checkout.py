from __future__ import annotations

from datetime import datetime
import logging
from typing import Callable, Optional
from uuid import uuid4

from ...config import Settings
from ...errors import PaymentError, PersistenceError
from ...utils.helpers import utc_now
from ...utils.validators import try_parse_decimal
from ..pricing.money import round_money, subtract
from ..pricing.totals import ensure_not_empty
from ..transactions import payment_methods
from ..transactions.transaction import Transaction, TransactionStore
from .cart import Cart

_log = logging.getLogger(__name__)


def generate_transaction_id(now: datetime) -> str:
    """Store-independent id: TX<yyyymmdd>-<8 hex chars>."""
    return f"TX{now.strftime('%Y%m%d')}-{uuid4().hex[:8].upper()}"


class CheckoutService:
    """
    Turns a cart into a persisted, completed Transaction.

    Ids come from `new_id(now)`. When none is given and the store can number
    transactions itself (TransactionsRepo.next_transaction_id), that is used.
    """

    def __init__(
        self,
        store: TransactionStore,
        settings: Settings,
        clock: Callable[[], datetime] = utc_now,
        new_id: Optional[Callable[[datetime], str]] = None,
    ):
        self.store = store
        self.settings = settings
        self.clock = clock
        if new_id is None:
            new_id = getattr(store, "next_transaction_id", None) or generate_transaction_id
        self.new_id = new_id

    def checkout(
        self,
        cart: Cart,
        payment_method: str,
        is_return: bool = False,
        amount_tendered=None,
    ) -> Transaction:
        items = ensure_not_empty(cart.items)
        method = payment_methods.ensure_valid(payment_method)
        now = self.clock()

        totals = cart.totals(self.settings.tax_rate, now, is_return=is_return)

        tendered = change = None
        if method == payment_methods.CASH and amount_tendered is not None and not is_return:
            ok, raw = try_parse_decimal(amount_tendered)
            if not ok or raw < 0:
                raise PaymentError(f"Amount tendered must be a non-negative number, got {amount_tendered!r}.")
            tendered = round_money(raw)
            if tendered < totals.total:
                raise PaymentError(
                    f"Insufficient cash: tendered {tendered}, due {totals.total}."
                )
            change = round_money(subtract(tendered, totals.total))

        tx = Transaction(
            id=self.new_id(now),
            items=tuple(items),
            totals=totals,
            timestamp=now,
            payment_method=method,
            is_return=bool(is_return),
            status="completed",
            discount=cart.discount,
            tax_enabled=cart.tax_enabled,
            tax_rate=self.settings.tax_rate,
            amount_tendered=tendered,
            change_due=change,
            currency=self.settings.currency,
            version=1,
        )

        try:
            self.store.save(tx)
        except PersistenceError:
            _log.warning("Checkout failed to persist %s; cart kept", tx.id)
            raise

        _log.info(
            "Checkout %s: %s %s via %s (%d lines)",
            tx.id,
            "return" if tx.is_return else "sale",
            tx.signed_total,
            method,
            len(tx.items),
        )
        cart.clear()
        return tx
