"""
transactions/editor.py

Edit session over one persisted transaction.

    VIEWING --begin_edit--> EDITING --save--> SAVING --ok--> VIEWING
                               ^                 |
                               +-----------------+ (store failure)

A failed save goes straight back to EDITING with the draft untouched and the
error kept in `last_error` (always a PersistenceError), so the operator can
retry or cancel.

Totals are never cached on the draft: `totals` re-runs the engine on every read.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
import logging
from typing import Callable, Optional

from ...errors import (
    EditStateError,
    LineItemNotFoundError,
    PersistenceError,
    TransactionLockedError,
    TransactionNotFoundError,
)
from ...utils.helpers import utc_now
from ...utils.validators import try_parse_decimal
from ..pricing import tax as tax_calc
from ..pricing.discounts import Discount
from ..pricing.totals import LineItem, Totals, compute_totals, ensure_not_empty, signed_total
from . import payment_methods, status as tx_status
from .transaction import Transaction, TransactionStore

_log = logging.getLogger(__name__)

VIEWING = "viewing"
EDITING = "editing"
SAVING = "saving"


@dataclass
class Draft:
    """Mutable working copy of a transaction."""
    items: list[LineItem]
    discount: Optional[Discount]
    tax_enabled: bool
    is_return: bool
    payment_method: str
    status: str

    @classmethod
    def of(cls, tx: Transaction) -> "Draft":
        return cls(
            items=list(tx.items),
            discount=tx.discount,
            tax_enabled=tx.tax_enabled,
            is_return=tx.is_return,
            payment_method=tx.payment_method,
            status=tx.status,
        )

    def index(self, product_id: str) -> int:
        for i, it in enumerate(self.items):
            if it.product_id == product_id:
                return i
        return -1


class TransactionEditor:
    def __init__(
        self,
        store: TransactionStore,
        tax_rate,
        clock: Callable[[], datetime] = utc_now,
        transaction: Optional[Transaction] = None,
    ):
        self.store = store
        self.tax_rate = tax_calc.validate_rate(tax_rate)
        self.clock = clock
        self.transaction: Optional[Transaction] = transaction
        self.draft: Optional[Draft] = None
        self.state = VIEWING
        self.last_error: Optional[PersistenceError] = None

    # ---- loading -----------------------------------------------------------

    def load(self, transaction_id: str) -> Transaction:
        """Select a stored transaction for viewing (discarding any open draft)."""
        self._require(VIEWING, EDITING)
        tx = self.store.load_by_id(transaction_id)
        if tx is None:
            raise TransactionNotFoundError(
                "Transaction not found.", transaction_id=transaction_id, operation="load"
            )
        self.transaction = tx
        self.draft = None
        self.state = VIEWING
        return tx

    # ---- state guards --------------------------------------------------------

    def _require(self, *states: str) -> None:
        if self.state not in states:
            raise EditStateError(
                f"Operation not allowed while {self.state} (expected {' or '.join(states)})."
            )

    def _draft(self) -> Draft:
        self._require(EDITING)
        assert self.draft is not None
        return self.draft

    # ---- session -------------------------------------------------------------

    def begin_edit(self) -> Draft:
        """Snapshot the current transaction into a draft. Nothing is recomputed here."""
        self._require(VIEWING)
        if self.transaction is None:
            raise EditStateError("No transaction selected.")
        if tx_status.is_terminal(self.transaction.status):
            raise TransactionLockedError(
                f"Transaction {self.transaction.id} is {tx_status.label(self.transaction.status).lower()} "
                "and can no longer be edited."
            )
        self.draft = Draft.of(self.transaction)
        self.last_error = None
        self.state = EDITING
        return self.draft

    def cancel_edit(self) -> None:
        self._require(EDITING)
        self.draft = None
        self.state = VIEWING

    # ---- draft mutations -----------------------------------------------------

    def set_item_quantity(self, product_id: str, quantity) -> Optional[LineItem]:
        """quantity <= 0 removes the line. Returns the new line, or None if removed."""
        d = self._draft()
        idx = d.index(product_id)
        if idx < 0:
            raise LineItemNotFoundError(f"No line for product {product_id} in transaction.")
        ok, q = try_parse_decimal(quantity)
        if ok and q <= 0:
            del d.items[idx]
            return None
        updated = d.items[idx].with_quantity(quantity)
        d.items[idx] = updated
        return updated

    def remove_item(self, product_id: str) -> LineItem:
        """May leave the draft empty; save() refuses that."""
        d = self._draft()
        idx = d.index(product_id)
        if idx < 0:
            raise LineItemNotFoundError(f"No line for product {product_id} in transaction.")
        return d.items.pop(idx)

    def apply_discount(self, discount: Discount) -> None:
        # replaces any existing discount; applicability is decided by the engine
        self._draft().discount = discount

    def remove_discount(self) -> None:
        self._draft().discount = None

    def toggle_tax(self) -> bool:
        d = self._draft()
        d.tax_enabled = not d.tax_enabled
        return d.tax_enabled

    def set_return(self, is_return: bool) -> None:
        self._draft().is_return = bool(is_return)

    def set_payment_method(self, method: str) -> str:
        d = self._draft()
        d.payment_method = payment_methods.ensure_valid(method)
        return d.payment_method

    def set_status(self, new_status: str) -> str:
        d = self._draft()
        d.status = tx_status.ensure_transition(d.status, new_status)
        return d.status

    # ---- derived ---------------------------------------------------------------

    @property
    def totals(self) -> Totals:
        """Totals of the draft while editing, of the stored transaction otherwise."""
        if self.draft is not None:
            d = self.draft
            return compute_totals(d.items, d.discount, d.tax_enabled, d.is_return, self.tax_rate, self.clock())
        if self.transaction is None:
            raise EditStateError("No transaction selected.")
        return self.transaction.totals

    @property
    def signed_total(self):
        return signed_total(self.totals)

    # ---- persistence -----------------------------------------------------------

    def save(self) -> Transaction:
        d = self._draft()
        ensure_not_empty(d.items)

        original = self.transaction
        assert original is not None
        totals = compute_totals(d.items, d.discount, d.tax_enabled, d.is_return, self.tax_rate, self.clock())
        updated = replace(
            original,
            items=tuple(d.items),
            totals=totals,
            payment_method=d.payment_method,
            is_return=d.is_return,
            status=d.status,
            discount=d.discount,
            tax_enabled=d.tax_enabled,
            tax_rate=self.tax_rate,
            version=original.version + 1,
        )

        self.state = SAVING
        try:
            self.store.save(updated)
        except Exception as e:
            # draft kept for retry/cancel
            self.state = EDITING
            if isinstance(e, PersistenceError):
                err = e
                if err.transaction_id is None:
                    err.transaction_id = original.id
                if err.operation is None:
                    err.operation = "save"
            else:
                err = PersistenceError(
                    f"Could not save transaction: {e}", transaction_id=original.id, operation="save"
                )
            self.last_error = err
            _log.warning("Saving %s failed: %s", original.id, err)
            if err is e:
                raise
            raise err from e

        if updated.status != original.status:
            _log.info("Transaction %s status %s -> %s", updated.id, original.status, updated.status)
        _log.info("Saved edit of %s (version %d, total %s)", updated.id, updated.version, updated.signed_total)
        self.transaction = updated
        self.draft = None
        self.last_error = None
        self.state = VIEWING
        return updated
