# retail_pos/modules/transactions/__init__.py
"""
Persisted transactions and everything that reads or changes them after checkout.

- transaction:     Transaction record + TransactionStore protocol
- status:          lifecycle states and allowed transitions
- payment_methods: canonical payment methods
- editor:          TransactionEditor (view/edit/save state machine)
- ledger:          signed totals, sales/returns summaries, per-product sales
"""

from .transaction import Transaction, TransactionStore

__all__ = ["Transaction", "TransactionStore"]
