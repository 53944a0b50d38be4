from __future__ import annotations


# Domain-level error the caller can surface directly (e.g., toast/snackbar)
class DomainError(Exception):
    pass


class InvalidLineItemError(DomainError):
    """Negative price, non-positive or non-integer quantity, or a line over the limits."""


class EmptyCartError(DomainError):
    """Checkout or save attempted with zero line items."""


class InvalidDiscountError(DomainError):
    """Discount value or window violates its invariants."""


class DiscountNotApplicableError(DomainError):
    """
    Raised by carts when asked to attach a discount that currently evaluates to nothing.

    The totals engine itself never raises this; it returns a zero discount amount.
    """


class LineItemNotFoundError(DomainError):
    pass


class ProductNotFoundError(DomainError):
    pass


class PaymentError(DomainError):
    """Unknown payment method or insufficient cash tendered."""


class TransactionLockedError(DomainError):
    """Edit attempted on a transaction in a terminal status."""


class InvalidStatusTransitionError(DomainError):
    pass


class EditStateError(DomainError):
    """Editor operation invoked in a state that does not allow it."""


class PersistenceError(Exception):
    """
    Failure reported by the transaction store.

    Carries the transaction id and the operation so callers can decide on retry
    or user notification.
    """

    def __init__(self, message: str, *, transaction_id: str | None = None, operation: str | None = None):
        super().__init__(message)
        self.transaction_id = transaction_id
        self.operation = operation

    def __str__(self) -> str:
        base = super().__str__()
        ctx = []
        if self.operation:
            ctx.append(f"operation={self.operation}")
        if self.transaction_id:
            ctx.append(f"transaction_id={self.transaction_id}")
        return f"{base} ({', '.join(ctx)})" if ctx else base


class ConcurrentModificationError(PersistenceError):
    """The stored transaction changed since the draft was taken."""


class TransactionNotFoundError(PersistenceError):
    pass
