# tests/test_editor.py
from decimal import Decimal

import pytest

from conftest import FailingStore, MemoryStore, make_transaction
from retail_pos.errors import (
    ConcurrentModificationError,
    EditStateError,
    EmptyCartError,
    InvalidLineItemError,
    InvalidStatusTransitionError,
    LineItemNotFoundError,
    PaymentError,
    PersistenceError,
    TransactionLockedError,
    TransactionNotFoundError,
)
from retail_pos.modules.pricing import Discount, LineItem
from retail_pos.modules.transactions import editor as ed
from retail_pos.modules.transactions.editor import TransactionEditor

RATE = Decimal("0.13")


def _scenario_b():
    return make_transaction(
        "TX-B", [LineItem("P1", "10.00", 1)], discount=Discount.percentage("20")
    )


def _editor(store, tx_id, clock):
    e = TransactionEditor(store, RATE, clock)
    e.load(tx_id)
    return e


# ---------- Scenario E ----------
def test_remove_discount_then_save_recomputes_fully(clock):
    store = MemoryStore(_scenario_b())
    e = _editor(store, "TX-B", clock)
    assert e.transaction.totals.total == Decimal("9.04")

    e.begin_edit()
    e.remove_discount()
    saved = e.save()

    assert saved.discount is None
    assert saved.totals.discount_amount == 0
    assert saved.totals.subtotal == Decimal("10.00")
    assert saved.totals.tax == Decimal("1.30")
    assert saved.totals.total == Decimal("11.30")
    assert saved.version == 2
    assert e.state == ed.VIEWING
    assert store.saved == [saved]


# ---------- State machine ----------
def test_mutations_require_editing(clock):
    e = _editor(MemoryStore(_scenario_b()), "TX-B", clock)
    for call in (
        lambda: e.set_item_quantity("P1", 2),
        lambda: e.remove_item("P1"),
        e.remove_discount,
        e.toggle_tax,
        e.save,
        e.cancel_edit,
    ):
        with pytest.raises(EditStateError):
            call()


def test_begin_edit_twice_rejected(clock):
    e = _editor(MemoryStore(_scenario_b()), "TX-B", clock)
    e.begin_edit()
    with pytest.raises(EditStateError):
        e.begin_edit()


def test_begin_edit_does_not_recompute(clock):
    tx = _scenario_b()
    e = _editor(MemoryStore(tx), "TX-B", clock)
    draft = e.begin_edit()
    assert draft.items == list(tx.items)
    assert draft.discount == tx.discount


def test_cancel_edit_discards_draft(clock):
    store = MemoryStore(_scenario_b())
    e = _editor(store, "TX-B", clock)
    e.begin_edit()
    e.set_item_quantity("P1", 5)
    assert e.totals.subtotal == Decimal("50.00")
    e.cancel_edit()
    assert e.state == ed.VIEWING
    assert e.totals.total == Decimal("9.04")
    assert store.saved == []


def test_load_unknown_id(clock):
    with pytest.raises(TransactionNotFoundError):
        _editor(MemoryStore(), "NOPE", clock)


# ---------- Draft operations ----------
def test_totals_follow_every_mutation(clock):
    e = _editor(MemoryStore(_scenario_b()), "TX-B", clock)
    e.begin_edit()
    e.set_item_quantity("P1", 2)
    assert e.totals.total == Decimal("18.08")
    e.toggle_tax()
    assert e.totals.total == Decimal("16.00")
    e.apply_discount(Discount.fixed("1"))
    assert e.totals.total == Decimal("19.00")
    e.set_return(True)
    assert e.totals.total == Decimal("19.00")
    assert e.signed_total == Decimal("-19.00")


def test_quantity_zero_removes_and_unknown_line(clock):
    e = _editor(MemoryStore(_scenario_b()), "TX-B", clock)
    e.begin_edit()
    with pytest.raises(LineItemNotFoundError):
        e.set_item_quantity("ZZZ", 1)
    with pytest.raises(LineItemNotFoundError):
        e.remove_item("ZZZ")
    assert e.set_item_quantity("P1", 0) is None
    assert e.draft.items == []


def test_invalid_quantity_rejected(clock):
    e = _editor(MemoryStore(_scenario_b()), "TX-B", clock)
    e.begin_edit()
    with pytest.raises(InvalidLineItemError):
        e.set_item_quantity("P1", 2.5)
    assert e.draft.items[0].quantity == 1


def test_apply_discount_skips_applicability_check(clock):
    e = _editor(MemoryStore(_scenario_b()), "TX-B", clock)
    e.begin_edit()
    e.apply_discount(Discount.fixed("5", min_applicable_subtotal="100"))
    assert e.totals.discount_amount == 0
    assert e.totals.discount_active is False


def test_save_empty_draft_rejected_without_transition(clock):
    store = MemoryStore(_scenario_b())
    e = _editor(store, "TX-B", clock)
    e.begin_edit()
    e.remove_item("P1")
    with pytest.raises(EmptyCartError):
        e.save()
    assert e.state == ed.EDITING
    assert store.saved == []


def test_payment_method_and_status(clock):
    store = MemoryStore(_scenario_b())
    e = _editor(store, "TX-B", clock)
    e.begin_edit()
    with pytest.raises(PaymentError):
        e.set_payment_method("iou")
    assert e.set_payment_method("Store Credit") == "store_credit"
    with pytest.raises(InvalidStatusTransitionError):
        e.set_status("pending")
    e.set_status("partial_refund")
    saved = e.save()
    assert (saved.payment_method, saved.status) == ("store_credit", "partial_refund")


# ---------- Locks ----------
@pytest.mark.parametrize("status", ["cancelled", "refunded"])
def test_terminal_transactions_locked(clock, status):
    tx = make_transaction("TX-L", status=status)
    e = _editor(MemoryStore(tx), "TX-L", clock)
    with pytest.raises(TransactionLockedError):
        e.begin_edit()
    assert e.state == ed.VIEWING


def test_cancelling_locks_further_edits(clock):
    e = _editor(MemoryStore(_scenario_b()), "TX-B", clock)
    e.begin_edit()
    e.set_status("cancelled")
    e.save()
    with pytest.raises(TransactionLockedError):
        e.begin_edit()


# ---------- Failure / retry ----------
def test_store_failure_returns_to_editing_with_draft(clock):
    store = FailingStore(_scenario_b(), failures=1)
    e = _editor(store, "TX-B", clock)
    e.begin_edit()
    e.remove_discount()

    with pytest.raises(PersistenceError) as info:
        e.save()
    assert info.value.transaction_id == "TX-B"
    assert info.value.operation == "save"
    assert e.state == ed.EDITING
    assert e.last_error is info.value
    assert e.draft.discount is None
    assert e.transaction.totals.total == Decimal("9.04")

    saved = e.save()  # caller-driven retry
    assert store.attempts == 2
    assert saved.totals.total == Decimal("11.30")
    assert e.last_error is None


class _BrokenStore(MemoryStore):
    def save(self, transaction):
        raise OSError("network down")


def test_unexpected_store_error_still_returns_to_editing(clock):
    e = _editor(_BrokenStore(_scenario_b()), "TX-B", clock)
    e.begin_edit()
    e.remove_discount()

    with pytest.raises(PersistenceError) as info:
        e.save()
    assert isinstance(info.value.__cause__, OSError)
    assert info.value.transaction_id == "TX-B"
    assert info.value.operation == "save"
    assert e.state == ed.EDITING
    assert e.last_error is info.value
    assert e.draft.discount is None

    e.cancel_edit()
    assert e.state == ed.VIEWING
    assert e.transaction.discount is not None


def test_saved_edit_records_the_rate_used(clock):
    store = MemoryStore(_scenario_b())
    e = TransactionEditor(store, "0.05", clock)
    e.load("TX-B")
    e.begin_edit()
    saved = e.save()
    assert saved.tax_rate == Decimal("0.05")
    assert saved.totals.tax == Decimal("0.40")


def test_concurrent_edit_detected_by_repository(tx_repo, clock):
    tx_repo.save(_scenario_b())
    first = _editor(tx_repo, "TX-B", clock)
    second = _editor(tx_repo, "TX-B", clock)

    first.begin_edit()
    first.set_item_quantity("P1", 2)
    first.save()

    second.begin_edit()
    second.remove_discount()
    with pytest.raises(ConcurrentModificationError):
        second.save()
    assert second.state == ed.EDITING
    assert tx_repo.load_by_id("TX-B").items[0].quantity == 2
    assert tx_repo.load_by_id("TX-B").version == 2
