# tests/test_cart.py
from datetime import timedelta
from decimal import Decimal

import pytest

from retail_pos.constants import MAX_CART_LINES
from retail_pos.errors import (
    DiscountNotApplicableError,
    InvalidLineItemError,
    LineItemNotFoundError,
    ProductNotFoundError,
)
from retail_pos.modules.cart import Cart
from retail_pos.modules.pricing import Discount, LineItem

RATE = Decimal("0.13")


@pytest.fixture()
def cart():
    return Cart()


# ---------- Adding ----------
def test_add_from_catalog_captures_price(cart, products_repo, now):
    line = cart.add_from_catalog(products_repo, "P-COFFEE", 3)
    assert line.unit_price == Decimal("2.50")
    assert line.name == "Coffee (Medium)"
    assert line.category == "Beverages"
    assert cart.totals(RATE, now).total == Decimal("8.48")


def test_same_product_merges_and_keeps_first_price(cart, products_repo):
    cart.add_from_catalog(products_repo, "P-COFFEE", 1)
    p = products_repo.get("P-COFFEE")
    p.price = Decimal("9.99")
    products_repo.upsert(p)
    merged = cart.add_from_catalog(products_repo, "P-COFFEE", 2)
    assert len(cart) == 1
    assert merged.quantity == 3
    assert merged.unit_price == Decimal("2.50")


def test_unknown_product(cart, products_repo):
    with pytest.raises(ProductNotFoundError):
        cart.add_from_catalog(products_repo, "NOPE")


def test_line_limit(cart):
    for i in range(MAX_CART_LINES):
        cart.add_item(LineItem(f"P{i}", "1.00", 1))
    with pytest.raises(InvalidLineItemError):
        cart.add_item(LineItem("ONE-MORE", "1.00", 1))
    # merging into an existing line is still fine
    cart.add_item(LineItem("P0", "1.00", 1))
    assert cart.items[0].quantity == 2


def test_merge_over_quantity_limit_rejected_and_cart_unchanged(cart):
    cart.add_item(LineItem("P1", "1.00", 999))
    with pytest.raises(InvalidLineItemError):
        cart.add_item(LineItem("P1", "1.00", 2))
    assert cart.items[0].quantity == 999


# ---------- Quantity / removal ----------
def test_update_quantity(cart):
    cart.add_item(LineItem("P1", "2.00", 1))
    cart.update_quantity("P1", 4)
    assert cart.item_count == 4


@pytest.mark.parametrize("qty", [0, -3])
def test_update_quantity_non_positive_removes(cart, qty):
    cart.add_item(LineItem("P1", "2.00", 1))
    assert cart.update_quantity("P1", qty) is None
    assert cart.is_empty()


def test_update_quantity_fractional_rejected(cart):
    cart.add_item(LineItem("P1", "2.00", 1))
    with pytest.raises(InvalidLineItemError):
        cart.update_quantity("P1", 1.5)
    assert cart.items[0].quantity == 1


def test_unknown_line(cart):
    with pytest.raises(LineItemNotFoundError):
        cart.update_quantity("P1", 2)
    with pytest.raises(LineItemNotFoundError):
        cart.remove_item("P1")


def test_remove_item(cart):
    cart.add_item(LineItem("P1", "2.00", 1))
    cart.add_item(LineItem("P2", "3.00", 1))
    cart.remove_item("P1")
    assert [it.product_id for it in cart.items] == ["P2"]


# ---------- Discount / tax ----------
def test_apply_and_remove_discount(cart, now):
    cart.add_item(LineItem("P1", "10.00", 1))
    cart.apply_discount(Discount.percentage("20"), now)
    assert cart.totals(RATE, now).total == Decimal("9.04")
    cart.remove_discount()
    assert cart.totals(RATE, now).total == Decimal("11.30")


def test_inapplicable_discount_rejected_up_front(cart, now):
    cart.add_item(LineItem("P1", "10.00", 1))
    with pytest.raises(DiscountNotApplicableError):
        cart.apply_discount(Discount.fixed("5", min_applicable_subtotal="50"), now)
    expired = Discount.fixed("5", valid_from=now - timedelta(days=2), valid_to=now - timedelta(days=1))
    with pytest.raises(DiscountNotApplicableError):
        cart.apply_discount(expired, now)
    assert cart.discount is None


def test_discount_that_lapses_later_evaluates_to_zero(cart, now):
    cart.add_item(LineItem("P1", "60.00", 1))
    cart.apply_discount(Discount.fixed("5", min_applicable_subtotal="50"), now)
    cart.update_quantity("P1", 1)
    cart.remove_item("P1")
    cart.add_item(LineItem("P2", "10.00", 1))
    t = cart.totals(RATE, now)
    assert cart.discount is not None
    assert t.discount_amount == 0
    assert t.discount_active is False


def test_toggle_tax(cart, now):
    cart.add_item(LineItem("P1", "10.00", 1))
    assert cart.toggle_tax() is False
    assert cart.totals(RATE, now).tax == 0
    assert cart.toggle_tax() is True


def test_clear_drops_discount_keeps_tax_toggle_and_reset_restores_tax(cart, now):
    cart.add_item(LineItem("P1", "10.00", 1))
    cart.apply_discount(Discount.percentage("10"), now)
    cart.toggle_tax()
    cart.clear()
    assert cart.is_empty() and cart.discount is None
    assert cart.tax_enabled is False
    cart.reset()
    assert cart.tax_enabled is True
