# tests/test_discounts.py
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from retail_pos.errors import InvalidDiscountError
from retail_pos.modules.pricing.discounts import (
    FIXED,
    PERCENTAGE,
    Discount,
    describe,
    evaluate,
    is_applicable,
)

NOW = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)


# ---------- Construction / invariants ----------
@pytest.mark.parametrize("value", ["0", "-5", "100.01", "abc"])
def test_percentage_out_of_range_rejected(value):
    with pytest.raises(InvalidDiscountError):
        Discount.percentage(value)


@pytest.mark.parametrize("value", ["0", "-1"])
def test_fixed_must_be_positive(value):
    with pytest.raises(InvalidDiscountError):
        Discount.fixed(value)


def test_unknown_kind_rejected():
    with pytest.raises(InvalidDiscountError):
        Discount("bogo", "10")


def test_percentage_boundary_100_allowed():
    assert Discount.percentage("100").value == Decimal("100")


def test_validity_window_must_be_ordered():
    with pytest.raises(InvalidDiscountError):
        Discount.fixed("5", valid_from=NOW, valid_to=NOW)
    with pytest.raises(InvalidDiscountError):
        Discount.fixed("5", valid_from=NOW, valid_to=NOW - timedelta(days=1))


def test_min_cannot_exceed_max():
    with pytest.raises(InvalidDiscountError):
        Discount.fixed("5", min_applicable_subtotal="50", max_applicable_subtotal="10")


def test_kind_is_normalized_and_description_generated():
    d = Discount(" Percentage ", "20")
    assert d.kind == PERCENTAGE
    assert d.description == "20% discount"
    assert describe(FIXED, "5") == "$5.00 discount"


def test_explicit_description_kept():
    assert Discount.fixed("5", "Loyalty").description == "Loyalty"


def test_dict_round_trip_preserves_window_and_bounds():
    d = Discount.percentage(
        "15",
        min_applicable_subtotal="20",
        valid_from=NOW,
        valid_to=NOW + timedelta(days=7),
        code="WINTER15",
    )
    assert Discount.from_dict(d.to_dict()) == d


# ---------- Evaluation ----------
def test_percentage_amount_unrounded():
    d = Discount.percentage("15")
    assert evaluate(Decimal("3.33"), d, NOW) == Decimal("0.4995")


def test_fixed_amount_clamped_to_subtotal():
    d = Discount.fixed("50.00")
    assert evaluate(Decimal("10.00"), d, NOW) == Decimal("10.00")
    assert evaluate(Decimal("80.00"), d, NOW) == Decimal("50.00")


def test_absent_discount_is_zero():
    assert evaluate(Decimal("10"), None, NOW) == 0
    assert is_applicable(Decimal("10"), None, NOW) is False


def test_subtotal_bounds_are_inclusive():
    d = Discount.fixed("5", min_applicable_subtotal="20", max_applicable_subtotal="100")
    assert evaluate(Decimal("19.99"), d, NOW) == 0
    assert evaluate(Decimal("20.00"), d, NOW) == Decimal("5")
    assert evaluate(Decimal("100.00"), d, NOW) == Decimal("5")
    assert evaluate(Decimal("100.01"), d, NOW) == 0


def test_outside_window_evaluates_to_zero_not_error():
    d = Discount.percentage("10", valid_from=NOW + timedelta(hours=1), valid_to=NOW + timedelta(days=1))
    assert evaluate(Decimal("50"), d, NOW) == 0
    assert evaluate(Decimal("50"), d, NOW + timedelta(hours=2)) == Decimal("5")
    assert evaluate(Decimal("50"), d, NOW + timedelta(days=2)) == 0


def test_naive_now_treated_as_utc():
    d = Discount.percentage("10", valid_from=NOW, valid_to=NOW + timedelta(days=1))
    assert is_applicable(Decimal("50"), d, datetime(2025, 1, 15, 13, 0))
