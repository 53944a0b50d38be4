# tests/test_tax.py
from decimal import Decimal

import pytest

from retail_pos.modules.pricing import tax


def test_disabled_is_zero_regardless_of_rate():
    assert tax.compute(Decimal("100"), Decimal("0.13"), False) == 0
    assert tax.compute(Decimal("100"), Decimal("1"), False) == 0


def test_enabled_multiplies_unrounded():
    assert tax.compute(Decimal("7.50"), Decimal("0.13"), True) == Decimal("0.9750")


def test_negative_base_clamped():
    assert tax.compute(Decimal("-3"), Decimal("0.13"), True) == 0


@pytest.mark.parametrize("rate", ["-0.01", "1.5", "abc"])
def test_rate_validated(rate):
    with pytest.raises(ValueError):
        tax.validate_rate(rate)
    with pytest.raises(ValueError):
        tax.compute(Decimal("10"), rate, False)


def test_rate_bounds_inclusive():
    assert tax.validate_rate("0") == 0
    assert tax.validate_rate("1") == 1
