"""
Unit tests for numeric reconciliation of sales lines.
"""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from src.core.transforms import reconcile_line


class TestReconcileLine:
    """Tests for reconcile_line"""

    def test_inconsistent_amount_is_recomputed(self):
        line = reconcile_line(quantity=3, unit_price=10, line_amount=25)
        assert line.line_amount == 30
        assert line.unit_price == 10
        assert line.amount_repaired is True
        assert line.price_repaired is False

    def test_missing_price_derived_from_amount(self):
        line = reconcile_line(quantity=3, unit_price=None, line_amount=30)
        assert line.line_amount == 30
        assert line.unit_price == 10
        assert line.price_repaired is True

    def test_zero_quantity_without_amount_or_price(self):
        line = reconcile_line(quantity=0, unit_price=None, line_amount=None)
        assert line.line_amount == 0
        assert line.unit_price is None

    @given(quantity=st.integers(min_value=1, max_value=10_000))
    def test_property_no_amount_and_no_price_leaves_price_unknown(self, quantity):
        """Property test: the zero-price amount is never used to derive a price"""
        line = reconcile_line(quantity=quantity, unit_price=None, line_amount=None)
        assert line.line_amount == 0
        assert line.unit_price is None
        assert line.price_repaired is False

    def test_consistent_line_untouched(self):
        line = reconcile_line(quantity=2, unit_price=1000.0, line_amount=2000.0)
        assert line == (2, 1000.0, 2000.0, False, False)

    def test_missing_amount_computed_from_price(self):
        line = reconcile_line(quantity=2, unit_price=1000, line_amount=None)
        assert line.line_amount == 2000

    def test_negative_price_is_a_sign_error(self):
        line = reconcile_line(quantity=1, unit_price=-35, line_amount=35)
        assert line.line_amount == 35
        assert line.unit_price == 35

    def test_non_positive_amount_with_price_recomputed(self):
        line = reconcile_line(quantity=4, unit_price=5, line_amount=-20)
        assert line.line_amount == 20

    def test_quantity_passed_through(self):
        line = reconcile_line(quantity=-1, unit_price=5, line_amount=-5)
        assert line.quantity == -1

    def test_unknown_quantity_leaves_price_unrecoverable(self):
        line = reconcile_line(quantity=None, unit_price=None, line_amount=30)
        assert line.line_amount == 30
        assert line.unit_price is None

    @given(
        quantity=st.integers(min_value=1, max_value=1000),
        price=st.one_of(
            st.none(),
            st.floats(min_value=-10_000, max_value=10_000, allow_nan=False, allow_infinity=False),
        ),
        amount=st.one_of(
            st.none(),
            st.floats(min_value=-1e7, max_value=1e7, allow_nan=False, allow_infinity=False),
        ),
    )
    def test_property_amount_matches_quantity_times_price(self, quantity, price, amount):
        """Property test: whenever a price survives, amount == quantity * price"""
        line = reconcile_line(quantity, price, amount)
        if line.unit_price is not None and line.unit_price > 0:
            assert line.line_amount == pytest.approx(quantity * line.unit_price, rel=1e-6, abs=1e-6)
