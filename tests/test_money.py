"""
Ledger Engine - Money Helper Tests

Rounding and arithmetic for monetary amounts.
"""

import pytest
from decimal import Decimal

from ledger_engine.utils.money import (
    ZERO,
    divide,
    is_zero,
    percentage,
    round2,
    round_rate,
    sum_money,
    to_decimal,
    within_tolerance,
)


class TestConversion:
    """Test conversion of inputs to Decimal."""

    def test_float_goes_through_str(self):
        """0.1 should not carry binary noise into the ledger."""
        assert to_decimal(0.1) == Decimal("0.1")

    def test_int_and_str(self):
        assert to_decimal(5) == Decimal("5")
        assert to_decimal("12.345") == Decimal("12.345")

    def test_decimal_passes_through(self):
        value = Decimal("9.99")
        assert to_decimal(value) is value

    def test_bool_rejected(self):
        with pytest.raises(TypeError):
            to_decimal(True)


class TestRounding:
    """Test half-up rounding to the cent and to rate precision."""

    def test_round_half_up(self):
        assert round2(Decimal("2.675")) == Decimal("2.68")
        assert round2(Decimal("2.665")) == Decimal("2.67")

    def test_round_half_away_from_zero_for_negatives(self):
        assert round2(Decimal("-1.005")) == Decimal("-1.01")

    def test_round_rate_six_places(self):
        assert round_rate(Decimal("155.1234565")) == Decimal("155.123457")

    def test_percentage_rounds_once(self):
        assert percentage(Decimal("333.33"), Decimal("0.15")) == Decimal("50.00")

    def test_sum_money_rounds_at_the_end(self):
        """Three thirds of a cent sum to one cent, not zero."""
        thirds = [Decimal("0.003333"), Decimal("0.003333"), Decimal("0.003334")]
        assert sum_money(thirds) == Decimal("0.01")


class TestComparison:
    """Test zero checks and tolerance comparison."""

    def test_is_zero(self):
        assert is_zero(Decimal("0.004"))
        assert not is_zero(Decimal("0.005"))

    def test_within_tolerance_is_strict(self):
        assert within_tolerance(Decimal("100.00"), Decimal("100.00"))
        assert not within_tolerance(Decimal("100.00"), Decimal("100.01"))

    def test_divide_by_zero(self):
        with pytest.raises(ZeroDivisionError):
            divide(Decimal("10"), ZERO)
