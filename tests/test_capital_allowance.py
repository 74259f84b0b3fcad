"""
Ledger Engine - Capital Allowance & Book Depreciation Tests

Unit tests for the Jamaican capital allowance rules and book depreciation.
"""

import pytest
from decimal import Decimal

from ledger_engine.models.fixed_asset import CapitalAllowanceClass, DepreciationMethod
from ledger_engine.services.tax_calculators.capital_allowance import (
    BookDepreciationCalculator,
    CapitalAllowanceCalculator,
)


class TestAllowableCost:
    """Test class cost caps."""

    def test_motor_vehicle_cost_capped(self):
        cost = CapitalAllowanceCalculator.allowable_cost(
            CapitalAllowanceClass.MOTOR_VEHICLES, Decimal("6000000.00"),
        )
        assert cost == Decimal("5000000.00")

    def test_uncapped_class(self):
        cost = CapitalAllowanceCalculator.allowable_cost(
            CapitalAllowanceClass.PLANT_MACHINERY, Decimal("6000000.00"),
        )
        assert cost == Decimal("6000000.00")


class TestYearlyAllowance:
    """Test initial and annual allowances."""

    def test_first_year_plant(self):
        """20% initial, then 10% of what is left."""
        result = CapitalAllowanceCalculator.first_year(
            CapitalAllowanceClass.PLANT_MACHINERY, Decimal("1000000.00"),
        )
        assert result.initial_allowance == Decimal("200000.00")
        assert result.annual_allowance == Decimal("80000.00")
        assert result.total_allowance == Decimal("280000.00")
        assert result.closing_wdv == Decimal("720000.00")

    def test_buildings_have_no_initial_allowance(self):
        result = CapitalAllowanceCalculator.first_year(
            CapitalAllowanceClass.BUILDINGS, Decimal("10000000.00"),
        )
        assert result.initial_allowance == Decimal("0.00")
        assert result.annual_allowance == Decimal("250000.00")

    def test_initial_allowance_only_in_acquisition_year(self):
        result = CapitalAllowanceCalculator.calculate_year(
            CapitalAllowanceClass.COMPUTERS,
            allowable_cost=Decimal("100000.00"),
            opening_wdv=Decimal("60000.00"),
            is_acquisition_year=False,
        )
        assert result.initial_allowance == Decimal("0")
        assert result.annual_allowance == Decimal("15000.00")

    def test_exhausted_wdv(self):
        result = CapitalAllowanceCalculator.calculate_year(
            CapitalAllowanceClass.COMPUTERS, Decimal("100000.00"), Decimal("0"), False,
        )
        assert result.total_allowance == Decimal("0")


class TestAllowanceSchedule:
    """Test multi-year projections."""

    def test_computer_schedule(self):
        schedule = CapitalAllowanceCalculator.build_schedule(
            CapitalAllowanceClass.COMPUTERS, Decimal("100000.00"), 2025,
        )
        assert [row.year for row in schedule.rows] == [2025, 2026, 2027, 2028]
        assert [row.closing_wdv for row in schedule.rows] == [
            Decimal("60000.00"), Decimal("45000.00"), Decimal("33750.00"), Decimal("25312.50"),
        ]
        assert schedule.total_allowances == Decimal("74687.50")

    def test_schedule_length_limit(self):
        schedule = CapitalAllowanceCalculator.build_schedule(
            CapitalAllowanceClass.COMPUTERS, Decimal("100000.00"), 2025, years=2,
        )
        assert len(schedule.rows) == 2


class TestBalancingAdjustment:
    """Test balancing charge and allowance on disposal."""

    def test_charge_capped_at_allowances_claimed(self):
        result = CapitalAllowanceCalculator.balancing_adjustment(
            Decimal("500.00"), Decimal("300.00"), Decimal("100.00"),
        )
        assert result.balancing_amount == Decimal("200.00")
        assert result.balancing_charge == Decimal("100.00")
        assert result.balancing_allowance == Decimal("0.00")

    def test_balancing_allowance(self):
        result = CapitalAllowanceCalculator.balancing_adjustment(
            Decimal("100.00"), Decimal("300.00"), Decimal("700.00"),
        )
        assert result.balancing_charge == Decimal("0.00")
        assert result.balancing_allowance == Decimal("200.00")

    def test_proceeds_equal_wdv(self):
        result = CapitalAllowanceCalculator.balancing_adjustment(
            Decimal("300.00"), Decimal("300.00"), Decimal("700.00"),
        )
        assert result.balancing_charge == result.balancing_allowance == Decimal("0.00")


class TestBookDepreciation:
    """Test straight line and reducing balance depreciation."""

    def test_straight_line(self):
        charge = BookDepreciationCalculator.annual_depreciation(
            DepreciationMethod.STRAIGHT_LINE,
            total_cost=Decimal("100000.00"),
            residual_value=Decimal("10000.00"),
            net_book_value=Decimal("100000.00"),
            useful_life_years=5,
        )
        assert charge == Decimal("18000.00")

    def test_stops_at_residual_value(self):
        charge = BookDepreciationCalculator.annual_depreciation(
            DepreciationMethod.STRAIGHT_LINE,
            total_cost=Decimal("100000.00"),
            residual_value=Decimal("10000.00"),
            net_book_value=Decimal("12000.00"),
            useful_life_years=5,
        )
        assert charge == Decimal("2000.00")

    @pytest.mark.parametrize("nbv,expected", [
        (Decimal("100000.00"), Decimal("20000.00")),
        (Decimal("12000.00"), Decimal("2000.00")),
        (Decimal("10000.00"), Decimal("0.00")),
    ])
    def test_reducing_balance(self, nbv, expected):
        charge = BookDepreciationCalculator.annual_depreciation(
            DepreciationMethod.REDUCING_BALANCE,
            total_cost=Decimal("100000.00"),
            residual_value=Decimal("10000.00"),
            net_book_value=nbv,
            rate_percent=Decimal("20"),
        )
        assert charge == expected

    def test_straight_line_without_life(self):
        charge = BookDepreciationCalculator.annual_depreciation(
            DepreciationMethod.STRAIGHT_LINE,
            Decimal("100000.00"), Decimal("0"), Decimal("100000.00"),
        )
        assert charge == Decimal("0")
