"""
Ledger Engine - Capital Allowance Calculator

Jamaican capital allowances (Income Tax Act, Second Schedule) and book
depreciation for the fixed asset register.

Capital allowances:
- Initial allowance: once, in the year of acquisition, on the allowable cost
- Annual allowance: reducing balance on the written-down value (WDV)
- Class cost caps: cost above the cap earns no allowance
- Balancing charge / allowance on disposal

Book depreciation:
- Straight line: (cost - residual) / useful life
- Reducing balance: NBV x rate
- Never depreciates below residual value
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional

from ledger_engine.models.fixed_asset import CapitalAllowanceClass, DepreciationMethod
from ledger_engine.utils.money import ZERO, round2, to_decimal


@dataclass(frozen=True)
class AllowanceClassRule:
    """Rates and cap for one capital-allowance class."""
    initial_rate: Decimal
    annual_rate: Decimal
    cost_cap: Optional[Decimal]
    typical_life_years: int


CAPITAL_ALLOWANCE_RULES: Dict[CapitalAllowanceClass, AllowanceClassRule] = {
    CapitalAllowanceClass.BUILDINGS: AllowanceClassRule(
        initial_rate=Decimal("0"),
        annual_rate=Decimal("0.025"),
        cost_cap=None,
        typical_life_years=40,
    ),
    CapitalAllowanceClass.PLANT_MACHINERY: AllowanceClassRule(
        initial_rate=Decimal("0.20"),
        annual_rate=Decimal("0.10"),
        cost_cap=None,
        typical_life_years=10,
    ),
    CapitalAllowanceClass.MOTOR_VEHICLES: AllowanceClassRule(
        initial_rate=Decimal("0.20"),
        annual_rate=Decimal("0.20"),
        cost_cap=Decimal("5000000"),
        typical_life_years=5,
    ),
    CapitalAllowanceClass.COMPUTERS: AllowanceClassRule(
        initial_rate=Decimal("0.20"),
        annual_rate=Decimal("0.25"),
        cost_cap=None,
        typical_life_years=4,
    ),
    CapitalAllowanceClass.FURNITURE_FIXTURES: AllowanceClassRule(
        initial_rate=Decimal("0.20"),
        annual_rate=Decimal("0.10"),
        cost_cap=None,
        typical_life_years=10,
    ),
    CapitalAllowanceClass.SOFTWARE: AllowanceClassRule(
        initial_rate=Decimal("0.20"),
        annual_rate=Decimal("0.25"),
        cost_cap=None,
        typical_life_years=4,
    ),
    CapitalAllowanceClass.LEASEHOLD_IMPROVEMENTS: AllowanceClassRule(
        initial_rate=Decimal("0"),
        annual_rate=Decimal("0.10"),
        cost_cap=None,
        typical_life_years=10,
    ),
}


@dataclass
class AllowanceResult:
    """Capital allowance claimed for one year."""
    opening_wdv: Decimal
    initial_allowance: Decimal
    annual_allowance: Decimal
    closing_wdv: Decimal

    @property
    def total_allowance(self) -> Decimal:
        return self.initial_allowance + self.annual_allowance


@dataclass
class ScheduleRow:
    year: int
    opening_wdv: Decimal
    initial_allowance: Decimal
    annual_allowance: Decimal
    total_allowance: Decimal
    closing_wdv: Decimal


@dataclass
class AllowanceSchedule:
    allowance_class: CapitalAllowanceClass
    cost: Decimal
    allowable_cost: Decimal
    rows: List[ScheduleRow] = field(default_factory=list)

    @property
    def total_allowances(self) -> Decimal:
        return sum((row.total_allowance for row in self.rows), ZERO)


@dataclass
class BalancingAdjustment:
    """
    Tax consequence of a disposal.

    balancing_amount = proceeds - WDV. A positive amount is a balancing
    charge capped at the allowances claimed; a negative one is a
    balancing allowance.
    """
    proceeds: Decimal
    written_down_value: Decimal
    allowances_claimed: Decimal
    balancing_amount: Decimal
    balancing_charge: Decimal
    balancing_allowance: Decimal


class CapitalAllowanceCalculator:
    """Table-driven capital allowance computations. Pure, no database access."""

    @staticmethod
    def get_rule(allowance_class: CapitalAllowanceClass) -> AllowanceClassRule:
        return CAPITAL_ALLOWANCE_RULES[CapitalAllowanceClass(allowance_class)]

    @staticmethod
    def allowable_cost(allowance_class: CapitalAllowanceClass, cost: Decimal) -> Decimal:
        """Cost qualifying for allowances: min(cost, class cap)."""
        cost = round2(cost)
        rule = CapitalAllowanceCalculator.get_rule(allowance_class)
        if rule.cost_cap is not None and cost > rule.cost_cap:
            return round2(rule.cost_cap)
        return cost

    @staticmethod
    def calculate_year(
        allowance_class: CapitalAllowanceClass,
        allowable_cost: Decimal,
        opening_wdv: Decimal,
        is_acquisition_year: bool,
    ) -> AllowanceResult:
        """
        Allowance for one tax year.

        In the acquisition year opening_wdv equals the allowable cost and
        the initial allowance comes off before the annual rate applies.
        The claim never takes the WDV below zero.
        """
        rule = CapitalAllowanceCalculator.get_rule(allowance_class)
        opening_wdv = round2(opening_wdv)
        if opening_wdv <= 0:
            return AllowanceResult(opening_wdv, ZERO, ZERO, opening_wdv)

        initial = ZERO
        if is_acquisition_year:
            initial = min(round2(to_decimal(allowable_cost) * rule.initial_rate), opening_wdv)

        remaining = opening_wdv - initial
        annual = min(round2(remaining * rule.annual_rate), remaining)

        return AllowanceResult(
            opening_wdv=opening_wdv,
            initial_allowance=initial,
            annual_allowance=annual,
            closing_wdv=remaining - annual,
        )

    @staticmethod
    def first_year(allowance_class: CapitalAllowanceClass, cost: Decimal) -> AllowanceResult:
        allowable = CapitalAllowanceCalculator.allowable_cost(allowance_class, cost)
        return CapitalAllowanceCalculator.calculate_year(
            allowance_class, allowable, allowable, is_acquisition_year=True,
        )

    @staticmethod
    def build_schedule(
        allowance_class: CapitalAllowanceClass,
        cost: Decimal,
        start_year: int,
        years: Optional[int] = None,
    ) -> AllowanceSchedule:
        """
        Preview the allowance claims year by year.

        Stops when the WDV reaches zero, when rounding leaves nothing to
        claim, or after `years` rows (default: the class's typical life).
        """
        rule = CapitalAllowanceCalculator.get_rule(allowance_class)
        allowable = CapitalAllowanceCalculator.allowable_cost(allowance_class, cost)
        schedule = AllowanceSchedule(
            allowance_class=CapitalAllowanceClass(allowance_class),
            cost=round2(cost),
            allowable_cost=allowable,
        )

        wdv = allowable
        for offset in range(years or rule.typical_life_years):
            if wdv <= 0:
                break
            result = CapitalAllowanceCalculator.calculate_year(
                allowance_class, allowable, wdv, is_acquisition_year=(offset == 0),
            )
            if result.total_allowance <= 0:
                break
            schedule.rows.append(ScheduleRow(
                year=start_year + offset,
                opening_wdv=result.opening_wdv,
                initial_allowance=result.initial_allowance,
                annual_allowance=result.annual_allowance,
                total_allowance=result.total_allowance,
                closing_wdv=result.closing_wdv,
            ))
            wdv = result.closing_wdv

        return schedule

    @staticmethod
    def balancing_adjustment(
        proceeds: Decimal,
        written_down_value: Decimal,
        allowances_claimed: Decimal,
    ) -> BalancingAdjustment:
        """Balancing charge (capped at allowances claimed) or balancing allowance."""
        proceeds = round2(proceeds)
        written_down_value = round2(written_down_value)
        allowances_claimed = round2(allowances_claimed)

        amount = proceeds - written_down_value
        charge = ZERO
        allowance = ZERO
        if amount > 0:
            charge = min(amount, allowances_claimed)
        elif amount < 0:
            allowance = -amount

        return BalancingAdjustment(
            proceeds=proceeds,
            written_down_value=written_down_value,
            allowances_claimed=allowances_claimed,
            balancing_amount=amount,
            balancing_charge=charge,
            balancing_allowance=allowance,
        )


class BookDepreciationCalculator:
    """Accounting (book) depreciation for one year."""

    @staticmethod
    def annual_depreciation(
        method: DepreciationMethod,
        total_cost: Decimal,
        residual_value: Decimal,
        net_book_value: Decimal,
        useful_life_years: Optional[int] = None,
        rate_percent: Optional[Decimal] = None,
    ) -> Decimal:
        """
        Depreciation charge for the year, rounded to the cent.

        Straight line spreads (cost - residual) evenly over the useful life;
        reducing balance applies rate_percent to the opening NBV. Either way
        the charge stops at the residual value.
        """
        total_cost = to_decimal(total_cost)
        residual_value = to_decimal(residual_value)
        net_book_value = to_decimal(net_book_value)

        headroom = net_book_value - residual_value
        if headroom <= 0:
            return ZERO

        if method == DepreciationMethod.STRAIGHT_LINE:
            if not useful_life_years or useful_life_years <= 0:
                return ZERO
            charge = round2((total_cost - residual_value) / useful_life_years)
        elif method == DepreciationMethod.REDUCING_BALANCE:
            if not rate_percent or to_decimal(rate_percent) <= 0:
                return ZERO
            charge = round2(net_book_value * to_decimal(rate_percent) / 100)
        else:
            return ZERO

        return min(charge, round2(headroom))
