"""
Ledger Engine - GCT Tests

Input credit rules and the GCT return for a period.
"""

import pytest
from datetime import date
from decimal import Decimal

from ledger_engine.models.expense import ExpenseCategory
from ledger_engine.models.sales import GCTRateCategory
from ledger_engine.schemas.expense import ExpenseCreate
from ledger_engine.schemas.sales import SalesInvoiceCreate, SalesInvoiceLineCreate
from ledger_engine.services.expense_service import ExpenseService
from ledger_engine.services.sales_service import SalesService
from ledger_engine.services.tax_calculators.gct_service import (
    GCTCalculator,
    GCTReturnPosition,
    GCTService,
)
from ledger_engine.utils.error_handling import InvalidDateRangeException


class TestOutputGCT:
    """Test output tax per rate category."""

    @pytest.mark.parametrize("category,expected", [
        (GCTRateCategory.STANDARD, Decimal("150.00")),
        (GCTRateCategory.TELECOM, Decimal("250.00")),
        (GCTRateCategory.TOURISM, Decimal("100.00")),
        (GCTRateCategory.ZERO_RATED, Decimal("0.00")),
        (GCTRateCategory.EXEMPT, Decimal("0.00")),
    ])
    def test_rates(self, category, expected):
        assert GCTCalculator.calculate_gct(Decimal("1000.00"), category) == expected


class TestInputCredit:
    """Test claimable input credit rules."""

    def test_full_credit(self):
        result = GCTCalculator.calculate_claimable_credit(Decimal("1500.00"), "office_supplies")
        assert result.claimable_amount == Decimal("1500.00")
        assert result.restricted_amount == Decimal("0.00")
        assert result.restriction_applied == "none"

    def test_restricted_category_half(self):
        result = GCTCalculator.calculate_claimable_credit(Decimal("301.00"), ExpenseCategory.ENTERTAINMENT)
        assert result.claimable_amount == Decimal("150.50")
        assert result.restricted_amount == Decimal("150.50")
        assert result.restriction_applied == "category_50_percent"

    def test_capital_goods_at_threshold_not_deferred(self):
        result = GCTCalculator.calculate_claimable_credit(
            Decimal("15000.00"), "equipment", total_amount=Decimal("100000.00"), is_capital_goods=True,
        )
        assert not result.requires_phased_recovery
        assert result.claimable_amount == Decimal("15000.00")

    def test_capital_goods_above_threshold_deferred(self):
        result = GCTCalculator.calculate_claimable_credit(
            Decimal("15000.15"), "equipment", total_amount=Decimal("100001.00"), is_capital_goods=True,
        )
        assert result.requires_phased_recovery
        assert result.claimable_amount == Decimal("0.00")
        assert result.deferred_amount == Decimal("15000.15")
        assert result.restricted_amount == Decimal("0.00")

    def test_restriction_and_mixed_supply_combine(self):
        result = GCTCalculator.calculate_claimable_credit(
            Decimal("1000.00"), "meals", mixed_supply_ratio=Decimal("0.80"),
        )
        assert result.claimable_amount == Decimal("400.00")
        assert result.restriction_applied == "combined"
        assert result.restriction_rate == Decimal("0.400")

    def test_zero_gct(self):
        result = GCTCalculator.calculate_claimable_credit(Decimal("0"), "meals")
        assert result.claimable_amount == Decimal("0")

    def test_mixed_supply_ratio(self):
        assert GCTCalculator.calculate_mixed_supply_ratio(Decimal("2"), Decimal("3")) == Decimal("0.67")
        assert GCTCalculator.calculate_mixed_supply_ratio(Decimal("5"), Decimal("0")) == Decimal("1")
        assert GCTCalculator.calculate_mixed_supply_ratio(Decimal("5"), Decimal("4")) == Decimal("1")

    def test_net_position(self):
        assert GCTCalculator.net_position(Decimal("10"), Decimal("4")) == GCTReturnPosition.PAYABLE
        assert GCTCalculator.net_position(Decimal("4"), Decimal("10")) == GCTReturnPosition.REFUNDABLE
        assert GCTCalculator.net_position(Decimal("4"), Decimal("4")) == GCTReturnPosition.NIL


class TestGCTReturn:
    """Test period aggregation over posted documents."""

    async def _record_period(self, db_session, tenant_id):
        await SalesService(db_session).create_invoice(tenant_id, SalesInvoiceCreate(
            invoice_date=date(2026, 7, 5),
            customer_name="Ocho Rios Deli",
            lines=[
                SalesInvoiceLineCreate(description="Catering", unit_price=Decimal("10000.00")),
                SalesInvoiceLineCreate(
                    description="Medical supplies",
                    unit_price=Decimal("5000.00"),
                    gct_rate_category=GCTRateCategory.EXEMPT,
                ),
            ],
        ))
        expenses = ExpenseService(db_session)
        for category, gct, post in (
            (ExpenseCategory.OFFICE_SUPPLIES, "600.00", True),
            (ExpenseCategory.MEALS, "200.00", True),
            (ExpenseCategory.RENT, "900.00", False),
        ):
            await expenses.create_expense(tenant_id, ExpenseCreate(
                expense_date=date(2026, 7, 10),
                category=category,
                description=f"{category.value} for July",
                amount=Decimal("4000.00"),
                gct_amount=Decimal(gct),
                post_to_gl=post,
            ))

    @pytest.mark.asyncio
    async def test_return_payable(self, db_session, tenant_id, chart):
        await self._record_period(db_session, tenant_id)

        gct_return = await GCTService(db_session).calculate_return(
            tenant_id, date(2026, 7, 1), date(2026, 7, 31),
        )

        buckets = {bucket.rate_category: bucket for bucket in gct_return.output_buckets}
        assert buckets[GCTRateCategory.STANDARD].taxable_amount == Decimal("10000.00")
        assert buckets[GCTRateCategory.EXEMPT].taxable_amount == Decimal("5000.00")
        assert gct_return.total_output_tax == Decimal("1500.00")
        assert gct_return.purchases_count == 2
        assert gct_return.total_input_gct == Decimal("800.00")
        assert gct_return.total_claimable_input == Decimal("700.00")
        assert gct_return.total_restricted_input == Decimal("100.00")
        assert gct_return.net_gct == Decimal("800.00")
        assert gct_return.position == GCTReturnPosition.PAYABLE

    @pytest.mark.asyncio
    async def test_return_with_mixed_supply(self, db_session, tenant_id, chart):
        await self._record_period(db_session, tenant_id)

        gct_return = await GCTService(db_session).calculate_return(
            tenant_id, date(2026, 7, 1), date(2026, 7, 31), apply_mixed_supply=True,
        )
        assert gct_return.mixed_supply_ratio == Decimal("0.67")
        assert gct_return.total_claimable_input == Decimal("469.00")
        assert gct_return.net_gct == Decimal("1031.00")

    @pytest.mark.asyncio
    async def test_claimable_input_matches_ledger(self, db_session, tenant_id, chart):
        await ExpenseService(db_session).create_expense(tenant_id, ExpenseCreate(
            expense_date=date(2026, 7, 10),
            category=ExpenseCategory.OFFICE_SUPPLIES,
            description="Shared printer toner",
            amount=Decimal("1000.00"),
            gct_amount=Decimal("150.00"),
            mixed_supply_ratio=Decimal("0.5"),
        ))
        assert chart["1150"].current_balance == Decimal("75.00")

        service = GCTService(db_session)
        gct_return = await service.calculate_return(tenant_id, date(2026, 7, 1), date(2026, 7, 31))
        assert gct_return.total_claimable_input == chart["1150"].current_balance
        assert gct_return.total_restricted_input == Decimal("75.00")

        # A ratio recorded on the expense is not apportioned again
        await SalesService(db_session).create_invoice(tenant_id, SalesInvoiceCreate(
            invoice_date=date(2026, 7, 5),
            customer_name="Ocho Rios Deli",
            lines=[
                SalesInvoiceLineCreate(description="Catering", unit_price=Decimal("5000.00")),
                SalesInvoiceLineCreate(
                    description="Medical supplies",
                    unit_price=Decimal("5000.00"),
                    gct_rate_category=GCTRateCategory.EXEMPT,
                ),
            ],
        ))
        gct_return = await service.calculate_return(
            tenant_id, date(2026, 7, 1), date(2026, 7, 31), apply_mixed_supply=True,
        )
        assert gct_return.mixed_supply_ratio == Decimal("0.50")
        assert gct_return.total_claimable_input == Decimal("75.00")

    @pytest.mark.asyncio
    async def test_empty_period_is_nil(self, db_session, tenant_id, chart):
        gct_return = await GCTService(db_session).calculate_return(
            tenant_id, date(2026, 8, 1), date(2026, 8, 31),
        )
        assert gct_return.position == GCTReturnPosition.NIL
        assert gct_return.net_gct == Decimal("0.00")

    @pytest.mark.asyncio
    async def test_inverted_period_rejected(self, db_session, tenant_id):
        with pytest.raises(InvalidDateRangeException):
            await GCTService(db_session).calculate_return(tenant_id, date(2026, 8, 31), date(2026, 8, 1))
