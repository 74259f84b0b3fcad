"""
Ledger Engine - GCT Calculator Service

General Consumption Tax (Jamaica) output and input credit computations.

GCT Rates:
- Standard: 15%
- Telecommunications: 25%
- Tourism: 10%
- Zero-rated / Exempt: 0%

Input credit restrictions:
- Entertainment, motor vehicle, restaurant, meals, vehicle maintenance and
  fuel: 50% of the GCT paid
- Capital goods above JMD 100,000: flagged for phased recovery; nothing is
  claimable in the period of purchase
- Mixed supply businesses: credit apportioned by taxable / total supplies

Figures are carried unrounded through aggregation and rounded once per total.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Dict, List, Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_engine.config import settings
from ledger_engine.models.expense import Expense, ExpenseStatus
from ledger_engine.models.sales import (
    GCTRateCategory, InvoiceStatus, SalesInvoice, SalesInvoiceLine,
)
from ledger_engine.utils.error_handling import InvalidDateRangeException
from ledger_engine.utils.money import ONE, ZERO, round2, to_decimal

logger = logging.getLogger(__name__)


GCT_RATES: Dict[GCTRateCategory, Decimal] = {
    GCTRateCategory.STANDARD: Decimal("0.15"),
    GCTRateCategory.TELECOM: Decimal("0.25"),
    GCTRateCategory.TOURISM: Decimal("0.10"),
    GCTRateCategory.ZERO_RATED: Decimal("0"),
    GCTRateCategory.EXEMPT: Decimal("0"),
}

# Categories whose input credit is capped at RESTRICTED_CREDIT_RATE
RESTRICTED_CATEGORIES = frozenset({
    "entertainment",
    "motor_vehicle",
    "restaurant",
    "meals",
    "vehicle_maintenance",
    "vehicle_fuel",
})

RESTRICTED_CREDIT_RATE = Decimal("0.5")


class GCTReturnPosition(str, Enum):
    PAYABLE = "payable"
    REFUNDABLE = "refundable"
    NIL = "nil"


@dataclass
class InputCreditResult:
    """Split of the GCT paid on one purchase."""
    gct_amount: Decimal
    claimable_amount: Decimal
    restricted_amount: Decimal
    deferred_amount: Decimal
    restriction_applied: str = "none"
    restriction_rate: Decimal = ONE
    requires_phased_recovery: bool = False


@dataclass
class OutputTaxBucket:
    rate_category: GCTRateCategory
    rate: Decimal
    taxable_amount: Decimal
    gct_amount: Decimal


@dataclass
class GCTReturn:
    """GCT position for a reporting period."""
    tenant_id: uuid.UUID
    period_start: date
    period_end: date
    output_buckets: List[OutputTaxBucket] = field(default_factory=list)
    total_output_tax: Decimal = ZERO
    total_input_gct: Decimal = ZERO
    total_claimable_input: Decimal = ZERO
    total_restricted_input: Decimal = ZERO
    total_deferred_input: Decimal = ZERO
    purchases_count: int = 0
    phased_recovery_count: int = 0
    mixed_supply_ratio: Optional[Decimal] = None
    net_gct: Decimal = ZERO
    position: GCTReturnPosition = GCTReturnPosition.NIL


class GCTCalculator:
    """
    GCT calculation utilities. Pure, no database access.
    """

    @staticmethod
    def rate_for(rate_category: GCTRateCategory) -> Decimal:
        return GCT_RATES[GCTRateCategory(rate_category)]

    @staticmethod
    def calculate_gct(amount: Decimal, rate_category: GCTRateCategory = GCTRateCategory.STANDARD) -> Decimal:
        """Output GCT on a net amount, rounded to the cent."""
        return round2(to_decimal(amount) * GCTCalculator.rate_for(rate_category))

    @staticmethod
    def is_restricted_category(category: str) -> bool:
        return str(getattr(category, "value", category)).lower() in RESTRICTED_CATEGORIES

    @staticmethod
    def calculate_mixed_supply_ratio(taxable_supplies: Decimal, total_supplies: Decimal) -> Decimal:
        """Taxable / total supplies, clamped to [0, 1]; 1 when there are no supplies."""
        total_supplies = to_decimal(total_supplies)
        if total_supplies <= 0:
            return ONE
        ratio = round2(to_decimal(taxable_supplies) / total_supplies)
        return min(ONE, max(Decimal("0"), ratio))

    @staticmethod
    def calculate_claimable_credit(
        gct_amount: Decimal,
        category: str,
        total_amount: Decimal = ZERO,
        is_capital_goods: bool = False,
        mixed_supply_ratio: Optional[Decimal] = None,
        capital_goods_threshold: Optional[Decimal] = None,
    ) -> InputCreditResult:
        """
        Determine the claimable input credit for a purchase.

        Restricted categories are cut to 50% first. Capital goods above the
        threshold then defer the whole remaining credit for phased recovery
        (no recovery schedule is produced). Otherwise a mixed-supply ratio
        below 1 apportions the credit.
        """
        gct = to_decimal(gct_amount)
        if gct <= 0:
            return InputCreditResult(
                gct_amount=gct,
                claimable_amount=ZERO,
                restricted_amount=ZERO,
                deferred_amount=ZERO,
            )

        threshold = capital_goods_threshold
        if threshold is None:
            threshold = settings.gct_capital_goods_threshold

        credit = gct
        restriction_applied = "none"
        restriction_rate = ONE

        if GCTCalculator.is_restricted_category(category):
            credit = gct * RESTRICTED_CREDIT_RATE
            restriction_applied = "category_50_percent"
            restriction_rate = RESTRICTED_CREDIT_RATE

        claimable = credit
        deferred = ZERO
        requires_phased_recovery = False

        if is_capital_goods and to_decimal(total_amount) > threshold:
            deferred = credit
            claimable = ZERO
            requires_phased_recovery = True
            restriction_applied = "capital_goods_deferred"
        elif mixed_supply_ratio is not None:
            ratio = min(ONE, max(Decimal("0"), to_decimal(mixed_supply_ratio)))
            if ratio < ONE:
                claimable = credit * ratio
                restriction_applied = "mixed_supply" if restriction_applied == "none" else "combined"
                restriction_rate = restriction_rate * ratio

        claimable = round2(claimable)
        deferred = round2(deferred)

        return InputCreditResult(
            gct_amount=gct,
            claimable_amount=claimable,
            restricted_amount=gct - claimable - deferred,
            deferred_amount=deferred,
            restriction_applied=restriction_applied,
            restriction_rate=restriction_rate,
            requires_phased_recovery=requires_phased_recovery,
        )

    @staticmethod
    def net_position(total_output_tax: Decimal, total_claimable_input: Decimal) -> GCTReturnPosition:
        net = to_decimal(total_output_tax) - to_decimal(total_claimable_input)
        if net > 0:
            return GCTReturnPosition.PAYABLE
        if net < 0:
            return GCTReturnPosition.REFUNDABLE
        return GCTReturnPosition.NIL


class GCTService:
    """Service for GCT return aggregation over posted sales and purchases."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.calculator = GCTCalculator()

    async def get_output_buckets(
        self,
        tenant_id: uuid.UUID,
        start_date: date,
        end_date: date,
    ) -> List[OutputTaxBucket]:
        """Taxable sales and GCT collected per rate bucket from posted invoices."""
        result = await self.db.execute(
            select(
                SalesInvoiceLine.gct_rate_category,
                func.sum(SalesInvoiceLine.amount),
                func.sum(SalesInvoiceLine.gct_amount),
            )
            .join(SalesInvoice, SalesInvoice.id == SalesInvoiceLine.invoice_id)
            .where(
                SalesInvoice.tenant_id == tenant_id,
                SalesInvoice.status == InvoiceStatus.POSTED,
                SalesInvoice.invoice_date >= start_date,
                SalesInvoice.invoice_date <= end_date,
            )
            .group_by(SalesInvoiceLine.gct_rate_category)
        )
        sums = {
            GCTRateCategory(category): (to_decimal(amount or 0), to_decimal(gct or 0))
            for category, amount, gct in result.all()
        }

        buckets = []
        for category in GCTRateCategory:
            amount, gct = sums.get(category, (ZERO, ZERO))
            buckets.append(OutputTaxBucket(
                rate_category=category,
                rate=GCT_RATES[category],
                taxable_amount=round2(amount),
                gct_amount=round2(gct),
            ))
        return buckets

    async def calculate_return(
        self,
        tenant_id: uuid.UUID,
        start_date: date,
        end_date: date,
        apply_mixed_supply: bool = False,
    ) -> GCTReturn:
        """
        Prepare the GCT return for a period.

        Net GCT = output tax - claimable input credit; positive is payable,
        negative refundable. Input credits are the claimable split stored on
        each posted expense, which is what the expense entries debited to
        the GCT input account. With apply_mixed_supply the period's own
        supplies give an apportionment ratio, applied to the claimable credit
        of expenses recorded without a ratio of their own.
        """
        if start_date > end_date:
            raise InvalidDateRangeException(str(start_date), str(end_date))

        buckets = await self.get_output_buckets(tenant_id, start_date, end_date)
        total_output = round2(sum((bucket.gct_amount for bucket in buckets), ZERO))

        ratio = None
        if apply_mixed_supply:
            total_supplies = sum((bucket.taxable_amount for bucket in buckets), ZERO)
            exempt = sum(
                (bucket.taxable_amount for bucket in buckets
                 if bucket.rate_category == GCTRateCategory.EXEMPT),
                ZERO,
            )
            ratio = GCTCalculator.calculate_mixed_supply_ratio(total_supplies - exempt, total_supplies)

        expenses = (await self.db.execute(
            select(Expense).where(
                Expense.tenant_id == tenant_id,
                Expense.status == ExpenseStatus.POSTED,
                Expense.expense_date >= start_date,
                Expense.expense_date <= end_date,
                Expense.gct_amount > 0,
            )
        )).scalars().all()

        input_gct = ZERO
        claimable = ZERO
        restricted = ZERO
        deferred = ZERO
        phased = 0
        for expense in expenses:
            # The split stored on the expense is what was booked to 1150
            expense_claimable = expense.gct_claimable
            expense_restricted = expense.gct_restricted
            if ratio is not None and expense.mixed_supply_ratio is None:
                apportioned = expense_claimable * ratio
                expense_restricted += expense_claimable - apportioned
                expense_claimable = apportioned
            input_gct += expense.gct_amount
            claimable += expense_claimable
            restricted += expense_restricted
            deferred += expense.gct_deferred
            if expense.requires_phased_recovery:
                phased += 1

        total_claimable = round2(claimable)
        net = total_output - total_claimable

        gct_return = GCTReturn(
            tenant_id=tenant_id,
            period_start=start_date,
            period_end=end_date,
            output_buckets=buckets,
            total_output_tax=total_output,
            total_input_gct=round2(input_gct),
            total_claimable_input=total_claimable,
            total_restricted_input=round2(restricted),
            total_deferred_input=round2(deferred),
            purchases_count=len(expenses),
            phased_recovery_count=phased,
            mixed_supply_ratio=ratio,
            net_gct=net,
            position=GCTCalculator.net_position(total_output, total_claimable),
        )
        logger.info(
            f"GCT return {start_date}..{end_date} for tenant {tenant_id}: "
            f"output {total_output}, input {total_claimable}, {gct_return.position.value} {abs(net)}"
        )
        return gct_return
