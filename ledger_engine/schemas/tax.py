"""
Ledger Engine - Tax Schemas

GCT input credits, GCT returns and capital allowance previews.
"""

from datetime import date
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from ledger_engine.models.expense import ExpenseCategory
from ledger_engine.models.fixed_asset import CapitalAllowanceClass
from ledger_engine.models.sales import GCTRateCategory
from ledger_engine.services.tax_calculators.gct_service import GCTReturnPosition


class InputCreditRequest(BaseModel):
    """Inputs for one purchase's GCT input credit."""
    gct_amount: Decimal = Field(..., ge=0)
    category: ExpenseCategory
    total_amount: Decimal = Field(default=Decimal("0"), ge=0)
    is_capital_goods: bool = False
    mixed_supply_ratio: Optional[Decimal] = Field(None, ge=0, le=1)


class InputCreditResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    gct_amount: Decimal
    claimable_amount: Decimal
    restricted_amount: Decimal
    deferred_amount: Decimal
    restriction_applied: str
    restriction_rate: Decimal
    requires_phased_recovery: bool


class MixedSupplyRequest(BaseModel):
    taxable_supplies: Decimal
    total_supplies: Decimal


class MixedSupplyResponse(BaseModel):
    ratio: Decimal


class OutputTaxBucketResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    rate_category: GCTRateCategory
    rate: Decimal
    taxable_amount: Decimal
    gct_amount: Decimal


class GCTReturnResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    tenant_id: UUID
    period_start: date
    period_end: date
    output_buckets: List[OutputTaxBucketResponse]
    total_output_tax: Decimal
    total_input_gct: Decimal
    total_claimable_input: Decimal
    total_restricted_input: Decimal
    total_deferred_input: Decimal
    purchases_count: int
    phased_recovery_count: int
    mixed_supply_ratio: Optional[Decimal] = None
    net_gct: Decimal
    position: GCTReturnPosition


class AllowancePreviewRequest(BaseModel):
    """Capital allowance schedule for a prospective purchase."""
    allowance_class: CapitalAllowanceClass
    cost: Decimal = Field(..., gt=0)
    start_year: int = Field(..., ge=1900, le=2999)
    years: Optional[int] = Field(None, gt=0, le=100)
