"""
Ledger Engine - Tax Router

Jamaican statutory tax calculations:
- GCT input credit split for a purchase
- Mixed supply apportionment ratio
- GCT return for a period
- Capital allowance preview for a prospective purchase
"""

from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_engine.dependencies import RequestContext, get_db, get_request_context
from ledger_engine.schemas.fixed_asset import AllowanceScheduleResponse
from ledger_engine.schemas.tax import (
    AllowancePreviewRequest,
    GCTReturnResponse,
    InputCreditRequest,
    InputCreditResponse,
    MixedSupplyRequest,
    MixedSupplyResponse,
)
from ledger_engine.services.tax_calculators.capital_allowance import CapitalAllowanceCalculator
from ledger_engine.services.tax_calculators.gct_service import GCTCalculator, GCTService

router = APIRouter(prefix="/api/v1/tax", tags=["Tax"])


# ============================================================================
# GCT
# ============================================================================

@router.post("/gct/input-credit", response_model=InputCreditResponse)
async def calculate_input_credit(
    data: InputCreditRequest,
    ctx: RequestContext = Depends(get_request_context),
):
    """
    Split the GCT paid on a purchase into claimable, restricted and deferred.

    Restricted categories (motor vehicles, entertainment) claim 50%;
    capital goods above the threshold are deferred for phased recovery.
    """
    return GCTCalculator.calculate_claimable_credit(
        data.gct_amount,
        data.category.value,
        total_amount=data.total_amount,
        is_capital_goods=data.is_capital_goods,
        mixed_supply_ratio=data.mixed_supply_ratio,
    )


@router.post("/gct/mixed-supply-ratio", response_model=MixedSupplyResponse)
async def calculate_mixed_supply_ratio(
    data: MixedSupplyRequest,
    ctx: RequestContext = Depends(get_request_context),
):
    """Taxable share of total supplies, used to apportion input credits."""
    return MixedSupplyResponse(
        ratio=GCTCalculator.calculate_mixed_supply_ratio(data.taxable_supplies, data.total_supplies),
    )


@router.get("/gct/return", response_model=GCTReturnResponse)
async def get_gct_return(
    start_date: date = Query(..., description="Period start"),
    end_date: date = Query(..., description="Period end"),
    apply_mixed_supply: bool = Query(False),
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    """GCT return from posted invoices and expenses in the period."""
    service = GCTService(db)
    return await service.calculate_return(ctx.tenant_id, start_date, end_date, apply_mixed_supply)


# ============================================================================
# CAPITAL ALLOWANCES
# ============================================================================

@router.post("/capital-allowances/preview", response_model=AllowanceScheduleResponse)
async def preview_capital_allowances(
    data: AllowancePreviewRequest,
    ctx: RequestContext = Depends(get_request_context),
):
    """Capital allowance schedule for a purchase that has not been registered yet."""
    return CapitalAllowanceCalculator.build_schedule(
        data.allowance_class,
        data.cost,
        data.start_year,
        data.years,
    )
