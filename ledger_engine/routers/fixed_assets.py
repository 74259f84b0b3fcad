"""
Ledger Engine - Fixed Assets Router

API endpoints for the fixed asset register:
- Asset registration and listing
- Capital allowance schedules
- Annual depreciation run
- Disposals with balancing charge / allowance
"""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_engine.dependencies import RequestContext, get_db, get_request_context
from ledger_engine.models.fixed_asset import AssetStatus, CapitalAllowanceClass
from ledger_engine.schemas.fixed_asset import (
    AllowanceScheduleResponse,
    AssetRegisterSummary,
    DepreciationEntryResponse,
    DepreciationRunRequest,
    DepreciationRunResponse,
    DisposalRequest,
    DisposalResponse,
    FixedAssetCreate,
    FixedAssetResponse,
)
from ledger_engine.services.fixed_asset_service import FixedAssetService
from ledger_engine.utils.error_handling import AppException

router = APIRouter(prefix="/api/v1/fixed-assets", tags=["Fixed Assets"])


# ============================================================================
# ASSET REGISTER
# ============================================================================

@router.post("", response_model=FixedAssetResponse, status_code=status.HTTP_201_CREATED)
async def create_asset(
    data: FixedAssetCreate,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    """Add an asset to the register."""
    service = FixedAssetService(db)
    try:
        asset = await service.create_asset(ctx.tenant_id, data, ctx.user_id)
        await db.commit()
        return asset
    except AppException:
        await db.rollback()
        raise


@router.get("", response_model=List[FixedAssetResponse])
async def list_assets(
    asset_status: Optional[AssetStatus] = Query(None, alias="status"),
    allowance_class: Optional[CapitalAllowanceClass] = Query(None),
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    service = FixedAssetService(db)
    return await service.list_assets(ctx.tenant_id, asset_status, allowance_class)


@router.get("/summary", response_model=AssetRegisterSummary)
async def get_register_summary(
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    """Register totals: cost, accumulated depreciation, NBV and tax WDV."""
    service = FixedAssetService(db)
    return await service.get_register_summary(ctx.tenant_id)


@router.get("/{asset_id}", response_model=FixedAssetResponse)
async def get_asset(
    asset_id: uuid.UUID = Path(..., description="Asset ID"),
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    service = FixedAssetService(db)
    return await service.get_asset(ctx.tenant_id, asset_id)


# ============================================================================
# CAPITAL ALLOWANCES & DEPRECIATION
# ============================================================================

@router.get("/{asset_id}/allowance-schedule", response_model=AllowanceScheduleResponse)
async def get_allowance_schedule(
    asset_id: uuid.UUID = Path(..., description="Asset ID"),
    years: Optional[int] = Query(None, gt=0, le=100),
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    """Projected capital allowances by year until the allowable cost is written off."""
    service = FixedAssetService(db)
    return await service.get_allowance_schedule(ctx.tenant_id, asset_id, years)


@router.get("/{asset_id}/depreciation", response_model=List[DepreciationEntryResponse])
async def get_depreciation_entries(
    asset_id: uuid.UUID = Path(..., description="Asset ID"),
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    service = FixedAssetService(db)
    return await service.get_depreciation_entries(ctx.tenant_id, asset_id)


@router.post("/depreciation-runs", response_model=DepreciationRunResponse)
async def run_depreciation(
    data: DepreciationRunRequest,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    """
    Run annual depreciation for every active asset.

    Assets already processed for the year are skipped, so the run can be
    repeated safely.
    """
    service = FixedAssetService(db)
    try:
        result = await service.run_depreciation(
            ctx.tenant_id, data.fiscal_year, ctx.user_id, post_to_gl=data.post_to_gl,
        )
        await db.commit()
        return result
    except AppException:
        await db.rollback()
        raise


# ============================================================================
# DISPOSAL
# ============================================================================

@router.post("/{asset_id}/dispose", response_model=DisposalResponse)
async def dispose_asset(
    data: DisposalRequest,
    asset_id: uuid.UUID = Path(..., description="Asset ID"),
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    """
    Dispose of an asset.

    Records book gain/loss and the balancing charge or allowance against the
    tax written-down value.
    """
    service = FixedAssetService(db)
    try:
        record = await service.dispose_asset(ctx.tenant_id, asset_id, data, ctx.user_id)
        await db.commit()
        return record
    except AppException:
        await db.rollback()
        raise


@router.get("/{asset_id}/disposal", response_model=DisposalResponse)
async def get_disposal(
    asset_id: uuid.UUID = Path(..., description="Asset ID"),
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    service = FixedAssetService(db)
    record = await service.get_disposal(ctx.tenant_id, asset_id)
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Asset has not been disposed",
        )
    return record
