"""
Ledger Engine - Stock Count Router

Physical stock counts: open a count, add items, record quantities,
approve, and post the net variance to the general ledger.
"""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_engine.dependencies import RequestContext, get_db, get_request_context
from ledger_engine.models.inventory import StockCountStatus
from ledger_engine.schemas.accounting import JournalEntryResponse
from ledger_engine.schemas.inventory import (
    ItemCountUpdate,
    StockCountCreate,
    StockCountItemCreate,
    StockCountItemResponse,
    StockCountPostRequest,
    StockCountResponse,
)
from ledger_engine.services.inventory_service import InventoryService
from ledger_engine.utils.error_handling import AppException

router = APIRouter(prefix="/api/v1/stock-counts", tags=["Inventory"])


@router.post("", response_model=StockCountResponse, status_code=status.HTTP_201_CREATED)
async def create_stock_count(
    data: StockCountCreate,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    service = InventoryService(db)
    stock_count = await service.create_stock_count(ctx.tenant_id, data, ctx.user_id)
    await db.commit()
    return stock_count


@router.get("", response_model=List[StockCountResponse])
async def list_stock_counts(
    count_status: Optional[StockCountStatus] = Query(None, alias="status"),
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    service = InventoryService(db)
    return await service.list_stock_counts(ctx.tenant_id, count_status)


@router.get("/{stock_count_id}", response_model=StockCountResponse)
async def get_stock_count(
    stock_count_id: uuid.UUID = Path(..., description="Stock count ID"),
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    service = InventoryService(db)
    return await service.get_stock_count(ctx.tenant_id, stock_count_id)


@router.post(
    "/{stock_count_id}/items",
    response_model=StockCountItemResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_item(
    data: StockCountItemCreate,
    stock_count_id: uuid.UUID = Path(..., description="Stock count ID"),
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    """Add an item with its expected quantity and unit cost."""
    service = InventoryService(db)
    try:
        item = await service.add_item(ctx.tenant_id, stock_count_id, data, ctx.user_id)
        await db.commit()
        return item
    except AppException:
        await db.rollback()
        raise


@router.put("/{stock_count_id}/items/{item_id}", response_model=StockCountResponse)
async def record_count(
    data: ItemCountUpdate,
    stock_count_id: uuid.UUID = Path(..., description="Stock count ID"),
    item_id: uuid.UUID = Path(..., description="Stock count item ID"),
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    """
    Record the physical quantity of an item.

    The item's variance is recomputed and the count moves to IN_PROGRESS,
    or PENDING_REVIEW once every item has been counted.
    """
    service = InventoryService(db)
    try:
        stock_count = await service.record_count(
            ctx.tenant_id, stock_count_id, item_id, data.counted_quantity, ctx.user_id,
        )
        await db.commit()
        return stock_count
    except AppException:
        await db.rollback()
        raise


@router.post("/{stock_count_id}/approve", response_model=StockCountResponse)
async def approve_stock_count(
    stock_count_id: uuid.UUID = Path(..., description="Stock count ID"),
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    service = InventoryService(db)
    try:
        stock_count = await service.approve(ctx.tenant_id, stock_count_id, ctx.user_id)
        await db.commit()
        return stock_count
    except AppException:
        await db.rollback()
        raise


@router.post("/{stock_count_id}/cancel", response_model=StockCountResponse)
async def cancel_stock_count(
    stock_count_id: uuid.UUID = Path(..., description="Stock count ID"),
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    service = InventoryService(db)
    try:
        stock_count = await service.cancel(ctx.tenant_id, stock_count_id, ctx.user_id)
        await db.commit()
        return stock_count
    except AppException:
        await db.rollback()
        raise


@router.post("/{stock_count_id}/post", response_model=JournalEntryResponse)
async def post_stock_count(
    data: Optional[StockCountPostRequest] = None,
    stock_count_id: uuid.UUID = Path(..., description="Stock count ID"),
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    """
    Post the net variance of an APPROVED count.

    A surplus debits inventory and credits the variance account; a shortage
    does the reverse. Returns the journal entry.
    """
    service = InventoryService(db)
    try:
        entry = await service.post_variance(ctx.tenant_id, stock_count_id, ctx.user_id, data)
        await db.commit()
        return entry
    except AppException:
        await db.rollback()
        raise
