"""
Ledger Engine - Sales Invoices Router

Issue, post and void sales invoices.
"""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_engine.dependencies import RequestContext, get_db, get_request_context
from ledger_engine.models.sales import InvoiceStatus
from ledger_engine.schemas.sales import InvoiceVoidRequest, SalesInvoiceCreate, SalesInvoiceResponse
from ledger_engine.services.sales_service import SalesService
from ledger_engine.utils.error_handling import AppException

router = APIRouter(prefix="/api/v1/invoices", tags=["Sales Invoices"])


@router.post("", response_model=SalesInvoiceResponse, status_code=status.HTTP_201_CREATED)
async def create_invoice(
    data: SalesInvoiceCreate,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    """Issue a sales invoice; GCT is charged per line at its rate category."""
    service = SalesService(db)
    try:
        invoice = await service.create_invoice(ctx.tenant_id, data, ctx.user_id)
        await db.commit()
        return invoice
    except AppException:
        await db.rollback()
        raise


@router.get("", response_model=List[SalesInvoiceResponse])
async def list_invoices(
    invoice_status: Optional[InvoiceStatus] = Query(None, alias="status"),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    service = SalesService(db)
    return await service.list_invoices(ctx.tenant_id, invoice_status, limit, offset)


@router.get("/{invoice_id}", response_model=SalesInvoiceResponse)
async def get_invoice(
    invoice_id: uuid.UUID = Path(..., description="Invoice ID"),
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    service = SalesService(db)
    return await service.get_invoice(ctx.tenant_id, invoice_id)


@router.post("/{invoice_id}/post", response_model=SalesInvoiceResponse)
async def post_invoice(
    invoice_id: uuid.UUID = Path(..., description="Invoice ID"),
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    """Post a DRAFT invoice: Dr receivable, Cr revenue and GCT payable."""
    service = SalesService(db)
    try:
        invoice = await service.post_invoice(ctx.tenant_id, invoice_id, ctx.user_id)
        await db.commit()
        return invoice
    except AppException:
        await db.rollback()
        raise


@router.post("/{invoice_id}/void", response_model=SalesInvoiceResponse)
async def void_invoice(
    data: InvoiceVoidRequest,
    invoice_id: uuid.UUID = Path(..., description="Invoice ID"),
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    """Void an invoice and reverse its journal entry."""
    service = SalesService(db)
    try:
        invoice = await service.void_invoice(ctx.tenant_id, invoice_id, data.reason, ctx.user_id)
        await db.commit()
        return invoice
    except AppException:
        await db.rollback()
        raise
