"""
Ledger Engine - Foreign Exchange (FX) Router

API endpoints for multi-currency operations:
- Exchange rate management
- Foreign-currency bank accounts
- Month-end revaluation (run, preview, history)
"""

import uuid
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_engine.config import settings
from ledger_engine.dependencies import RequestContext, get_db, get_request_context
from ledger_engine.schemas.fx import (
    BankAccountCreate,
    BankAccountResponse,
    ExchangeRateCreate,
    ExchangeRateResponse,
    RateLookupResponse,
    RevaluationEntryResponse,
    RevaluationRequest,
    RevaluationSummaryResponse,
)
from ledger_engine.services.fx_service import FXService
from ledger_engine.utils.error_handling import AppException

router = APIRouter(prefix="/api/v1/fx", tags=["Foreign Exchange (FX)"])


# ============================================================================
# EXCHANGE RATE MANAGEMENT
# ============================================================================

@router.get("/exchange-rates", response_model=List[ExchangeRateResponse])
async def list_exchange_rates(
    from_currency: Optional[str] = Query(None, min_length=3, max_length=3),
    to_currency: Optional[str] = Query(None, min_length=3, max_length=3),
    limit: int = Query(100, ge=1, le=1000),
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    service = FXService(db)
    return await service.list_exchange_rates(ctx.tenant_id, from_currency, to_currency, limit)


@router.post("/exchange-rates", response_model=ExchangeRateResponse, status_code=status.HTTP_201_CREATED)
async def record_exchange_rate(
    data: ExchangeRateCreate,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    """
    Create or update an exchange rate.

    If a rate already exists for the currency pair and date, it is replaced.
    """
    service = FXService(db)
    try:
        rate = await service.record_exchange_rate(ctx.tenant_id, data)
        await db.commit()
        return rate
    except AppException:
        await db.rollback()
        raise


@router.get("/exchange-rates/{from_currency}", response_model=RateLookupResponse)
async def get_exchange_rate(
    from_currency: str = Path(..., min_length=3, max_length=3),
    to_currency: Optional[str] = Query(None, min_length=3, max_length=3),
    as_of: Optional[date] = Query(None, description="Rate date, defaults to today"),
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    """
    Get the exchange rate for a currency pair.

    Returns the most recent rate on or before the date.
    """
    as_of = as_of or date.today()
    to_currency = (to_currency or settings.home_currency).upper()
    service = FXService(db)
    rate = await service.get_exchange_rate(ctx.tenant_id, from_currency, to_currency, as_of)

    if rate is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No exchange rate found for {from_currency.upper()}/{to_currency}",
        )
    return RateLookupResponse(
        from_currency=from_currency.upper(),
        to_currency=to_currency,
        as_of=as_of,
        rate=rate,
    )


# ============================================================================
# BANK ACCOUNTS
# ============================================================================

@router.get("/bank-accounts", response_model=List[BankAccountResponse])
async def list_bank_accounts(
    foreign_only: bool = Query(False),
    include_inactive: bool = Query(False),
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    service = FXService(db)
    return await service.list_bank_accounts(ctx.tenant_id, foreign_only, include_inactive)


@router.post("/bank-accounts", response_model=BankAccountResponse, status_code=status.HTTP_201_CREATED)
async def create_bank_account(
    data: BankAccountCreate,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    service = FXService(db)
    try:
        account = await service.create_bank_account(ctx.tenant_id, data)
        await db.commit()
        return account
    except AppException:
        await db.rollback()
        raise


@router.get("/bank-accounts/{bank_account_id}", response_model=BankAccountResponse)
async def get_bank_account(
    bank_account_id: uuid.UUID = Path(..., description="Bank account ID"),
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    service = FXService(db)
    return await service.get_bank_account(ctx.tenant_id, bank_account_id)


# ============================================================================
# REVALUATION
# ============================================================================

@router.post("/revaluations", response_model=RevaluationSummaryResponse)
async def revalue_month(
    data: RevaluationRequest,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    """
    Revalue foreign-currency bank balances at month end.

    Re-running a month replaces that month's entries. Accounts without a
    rate are reported as skipped.
    """
    service = FXService(db)
    try:
        summary = await service.revalue_month(ctx.tenant_id, data.year, data.month)
        await db.commit()
        return summary
    except AppException:
        await db.rollback()
        raise


@router.post("/revaluations/preview", response_model=RevaluationSummaryResponse)
async def preview_revaluation(
    data: RevaluationRequest,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    """Compute a month-end revaluation without saving it."""
    service = FXService(db)
    return await service.preview_revaluation(ctx.tenant_id, data.year, data.month)


@router.get("/revaluations", response_model=List[RevaluationEntryResponse])
async def get_revaluation_history(
    bank_account_id: Optional[uuid.UUID] = Query(None),
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    service = FXService(db)
    return await service.get_revaluation_history(ctx.tenant_id, bank_account_id)
