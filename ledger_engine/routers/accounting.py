"""
Ledger Engine - Accounting Router

API endpoints for the general ledger:
- Chart of accounts
- Journal entries (create, edit, post, void)
- Trial balance and balance verification
"""

import uuid
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_engine.dependencies import RequestContext, get_db, get_request_context
from ledger_engine.models.accounting import AccountType, JournalEntryStatus, JournalEntryType
from ledger_engine.schemas.accounting import (
    BalanceVerificationReport,
    GLAccountCreate,
    GLAccountResponse,
    JournalEntryCreate,
    JournalEntryResponse,
    JournalEntryUpdate,
    JournalVoidRequest,
    TrialBalanceReport,
)
from ledger_engine.services.accounting_service import AccountingService
from ledger_engine.utils.error_handling import AppException

router = APIRouter(prefix="/api/v1", tags=["General Ledger"])


# ============================================================================
# CHART OF ACCOUNTS
# ============================================================================

@router.get("/accounts", response_model=List[GLAccountResponse])
async def list_accounts(
    account_type: Optional[AccountType] = Query(None, description="Filter by account type"),
    include_inactive: bool = Query(False),
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    """Get the chart of accounts."""
    service = AccountingService(db)
    return await service.get_chart_of_accounts(ctx.tenant_id, account_type, include_inactive)


@router.post("/accounts", response_model=GLAccountResponse, status_code=status.HTTP_201_CREATED)
async def create_account(
    data: GLAccountCreate,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    """Create a new account in the chart of accounts."""
    service = AccountingService(db)
    try:
        account = await service.create_account(ctx.tenant_id, data, ctx.user_id)
        await db.commit()
        return account
    except AppException:
        await db.rollback()
        raise


@router.post("/accounts/initialize", response_model=List[GLAccountResponse])
async def initialize_chart_of_accounts(
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    """
    Seed the default Jamaican chart of accounts.

    Only missing codes are created; the response lists what was added.
    """
    service = AccountingService(db)
    accounts = await service.create_default_chart_of_accounts(ctx.tenant_id, ctx.user_id)
    await db.commit()
    return accounts


@router.get("/accounts/{account_id}", response_model=GLAccountResponse)
async def get_account(
    account_id: uuid.UUID = Path(..., description="Account ID"),
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    """Get account by ID."""
    service = AccountingService(db)
    return await service.get_account(ctx.tenant_id, account_id)


@router.post("/accounts/{account_id}/deactivate", response_model=GLAccountResponse)
async def deactivate_account(
    account_id: uuid.UUID = Path(..., description="Account ID"),
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    """Deactivate an account. Existing history is kept."""
    service = AccountingService(db)
    try:
        account = await service.deactivate_account(ctx.tenant_id, account_id, ctx.user_id)
        await db.commit()
        return account
    except AppException:
        await db.rollback()
        raise


# ============================================================================
# JOURNAL ENTRIES
# ============================================================================

@router.get("/journal-entries", response_model=List[JournalEntryResponse])
async def list_journal_entries(
    entry_status: Optional[JournalEntryStatus] = Query(None, alias="status"),
    entry_type: Optional[JournalEntryType] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    source_module: Optional[str] = Query(None),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    """List journal entries with filters."""
    service = AccountingService(db)
    return await service.get_journal_entries(
        ctx.tenant_id,
        status=entry_status,
        entry_type=entry_type,
        start_date=start_date,
        end_date=end_date,
        source_module=source_module,
        limit=limit,
        offset=offset,
    )


@router.post("/journal-entries", response_model=JournalEntryResponse, status_code=status.HTTP_201_CREATED)
async def create_journal_entry(
    data: JournalEntryCreate,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    """
    Create a journal entry.

    The entry is saved as DRAFT unless auto_post is set, in which case it is
    validated and posted in the same transaction.
    """
    service = AccountingService(db)
    try:
        entry = await service.create_journal_entry(ctx.tenant_id, data, ctx.user_id)
        await db.commit()
        return entry
    except AppException:
        await db.rollback()
        raise


@router.get("/journal-entries/{entry_id}", response_model=JournalEntryResponse)
async def get_journal_entry(
    entry_id: uuid.UUID = Path(..., description="Journal entry ID"),
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    service = AccountingService(db)
    return await service.get_journal_entry(ctx.tenant_id, entry_id)


@router.patch("/journal-entries/{entry_id}", response_model=JournalEntryResponse)
async def update_journal_entry(
    data: JournalEntryUpdate,
    entry_id: uuid.UUID = Path(..., description="Journal entry ID"),
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    """Update a DRAFT journal entry."""
    service = AccountingService(db)
    try:
        entry = await service.update_journal_entry(ctx.tenant_id, entry_id, data, ctx.user_id)
        await db.commit()
        return entry
    except AppException:
        await db.rollback()
        raise


@router.post("/journal-entries/{entry_id}/post", response_model=JournalEntryResponse)
async def post_journal_entry(
    entry_id: uuid.UUID = Path(..., description="Journal entry ID"),
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    """Post a DRAFT entry to the ledger, updating account balances."""
    service = AccountingService(db)
    try:
        entry = await service.post_journal_entry(ctx.tenant_id, entry_id, ctx.user_id)
        await db.commit()
        return entry
    except AppException:
        await db.rollback()
        raise


@router.post("/journal-entries/{entry_id}/void", response_model=JournalEntryResponse)
async def void_journal_entry(
    data: Optional[JournalVoidRequest] = None,
    entry_id: uuid.UUID = Path(..., description="Journal entry ID"),
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    """
    Void a journal entry.

    A POSTED entry has its balance effects reversed; a DRAFT entry is simply
    marked VOID.
    """
    service = AccountingService(db)
    try:
        entry = await service.void_journal_entry(
            ctx.tenant_id, entry_id, ctx.user_id, reason=data.reason if data else None,
        )
        await db.commit()
        return entry
    except AppException:
        await db.rollback()
        raise


@router.delete("/journal-entries/{entry_id}", response_model=JournalEntryResponse)
async def delete_journal_entry(
    entry_id: uuid.UUID = Path(..., description="Journal entry ID"),
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    """Delete a DRAFT entry. Posted entries must be voided instead."""
    service = AccountingService(db)
    try:
        entry = await service.delete_journal_entry(ctx.tenant_id, entry_id, ctx.user_id)
        await db.commit()
        return entry
    except AppException:
        await db.rollback()
        raise


# ============================================================================
# REPORTS
# ============================================================================

@router.get("/reports/trial-balance", response_model=TrialBalanceReport)
async def get_trial_balance(
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    """Trial balance from the running account balances."""
    service = AccountingService(db)
    return await service.get_trial_balance(ctx.tenant_id)


@router.get("/reports/balance-verification", response_model=BalanceVerificationReport)
async def verify_balances(
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    """Recompute every account balance from posted lines and report mismatches."""
    service = AccountingService(db)
    return await service.verify_account_balances(ctx.tenant_id)
