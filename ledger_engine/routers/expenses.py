"""
Ledger Engine - Expenses Router

Record expenses with their GCT input credit split and post them to the GL.
"""

import uuid
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_engine.dependencies import RequestContext, get_db, get_request_context
from ledger_engine.models.expense import ExpenseCategory, ExpenseStatus
from ledger_engine.schemas.expense import ExpenseCreate, ExpenseResponse
from ledger_engine.services.expense_service import ExpenseService
from ledger_engine.utils.error_handling import AppException

router = APIRouter(prefix="/api/v1/expenses", tags=["Expenses"])


@router.post("", response_model=ExpenseResponse, status_code=status.HTTP_201_CREATED)
async def create_expense(
    data: ExpenseCreate,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    """
    Record an expense.

    Claimable GCT is debited to the input tax account; restricted GCT is
    added to the expense. With post_to_gl off the expense stays DRAFT.
    """
    service = ExpenseService(db)
    try:
        expense = await service.create_expense(ctx.tenant_id, data, ctx.user_id)
        await db.commit()
        return expense
    except AppException:
        await db.rollback()
        raise


@router.get("", response_model=List[ExpenseResponse])
async def list_expenses(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    category: Optional[ExpenseCategory] = Query(None),
    expense_status: Optional[ExpenseStatus] = Query(None, alias="status"),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    service = ExpenseService(db)
    return await service.list_expenses(
        ctx.tenant_id,
        start_date=start_date,
        end_date=end_date,
        category=category,
        status=expense_status,
        limit=limit,
        offset=offset,
    )


@router.get("/{expense_id}", response_model=ExpenseResponse)
async def get_expense(
    expense_id: uuid.UUID = Path(..., description="Expense ID"),
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    service = ExpenseService(db)
    return await service.get_expense(ctx.tenant_id, expense_id)


@router.post("/{expense_id}/post", response_model=ExpenseResponse)
async def post_expense(
    expense_id: uuid.UUID = Path(..., description="Expense ID"),
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    """Post a DRAFT expense to the general ledger."""
    service = ExpenseService(db)
    try:
        expense = await service.post_expense(ctx.tenant_id, expense_id, ctx.user_id)
        await db.commit()
        return expense
    except AppException:
        await db.rollback()
        raise
