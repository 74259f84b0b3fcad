"""
Ledger Engine - Payroll Router

Employees and statutory termination gratuity.
"""

import uuid
from dataclasses import asdict
from typing import List

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_engine.dependencies import RequestContext, get_db, get_request_context
from ledger_engine.schemas.payroll import (
    EmployeeCreate,
    EmployeeResponse,
    GratuityRequest,
    GratuityResponse,
    PayrollRunResponse,
)
from ledger_engine.services.payroll_service import PayrollService
from ledger_engine.services.tax_calculators.gratuity import GratuityResult
from ledger_engine.utils.error_handling import AppException

router = APIRouter(prefix="/api/v1/employees", tags=["Payroll"])


def _gratuity_response(employee_id: uuid.UUID, result: GratuityResult) -> GratuityResponse:
    return GratuityResponse(employee_id=employee_id, breakdown=result.breakdown, **asdict(result))


@router.post("", response_model=EmployeeResponse, status_code=status.HTTP_201_CREATED)
async def create_employee(
    data: EmployeeCreate,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    service = PayrollService(db)
    try:
        employee = await service.create_employee(ctx.tenant_id, data, ctx.user_id)
        await db.commit()
        return employee
    except AppException:
        await db.rollback()
        raise


@router.get("", response_model=List[EmployeeResponse])
async def list_employees(
    active_only: bool = Query(True),
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    service = PayrollService(db)
    return await service.list_employees(ctx.tenant_id, active_only)


@router.get("/{employee_id}", response_model=EmployeeResponse)
async def get_employee(
    employee_id: uuid.UUID = Path(..., description="Employee ID"),
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    service = PayrollService(db)
    return await service.get_employee(ctx.tenant_id, employee_id)


@router.post("/{employee_id}/gratuity/estimate", response_model=GratuityResponse)
async def estimate_gratuity(
    data: GratuityRequest,
    employee_id: uuid.UUID = Path(..., description="Employee ID"),
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    """
    Gratuity the employee would receive on the given date.

    Two weeks' pay per completed year of service, counting at most five
    years. Redundancy and resignation need two years of service.
    """
    service = PayrollService(db)
    result = await service.estimate_gratuity(ctx.tenant_id, employee_id, data)
    return _gratuity_response(employee_id, result)


@router.post("/{employee_id}/gratuity", response_model=PayrollRunResponse)
async def process_gratuity(
    data: GratuityRequest,
    employee_id: uuid.UUID = Path(..., description="Employee ID"),
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    """Pay the gratuity through a special payroll run and record the termination."""
    service = PayrollService(db)
    try:
        _, run = await service.process_gratuity(ctx.tenant_id, employee_id, data, ctx.user_id)
        await db.commit()
        return run
    except AppException:
        await db.rollback()
        raise
