"""
Ledger Engine - Payroll Service

Employees and statutory termination gratuity.

A processed gratuity is paid through its own SPECIAL payroll run holding a
single tax-exempt entry: gross = net = gratuity, with no PAYE, NIS, NHT or
education tax withheld.
"""

import logging
import uuid
from typing import List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_engine.models.payroll import (
    Employee,
    PayrollEntry,
    PayrollRun,
    PayrollRunStatus,
    PayrollRunType,
    TerminationReason,
)
from ledger_engine.schemas.payroll import EmployeeCreate, GratuityRequest
from ledger_engine.services.sequence_service import SequenceService
from ledger_engine.services.tax_calculators.gratuity import GratuityCalculator, GratuityResult
from ledger_engine.utils.error_handling import (
    BusinessRuleException,
    DuplicateEntryException,
    ErrorCode,
    NotFoundException,
)
from ledger_engine.utils.money import ZERO, round2

logger = logging.getLogger(__name__)


class PayrollService:
    """Service for employees and gratuity payments."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.sequences = SequenceService(db)

    # ===========================================
    # EMPLOYEES
    # ===========================================

    async def create_employee(
        self,
        tenant_id: uuid.UUID,
        data: EmployeeCreate,
        user_id: Optional[uuid.UUID] = None,
    ) -> Employee:
        existing = await self.db.execute(
            select(Employee.id).where(
                Employee.tenant_id == tenant_id,
                Employee.employee_number == data.employee_number,
            )
        )
        if existing.scalar_one_or_none():
            raise DuplicateEntryException("Employee", "employee_number", data.employee_number)

        employee = Employee(
            tenant_id=tenant_id,
            employee_number=data.employee_number,
            first_name=data.first_name,
            last_name=data.last_name,
            hire_date=data.hire_date,
            base_salary=round2(data.base_salary),
            pay_frequency=data.pay_frequency,
            is_active=True,
            created_by_id=user_id,
            updated_by_id=user_id,
        )
        self.db.add(employee)
        await self.db.flush()
        return employee

    async def get_employee(
        self,
        tenant_id: uuid.UUID,
        employee_id: uuid.UUID,
        for_update: bool = False,
    ) -> Employee:
        query = select(Employee).where(
            Employee.id == employee_id,
            Employee.tenant_id == tenant_id,
        )
        if for_update:
            query = query.with_for_update().execution_options(populate_existing=True)
        result = await self.db.execute(query)
        employee = result.scalar_one_or_none()
        if employee is None:
            raise NotFoundException("Employee", employee_id)
        return employee

    async def list_employees(self, tenant_id: uuid.UUID, active_only: bool = True) -> List[Employee]:
        query = select(Employee).where(Employee.tenant_id == tenant_id)
        if active_only:
            query = query.where(Employee.is_active == True)
        result = await self.db.execute(query.order_by(Employee.employee_number))
        return list(result.scalars().all())

    # ===========================================
    # GRATUITY
    # ===========================================

    async def estimate_gratuity(
        self,
        tenant_id: uuid.UUID,
        employee_id: uuid.UUID,
        request: GratuityRequest,
    ) -> GratuityResult:
        """Gratuity as of a date. Never changes any record."""
        employee = await self.get_employee(tenant_id, employee_id)
        return GratuityCalculator.calculate(
            employee.base_salary,
            employee.pay_frequency,
            employee.hire_date,
            request.termination_date,
            request.reason,
        )

    async def process_gratuity(
        self,
        tenant_id: uuid.UUID,
        employee_id: uuid.UUID,
        request: GratuityRequest,
        user_id: Optional[uuid.UUID] = None,
    ) -> Tuple[GratuityResult, PayrollRun]:
        """
        Pay the gratuity through a SPECIAL payroll run.

        The employee is marked terminated unless the reason is RETIREMENT.
        ESTIMATE requests and ineligible results are rejected.
        """
        if request.reason == TerminationReason.ESTIMATE:
            raise BusinessRuleException(
                message="An estimate cannot be processed; give the actual termination reason",
                rule="gratuity_reason_required",
                code=ErrorCode.NOT_ELIGIBLE,
            )

        employee = await self.get_employee(tenant_id, employee_id, for_update=True)
        result = GratuityCalculator.calculate(
            employee.base_salary,
            employee.pay_frequency,
            employee.hire_date,
            request.termination_date,
            request.reason,
        )
        if not result.eligible:
            raise BusinessRuleException(
                message=f"{employee.full_name} is not eligible for gratuity: {result.ineligible_reason}",
                rule="gratuity_eligibility",
                code=ErrorCode.NOT_ELIGIBLE,
                details={"years_of_service": result.years_of_service},
            )

        run = PayrollRun(
            tenant_id=tenant_id,
            run_number=await self.sequences.next_number(tenant_id, "payroll_run", "PR"),
            run_type=PayrollRunType.SPECIAL,
            status=PayrollRunStatus.PROCESSED,
            pay_date=request.termination_date,
            period_start=request.termination_date,
            period_end=request.termination_date,
            description=f"Termination gratuity: {employee.full_name} ({request.reason.value})",
            total_gross=result.amount,
            total_net=result.amount,
            entries=[
                PayrollEntry(
                    tenant_id=tenant_id,
                    employee_id=employee.id,
                    payment_type="gratuity",
                    gross_pay=result.amount,
                    paye=ZERO,
                    nis=ZERO,
                    nht=ZERO,
                    education_tax=ZERO,
                    net_pay=result.amount,
                    is_tax_exempt=True,
                    notes=result.breakdown,
                ),
            ],
            created_by_id=user_id,
            updated_by_id=user_id,
        )
        self.db.add(run)

        if request.reason != TerminationReason.RETIREMENT:
            employee.is_active = False
            employee.termination_date = request.termination_date
            employee.termination_reason = request.reason
            employee.updated_by_id = user_id

        await self.db.flush()

        logger.info(
            f"Processed gratuity {result.amount} for employee {employee.employee_number} in run {run.run_number}"
        )
        return result, run
