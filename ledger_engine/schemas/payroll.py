"""
Ledger Engine - Payroll Schemas

Employees and termination gratuity.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from ledger_engine.models.payroll import (
    PayFrequency,
    PayrollRunStatus,
    PayrollRunType,
    TerminationReason,
)


class EmployeeCreate(BaseModel):
    """Schema for adding an employee."""
    employee_number: str = Field(..., min_length=1, max_length=50)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    hire_date: date
    base_salary: Decimal = Field(..., gt=0)
    pay_frequency: PayFrequency = PayFrequency.MONTHLY


class EmployeeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    employee_number: str
    first_name: str
    last_name: str
    full_name: str
    hire_date: date
    base_salary: Decimal
    pay_frequency: PayFrequency
    is_active: bool
    termination_date: Optional[date] = None
    termination_reason: Optional[TerminationReason] = None
    created_at: datetime


class GratuityRequest(BaseModel):
    """Termination date and reason used for the gratuity calculation."""
    termination_date: date
    reason: TerminationReason = TerminationReason.ESTIMATE


class GratuityResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    employee_id: UUID
    eligible: bool
    years_of_service: int
    capped_years: int
    weekly_rate: Decimal
    weeks_entitled: int
    amount: Decimal
    ineligible_reason: Optional[str] = None
    breakdown: str


class PayrollEntryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    employee_id: UUID
    payment_type: str
    gross_pay: Decimal
    paye: Decimal
    nis: Decimal
    nht: Decimal
    education_tax: Decimal
    net_pay: Decimal
    is_tax_exempt: bool
    notes: Optional[str] = None


class PayrollRunResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    run_number: str
    run_type: PayrollRunType
    status: PayrollRunStatus
    pay_date: date
    period_start: date
    period_end: date
    description: Optional[str] = None
    total_gross: Decimal
    total_net: Decimal
    entries: List[PayrollEntryResponse] = []
