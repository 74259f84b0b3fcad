"""
Ledger Engine - Payroll Models

Employees and the payroll runs used for special (non-periodic) payments
such as termination gratuity.
"""

import uuid
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from sqlalchemy import (
    Boolean, Date, ForeignKey, Numeric, String, Text, Enum as SQLEnum, UniqueConstraint
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ledger_engine.models.base import BaseModel, AuditMixin, TenantMixin


class PayFrequency(str, Enum):
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"


class TerminationReason(str, Enum):
    """Reason used for gratuity eligibility. ESTIMATE never changes records."""
    REDUNDANCY = "redundancy"
    RESIGNATION = "resignation"
    RETIREMENT = "retirement"
    TERMINATION = "termination"
    ESTIMATE = "estimate"


class PayrollRunType(str, Enum):
    REGULAR = "regular"
    SPECIAL = "special"


class PayrollRunStatus(str, Enum):
    DRAFT = "draft"
    PROCESSED = "processed"


class Employee(BaseModel, TenantMixin, AuditMixin):
    """Employee master record."""

    __tablename__ = "employees"

    employee_number: Mapped[str] = mapped_column(String(50), nullable=False)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)

    hire_date: Mapped[date] = mapped_column(Date, nullable=False)
    base_salary: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    pay_frequency: Mapped[PayFrequency] = mapped_column(
        SQLEnum(PayFrequency), default=PayFrequency.MONTHLY, nullable=False,
    )

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    termination_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    termination_reason: Mapped[Optional[TerminationReason]] = mapped_column(
        SQLEnum(TerminationReason), nullable=True,
    )

    __table_args__ = (
        UniqueConstraint('tenant_id', 'employee_number', name='uq_employee_tenant_number'),
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class PayrollRun(BaseModel, TenantMixin, AuditMixin):
    """A batch of payroll entries paid together."""

    __tablename__ = "payroll_runs"

    run_number: Mapped[str] = mapped_column(String(50), nullable=False)
    run_type: Mapped[PayrollRunType] = mapped_column(
        SQLEnum(PayrollRunType), default=PayrollRunType.REGULAR, nullable=False,
    )
    status: Mapped[PayrollRunStatus] = mapped_column(
        SQLEnum(PayrollRunStatus), default=PayrollRunStatus.DRAFT, nullable=False,
    )
    pay_date: Mapped[date] = mapped_column(Date, nullable=False)
    period_start: Mapped[date] = mapped_column(Date, nullable=False)
    period_end: Mapped[date] = mapped_column(Date, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    total_gross: Mapped[Decimal] = mapped_column(Numeric(18, 2), default=Decimal("0.00"), nullable=False)
    total_net: Mapped[Decimal] = mapped_column(Numeric(18, 2), default=Decimal("0.00"), nullable=False)

    entries: Mapped[List["PayrollEntry"]] = relationship(
        "PayrollEntry",
        back_populates="payroll_run",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        UniqueConstraint('tenant_id', 'run_number', name='uq_payroll_run_tenant_number'),
    )


class PayrollEntry(BaseModel, TenantMixin):
    """One employee's pay in a run, with statutory withholdings."""

    __tablename__ = "payroll_entries"

    payroll_run_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("payroll_runs.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    employee_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("employees.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    payment_type: Mapped[str] = mapped_column(String(50), default="salary", nullable=False)
    gross_pay: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)

    # Statutory deductions
    paye: Mapped[Decimal] = mapped_column(Numeric(18, 2), default=Decimal("0.00"), nullable=False)
    nis: Mapped[Decimal] = mapped_column(Numeric(18, 2), default=Decimal("0.00"), nullable=False)
    nht: Mapped[Decimal] = mapped_column(Numeric(18, 2), default=Decimal("0.00"), nullable=False)
    education_tax: Mapped[Decimal] = mapped_column(Numeric(18, 2), default=Decimal("0.00"), nullable=False)

    net_pay: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    is_tax_exempt: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    payroll_run: Mapped["PayrollRun"] = relationship("PayrollRun", back_populates="entries")
    employee: Mapped["Employee"] = relationship("Employee")
