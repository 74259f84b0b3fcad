"""
Ledger Engine - Expense Models

Purchases recorded by the business, sized for GCT input credit and posted
to the general ledger when created.
"""

import uuid
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from sqlalchemy import (
    Boolean, Date, ForeignKey, Numeric, String, Text, Enum as SQLEnum, UniqueConstraint
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from ledger_engine.models.base import BaseModel, AuditMixin, TenantMixin
from ledger_engine.utils.tagged_value import TaggedValueType


class ExpenseCategory(str, Enum):
    """Expense categories, each mapped to a default GL account."""
    ADVERTISING = "advertising"
    BANK_FEES = "bank_fees"
    CONTRACTOR = "contractor"
    ENTERTAINMENT = "entertainment"
    EQUIPMENT = "equipment"
    INSURANCE = "insurance"
    INVENTORY = "inventory"
    MEALS = "meals"
    MOTOR_VEHICLE = "motor_vehicle"
    OFFICE_SUPPLIES = "office_supplies"
    PROFESSIONAL_SERVICES = "professional_services"
    RENT = "rent"
    REPAIRS = "repairs"
    RESTAURANT = "restaurant"
    SALARIES = "salaries"
    SOFTWARE = "software"
    TAXES = "taxes"
    TELEPHONE = "telephone"
    TRAVEL = "travel"
    UTILITIES = "utilities"
    VEHICLE = "vehicle"
    VEHICLE_FUEL = "vehicle_fuel"
    VEHICLE_MAINTENANCE = "vehicle_maintenance"
    OTHER = "other"


class PaymentMethod(str, Enum):
    """How the expense was settled; selects the credited account."""
    CASH = "cash"
    BANK = "bank"
    CREDIT = "credit"


class ExpenseStatus(str, Enum):
    DRAFT = "draft"
    POSTED = "posted"


class Expense(BaseModel, TenantMixin, AuditMixin):
    """
    A purchase with its GCT split.

    amount is the net (GCT-exclusive) figure. gct_claimable + gct_restricted
    + gct_deferred always equals gct_amount.
    """

    __tablename__ = "expenses"

    expense_number: Mapped[str] = mapped_column(String(50), nullable=False)
    expense_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    category: Mapped[ExpenseCategory] = mapped_column(SQLEnum(ExpenseCategory), nullable=False)
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    vendor_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    gct_amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), default=Decimal("0.00"), nullable=False)
    gct_claimable: Mapped[Decimal] = mapped_column(Numeric(18, 2), default=Decimal("0.00"), nullable=False)
    gct_restricted: Mapped[Decimal] = mapped_column(Numeric(18, 2), default=Decimal("0.00"), nullable=False)
    gct_deferred: Mapped[Decimal] = mapped_column(Numeric(18, 2), default=Decimal("0.00"), nullable=False)
    mixed_supply_ratio: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(8, 4), nullable=True,
        comment="Apportionment applied when the split was fixed",
    )
    requires_phased_recovery: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_capital_purchase: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    payment_method: Mapped[PaymentMethod] = mapped_column(
        SQLEnum(PaymentMethod), default=PaymentMethod.CASH, nullable=False,
    )
    status: Mapped[ExpenseStatus] = mapped_column(
        SQLEnum(ExpenseStatus), default=ExpenseStatus.DRAFT, nullable=False, index=True,
    )

    expense_account_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("gl_accounts.id", ondelete="SET NULL"),
        nullable=True,
        comment="Overrides the category's default expense account",
    )
    journal_entry_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("journal_entries.id", ondelete="SET NULL"),
        nullable=True,
    )

    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    attributes: Mapped[Optional[object]] = mapped_column(TaggedValueType, nullable=True)

    __table_args__ = (
        UniqueConstraint('tenant_id', 'expense_number', name='uq_expense_tenant_number'),
    )

    @property
    def total_amount(self) -> Decimal:
        return self.amount + self.gct_amount
