"""
Ledger Engine - Sales Invoice Models

Invoices carry GCT per line so output tax can be bucketed by rate.
"""

import uuid
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from sqlalchemy import (
    Date, ForeignKey, Integer, Numeric, String, Enum as SQLEnum, UniqueConstraint
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ledger_engine.models.base import BaseModel, AuditMixin, TenantMixin


class GCTRateCategory(str, Enum):
    """Jamaican GCT rate buckets."""
    STANDARD = "standard"
    TELECOM = "telecom"
    TOURISM = "tourism"
    ZERO_RATED = "zero_rated"
    EXEMPT = "exempt"


class InvoiceStatus(str, Enum):
    DRAFT = "draft"
    POSTED = "posted"
    VOID = "void"


class SalesInvoice(BaseModel, TenantMixin, AuditMixin):
    """Customer invoice."""

    __tablename__ = "sales_invoices"

    invoice_number: Mapped[str] = mapped_column(String(50), nullable=False)
    invoice_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    customer_name: Mapped[str] = mapped_column(String(255), nullable=False)

    subtotal: Mapped[Decimal] = mapped_column(Numeric(18, 2), default=Decimal("0.00"), nullable=False)
    gct_amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), default=Decimal("0.00"), nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), default=Decimal("0.00"), nullable=False)

    status: Mapped[InvoiceStatus] = mapped_column(
        SQLEnum(InvoiceStatus), default=InvoiceStatus.DRAFT, nullable=False, index=True,
    )
    journal_entry_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("journal_entries.id", ondelete="SET NULL"),
        nullable=True,
    )

    lines: Mapped[List["SalesInvoiceLine"]] = relationship(
        "SalesInvoiceLine",
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="SalesInvoiceLine.line_number",
    )

    __table_args__ = (
        UniqueConstraint('tenant_id', 'invoice_number', name='uq_sales_invoice_tenant_number'),
    )


class SalesInvoiceLine(BaseModel):
    """Invoice line with its GCT bucket."""

    __tablename__ = "sales_invoice_lines"

    invoice_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("sales_invoices.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    line_number: Mapped[int] = mapped_column(Integer, nullable=False)
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    quantity: Mapped[Decimal] = mapped_column(Numeric(18, 3), default=Decimal("1"), nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    gct_rate_category: Mapped[GCTRateCategory] = mapped_column(
        SQLEnum(GCTRateCategory), default=GCTRateCategory.STANDARD, nullable=False,
    )
    gct_amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), default=Decimal("0.00"), nullable=False)

    invoice: Mapped["SalesInvoice"] = relationship("SalesInvoice", back_populates="lines")
