"""
Ledger Engine - Stock Count Models

Physical inventory counts. Item variances roll up to a single GL posting
once the count is approved.
"""

import uuid
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from sqlalchemy import (
    Date, DateTime, ForeignKey, Numeric, String, Text, Enum as SQLEnum, UniqueConstraint
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ledger_engine.models.base import BaseModel, AuditMixin, TenantMixin


class StockCountStatus(str, Enum):
    """Stock count lifecycle."""
    DRAFT = "draft"
    IN_PROGRESS = "in_progress"
    PENDING_REVIEW = "pending_review"
    APPROVED = "approved"
    POSTED = "posted"
    CANCELLED = "cancelled"


class StockCount(BaseModel, TenantMixin, AuditMixin):
    """A counting session over a set of inventory items."""

    __tablename__ = "stock_counts"

    count_number: Mapped[str] = mapped_column(String(50), nullable=False)
    count_date: Mapped[date] = mapped_column(Date, nullable=False)
    location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    status: Mapped[StockCountStatus] = mapped_column(
        SQLEnum(StockCountStatus),
        default=StockCountStatus.DRAFT,
        nullable=False,
        index=True,
    )

    # Summary, maintained from the item set
    total_items: Mapped[int] = mapped_column(default=0, nullable=False)
    items_counted: Mapped[int] = mapped_column(default=0, nullable=False)
    items_with_variance: Mapped[int] = mapped_column(default=0, nullable=False)
    total_variance_value: Mapped[Decimal] = mapped_column(
        Numeric(18, 2), default=Decimal("0.00"), nullable=False,
    )

    approved_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    approved_by_id: Mapped[Optional[uuid.UUID]] = mapped_column(UUID(as_uuid=True), nullable=True)
    posted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    journal_entry_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("journal_entries.id", ondelete="SET NULL"),
        nullable=True,
    )

    items: Mapped[List["StockCountItem"]] = relationship(
        "StockCountItem",
        back_populates="stock_count",
        cascade="all, delete-orphan",
        order_by="StockCountItem.item_code",
    )

    __table_args__ = (
        UniqueConstraint('tenant_id', 'count_number', name='uq_stock_count_tenant_number'),
    )


class StockCountItem(BaseModel):
    """Expected vs counted quantity for one item."""

    __tablename__ = "stock_count_items"

    stock_count_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("stock_counts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    item_code: Mapped[str] = mapped_column(String(50), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    expected_quantity: Mapped[Decimal] = mapped_column(Numeric(18, 3), nullable=False)
    counted_quantity: Mapped[Optional[Decimal]] = mapped_column(Numeric(18, 3), nullable=True)
    unit_cost: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)

    variance_quantity: Mapped[Decimal] = mapped_column(
        Numeric(18, 3), default=Decimal("0"), nullable=False,
    )
    variance_value: Mapped[Decimal] = mapped_column(
        Numeric(18, 2), default=Decimal("0.00"), nullable=False,
    )
    counted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    stock_count: Mapped["StockCount"] = relationship("StockCount", back_populates="items")

    __table_args__ = (
        UniqueConstraint('stock_count_id', 'item_code', name='uq_stock_count_item_code'),
    )

    @property
    def is_counted(self) -> bool:
        return self.counted_quantity is not None
