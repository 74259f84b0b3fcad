"""
Ledger Engine - Chart of Accounts & General Ledger Models

Double-entry accounting backbone:
- GL accounts (Assets, Liabilities, Equity, Income, Expenses)
- Journal entries with ordered debit/credit lines
- Per-tenant document counters

Every posting adapter in the engine writes through these tables.
"""

import uuid
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from sqlalchemy import (
    Boolean, Date, DateTime, ForeignKey, Integer, Numeric, String, Text,
    Enum as SQLEnum, UniqueConstraint, Index, CheckConstraint
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ledger_engine.models.base import BaseModel, AuditMixin, TenantMixin
from ledger_engine.utils.tagged_value import TaggedValueType


# =============================================================================
# ENUMS
# =============================================================================

class AccountType(str, Enum):
    """Main account types."""
    ASSET = "asset"
    LIABILITY = "liability"
    EQUITY = "equity"
    INCOME = "income"
    EXPENSE = "expense"


class NormalBalance(str, Enum):
    """Side that increases the account balance."""
    DEBIT = "debit"
    CREDIT = "credit"


DEBIT_NORMAL_TYPES = frozenset({AccountType.ASSET, AccountType.EXPENSE})


class JournalEntryStatus(str, Enum):
    """Journal entry lifecycle: DRAFT -> POSTED -> VOID, or DRAFT -> VOID."""
    DRAFT = "draft"
    POSTED = "posted"
    VOID = "void"


class JournalEntryType(str, Enum):
    """Origin of a journal entry."""
    MANUAL = "manual"
    EXPENSE = "expense"
    SALES = "sales"
    INVENTORY_ADJUSTMENT = "inventory_adjustment"
    DEPRECIATION = "depreciation"
    ASSET_DISPOSAL = "asset_disposal"
    FX_REVALUATION = "fx_revaluation"
    PAYROLL = "payroll"
    ADJUSTMENT = "adjustment"


# =============================================================================
# CHART OF ACCOUNTS
# =============================================================================

class GLAccount(BaseModel, TenantMixin, AuditMixin):
    """
    General ledger account.

    current_balance is a running total expressed on the account's normal side.
    Only posting and voiding journal entries change it.
    """

    __tablename__ = "gl_accounts"

    account_code: Mapped[str] = mapped_column(String(20), nullable=False)
    account_name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    account_type: Mapped[AccountType] = mapped_column(
        SQLEnum(AccountType),
        nullable=False,
        index=True,
    )

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    is_system_account: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False,
        comment="Seeded account used by automatic postings",
    )

    current_balance: Mapped[Decimal] = mapped_column(
        Numeric(precision=18, scale=2),
        default=Decimal("0.00"),
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint('tenant_id', 'account_code', name='uq_gl_account_tenant_code'),
        Index('ix_gl_accounts_tenant_type', 'tenant_id', 'account_type'),
    )

    @property
    def normal_balance(self) -> NormalBalance:
        if self.account_type in DEBIT_NORMAL_TYPES:
            return NormalBalance.DEBIT
        return NormalBalance.CREDIT

    def signed_delta(self, debit: Decimal, credit: Decimal) -> Decimal:
        """Balance change caused by a debit/credit pair on this account."""
        if self.normal_balance == NormalBalance.DEBIT:
            return debit - credit
        return credit - debit

    def __repr__(self) -> str:
        return f"<GLAccount {self.account_code} {self.account_name}>"


# =============================================================================
# JOURNAL ENTRIES
# =============================================================================

class JournalEntry(BaseModel, TenantMixin, AuditMixin):
    """
    Journal Entry - one balanced financial event.

    DRAFT entries are editable and have no balance effect. POSTED entries are
    immutable; voiding them re-applies every line with the opposite sign.
    """

    __tablename__ = "journal_entries"

    # Entry Identification
    entry_number: Mapped[str] = mapped_column(
        String(50), nullable=False,
        comment="Sequential per tenant (e.g., JE-00001)",
    )
    entry_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)

    entry_type: Mapped[JournalEntryType] = mapped_column(
        SQLEnum(JournalEntryType),
        default=JournalEntryType.MANUAL,
        nullable=False,
    )

    # Traceability
    source_module: Mapped[Optional[str]] = mapped_column(
        String(50), nullable=True,
        comment="Module that created this entry (expenses, inventory, etc.)",
    )
    source_document_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), nullable=True,
        comment="ID of the source document",
    )

    description: Mapped[str] = mapped_column(String(500), nullable=False)
    reference: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    total_debit: Mapped[Decimal] = mapped_column(
        Numeric(precision=18, scale=2),
        default=Decimal("0.00"),
        nullable=False,
    )
    total_credit: Mapped[Decimal] = mapped_column(
        Numeric(precision=18, scale=2),
        default=Decimal("0.00"),
        nullable=False,
    )

    status: Mapped[JournalEntryStatus] = mapped_column(
        SQLEnum(JournalEntryStatus),
        default=JournalEntryStatus.DRAFT,
        nullable=False,
        index=True,
    )

    # Posting details
    posted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    posted_by_id: Mapped[Optional[uuid.UUID]] = mapped_column(UUID(as_uuid=True), nullable=True)

    # Void details
    voided_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    voided_by_id: Mapped[Optional[uuid.UUID]] = mapped_column(UUID(as_uuid=True), nullable=True)
    void_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    entry_metadata: Mapped[Optional[object]] = mapped_column(
        TaggedValueType, nullable=True,
        comment="Tagged string/number/bool/map value",
    )

    # Relationships
    lines: Mapped[List["JournalLine"]] = relationship(
        "JournalLine",
        back_populates="journal_entry",
        cascade="all, delete-orphan",
        order_by="JournalLine.line_number",
    )

    __table_args__ = (
        UniqueConstraint('tenant_id', 'entry_number', name='uq_journal_entry_number'),
        Index('ix_journal_entries_source', 'source_module', 'source_document_id'),
        CheckConstraint('total_debit = total_credit', name='balanced_entry'),
    )

    @property
    def is_balanced(self) -> bool:
        return self.total_debit == self.total_credit


class JournalLine(BaseModel):
    """
    One debit or credit line of a journal entry.

    Exactly one of debit_amount / credit_amount is positive.
    """

    __tablename__ = "journal_lines"

    journal_entry_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("journal_entries.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    account_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("gl_accounts.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    line_number: Mapped[int] = mapped_column(Integer, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    debit_amount: Mapped[Decimal] = mapped_column(
        Numeric(precision=18, scale=2),
        default=Decimal("0.00"),
        nullable=False,
    )
    credit_amount: Mapped[Decimal] = mapped_column(
        Numeric(precision=18, scale=2),
        default=Decimal("0.00"),
        nullable=False,
    )

    # Relationships
    journal_entry: Mapped["JournalEntry"] = relationship("JournalEntry", back_populates="lines")
    account: Mapped["GLAccount"] = relationship("GLAccount")

    __table_args__ = (
        UniqueConstraint('journal_entry_id', 'line_number', name='uq_journal_line_number'),
        CheckConstraint(
            '(debit_amount > 0 AND credit_amount = 0) OR (credit_amount > 0 AND debit_amount = 0)',
            name='one_sided_line',
        ),
    )


# =============================================================================
# DOCUMENT COUNTERS
# =============================================================================

class NumberSequence(BaseModel, TenantMixin):
    """Per-tenant counter for human-readable document numbers."""

    __tablename__ = "number_sequences"

    sequence_name: Mapped[str] = mapped_column(String(50), nullable=False)
    last_value: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    __table_args__ = (
        UniqueConstraint('tenant_id', 'sequence_name', name='uq_number_sequence_tenant_name'),
    )
