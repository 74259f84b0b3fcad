"""
Ledger Engine - Accounting Schemas

Pydantic schemas for GL accounts, journal entries and ledger reports.
Balance and line rules are enforced by AccountingService so in-process
callers and the API get the same error codes.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ledger_engine.models.accounting import (
    AccountType,
    JournalEntryStatus,
    JournalEntryType,
)
from ledger_engine.utils.tagged_value import to_python


# =============================================================================
# GL ACCOUNTS
# =============================================================================

class GLAccountCreate(BaseModel):
    """Schema for creating a GL account."""
    account_code: str = Field(..., min_length=1, max_length=20)
    account_name: str = Field(..., min_length=1, max_length=255)
    account_type: AccountType
    description: Optional[str] = None
    is_system_account: bool = False

    @field_validator('account_code')
    @classmethod
    def strip_code(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError('Account code cannot be blank')
        return v


class GLAccountResponse(BaseModel):
    """Schema for GL account response."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    tenant_id: UUID
    account_code: str
    account_name: str
    account_type: AccountType
    description: Optional[str] = None
    is_active: bool
    is_system_account: bool
    current_balance: Decimal
    created_at: datetime


# =============================================================================
# JOURNAL ENTRIES
# =============================================================================

class JournalLineCreate(BaseModel):
    """One debit or credit line."""
    account_id: UUID
    debit_amount: Decimal = Decimal("0.00")
    credit_amount: Decimal = Decimal("0.00")
    description: Optional[str] = Field(None, max_length=500)


class JournalEntryCreate(BaseModel):
    """Schema for creating a journal entry."""
    entry_date: date
    description: str = Field(..., min_length=1, max_length=500)
    reference: Optional[str] = Field(None, max_length=100)
    entry_type: JournalEntryType = JournalEntryType.MANUAL
    source_module: Optional[str] = None
    source_document_id: Optional[UUID] = None
    lines: List[JournalLineCreate]
    entry_metadata: Optional[Any] = None
    auto_post: bool = False


class JournalEntryUpdate(BaseModel):
    """Schema for updating a journal entry (draft only)."""
    entry_date: Optional[date] = None
    description: Optional[str] = Field(None, min_length=1, max_length=500)
    reference: Optional[str] = Field(None, max_length=100)
    lines: Optional[List[JournalLineCreate]] = None


class JournalVoidRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=1000)


class JournalLineResponse(BaseModel):
    """Schema for journal line response."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    line_number: int
    account_id: UUID
    description: Optional[str] = None
    debit_amount: Decimal
    credit_amount: Decimal


class JournalEntryResponse(BaseModel):
    """Schema for journal entry response."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    tenant_id: UUID
    entry_number: str
    entry_date: date
    entry_type: JournalEntryType
    description: str
    reference: Optional[str] = None
    source_module: Optional[str] = None
    source_document_id: Optional[UUID] = None
    status: JournalEntryStatus
    total_debit: Decimal
    total_credit: Decimal
    created_by_id: Optional[UUID] = None
    posted_at: Optional[datetime] = None
    posted_by_id: Optional[UUID] = None
    voided_at: Optional[datetime] = None
    voided_by_id: Optional[UUID] = None
    void_reason: Optional[str] = None
    entry_metadata: Optional[Any] = None
    lines: List[JournalLineResponse] = []

    @field_validator('entry_metadata', mode='before')
    @classmethod
    def unwrap_metadata(cls, v: Any) -> Any:
        if v is None or isinstance(v, dict):
            return v
        return to_python(v)


# =============================================================================
# REPORTS
# =============================================================================

class TrialBalanceItem(BaseModel):
    account_id: UUID
    account_code: str
    account_name: str
    account_type: AccountType
    debit_balance: Decimal
    credit_balance: Decimal


class TrialBalanceReport(BaseModel):
    tenant_id: UUID
    generated_at: datetime
    items: List[TrialBalanceItem]
    total_debits: Decimal
    total_credits: Decimal
    is_balanced: bool


class BalanceDiscrepancy(BaseModel):
    account_id: UUID
    account_code: str
    stored_balance: Decimal
    computed_balance: Decimal
    difference: Decimal


class BalanceVerificationReport(BaseModel):
    tenant_id: UUID
    accounts_checked: int
    discrepancies: List[BalanceDiscrepancy]

    @property
    def is_consistent(self) -> bool:
        return not self.discrepancies
