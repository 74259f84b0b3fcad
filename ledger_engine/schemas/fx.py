"""
Ledger Engine - Foreign Exchange Schemas
"""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _currency_code(v: str) -> str:
    v = v.strip().upper()
    if len(v) != 3 or not v.isalpha():
        raise ValueError('Currency must be a 3-letter ISO code')
    return v


# =============================================================================
# EXCHANGE RATES
# =============================================================================

class ExchangeRateCreate(BaseModel):
    """Schema for recording an exchange rate."""
    from_currency: str
    to_currency: str = "JMD"
    rate: Decimal = Field(..., gt=0)
    rate_date: date
    source: Optional[str] = Field(default="manual", max_length=50)

    @field_validator('from_currency', 'to_currency')
    @classmethod
    def normalize_currency(cls, v: str) -> str:
        return _currency_code(v)


class ExchangeRateResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    from_currency: str
    to_currency: str
    rate: Decimal
    rate_date: date
    source: Optional[str] = None


class RateLookupResponse(BaseModel):
    from_currency: str
    to_currency: str
    as_of: date
    rate: Optional[Decimal] = None


# =============================================================================
# BANK ACCOUNTS
# =============================================================================

class BankAccountCreate(BaseModel):
    """Schema for registering a bank account."""
    account_name: str = Field(..., min_length=1, max_length=255)
    bank_name: Optional[str] = Field(None, max_length=255)
    account_number: Optional[str] = Field(None, max_length=50)
    currency: str = "JMD"
    current_balance: Decimal = Decimal("0.00")
    original_exchange_rate: Optional[Decimal] = Field(None, gt=0)
    gl_account_id: Optional[UUID] = None

    @field_validator('currency')
    @classmethod
    def normalize_currency(cls, v: str) -> str:
        return _currency_code(v)


class BankAccountResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    account_name: str
    bank_name: Optional[str] = None
    account_number: Optional[str] = None
    currency: str
    current_balance: Decimal
    original_exchange_rate: Optional[Decimal] = None
    is_active: bool
    gl_account_id: Optional[UUID] = None
    created_at: datetime


# =============================================================================
# REVALUATION
# =============================================================================

class RevaluationRequest(BaseModel):
    year: int = Field(..., ge=1900, le=2999)
    month: int = Field(..., ge=1, le=12)


class RevaluationLineResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    bank_account_id: UUID
    account_name: str
    currency: str
    foreign_balance: Decimal
    previous_rate: Decimal
    current_rate: Decimal
    previous_jmd_value: Decimal
    current_jmd_value: Decimal
    unrealized_gain_loss: Decimal


class SkippedAccountResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    bank_account_id: UUID
    account_name: str
    currency: str
    reason: str


class RevaluationSummaryResponse(BaseModel):
    """Run summary: processed accounts, skipped accounts with reasons, total."""
    model_config = ConfigDict(from_attributes=True)

    revaluation_month: date
    is_preview: bool
    processed: List[RevaluationLineResponse]
    skipped: List[SkippedAccountResponse]
    total_unrealized_gain_loss: Decimal
    processed_count: int
    skipped_count: int


class RevaluationEntryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    bank_account_id: UUID
    revaluation_month: date
    currency: str
    previous_rate: Decimal
    current_rate: Decimal
    foreign_balance: Decimal
    previous_jmd_value: Decimal
    current_jmd_value: Decimal
    unrealized_gain_loss: Decimal
    updated_at: datetime
