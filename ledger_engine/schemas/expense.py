"""
Ledger Engine - Expense Schemas
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ledger_engine.models.expense import ExpenseCategory, ExpenseStatus, PaymentMethod
from ledger_engine.utils.tagged_value import to_python


class ExpenseCreate(BaseModel):
    """Schema for recording an expense. amount is net of GCT."""
    expense_date: date
    category: ExpenseCategory
    description: str = Field(..., min_length=1, max_length=500)
    vendor_name: Optional[str] = Field(None, max_length=255)
    amount: Decimal = Field(..., gt=0)
    gct_amount: Decimal = Field(default=Decimal("0"), ge=0)
    is_capital_purchase: bool = False
    mixed_supply_ratio: Optional[Decimal] = Field(None, ge=0, le=1)
    payment_method: PaymentMethod = PaymentMethod.BANK
    expense_account_id: Optional[UUID] = None
    notes: Optional[str] = None
    attributes: Optional[Dict[str, Any]] = None
    post_to_gl: bool = True


class ExpenseResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    expense_number: str
    expense_date: date
    category: ExpenseCategory
    description: str
    vendor_name: Optional[str] = None
    amount: Decimal
    gct_amount: Decimal
    gct_claimable: Decimal
    gct_restricted: Decimal
    gct_deferred: Decimal
    mixed_supply_ratio: Optional[Decimal] = None
    requires_phased_recovery: bool
    is_capital_purchase: bool
    payment_method: PaymentMethod
    status: ExpenseStatus
    expense_account_id: Optional[UUID] = None
    journal_entry_id: Optional[UUID] = None
    notes: Optional[str] = None
    attributes: Optional[Dict[str, Any]] = None
    created_at: datetime

    @field_validator('attributes', mode='before')
    @classmethod
    def unwrap_attributes(cls, v: Any) -> Any:
        if v is None or isinstance(v, dict):
            return v
        return to_python(v)
