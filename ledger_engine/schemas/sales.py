"""
Ledger Engine - Sales Invoice Schemas
"""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from ledger_engine.models.sales import GCTRateCategory, InvoiceStatus


class SalesInvoiceLineCreate(BaseModel):
    description: str = Field(..., min_length=1, max_length=500)
    quantity: Decimal = Field(default=Decimal("1"), gt=0)
    unit_price: Decimal = Field(..., ge=0)
    gct_rate_category: GCTRateCategory = GCTRateCategory.STANDARD


class SalesInvoiceCreate(BaseModel):
    """Schema for issuing a sales invoice."""
    invoice_date: date
    customer_name: str = Field(..., min_length=1, max_length=255)
    lines: List[SalesInvoiceLineCreate] = Field(..., min_length=1)
    post_to_gl: bool = True


class SalesInvoiceLineResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    line_number: int
    description: str
    quantity: Decimal
    unit_price: Decimal
    amount: Decimal
    gct_rate_category: GCTRateCategory
    gct_amount: Decimal


class SalesInvoiceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    invoice_number: str
    invoice_date: date
    customer_name: str
    subtotal: Decimal
    gct_amount: Decimal
    total_amount: Decimal
    status: InvoiceStatus
    journal_entry_id: Optional[UUID] = None
    lines: List[SalesInvoiceLineResponse] = []
    created_at: datetime


class InvoiceVoidRequest(BaseModel):
    reason: str = Field(..., min_length=1, max_length=500)
