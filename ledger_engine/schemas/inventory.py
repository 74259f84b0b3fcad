"""
Ledger Engine - Stock Count Schemas
"""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from ledger_engine.models.inventory import StockCountStatus


class StockCountCreate(BaseModel):
    """Schema for opening a stock count."""
    count_date: date
    location: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = None


class StockCountItemCreate(BaseModel):
    """Schema for adding an item to a count."""
    item_code: str = Field(..., min_length=1, max_length=50)
    description: Optional[str] = Field(None, max_length=255)
    expected_quantity: Decimal = Field(..., ge=0)
    unit_cost: Decimal = Field(..., ge=0)


class ItemCountUpdate(BaseModel):
    """Schema for recording the physical count of an item."""
    counted_quantity: Decimal = Field(..., ge=0)


class StockCountPostRequest(BaseModel):
    """Optional account overrides for the variance posting."""
    inventory_account_id: Optional[UUID] = None
    variance_account_id: Optional[UUID] = None
    posting_date: Optional[date] = None


class StockCountItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    item_code: str
    description: Optional[str] = None
    expected_quantity: Decimal
    counted_quantity: Optional[Decimal] = None
    unit_cost: Decimal
    variance_quantity: Decimal
    variance_value: Decimal
    counted_at: Optional[datetime] = None


class StockCountResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    count_number: str
    count_date: date
    location: Optional[str] = None
    notes: Optional[str] = None
    status: StockCountStatus
    total_items: int
    items_counted: int
    items_with_variance: int
    total_variance_value: Decimal
    approved_at: Optional[datetime] = None
    posted_at: Optional[datetime] = None
    journal_entry_id: Optional[UUID] = None
    items: List[StockCountItemResponse] = []
    created_at: datetime
