"""
Ledger Engine - Fixed Asset Schemas

Pydantic schemas for the asset register, capital allowances,
depreciation runs and disposals.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ledger_engine.models.fixed_asset import (
    AssetStatus,
    CapitalAllowanceClass,
    DepreciationMethod,
    DisposalMethod,
)


# =============================================================================
# ASSET REGISTER
# =============================================================================

class FixedAssetCreate(BaseModel):
    """Schema for adding an asset to the register."""
    asset_code: str = Field(..., min_length=1, max_length=50)
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None

    acquisition_date: date
    acquisition_cost: Decimal = Field(..., gt=0)
    capitalized_costs: Decimal = Field(default=Decimal("0"), ge=0)

    depreciation_method: DepreciationMethod = DepreciationMethod.STRAIGHT_LINE
    depreciation_rate: Decimal = Field(default=Decimal("0"), ge=0, le=100)
    useful_life_years: Optional[int] = Field(None, gt=0, le=100)
    residual_value: Decimal = Field(default=Decimal("0"), ge=0)

    capital_allowance_class: CapitalAllowanceClass

    depreciation_expense_account_id: Optional[UUID] = None
    accumulated_depreciation_account_id: Optional[UUID] = None

    @model_validator(mode='after')
    def check_method_inputs(self):
        if self.depreciation_method == DepreciationMethod.REDUCING_BALANCE and self.depreciation_rate <= 0:
            raise ValueError('Reducing balance depreciation requires a positive depreciation_rate')
        if self.residual_value > self.acquisition_cost + self.capitalized_costs:
            raise ValueError('Residual value cannot exceed the asset cost')
        return self


class FixedAssetResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    asset_code: str
    name: str
    description: Optional[str] = None
    status: AssetStatus
    acquisition_date: date
    acquisition_cost: Decimal
    capitalized_costs: Decimal
    total_capitalized_cost: Decimal
    depreciation_method: DepreciationMethod
    depreciation_rate: Decimal
    useful_life_years: Optional[int] = None
    residual_value: Decimal
    accumulated_depreciation: Decimal
    net_book_value: Decimal
    last_depreciation_date: Optional[date] = None
    capital_allowance_class: CapitalAllowanceClass
    tax_eligible_cost: Decimal
    accumulated_capital_allowances: Decimal
    tax_written_down_value: Decimal
    created_at: datetime


class AssetRegisterSummary(BaseModel):
    """Totals across the register, by status."""
    active_count: int
    disposed_count: int
    total_cost: Decimal
    total_accumulated_depreciation: Decimal
    total_net_book_value: Decimal
    total_tax_written_down_value: Decimal


# =============================================================================
# CAPITAL ALLOWANCES
# =============================================================================

class AllowanceScheduleRow(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    year: int
    opening_wdv: Decimal
    initial_allowance: Decimal
    annual_allowance: Decimal
    total_allowance: Decimal
    closing_wdv: Decimal


class AllowanceScheduleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    allowance_class: CapitalAllowanceClass
    cost: Decimal
    allowable_cost: Decimal
    rows: List[AllowanceScheduleRow]
    total_allowances: Decimal


# =============================================================================
# DEPRECIATION RUN
# =============================================================================

class DepreciationRunRequest(BaseModel):
    fiscal_year: int = Field(..., ge=1900, le=2999)
    post_to_gl: bool = True


class DepreciationEntryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    asset_id: UUID
    fiscal_year: int
    opening_book_value: Decimal
    depreciation_amount: Decimal
    closing_book_value: Decimal
    depreciation_method: DepreciationMethod
    opening_written_down_value: Decimal
    initial_allowance: Decimal
    annual_allowance: Decimal
    closing_written_down_value: Decimal
    journal_entry_id: Optional[UUID] = None


class ProcessedAssetResult(BaseModel):
    asset_id: UUID
    asset_code: str
    depreciation_amount: Decimal
    capital_allowance: Decimal
    closing_book_value: Decimal
    closing_written_down_value: Decimal
    journal_entry_id: Optional[UUID] = None


class SkippedAssetResult(BaseModel):
    asset_id: UUID
    asset_code: str
    reason: str


class DepreciationRunResponse(BaseModel):
    fiscal_year: int
    processed: List[ProcessedAssetResult]
    skipped: List[SkippedAssetResult]
    total_depreciation: Decimal
    total_capital_allowances: Decimal
    processed_count: int
    skipped_count: int


# =============================================================================
# DISPOSAL
# =============================================================================

class DisposalRequest(BaseModel):
    """Schema for disposing of an asset."""
    disposal_date: date
    disposal_method: DisposalMethod
    proceeds: Decimal = Field(default=Decimal("0"), ge=0)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    exchange_rate: Decimal = Field(default=Decimal("1"), gt=0)
    buyer_name: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = None


class DisposalResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    asset_id: UUID
    disposal_date: date
    disposal_method: DisposalMethod
    proceeds: Decimal
    currency: str
    exchange_rate: Decimal
    proceeds_jmd: Decimal
    cost_at_disposal: Decimal
    accumulated_depreciation_at_disposal: Decimal
    net_book_value_at_disposal: Decimal
    book_gain_loss: Decimal
    written_down_value_at_disposal: Decimal
    allowances_claimed: Decimal
    balancing_amount: Decimal
    balancing_charge: Decimal
    balancing_allowance: Decimal
    buyer_name: Optional[str] = None
    notes: Optional[str] = None
