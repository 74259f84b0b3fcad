"""
Ledger Engine - Fixed Asset Register Models

Tracks capital assets on two parallel bases:
- Book basis: cost, accumulated depreciation, net book value
- Tax basis: capital-allowance class, eligible cost, written-down value
"""

import uuid
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from sqlalchemy import (
    Date, ForeignKey, Integer, Numeric, String, Text,
    Enum as SQLEnum, UniqueConstraint
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ledger_engine.models.base import BaseModel, AuditMixin, TenantMixin


class AssetStatus(str, Enum):
    """Asset lifecycle status."""
    ACTIVE = "active"
    DISPOSED = "disposed"


class DepreciationMethod(str, Enum):
    """Book depreciation methods."""
    STRAIGHT_LINE = "straight_line"
    REDUCING_BALANCE = "reducing_balance"


class CapitalAllowanceClass(str, Enum):
    """Jamaican capital-allowance asset classes."""
    BUILDINGS = "buildings"
    PLANT_MACHINERY = "plant_machinery"
    MOTOR_VEHICLES = "motor_vehicles"
    COMPUTERS = "computers"
    FURNITURE_FIXTURES = "furniture_fixtures"
    SOFTWARE = "software"
    LEASEHOLD_IMPROVEMENTS = "leasehold_improvements"


class DisposalMethod(str, Enum):
    """How an asset left the register."""
    SALE = "sale"
    TRADE_IN = "trade_in"
    SCRAP = "scrap"
    DONATION = "donation"
    THEFT = "theft"
    WRITE_OFF = "write_off"
    TRANSFER = "transfer"


class FixedAsset(BaseModel, TenantMixin, AuditMixin):
    """
    Fixed asset register entry.

    NBV = total capitalized cost - accumulated depreciation
    WDV = tax eligible cost - accumulated capital allowances
    """

    __tablename__ = "fixed_assets"

    asset_code: Mapped[str] = mapped_column(String(50), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    status: Mapped[AssetStatus] = mapped_column(
        SQLEnum(AssetStatus),
        default=AssetStatus.ACTIVE,
        nullable=False,
        index=True,
    )

    # Acquisition
    acquisition_date: Mapped[date] = mapped_column(Date, nullable=False)
    acquisition_cost: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    capitalized_costs: Mapped[Decimal] = mapped_column(
        Numeric(18, 2), default=Decimal("0.00"), nullable=False,
        comment="Installation, delivery and similar costs added to the asset",
    )

    # Book depreciation
    depreciation_method: Mapped[DepreciationMethod] = mapped_column(
        SQLEnum(DepreciationMethod),
        default=DepreciationMethod.STRAIGHT_LINE,
        nullable=False,
    )
    depreciation_rate: Mapped[Decimal] = mapped_column(
        Numeric(8, 4), default=Decimal("0"), nullable=False,
        comment="Annual rate in percent, used by reducing balance",
    )
    useful_life_years: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    residual_value: Mapped[Decimal] = mapped_column(
        Numeric(18, 2), default=Decimal("0.00"), nullable=False,
    )
    accumulated_depreciation: Mapped[Decimal] = mapped_column(
        Numeric(18, 2), default=Decimal("0.00"), nullable=False,
    )
    last_depreciation_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    # Tax basis
    capital_allowance_class: Mapped[CapitalAllowanceClass] = mapped_column(
        SQLEnum(CapitalAllowanceClass),
        nullable=False,
    )
    tax_eligible_cost: Mapped[Decimal] = mapped_column(
        Numeric(18, 2), nullable=False,
        comment="Cost qualifying for allowances after any class cap",
    )
    accumulated_capital_allowances: Mapped[Decimal] = mapped_column(
        Numeric(18, 2), default=Decimal("0.00"), nullable=False,
    )

    # Optional GL overrides for depreciation postings
    depreciation_expense_account_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("gl_accounts.id", ondelete="SET NULL"),
        nullable=True,
    )
    accumulated_depreciation_account_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("gl_accounts.id", ondelete="SET NULL"),
        nullable=True,
    )

    # Relationships
    depreciation_entries: Mapped[List["DepreciationEntry"]] = relationship(
        "DepreciationEntry",
        back_populates="asset",
        cascade="all, delete-orphan",
    )
    disposal: Mapped[Optional["DisposalRecord"]] = relationship(
        "DisposalRecord",
        back_populates="asset",
        uselist=False,
    )

    __table_args__ = (
        UniqueConstraint('tenant_id', 'asset_code', name='uq_fixed_asset_tenant_code'),
    )

    @property
    def total_capitalized_cost(self) -> Decimal:
        return self.acquisition_cost + self.capitalized_costs

    @property
    def net_book_value(self) -> Decimal:
        """Calculate current net book value."""
        return self.total_capitalized_cost - self.accumulated_depreciation

    @property
    def tax_written_down_value(self) -> Decimal:
        return self.tax_eligible_cost - self.accumulated_capital_allowances

    @property
    def is_fully_depreciated(self) -> bool:
        """Check if asset is fully depreciated."""
        return self.net_book_value <= self.residual_value

    def __repr__(self) -> str:
        return f"<FixedAsset(id={self.id}, code={self.asset_code}, nbv={self.net_book_value})>"


class DepreciationEntry(BaseModel, TenantMixin):
    """
    One annual depreciation and capital-allowance record per asset.
    """

    __tablename__ = "depreciation_entries"

    asset_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("fixed_assets.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    fiscal_year: Mapped[int] = mapped_column(Integer, nullable=False)

    # Book side
    opening_book_value: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    depreciation_amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    closing_book_value: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    depreciation_method: Mapped[DepreciationMethod] = mapped_column(
        SQLEnum(DepreciationMethod), nullable=False,
    )

    # Tax side
    opening_written_down_value: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    initial_allowance: Mapped[Decimal] = mapped_column(
        Numeric(18, 2), default=Decimal("0.00"), nullable=False,
    )
    annual_allowance: Mapped[Decimal] = mapped_column(
        Numeric(18, 2), default=Decimal("0.00"), nullable=False,
    )
    closing_written_down_value: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)

    journal_entry_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("journal_entries.id", ondelete="SET NULL"),
        nullable=True,
    )

    asset: Mapped["FixedAsset"] = relationship("FixedAsset", back_populates="depreciation_entries")

    __table_args__ = (
        UniqueConstraint('asset_id', 'fiscal_year', name='uq_depreciation_entry_asset_year'),
    )

    @property
    def total_allowance(self) -> Decimal:
        return self.initial_allowance + self.annual_allowance

    def __repr__(self) -> str:
        return f"<DepreciationEntry(asset_id={self.asset_id}, year={self.fiscal_year}, amount={self.depreciation_amount})>"


class DisposalRecord(BaseModel, TenantMixin, AuditMixin):
    """
    Frozen disposal figures: book gain/loss and the tax balancing adjustment.
    """

    __tablename__ = "disposal_records"

    asset_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("fixed_assets.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )

    disposal_date: Mapped[date] = mapped_column(Date, nullable=False)
    disposal_method: Mapped[DisposalMethod] = mapped_column(SQLEnum(DisposalMethod), nullable=False)

    proceeds: Mapped[Decimal] = mapped_column(Numeric(18, 2), default=Decimal("0.00"), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), default="JMD", nullable=False)
    exchange_rate: Mapped[Decimal] = mapped_column(
        Numeric(18, 6), default=Decimal("1.000000"), nullable=False,
    )
    proceeds_jmd: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)

    # Book values at disposal
    cost_at_disposal: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    accumulated_depreciation_at_disposal: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    net_book_value_at_disposal: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    book_gain_loss: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)

    # Tax values at disposal
    written_down_value_at_disposal: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    allowances_claimed: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    balancing_amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    balancing_charge: Mapped[Decimal] = mapped_column(
        Numeric(18, 2), default=Decimal("0.00"), nullable=False,
    )
    balancing_allowance: Mapped[Decimal] = mapped_column(
        Numeric(18, 2), default=Decimal("0.00"), nullable=False,
    )

    buyer_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    asset: Mapped["FixedAsset"] = relationship("FixedAsset", back_populates="disposal")
