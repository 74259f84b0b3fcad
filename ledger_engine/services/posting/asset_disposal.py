"""
Ledger Engine - Fixed Asset Disposal

Records the disposal of an asset on both bases:
- Book: gain/loss = proceeds (JMD) - net book value
- Tax: balancing charge or balancing allowance against the WDV

The asset flips to DISPOSED and a DisposalRecord freezes the figures.
No journal entry is posted here; the cash/proceeds side belongs to the
receipt that brings the money in.
"""

import logging
import uuid
from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_engine.config import settings
from ledger_engine.models.fixed_asset import (
    AssetStatus,
    DisposalMethod,
    DisposalRecord,
    FixedAsset,
)
from ledger_engine.services.tax_calculators.capital_allowance import CapitalAllowanceCalculator
from ledger_engine.utils.error_handling import (
    AssetNotFoundException,
    InvalidAmountException,
    InvalidDateRangeException,
    InvalidStatusException,
)
from ledger_engine.utils.money import ONE, round2, to_decimal

logger = logging.getLogger(__name__)


class AssetDisposalAdapter:
    """Disposes of fixed assets."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _lock_asset(self, tenant_id: uuid.UUID, asset_id: uuid.UUID) -> FixedAsset:
        result = await self.db.execute(
            select(FixedAsset)
            .where(
                FixedAsset.id == asset_id,
                FixedAsset.tenant_id == tenant_id,
            )
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        asset = result.scalar_one_or_none()
        if asset is None:
            raise AssetNotFoundException(asset_id)
        return asset

    async def dispose(
        self,
        tenant_id: uuid.UUID,
        asset_id: uuid.UUID,
        disposal_date: date,
        disposal_method: DisposalMethod,
        proceeds: Decimal = Decimal("0"),
        currency: Optional[str] = None,
        exchange_rate: Decimal = Decimal("1"),
        buyer_name: Optional[str] = None,
        notes: Optional[str] = None,
        user_id: Optional[uuid.UUID] = None,
    ) -> DisposalRecord:
        """Dispose of an ACTIVE asset. A second disposal is a state conflict."""
        asset = await self._lock_asset(tenant_id, asset_id)
        if asset.status != AssetStatus.ACTIVE:
            raise InvalidStatusException("Fixed asset", asset.status, AssetStatus.ACTIVE)

        if disposal_date < asset.acquisition_date:
            raise InvalidDateRangeException(
                str(asset.acquisition_date),
                str(disposal_date),
                message="Disposal date cannot be before the acquisition date",
            )

        proceeds = round2(proceeds)
        if proceeds < 0:
            raise InvalidAmountException(proceeds, "proceeds", "Disposal proceeds cannot be negative")

        currency = (currency or settings.home_currency).upper()
        rate = ONE if currency == settings.home_currency else to_decimal(exchange_rate)
        if rate <= 0:
            raise InvalidAmountException(exchange_rate, "exchange_rate", "Exchange rate must be positive")

        proceeds_jmd = round2(proceeds * rate)
        cost = round2(asset.total_capitalized_cost)
        accumulated = round2(asset.accumulated_depreciation)
        nbv = cost - accumulated

        adjustment = CapitalAllowanceCalculator.balancing_adjustment(
            proceeds_jmd,
            asset.tax_written_down_value,
            asset.accumulated_capital_allowances,
        )

        record = DisposalRecord(
            tenant_id=tenant_id,
            asset_id=asset.id,
            disposal_date=disposal_date,
            disposal_method=disposal_method,
            proceeds=proceeds,
            currency=currency,
            exchange_rate=rate,
            proceeds_jmd=proceeds_jmd,
            cost_at_disposal=cost,
            accumulated_depreciation_at_disposal=accumulated,
            net_book_value_at_disposal=nbv,
            book_gain_loss=proceeds_jmd - nbv,
            written_down_value_at_disposal=adjustment.written_down_value,
            allowances_claimed=adjustment.allowances_claimed,
            balancing_amount=adjustment.balancing_amount,
            balancing_charge=adjustment.balancing_charge,
            balancing_allowance=adjustment.balancing_allowance,
            buyer_name=buyer_name,
            notes=notes,
            created_by_id=user_id,
            updated_by_id=user_id,
        )
        self.db.add(record)

        asset.status = AssetStatus.DISPOSED
        asset.updated_by_id = user_id
        await self.db.flush()

        logger.info(
            f"Disposed asset {asset.asset_code}: proceeds {proceeds_jmd} JMD, "
            f"book gain/loss {record.book_gain_loss}, balancing amount {record.balancing_amount}"
        )
        return record
