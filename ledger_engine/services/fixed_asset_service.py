"""
Ledger Engine - Fixed Asset Register Service

Business logic for the asset register:
- Register assets with their book and tax (capital allowance) bases
- Annual depreciation run: book depreciation posted to the GL plus the
  capital allowance claimed for the year
- Disposal with book gain/loss and balancing adjustment
- Register summary and allowance schedules

Methods flush; the caller commits.
"""

import logging
import uuid
from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_engine.models.fixed_asset import (
    AssetStatus,
    CapitalAllowanceClass,
    DepreciationEntry,
    DepreciationMethod,
    DisposalRecord,
    FixedAsset,
)
from ledger_engine.schemas.fixed_asset import DisposalRequest, FixedAssetCreate
from ledger_engine.services.posting.asset_disposal import AssetDisposalAdapter
from ledger_engine.services.posting.depreciation_posting import DepreciationPostingAdapter
from ledger_engine.services.tax_calculators.capital_allowance import (
    AllowanceSchedule,
    BookDepreciationCalculator,
    CapitalAllowanceCalculator,
)
from ledger_engine.utils.error_handling import (
    AssetNotFoundException,
    DuplicateEntryException,
    InvalidAmountException,
    MissingGLAccountException,
)
from ledger_engine.utils.money import ZERO, round2

logger = logging.getLogger(__name__)


# Reasons an asset is left out of a depreciation run
SKIP_ALREADY_PROCESSED = "already_processed"
SKIP_NOT_YET_ACQUIRED = "not_yet_acquired"
SKIP_FULLY_DEPRECIATED = "fully_depreciated"
SKIP_MISSING_GL_ACCOUNT = "missing_gl_account"
SKIP_LATER_YEAR_PROCESSED = "later_year_processed"
SKIP_PRIOR_YEAR_UNPROCESSED = "prior_year_unprocessed"


class FixedAssetService:
    """Service for fixed asset management."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.depreciation_posting = DepreciationPostingAdapter(db)
        self.disposals = AssetDisposalAdapter(db)

    # ===========================================
    # ASSET REGISTER
    # ===========================================

    async def create_asset(
        self,
        tenant_id: uuid.UUID,
        data: FixedAssetCreate,
        user_id: Optional[uuid.UUID] = None,
    ) -> FixedAsset:
        """Register a new asset. Allowances are computed on the capped cost."""
        existing = await self.get_asset_by_code(tenant_id, data.asset_code)
        if existing:
            raise DuplicateEntryException("Fixed asset", "asset_code", data.asset_code)

        acquisition_cost = round2(data.acquisition_cost)
        capitalized_costs = round2(data.capitalized_costs)
        if acquisition_cost <= 0:
            raise InvalidAmountException(acquisition_cost, "acquisition_cost", "Acquisition cost must be positive")

        useful_life = data.useful_life_years
        if useful_life is None and data.depreciation_method == DepreciationMethod.STRAIGHT_LINE:
            useful_life = CapitalAllowanceCalculator.get_rule(data.capital_allowance_class).typical_life_years

        asset = FixedAsset(
            tenant_id=tenant_id,
            asset_code=data.asset_code,
            name=data.name,
            description=data.description,
            status=AssetStatus.ACTIVE,
            acquisition_date=data.acquisition_date,
            acquisition_cost=acquisition_cost,
            capitalized_costs=capitalized_costs,
            depreciation_method=data.depreciation_method,
            depreciation_rate=data.depreciation_rate,
            useful_life_years=useful_life,
            residual_value=round2(data.residual_value),
            accumulated_depreciation=ZERO,
            capital_allowance_class=data.capital_allowance_class,
            tax_eligible_cost=CapitalAllowanceCalculator.allowable_cost(
                data.capital_allowance_class, acquisition_cost + capitalized_costs,
            ),
            accumulated_capital_allowances=ZERO,
            depreciation_expense_account_id=data.depreciation_expense_account_id,
            accumulated_depreciation_account_id=data.accumulated_depreciation_account_id,
            created_by_id=user_id,
            updated_by_id=user_id,
        )
        self.db.add(asset)
        await self.db.flush()

        logger.info(f"Registered fixed asset {asset.asset_code} for tenant {tenant_id}")
        return asset

    async def get_asset(self, tenant_id: uuid.UUID, asset_id: uuid.UUID) -> FixedAsset:
        result = await self.db.execute(
            select(FixedAsset).where(
                FixedAsset.id == asset_id,
                FixedAsset.tenant_id == tenant_id,
            )
        )
        asset = result.scalar_one_or_none()
        if asset is None:
            raise AssetNotFoundException(asset_id)
        return asset

    async def get_asset_by_code(self, tenant_id: uuid.UUID, asset_code: str) -> Optional[FixedAsset]:
        result = await self.db.execute(
            select(FixedAsset).where(
                FixedAsset.tenant_id == tenant_id,
                FixedAsset.asset_code == asset_code,
            )
        )
        return result.scalar_one_or_none()

    async def list_assets(
        self,
        tenant_id: uuid.UUID,
        status: Optional[AssetStatus] = None,
        allowance_class: Optional[CapitalAllowanceClass] = None,
    ) -> List[FixedAsset]:
        query = select(FixedAsset).where(FixedAsset.tenant_id == tenant_id)
        if status:
            query = query.where(FixedAsset.status == status)
        if allowance_class:
            query = query.where(FixedAsset.capital_allowance_class == allowance_class)
        query = query.order_by(FixedAsset.asset_code)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_depreciation_entries(
        self,
        tenant_id: uuid.UUID,
        asset_id: uuid.UUID,
    ) -> List[DepreciationEntry]:
        await self.get_asset(tenant_id, asset_id)
        result = await self.db.execute(
            select(DepreciationEntry)
            .where(
                DepreciationEntry.tenant_id == tenant_id,
                DepreciationEntry.asset_id == asset_id,
            )
            .order_by(DepreciationEntry.fiscal_year)
        )
        return list(result.scalars().all())

    async def get_allowance_schedule(
        self,
        tenant_id: uuid.UUID,
        asset_id: uuid.UUID,
        years: Optional[int] = None,
    ) -> AllowanceSchedule:
        """Projected capital allowances for the asset from its acquisition year."""
        asset = await self.get_asset(tenant_id, asset_id)
        return CapitalAllowanceCalculator.build_schedule(
            asset.capital_allowance_class,
            asset.total_capitalized_cost,
            asset.acquisition_date.year,
            years,
        )

    # ===========================================
    # DEPRECIATION RUN
    # ===========================================

    async def _entry_exists(self, asset_id: uuid.UUID, fiscal_year: int) -> bool:
        result = await self.db.execute(
            select(DepreciationEntry.id).where(
                DepreciationEntry.asset_id == asset_id,
                DepreciationEntry.fiscal_year == fiscal_year,
            )
        )
        return result.scalar_one_or_none() is not None

    async def _latest_processed_year(self, asset_id: uuid.UUID) -> Optional[int]:
        return await self.db.scalar(
            select(func.max(DepreciationEntry.fiscal_year)).where(DepreciationEntry.asset_id == asset_id)
        )

    async def run_depreciation(
        self,
        tenant_id: uuid.UUID,
        fiscal_year: int,
        user_id: Optional[uuid.UUID] = None,
        post_to_gl: bool = True,
    ) -> Dict[str, Any]:
        """
        Depreciate every ACTIVE asset for the fiscal year.

        Each asset is either processed (DepreciationEntry written, book
        depreciation posted, accumulations updated) or skipped with a
        reason. Running the same year twice processes nothing new. Years are
        processed in order from the acquisition year: a year before one already
        processed, or one after an unprocessed year, is skipped.
        """
        result = await self.db.execute(
            select(FixedAsset)
            .where(
                FixedAsset.tenant_id == tenant_id,
                FixedAsset.status == AssetStatus.ACTIVE,
            )
            .order_by(FixedAsset.asset_code)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        assets = list(result.scalars().all())

        year_end = date(fiscal_year, 12, 31)
        processed: List[Dict[str, Any]] = []
        skipped: List[Dict[str, Any]] = []
        total_depreciation = ZERO
        total_allowances = ZERO

        def skip(asset: FixedAsset, reason: str) -> None:
            skipped.append({"asset_id": asset.id, "asset_code": asset.asset_code, "reason": reason})

        for asset in assets:
            if asset.acquisition_date.year > fiscal_year:
                skip(asset, SKIP_NOT_YET_ACQUIRED)
                continue
            if await self._entry_exists(asset.id, fiscal_year):
                skip(asset, SKIP_ALREADY_PROCESSED)
                continue

            latest_year = await self._latest_processed_year(asset.id)
            if latest_year is not None and fiscal_year < latest_year:
                skip(asset, SKIP_LATER_YEAR_PROCESSED)
                continue
            next_year = latest_year + 1 if latest_year is not None else asset.acquisition_date.year

            opening_nbv = round2(asset.net_book_value)
            depreciation = BookDepreciationCalculator.annual_depreciation(
                asset.depreciation_method,
                asset.total_capitalized_cost,
                asset.residual_value,
                opening_nbv,
                asset.useful_life_years,
                asset.depreciation_rate,
            )
            allowance = CapitalAllowanceCalculator.calculate_year(
                asset.capital_allowance_class,
                asset.tax_eligible_cost,
                asset.tax_written_down_value,
                is_acquisition_year=asset.acquisition_date.year == fiscal_year,
            )

            if depreciation <= 0 and allowance.total_allowance <= 0:
                skip(asset, SKIP_FULLY_DEPRECIATED)
                continue
            if fiscal_year > next_year:
                skip(asset, SKIP_PRIOR_YEAR_UNPROCESSED)
                continue

            journal_entry_id = None
            if post_to_gl and depreciation > 0:
                try:
                    entry = await self.depreciation_posting.post_depreciation(
                        tenant_id, asset, depreciation, year_end, fiscal_year, user_id,
                    )
                except MissingGLAccountException as e:
                    logger.warning(f"Skipping depreciation of {asset.asset_code}: {e.message}")
                    skip(asset, SKIP_MISSING_GL_ACCOUNT)
                    continue
                journal_entry_id = entry.id

            self.db.add(DepreciationEntry(
                tenant_id=tenant_id,
                asset_id=asset.id,
                fiscal_year=fiscal_year,
                opening_book_value=opening_nbv,
                depreciation_amount=depreciation,
                closing_book_value=opening_nbv - depreciation,
                depreciation_method=asset.depreciation_method,
                opening_written_down_value=allowance.opening_wdv,
                initial_allowance=allowance.initial_allowance,
                annual_allowance=allowance.annual_allowance,
                closing_written_down_value=allowance.closing_wdv,
                journal_entry_id=journal_entry_id,
            ))

            asset.accumulated_depreciation = round2(asset.accumulated_depreciation + depreciation)
            asset.accumulated_capital_allowances = round2(
                asset.accumulated_capital_allowances + allowance.total_allowance
            )
            asset.last_depreciation_date = year_end
            asset.updated_by_id = user_id

            processed.append({
                "asset_id": asset.id,
                "asset_code": asset.asset_code,
                "depreciation_amount": depreciation,
                "capital_allowance": allowance.total_allowance,
                "closing_book_value": opening_nbv - depreciation,
                "closing_written_down_value": allowance.closing_wdv,
                "journal_entry_id": journal_entry_id,
            })
            total_depreciation += depreciation
            total_allowances += allowance.total_allowance

        await self.db.flush()

        logger.info(
            f"Depreciation run {fiscal_year} for tenant {tenant_id}: "
            f"{len(processed)} processed, {len(skipped)} skipped, "
            f"depreciation {total_depreciation}, allowances {total_allowances}"
        )
        return {
            "fiscal_year": fiscal_year,
            "processed": processed,
            "skipped": skipped,
            "total_depreciation": total_depreciation,
            "total_capital_allowances": total_allowances,
            "processed_count": len(processed),
            "skipped_count": len(skipped),
        }

    # ===========================================
    # DISPOSAL
    # ===========================================

    async def dispose_asset(
        self,
        tenant_id: uuid.UUID,
        asset_id: uuid.UUID,
        data: DisposalRequest,
        user_id: Optional[uuid.UUID] = None,
    ) -> DisposalRecord:
        return await self.disposals.dispose(
            tenant_id,
            asset_id,
            disposal_date=data.disposal_date,
            disposal_method=data.disposal_method,
            proceeds=data.proceeds,
            currency=data.currency,
            exchange_rate=data.exchange_rate,
            buyer_name=data.buyer_name,
            notes=data.notes,
            user_id=user_id,
        )

    async def get_disposal(self, tenant_id: uuid.UUID, asset_id: uuid.UUID) -> Optional[DisposalRecord]:
        result = await self.db.execute(
            select(DisposalRecord).where(
                DisposalRecord.tenant_id == tenant_id,
                DisposalRecord.asset_id == asset_id,
            )
        )
        return result.scalar_one_or_none()

    # ===========================================
    # REPORTING
    # ===========================================

    async def get_register_summary(self, tenant_id: uuid.UUID) -> Dict[str, Any]:
        """Totals for the active register plus a count of disposed assets."""
        assets = await self.list_assets(tenant_id)
        active = [a for a in assets if a.status == AssetStatus.ACTIVE]

        return {
            "active_count": len(active),
            "disposed_count": len(assets) - len(active),
            "total_cost": sum((a.total_capitalized_cost for a in active), ZERO),
            "total_accumulated_depreciation": sum((a.accumulated_depreciation for a in active), ZERO),
            "total_net_book_value": sum((a.net_book_value for a in active), ZERO),
            "total_tax_written_down_value": sum((a.tax_written_down_value for a in active), ZERO),
        }
