"""
Ledger Engine - Fixed Asset Register Tests

Registration, the annual depreciation run and disposals.
"""

import pytest
from datetime import date
from decimal import Decimal

from ledger_engine.models.fixed_asset import (
    AssetStatus,
    CapitalAllowanceClass,
    DepreciationEntry,
    DepreciationMethod,
    DisposalMethod,
)
from ledger_engine.schemas.fixed_asset import DisposalRequest, FixedAssetCreate
from ledger_engine.services.fixed_asset_service import (
    SKIP_ALREADY_PROCESSED,
    SKIP_LATER_YEAR_PROCESSED,
    SKIP_MISSING_GL_ACCOUNT,
    SKIP_NOT_YET_ACQUIRED,
    SKIP_PRIOR_YEAR_UNPROCESSED,
    FixedAssetService,
)
from ledger_engine.utils.error_handling import (
    DuplicateEntryException,
    InvalidDateRangeException,
    InvalidStatusException,
)


def laptop_data(**overrides):
    data = {
        "asset_code": "IT-001",
        "name": "Developer laptops",
        "acquisition_date": date(2025, 3, 1),
        "acquisition_cost": Decimal("400000.00"),
        "depreciation_method": DepreciationMethod.STRAIGHT_LINE,
        "useful_life_years": 4,
        "capital_allowance_class": CapitalAllowanceClass.COMPUTERS,
    }
    data.update(overrides)
    return FixedAssetCreate(**data)


class TestAssetRegister:
    """Test asset registration."""

    @pytest.mark.asyncio
    async def test_register_asset(self, db_session, tenant_id):
        asset = await FixedAssetService(db_session).create_asset(tenant_id, laptop_data())

        assert asset.status == AssetStatus.ACTIVE
        assert asset.net_book_value == Decimal("400000.00")
        assert asset.tax_eligible_cost == Decimal("400000.00")

    @pytest.mark.asyncio
    async def test_vehicle_tax_cost_capped(self, db_session, tenant_id):
        asset = await FixedAssetService(db_session).create_asset(tenant_id, laptop_data(
            asset_code="MV-001",
            name="Delivery truck",
            acquisition_cost=Decimal("6500000.00"),
            useful_life_years=None,
            capital_allowance_class=CapitalAllowanceClass.MOTOR_VEHICLES,
        ))
        assert asset.tax_eligible_cost == Decimal("5000000.00")
        assert asset.useful_life_years == 5

    @pytest.mark.asyncio
    async def test_duplicate_code(self, db_session, tenant_id):
        service = FixedAssetService(db_session)
        await service.create_asset(tenant_id, laptop_data())
        with pytest.raises(DuplicateEntryException):
            await service.create_asset(tenant_id, laptop_data())


class TestDepreciationRun:
    """Test the annual depreciation and capital allowance run."""

    @pytest.mark.asyncio
    async def test_acquisition_year(self, db_session, tenant_id, chart):
        service = FixedAssetService(db_session)
        asset = await service.create_asset(tenant_id, laptop_data())

        result = await service.run_depreciation(tenant_id, 2025)

        assert result["processed_count"] == 1
        [processed] = result["processed"]
        assert processed["depreciation_amount"] == Decimal("100000.00")
        assert processed["capital_allowance"] == Decimal("160000.00")
        assert processed["closing_written_down_value"] == Decimal("240000.00")

        assert asset.accumulated_depreciation == Decimal("100000.00")
        assert asset.accumulated_capital_allowances == Decimal("160000.00")
        assert asset.last_depreciation_date == date(2025, 12, 31)
        assert chart["6030"].current_balance == Decimal("100000.00")
        assert chart["1510"].current_balance == Decimal("-100000.00")

    @pytest.mark.asyncio
    async def test_second_year_annual_allowance_only(self, db_session, tenant_id, chart):
        service = FixedAssetService(db_session)
        asset = await service.create_asset(tenant_id, laptop_data())
        await service.run_depreciation(tenant_id, 2025)
        result = await service.run_depreciation(tenant_id, 2026)

        [processed] = result["processed"]
        assert processed["capital_allowance"] == Decimal("60000.00")
        assert asset.net_book_value == Decimal("200000.00")
        assert asset.tax_written_down_value == Decimal("180000.00")

        entries = await service.get_depreciation_entries(tenant_id, asset.id)
        assert [e.fiscal_year for e in entries] == [2025, 2026]
        assert entries[1].initial_allowance == Decimal("0")

    @pytest.mark.asyncio
    async def test_rerun_is_idempotent(self, db_session, tenant_id, chart):
        service = FixedAssetService(db_session)
        asset = await service.create_asset(tenant_id, laptop_data())
        await service.run_depreciation(tenant_id, 2025)
        result = await service.run_depreciation(tenant_id, 2025)

        assert result["processed_count"] == 0
        assert result["skipped"][0]["reason"] == SKIP_ALREADY_PROCESSED
        assert asset.accumulated_depreciation == Decimal("100000.00")

    @pytest.mark.asyncio
    async def test_future_asset_skipped(self, db_session, tenant_id, chart):
        service = FixedAssetService(db_session)
        await service.create_asset(tenant_id, laptop_data())
        result = await service.run_depreciation(tenant_id, 2024)
        assert result["skipped"][0]["reason"] == SKIP_NOT_YET_ACQUIRED

    @pytest.mark.asyncio
    async def test_year_after_unprocessed_year_is_skipped(self, db_session, tenant_id, chart):
        service = FixedAssetService(db_session)
        asset = await service.create_asset(tenant_id, laptop_data())

        result = await service.run_depreciation(tenant_id, 2026)
        assert result["processed_count"] == 0
        assert result["skipped"][0]["reason"] == SKIP_PRIOR_YEAR_UNPROCESSED
        assert asset.accumulated_capital_allowances == Decimal("0.00")
        assert chart["6030"].current_balance == Decimal("0.00")

        first = await service.run_depreciation(tenant_id, 2025)
        second = await service.run_depreciation(tenant_id, 2026)

        assert first["processed"][0]["capital_allowance"] == Decimal("160000.00")
        assert second["processed"][0]["capital_allowance"] == Decimal("60000.00")
        assert asset.accumulated_capital_allowances == Decimal("220000.00")
        assert asset.tax_written_down_value == Decimal("180000.00")

    @pytest.mark.asyncio
    async def test_year_before_processed_year_is_skipped(self, db_session, tenant_id, chart):
        service = FixedAssetService(db_session)
        asset = await service.create_asset(tenant_id, laptop_data())
        db_session.add(DepreciationEntry(
            tenant_id=tenant_id,
            asset_id=asset.id,
            fiscal_year=2026,
            opening_book_value=Decimal("400000.00"),
            depreciation_amount=Decimal("0.00"),
            closing_book_value=Decimal("400000.00"),
            depreciation_method=DepreciationMethod.STRAIGHT_LINE,
            opening_written_down_value=Decimal("400000.00"),
            closing_written_down_value=Decimal("400000.00"),
        ))
        await db_session.flush()

        result = await service.run_depreciation(tenant_id, 2025)

        assert result["processed_count"] == 0
        assert result["skipped"][0]["reason"] == SKIP_LATER_YEAR_PROCESSED
        assert asset.accumulated_capital_allowances == Decimal("0.00")

    @pytest.mark.asyncio
    async def test_missing_accounts_skip_the_asset(self, db_session, tenant_id):
        service = FixedAssetService(db_session)
        asset = await service.create_asset(tenant_id, laptop_data())
        result = await service.run_depreciation(tenant_id, 2025)

        assert result["skipped"][0]["reason"] == SKIP_MISSING_GL_ACCOUNT
        assert asset.accumulated_depreciation == Decimal("0.00")

    @pytest.mark.asyncio
    async def test_run_without_posting(self, db_session, tenant_id):
        service = FixedAssetService(db_session)
        await service.create_asset(tenant_id, laptop_data())
        result = await service.run_depreciation(tenant_id, 2025, post_to_gl=False)

        [processed] = result["processed"]
        assert processed["journal_entry_id"] is None
        assert result["total_depreciation"] == Decimal("100000.00")


class TestDisposal:
    """Test disposal on the book and tax bases."""

    @pytest.mark.asyncio
    async def test_sale_above_wdv_gives_balancing_charge(self, db_session, tenant_id, chart):
        service = FixedAssetService(db_session)
        asset = await service.create_asset(tenant_id, laptop_data())
        await service.run_depreciation(tenant_id, 2025)

        record = await service.dispose_asset(tenant_id, asset.id, DisposalRequest(
            disposal_date=date(2026, 2, 1),
            disposal_method=DisposalMethod.SALE,
            proceeds=Decimal("350000.00"),
        ))

        assert asset.status == AssetStatus.DISPOSED
        assert record.net_book_value_at_disposal == Decimal("300000.00")
        assert record.book_gain_loss == Decimal("50000.00")
        assert record.balancing_amount == Decimal("110000.00")
        assert record.balancing_charge == Decimal("110000.00")
        assert record.balancing_allowance == Decimal("0.00")

    @pytest.mark.asyncio
    async def test_sale_below_wdv_gives_balancing_allowance(self, db_session, tenant_id, chart):
        service = FixedAssetService(db_session)
        asset = await service.create_asset(tenant_id, laptop_data())
        await service.run_depreciation(tenant_id, 2025)

        record = await service.dispose_asset(tenant_id, asset.id, DisposalRequest(
            disposal_date=date(2026, 2, 1),
            disposal_method=DisposalMethod.SALE,
            proceeds=Decimal("200000.00"),
        ))
        assert record.book_gain_loss == Decimal("-100000.00")
        assert record.balancing_allowance == Decimal("40000.00")

    @pytest.mark.asyncio
    async def test_foreign_currency_proceeds(self, db_session, tenant_id):
        service = FixedAssetService(db_session)
        asset = await service.create_asset(tenant_id, laptop_data())

        record = await service.dispose_asset(tenant_id, asset.id, DisposalRequest(
            disposal_date=date(2025, 6, 1),
            disposal_method=DisposalMethod.SALE,
            proceeds=Decimal("2000.00"),
            currency="usd",
            exchange_rate=Decimal("155.00"),
        ))
        assert record.currency == "USD"
        assert record.proceeds_jmd == Decimal("310000.00")
        assert record.book_gain_loss == Decimal("-90000.00")

    @pytest.mark.asyncio
    async def test_dispose_twice_and_before_acquisition(self, db_session, tenant_id):
        service = FixedAssetService(db_session)
        asset = await service.create_asset(tenant_id, laptop_data())

        with pytest.raises(InvalidDateRangeException):
            await service.dispose_asset(tenant_id, asset.id, DisposalRequest(
                disposal_date=date(2024, 12, 31), disposal_method=DisposalMethod.SCRAP,
            ))

        await service.dispose_asset(tenant_id, asset.id, DisposalRequest(
            disposal_date=date(2025, 12, 31), disposal_method=DisposalMethod.SCRAP,
        ))
        with pytest.raises(InvalidStatusException):
            await service.dispose_asset(tenant_id, asset.id, DisposalRequest(
                disposal_date=date(2026, 1, 31), disposal_method=DisposalMethod.SCRAP,
            ))

    @pytest.mark.asyncio
    async def test_disposed_assets_leave_the_run(self, db_session, tenant_id, chart):
        service = FixedAssetService(db_session)
        asset = await service.create_asset(tenant_id, laptop_data())
        await service.dispose_asset(tenant_id, asset.id, DisposalRequest(
            disposal_date=date(2025, 12, 31), disposal_method=DisposalMethod.WRITE_OFF,
        ))

        result = await service.run_depreciation(tenant_id, 2025)
        assert result["processed_count"] == result["skipped_count"] == 0

        summary = await service.get_register_summary(tenant_id)
        assert summary["active_count"] == 0
        assert summary["disposed_count"] == 1
