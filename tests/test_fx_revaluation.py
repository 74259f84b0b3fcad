"""
Ledger Engine - FX Rate & Revaluation Tests

Exchange rate lookup and month-end revaluation of foreign-currency
bank balances.
"""

import pytest
from datetime import date
from decimal import Decimal

from ledger_engine.schemas.fx import BankAccountCreate, ExchangeRateCreate
from ledger_engine.services.fx_service import SKIP_NO_RATE, FXService, month_bounds, revalue_balance


async def add_rate(service, tenant_id, currency, rate, rate_date, to_currency="JMD"):
    return await service.record_exchange_rate(tenant_id, ExchangeRateCreate(
        from_currency=currency, to_currency=to_currency, rate=Decimal(rate), rate_date=rate_date,
    ))


async def add_account(service, tenant_id, name, currency, balance, original_rate=None):
    return await service.create_bank_account(tenant_id, BankAccountCreate(
        account_name=name,
        bank_name="NCB",
        currency=currency,
        current_balance=Decimal(balance),
        original_exchange_rate=Decimal(original_rate) if original_rate else None,
    ))


class TestRevaluationMath:
    """Test the pure revaluation helpers."""

    def test_revalue_balance(self):
        previous, current, gain_loss = revalue_balance(
            Decimal("10000.00"), Decimal("150.00"), Decimal("155.25"),
        )
        assert previous == Decimal("1500000.00")
        assert current == Decimal("1552500.00")
        assert gain_loss == Decimal("52500.00")

    def test_month_bounds_leap_year(self):
        assert month_bounds(2028, 2) == (date(2028, 2, 1), date(2028, 2, 29))


class TestExchangeRates:
    """Test rate recording and lookup."""

    @pytest.mark.asyncio
    async def test_same_currency_is_one(self, db_session, tenant_id):
        rate = await FXService(db_session).get_exchange_rate(tenant_id, "JMD", "JMD")
        assert rate == Decimal("1")

    @pytest.mark.asyncio
    async def test_latest_rate_on_or_before(self, db_session, tenant_id):
        service = FXService(db_session)
        await add_rate(service, tenant_id, "USD", "154.00", date(2026, 1, 10))
        await add_rate(service, tenant_id, "USD", "156.00", date(2026, 1, 20))

        assert await service.get_exchange_rate(tenant_id, "usd", as_of=date(2026, 1, 15)) == Decimal("154.00")
        assert await service.get_exchange_rate(tenant_id, "USD", as_of=date(2026, 1, 31)) == Decimal("156.00")
        assert await service.get_exchange_rate(tenant_id, "USD", as_of=date(2026, 1, 1)) is None

    @pytest.mark.asyncio
    async def test_recording_same_date_replaces(self, db_session, tenant_id):
        service = FXService(db_session)
        await add_rate(service, tenant_id, "USD", "154.00", date(2026, 1, 10))
        await add_rate(service, tenant_id, "USD", "154.50", date(2026, 1, 10))

        rates = await service.list_exchange_rates(tenant_id, "USD")
        assert len(rates) == 1
        assert rates[0].rate == Decimal("154.50")

    @pytest.mark.asyncio
    async def test_inverse_of_reverse_pair(self, db_session, tenant_id):
        service = FXService(db_session)
        await add_rate(service, tenant_id, "JMD", "0.005", date(2026, 1, 10), to_currency="GBP")

        rate = await service.get_exchange_rate(tenant_id, "GBP", "JMD", date(2026, 1, 31))
        assert rate == Decimal("200.000000")


class TestRevaluation:
    """Test month-end revaluation runs."""

    @pytest.mark.asyncio
    async def test_revaluation_chains_previous_rate(self, db_session, tenant_id):
        service = FXService(db_session)
        account = await add_account(service, tenant_id, "USD Operating", "USD", "10000.00", "150.00")
        await add_rate(service, tenant_id, "USD", "155.00", date(2026, 1, 31))
        await add_rate(service, tenant_id, "USD", "153.00", date(2026, 2, 27))

        january = await service.revalue_month(tenant_id, 2026, 1)
        [line] = january.processed
        assert line.previous_rate == Decimal("150.00")
        assert line.unrealized_gain_loss == Decimal("50000.00")

        february = await service.revalue_month(tenant_id, 2026, 2)
        [line] = february.processed
        assert line.previous_rate == Decimal("155.00")
        assert line.current_rate == Decimal("153.00")
        assert line.unrealized_gain_loss == Decimal("-20000.00")

        history = await service.get_revaluation_history(tenant_id, account.id)
        assert [entry.revaluation_month for entry in history] == [date(2026, 2, 1), date(2026, 1, 1)]

    @pytest.mark.asyncio
    async def test_account_without_rate_is_skipped(self, db_session, tenant_id):
        service = FXService(db_session)
        await add_account(service, tenant_id, "USD Operating", "USD", "10000.00", "150.00")
        await add_account(service, tenant_id, "EUR Reserve", "EUR", "5000.00", "170.00")
        await add_account(service, tenant_id, "JMD Payroll", "JMD", "900000.00")
        await add_rate(service, tenant_id, "USD", "155.00", date(2026, 1, 31))

        summary = await service.revalue_month(tenant_id, 2026, 1)

        assert summary.processed_count == 1
        assert summary.skipped_count == 1
        assert summary.skipped[0].currency == "EUR"
        assert summary.skipped[0].reason == SKIP_NO_RATE
        assert summary.total_unrealized_gain_loss == Decimal("50000.00")

    @pytest.mark.asyncio
    async def test_no_booking_rate_means_no_movement(self, db_session, tenant_id):
        service = FXService(db_session)
        await add_account(service, tenant_id, "USD Savings", "USD", "2500.00")
        await add_rate(service, tenant_id, "USD", "155.00", date(2026, 1, 31))

        summary = await service.revalue_month(tenant_id, 2026, 1)
        assert summary.processed[0].unrealized_gain_loss == Decimal("0.00")

    @pytest.mark.asyncio
    async def test_rerun_replaces_the_month(self, db_session, tenant_id):
        service = FXService(db_session)
        account = await add_account(service, tenant_id, "USD Operating", "USD", "10000.00", "150.00")
        await add_rate(service, tenant_id, "USD", "155.00", date(2026, 1, 31))

        await service.revalue_month(tenant_id, 2026, 1)
        await add_rate(service, tenant_id, "USD", "156.00", date(2026, 1, 31))
        await service.revalue_month(tenant_id, 2026, 1)

        [entry] = await service.get_revaluation_history(tenant_id, account.id)
        assert entry.current_rate == Decimal("156.00")
        assert entry.unrealized_gain_loss == Decimal("60000.00")

    @pytest.mark.asyncio
    async def test_preview_writes_nothing(self, db_session, tenant_id):
        service = FXService(db_session)
        await add_account(service, tenant_id, "USD Operating", "USD", "10000.00", "150.00")
        await add_rate(service, tenant_id, "USD", "155.00", date(2026, 1, 31))

        preview = await service.preview_revaluation(tenant_id, 2026, 1)
        assert preview.is_preview
        assert preview.total_unrealized_gain_loss == Decimal("50000.00")
        assert await service.get_revaluation_history(tenant_id) == []
