"""
Ledger Engine - Scheduled Task Tests

The async bodies of the Celery tasks, run against the test database.
"""

import pytest
from datetime import date
from decimal import Decimal
from unittest.mock import patch

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ledger_engine.models.accounting import JournalEntryType
from ledger_engine.schemas.accounting import JournalEntryCreate, JournalLineCreate
from ledger_engine.schemas.fx import BankAccountCreate, ExchangeRateCreate
from ledger_engine.services.accounting_service import AccountingService
from ledger_engine.services.fx_service import FXService
from ledger_engine.tasks.celery_tasks import (
    _monthly_fx_revaluation,
    _verify_account_balances,
    previous_month,
)


@pytest.fixture
def task_sessions(test_engine):
    """Point the tasks' own sessions at the test database."""
    factory = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)
    with patch("ledger_engine.database.async_session_maker", factory):
        yield factory


async def seed_usd_account(db_session, tenant_id):
    service = FXService(db_session)
    await service.create_bank_account(tenant_id, BankAccountCreate(
        account_name="USD Operating",
        bank_name="NCB",
        currency="USD",
        current_balance=Decimal("10000.00"),
        original_exchange_rate=Decimal("150.00"),
    ))
    await service.record_exchange_rate(tenant_id, ExchangeRateCreate(
        from_currency="USD", rate=Decimal("155.00"), rate_date=date(2026, 1, 31),
    ))
    await db_session.commit()


class TestPreviousMonth:

    def test_mid_year(self):
        assert previous_month(date(2026, 7, 1)) == (2026, 6)

    def test_january_rolls_back_a_year(self):
        assert previous_month(date(2026, 1, 1)) == (2025, 12)


class TestRevaluationTask:
    """Test the month-end revaluation job."""

    @pytest.mark.asyncio
    async def test_revalues_requested_tenant(self, db_session, tenant_id, task_sessions):
        await seed_usd_account(db_session, tenant_id)

        result = await _monthly_fx_revaluation(2026, 1, str(tenant_id))

        assert result["period"] == "2026-01"
        assert result["accounts_revalued"] == 1
        assert result["failed_tenants"] == []

        [entry] = await FXService(db_session).get_revaluation_history(tenant_id)
        assert entry.unrealized_gain_loss == Decimal("50000.00")

    @pytest.mark.asyncio
    async def test_failing_tenant_is_reported(self, db_session, tenant_id, task_sessions):
        await seed_usd_account(db_session, tenant_id)

        with patch.object(FXService, "revalue_month", side_effect=RuntimeError("rate feed down")):
            result = await _monthly_fx_revaluation(2026, 1, str(tenant_id))

        assert result["accounts_revalued"] == 0
        assert result["failed_tenants"] == [str(tenant_id)]


class TestBalanceVerificationTask:
    """Test the nightly balance check."""

    @pytest.mark.asyncio
    async def test_discovers_tenants_from_chart(self, db_session, tenant_id, chart, task_sessions):
        await AccountingService(db_session).create_journal_entry(tenant_id, JournalEntryCreate(
            entry_date=date(2026, 7, 15),
            description="Cash sale",
            entry_type=JournalEntryType.MANUAL,
            lines=[
                JournalLineCreate(account_id=chart["1000"].id, debit_amount=Decimal("250.00")),
                JournalLineCreate(account_id=chart["4000"].id, credit_amount=Decimal("250.00")),
            ],
            auto_post=True,
        ))
        await db_session.commit()

        result = await _verify_account_balances(None)

        assert result["tenants_checked"] == 1
        assert result["inconsistent_tenants"] == {}
