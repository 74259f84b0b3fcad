"""
Ledger Engine - Posting Atomicity Tests

A posting that fails part way through must leave no trace once its
transaction is rolled back: no balance moves, no status change.
"""

import pytest
from datetime import date
from decimal import Decimal
from unittest.mock import patch

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ledger_engine.database import unit_of_work
from ledger_engine.models.accounting import GLAccount, JournalEntry, JournalEntryStatus
from ledger_engine.models.expense import Expense, ExpenseCategory, ExpenseStatus
from ledger_engine.schemas.accounting import JournalEntryCreate, JournalLineCreate
from ledger_engine.schemas.expense import ExpenseCreate
from ledger_engine.services.accounting_service import AccountingService
from ledger_engine.services.expense_service import ExpenseService
from ledger_engine.utils.error_handling import AppException, ErrorCode


@pytest.fixture
def session_factory(test_engine):
    """Point unit_of_work at the test database."""
    factory = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)
    with patch("ledger_engine.database.async_session_maker", factory):
        yield factory


def failing_apply(error):
    """Apply the first line of the entry, flush it, then fail."""

    async def apply_lines(self, entry, sign):
        line = entry.lines[0]
        account = await self.db.get(GLAccount, line.account_id)
        account.current_balance += sign * account.signed_delta(line.debit_amount, line.credit_amount)
        await self.db.flush()
        raise error

    return apply_lines


async def balances(factory, tenant_id):
    async with factory() as session:
        result = await session.execute(select(GLAccount).where(GLAccount.tenant_id == tenant_id))
        return {account.account_code: account.current_balance for account in result.scalars().all()}


class TestJournalPostingAtomicity:
    """Test rollback of a journal entry that fails while posting."""

    @pytest.mark.asyncio
    async def test_failed_post_leaves_draft_and_balances(self, db_session, tenant_id, chart, session_factory):
        entry = await AccountingService(db_session).create_journal_entry(tenant_id, JournalEntryCreate(
            entry_date=date(2026, 7, 15),
            description="Cash sale",
            lines=[
                JournalLineCreate(account_id=chart["1000"].id, debit_amount=Decimal("1000.00")),
                JournalLineCreate(account_id=chart["4000"].id, credit_amount=Decimal("1000.00")),
            ],
        ))
        await db_session.commit()

        with patch.object(AccountingService, "_apply_lines", failing_apply(RuntimeError("connection lost"))):
            with pytest.raises(RuntimeError):
                async with unit_of_work() as db:
                    await AccountingService(db).post_journal_entry(tenant_id, entry.id)

        async with session_factory() as session:
            stored = await session.get(JournalEntry, entry.id)
            assert stored.status == JournalEntryStatus.DRAFT
            assert stored.posted_at is None

        after = await balances(session_factory, tenant_id)
        assert after["1000"] == Decimal("0.00")
        assert after["4000"] == Decimal("0.00")


class TestExpensePostingAtomicity:
    """Test rollback of an expense that fails while posting."""

    @pytest.mark.asyncio
    async def test_failed_post_leaves_expense_draft(self, db_session, tenant_id, chart, session_factory):
        expense = await ExpenseService(db_session).create_expense(tenant_id, ExpenseCreate(
            expense_date=date(2026, 7, 10),
            category=ExpenseCategory.OFFICE_SUPPLIES,
            description="Printer paper",
            amount=Decimal("10000.00"),
            gct_amount=Decimal("1500.00"),
            post_to_gl=False,
        ))
        await db_session.commit()
        before = await balances(session_factory, tenant_id)

        with patch.object(AccountingService, "_apply_lines", failing_apply(RuntimeError("connection lost"))):
            with pytest.raises(RuntimeError):
                async with unit_of_work() as db:
                    await ExpenseService(db).post_expense(tenant_id, expense.id)

        async with session_factory() as session:
            stored = await session.get(Expense, expense.id)
            assert stored.status == ExpenseStatus.DRAFT
            assert stored.journal_entry_id is None

            entries = await session.scalar(
                select(func.count(JournalEntry.id)).where(JournalEntry.tenant_id == tenant_id)
            )
            assert entries == 0

        assert await balances(session_factory, tenant_id) == before
        assert before["1150"] == Decimal("0.00")


class TestRouterRollback:
    """Test that the API rolls back a posting that fails part way."""

    @pytest.mark.asyncio
    async def test_failed_post_over_http(self, client, headers):
        response = await client.post("/api/v1/accounts/initialize", headers=headers)
        accounts = {account["account_code"]: account["id"] for account in response.json()}

        response = await client.post("/api/v1/journal-entries", json={
            "entry_date": "2026-07-15",
            "description": "Cash sale",
            "lines": [
                {"account_id": accounts["1000"], "debit_amount": "1000.00"},
                {"account_id": accounts["4000"], "credit_amount": "1000.00"},
            ],
        }, headers=headers)
        entry_id = response.json()["id"]

        error = AppException(code=ErrorCode.DATABASE_ERROR, message="Ledger write failed")
        with patch.object(AccountingService, "_apply_lines", failing_apply(error)):
            response = await client.post(f"/api/v1/journal-entries/{entry_id}/post", headers=headers)
        assert response.status_code == 500
        assert response.json()["detail"]["code"] == "DATABASE_ERROR"

        response = await client.get(f"/api/v1/journal-entries/{entry_id}", headers=headers)
        assert response.json()["status"] == "draft"

        response = await client.get(f"/api/v1/accounts/{accounts['1000']}", headers=headers)
        assert Decimal(response.json()["current_balance"]) == Decimal("0.00")
