"""
Ledger Engine - Depreciation Posting

One posted entry per asset per run:

    Dr  Depreciation Expense      book depreciation
        Cr  Accumulated Depreciation
"""

import uuid
from datetime import date
from decimal import Decimal
from typing import Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from ledger_engine.models.accounting import GLAccount, JournalEntry, JournalEntryType
from ledger_engine.models.fixed_asset import FixedAsset
from ledger_engine.schemas.accounting import JournalEntryCreate, JournalLineCreate
from ledger_engine.services.accounting_service import AccountingService, SystemAccounts
from ledger_engine.utils.error_handling import AccountNotFoundException, MissingGLAccountException


class DepreciationPostingAdapter:
    """Builds and posts depreciation entries."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.accounting = AccountingService(db)

    async def _account(
        self,
        tenant_id: uuid.UUID,
        override_id: Optional[uuid.UUID],
        default_code: str,
        purpose: str,
    ) -> GLAccount:
        if override_id is None:
            return await self.accounting.require_account_by_code(tenant_id, default_code, purpose)
        try:
            account = await self.accounting.get_account(tenant_id, override_id)
        except AccountNotFoundException:
            raise MissingGLAccountException(str(override_id), purpose)
        if not account.is_active:
            raise MissingGLAccountException(account.account_code, purpose)
        return account

    async def resolve_accounts(
        self,
        tenant_id: uuid.UUID,
        asset: FixedAsset,
    ) -> Tuple[GLAccount, GLAccount]:
        """(expense account, accumulated depreciation account) for the asset."""
        expense = await self._account(
            tenant_id,
            asset.depreciation_expense_account_id,
            SystemAccounts.DEPRECIATION_EXPENSE,
            "depreciation expense",
        )
        accumulated = await self._account(
            tenant_id,
            asset.accumulated_depreciation_account_id,
            SystemAccounts.ACCUMULATED_DEPRECIATION,
            "accumulated depreciation",
        )
        return expense, accumulated

    async def post_depreciation(
        self,
        tenant_id: uuid.UUID,
        asset: FixedAsset,
        amount: Decimal,
        entry_date: date,
        fiscal_year: int,
        user_id: Optional[uuid.UUID] = None,
    ) -> JournalEntry:
        expense, accumulated = await self.resolve_accounts(tenant_id, asset)
        label = f"Depreciation {fiscal_year}: {asset.asset_code} {asset.name}"[:500]
        return await self.accounting.create_journal_entry(
            tenant_id,
            JournalEntryCreate(
                entry_date=entry_date,
                description=label,
                reference=f"DEP-{fiscal_year}-{asset.asset_code}"[:100],
                entry_type=JournalEntryType.DEPRECIATION,
                source_module="fixed_assets",
                source_document_id=asset.id,
                lines=[
                    JournalLineCreate(account_id=expense.id, debit_amount=amount, description=label),
                    JournalLineCreate(account_id=accumulated.id, credit_amount=amount, description=label),
                ],
                entry_metadata={"fiscal_year": fiscal_year},
                auto_post=True,
            ),
            user_id,
        )
