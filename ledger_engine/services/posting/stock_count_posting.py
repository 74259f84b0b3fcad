"""
Ledger Engine - Stock Count Variance Posting

Posts the net variance of an approved stock count:

    surplus  (total > 0):  Dr Inventory           / Cr Inventory Variance
    shortage (total < 0):  Dr Inventory Variance  / Cr Inventory

for |total variance value|. The count becomes POSTED in the same unit of work.
"""

import logging
import uuid
from datetime import date, datetime
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ledger_engine.models.accounting import GLAccount, JournalEntry, JournalEntryType
from ledger_engine.models.inventory import StockCount, StockCountStatus
from ledger_engine.schemas.accounting import JournalEntryCreate, JournalLineCreate
from ledger_engine.services.accounting_service import AccountingService, SystemAccounts
from ledger_engine.utils.error_handling import (
    BusinessRuleException,
    ErrorCode,
    InvalidStatusException,
    NotFoundException,
)
from ledger_engine.utils.money import ZERO, round2

logger = logging.getLogger(__name__)


class StockCountPostingAdapter:
    """Builds and posts the variance entry for a stock count."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.accounting = AccountingService(db)

    async def _load_for_update(self, tenant_id: uuid.UUID, stock_count_id: uuid.UUID) -> StockCount:
        result = await self.db.execute(
            select(StockCount)
            .where(
                StockCount.id == stock_count_id,
                StockCount.tenant_id == tenant_id,
            )
            .options(selectinload(StockCount.items))
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        stock_count = result.scalar_one_or_none()
        if stock_count is None:
            raise NotFoundException("Stock count", stock_count_id)
        return stock_count

    async def _account(
        self,
        tenant_id: uuid.UUID,
        account_id: Optional[uuid.UUID],
        default_code: str,
        purpose: str,
    ) -> GLAccount:
        if account_id:
            return await self.accounting.get_account(tenant_id, account_id)
        return await self.accounting.require_account_by_code(tenant_id, default_code, purpose)

    @staticmethod
    def build_lines(
        count_number: str,
        total_variance,
        inventory_account_id: uuid.UUID,
        variance_account_id: uuid.UUID,
    ) -> List[JournalLineCreate]:
        amount = abs(round2(total_variance))
        if total_variance > 0:
            label = f"Stock count surplus: {count_number}"
            debit_account, credit_account = inventory_account_id, variance_account_id
        else:
            label = f"Stock count shortage: {count_number}"
            debit_account, credit_account = variance_account_id, inventory_account_id

        return [
            JournalLineCreate(account_id=debit_account, debit_amount=amount, description=label),
            JournalLineCreate(account_id=credit_account, credit_amount=amount, description=label),
        ]

    async def post_stock_count(
        self,
        tenant_id: uuid.UUID,
        stock_count_id: uuid.UUID,
        user_id: Optional[uuid.UUID] = None,
        inventory_account_id: Optional[uuid.UUID] = None,
        variance_account_id: Optional[uuid.UUID] = None,
        posting_date: Optional[date] = None,
    ) -> JournalEntry:
        """Post the count's variance. Only APPROVED, never-posted counts qualify."""
        stock_count = await self._load_for_update(tenant_id, stock_count_id)

        if stock_count.status != StockCountStatus.APPROVED or stock_count.journal_entry_id:
            raise InvalidStatusException(
                "Stock count", stock_count.status, StockCountStatus.APPROVED,
            )

        total_variance = round2(sum((item.variance_value for item in stock_count.items), ZERO))
        if total_variance == 0:
            raise BusinessRuleException(
                message=f"Stock count {stock_count.count_number} has no variance to post",
                rule="variance_required",
                code=ErrorCode.NOTHING_TO_POST,
            )

        inventory = await self._account(
            tenant_id, inventory_account_id, SystemAccounts.INVENTORY, "inventory",
        )
        variance = await self._account(
            tenant_id, variance_account_id, SystemAccounts.INVENTORY_VARIANCE, "inventory variance",
        )

        entry = await self.accounting.create_journal_entry(
            tenant_id,
            JournalEntryCreate(
                entry_date=posting_date or stock_count.count_date,
                description=f"Stock count variance: {stock_count.count_number}",
                reference=stock_count.count_number,
                entry_type=JournalEntryType.INVENTORY_ADJUSTMENT,
                source_module="inventory",
                source_document_id=stock_count.id,
                lines=self.build_lines(
                    stock_count.count_number, total_variance, inventory.id, variance.id,
                ),
                auto_post=True,
            ),
            user_id,
        )

        stock_count.status = StockCountStatus.POSTED
        stock_count.journal_entry_id = entry.id
        stock_count.total_variance_value = total_variance
        stock_count.posted_at = datetime.utcnow()
        stock_count.updated_by_id = user_id
        await self.db.flush()

        logger.info(
            f"Posted stock count {stock_count.count_number} variance {total_variance} as {entry.entry_number}"
        )
        return entry
