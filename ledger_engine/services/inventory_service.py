"""
Ledger Engine - Stock Count Service

Physical stock counts:
- Open a count and add the items to be counted
- Record counted quantities; variance = counted - expected, valued at unit cost
- Count status follows the item set (DRAFT -> IN_PROGRESS -> PENDING_REVIEW)
- Approve, then post the net variance to the GL

Methods flush; the caller commits.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ledger_engine.models.accounting import JournalEntry
from ledger_engine.models.inventory import StockCount, StockCountItem, StockCountStatus
from ledger_engine.schemas.inventory import (
    StockCountCreate,
    StockCountItemCreate,
    StockCountPostRequest,
)
from ledger_engine.services.posting.stock_count_posting import StockCountPostingAdapter
from ledger_engine.services.sequence_service import SequenceService
from ledger_engine.utils.error_handling import (
    DuplicateEntryException,
    InvalidStatusException,
    NotFoundException,
)
from ledger_engine.utils.money import ZERO, round2

logger = logging.getLogger(__name__)


# Statuses that no longer follow the item set
FROZEN_STATUSES = frozenset({
    StockCountStatus.APPROVED,
    StockCountStatus.POSTED,
    StockCountStatus.CANCELLED,
})


@dataclass
class StockCountSummary:
    status: StockCountStatus
    total_items: int
    items_counted: int
    items_with_variance: int
    total_variance_value: Decimal


def derive_stock_count_status(
    current_status: StockCountStatus,
    items: Iterable[StockCountItem],
) -> StockCountSummary:
    """
    Status and summary counts implied by a count's items.

    Frozen statuses are kept as they are. Otherwise: nothing counted is
    DRAFT, some counted is IN_PROGRESS, everything counted is PENDING_REVIEW.
    """
    items = list(items)
    counted = [item for item in items if item.counted_quantity is not None]
    with_variance = [item for item in counted if item.variance_quantity != 0]
    total_variance = round2(sum((item.variance_value for item in counted), ZERO))

    status = StockCountStatus(current_status)
    if status not in FROZEN_STATUSES:
        if not counted:
            status = StockCountStatus.DRAFT
        elif len(counted) < len(items):
            status = StockCountStatus.IN_PROGRESS
        else:
            status = StockCountStatus.PENDING_REVIEW

    return StockCountSummary(
        status=status,
        total_items=len(items),
        items_counted=len(counted),
        items_with_variance=len(with_variance),
        total_variance_value=total_variance,
    )


class InventoryService:
    """Service for stock counts."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.sequences = SequenceService(db)
        self.posting = StockCountPostingAdapter(db)

    async def create_stock_count(
        self,
        tenant_id: uuid.UUID,
        data: StockCountCreate,
        user_id: Optional[uuid.UUID] = None,
    ) -> StockCount:
        count_number = await self.sequences.next_number(tenant_id, "stock_count", "SC")
        stock_count = StockCount(
            tenant_id=tenant_id,
            count_number=count_number,
            count_date=data.count_date,
            location=data.location,
            notes=data.notes,
            status=StockCountStatus.DRAFT,
            total_items=0,
            items_counted=0,
            items_with_variance=0,
            total_variance_value=ZERO,
            items=[],
            created_by_id=user_id,
            updated_by_id=user_id,
        )
        self.db.add(stock_count)
        await self.db.flush()
        return stock_count

    async def get_stock_count(
        self,
        tenant_id: uuid.UUID,
        stock_count_id: uuid.UUID,
        for_update: bool = False,
    ) -> StockCount:
        query = (
            select(StockCount)
            .where(
                StockCount.id == stock_count_id,
                StockCount.tenant_id == tenant_id,
            )
            .options(selectinload(StockCount.items))
        )
        if for_update:
            query = query.with_for_update().execution_options(populate_existing=True)
        result = await self.db.execute(query)
        stock_count = result.scalar_one_or_none()
        if stock_count is None:
            raise NotFoundException("Stock count", stock_count_id)
        return stock_count

    async def list_stock_counts(
        self,
        tenant_id: uuid.UUID,
        status: Optional[StockCountStatus] = None,
    ) -> List[StockCount]:
        query = (
            select(StockCount)
            .where(StockCount.tenant_id == tenant_id)
            .options(selectinload(StockCount.items))
        )
        if status:
            query = query.where(StockCount.status == status)
        query = query.order_by(StockCount.count_date.desc(), StockCount.count_number.desc())
        result = await self.db.execute(query)
        return list(result.scalars().all())

    def _refresh_summary(self, stock_count: StockCount) -> None:
        summary = derive_stock_count_status(stock_count.status, stock_count.items)
        stock_count.status = summary.status
        stock_count.total_items = summary.total_items
        stock_count.items_counted = summary.items_counted
        stock_count.items_with_variance = summary.items_with_variance
        stock_count.total_variance_value = summary.total_variance_value

    @staticmethod
    def _require_open(stock_count: StockCount) -> None:
        if stock_count.status in FROZEN_STATUSES:
            raise InvalidStatusException(
                "Stock count",
                stock_count.status,
                message=f"Stock count {stock_count.count_number} is {stock_count.status.value} and can no longer change",
            )

    async def add_item(
        self,
        tenant_id: uuid.UUID,
        stock_count_id: uuid.UUID,
        data: StockCountItemCreate,
        user_id: Optional[uuid.UUID] = None,
    ) -> StockCountItem:
        stock_count = await self.get_stock_count(tenant_id, stock_count_id, for_update=True)
        self._require_open(stock_count)

        if any(item.item_code == data.item_code for item in stock_count.items):
            raise DuplicateEntryException("Stock count item", "item_code", data.item_code)

        item = StockCountItem(
            item_code=data.item_code,
            description=data.description,
            expected_quantity=data.expected_quantity,
            unit_cost=round2(data.unit_cost),
            variance_quantity=Decimal("0"),
            variance_value=ZERO,
        )
        stock_count.items.append(item)
        self._refresh_summary(stock_count)
        stock_count.updated_by_id = user_id
        await self.db.flush()
        return item

    async def record_count(
        self,
        tenant_id: uuid.UUID,
        stock_count_id: uuid.UUID,
        item_id: uuid.UUID,
        counted_quantity: Decimal,
        user_id: Optional[uuid.UUID] = None,
    ) -> StockCount:
        """Record a physical count; variance and the count status follow."""
        stock_count = await self.get_stock_count(tenant_id, stock_count_id, for_update=True)
        self._require_open(stock_count)

        item = next((item for item in stock_count.items if item.id == item_id), None)
        if item is None:
            raise NotFoundException("Stock count item", item_id)

        item.counted_quantity = counted_quantity
        item.variance_quantity = counted_quantity - item.expected_quantity
        item.variance_value = round2(item.variance_quantity * item.unit_cost)
        item.counted_at = datetime.utcnow()

        self._refresh_summary(stock_count)
        stock_count.updated_by_id = user_id
        await self.db.flush()
        return stock_count

    async def approve(
        self,
        tenant_id: uuid.UUID,
        stock_count_id: uuid.UUID,
        user_id: Optional[uuid.UUID] = None,
    ) -> StockCount:
        stock_count = await self.get_stock_count(tenant_id, stock_count_id, for_update=True)
        if stock_count.status != StockCountStatus.PENDING_REVIEW:
            raise InvalidStatusException("Stock count", stock_count.status, StockCountStatus.PENDING_REVIEW)

        stock_count.status = StockCountStatus.APPROVED
        stock_count.approved_at = datetime.utcnow()
        stock_count.approved_by_id = user_id
        stock_count.updated_by_id = user_id
        await self.db.flush()

        logger.info(f"Approved stock count {stock_count.count_number}")
        return stock_count

    async def cancel(
        self,
        tenant_id: uuid.UUID,
        stock_count_id: uuid.UUID,
        user_id: Optional[uuid.UUID] = None,
    ) -> StockCount:
        stock_count = await self.get_stock_count(tenant_id, stock_count_id, for_update=True)
        if stock_count.status in (StockCountStatus.POSTED, StockCountStatus.CANCELLED):
            raise InvalidStatusException(
                "Stock count",
                stock_count.status,
                message=f"Stock count {stock_count.count_number} is {stock_count.status.value} and cannot be cancelled",
            )

        stock_count.status = StockCountStatus.CANCELLED
        stock_count.updated_by_id = user_id
        await self.db.flush()
        return stock_count

    async def post_variance(
        self,
        tenant_id: uuid.UUID,
        stock_count_id: uuid.UUID,
        user_id: Optional[uuid.UUID] = None,
        options: Optional[StockCountPostRequest] = None,
    ) -> JournalEntry:
        options = options or StockCountPostRequest()
        return await self.posting.post_stock_count(
            tenant_id,
            stock_count_id,
            user_id,
            inventory_account_id=options.inventory_account_id,
            variance_account_id=options.variance_account_id,
            posting_date=options.posting_date,
        )
