"""
Ledger Engine - Document Number Sequences

Per-tenant counters for journal entries, expenses, stock counts and other
human-readable document numbers. The increment is a single conditional
UPDATE so two concurrent transactions never read the same value.
"""

import logging
import uuid

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_engine.models.accounting import NumberSequence

logger = logging.getLogger(__name__)


class SequenceService:
    """Atomic per-tenant document counters."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def next_value(self, tenant_id: uuid.UUID, sequence_name: str) -> int:
        """Increment the counter and return the new value (first call returns 1)."""
        result = await self.db.execute(
            update(NumberSequence)
            .where(
                NumberSequence.tenant_id == tenant_id,
                NumberSequence.sequence_name == sequence_name,
            )
            .values(last_value=NumberSequence.last_value + 1)
            .execution_options(synchronize_session=False)
        )

        if result.rowcount == 0:
            # The unique (tenant_id, sequence_name) constraint rejects a
            # concurrent first insert; the loser's transaction rolls back.
            self.db.add(NumberSequence(
                tenant_id=tenant_id,
                sequence_name=sequence_name,
                last_value=1,
            ))
            await self.db.flush()
            logger.debug(f"Started sequence {sequence_name} for tenant {tenant_id}")
            return 1

        value = await self.db.scalar(
            select(NumberSequence.last_value).where(
                NumberSequence.tenant_id == tenant_id,
                NumberSequence.sequence_name == sequence_name,
            )
        )
        return int(value)

    async def next_number(
        self,
        tenant_id: uuid.UUID,
        sequence_name: str,
        prefix: str,
        width: int = 5,
    ) -> str:
        """Formatted document number, e.g. JE-00001."""
        value = await self.next_value(tenant_id, sequence_name)
        return f"{prefix}-{value:0{width}d}"
