"""
Ledger Engine - Expense Service

Records expenses with their GCT input-credit split and posts them to the
general ledger through the expense posting adapter.
"""

import logging
import uuid
from datetime import date
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_engine.models.expense import Expense, ExpenseCategory, ExpenseStatus
from ledger_engine.schemas.expense import ExpenseCreate
from ledger_engine.services.posting.expense_posting import ExpensePostingAdapter
from ledger_engine.services.sequence_service import SequenceService
from ledger_engine.services.tax_calculators.gct_service import GCTCalculator
from ledger_engine.utils.error_handling import InvalidDateRangeException, NotFoundException
from ledger_engine.utils.money import round2
from ledger_engine.utils.tagged_value import from_python

logger = logging.getLogger(__name__)


class ExpenseService:
    """Service for expense recording and posting."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.sequences = SequenceService(db)
        self.posting = ExpensePostingAdapter(db)

    async def create_expense(
        self,
        tenant_id: uuid.UUID,
        data: ExpenseCreate,
        user_id: Optional[uuid.UUID] = None,
    ) -> Expense:
        """
        Record an expense and, unless post_to_gl is off, post it.

        The claimable / restricted / deferred split is fixed here and is
        what the journal entry is sized from.
        """
        amount = round2(data.amount)
        gct_amount = round2(data.gct_amount)
        credit = GCTCalculator.calculate_claimable_credit(
            gct_amount,
            data.category.value,
            total_amount=amount,
            is_capital_goods=data.is_capital_purchase,
            mixed_supply_ratio=data.mixed_supply_ratio,
        )

        expense = Expense(
            tenant_id=tenant_id,
            expense_number=await self.sequences.next_number(tenant_id, "expense", "EXP"),
            expense_date=data.expense_date,
            category=data.category,
            description=data.description,
            vendor_name=data.vendor_name,
            amount=amount,
            gct_amount=gct_amount,
            gct_claimable=credit.claimable_amount,
            gct_restricted=credit.restricted_amount,
            gct_deferred=credit.deferred_amount,
            mixed_supply_ratio=data.mixed_supply_ratio,
            requires_phased_recovery=credit.requires_phased_recovery,
            is_capital_purchase=data.is_capital_purchase,
            payment_method=data.payment_method,
            status=ExpenseStatus.DRAFT,
            expense_account_id=data.expense_account_id,
            notes=data.notes,
            attributes=from_python(data.attributes) if data.attributes is not None else None,
            created_by_id=user_id,
            updated_by_id=user_id,
        )
        self.db.add(expense)
        await self.db.flush()

        if credit.requires_phased_recovery:
            logger.info(
                f"Expense {expense.expense_number}: GCT {credit.deferred_amount} deferred for phased recovery"
            )

        if data.post_to_gl:
            await self.posting.post_expense(tenant_id, expense, user_id)

        return expense

    async def post_expense(
        self,
        tenant_id: uuid.UUID,
        expense_id: uuid.UUID,
        user_id: Optional[uuid.UUID] = None,
    ) -> Expense:
        """Post a DRAFT expense recorded with post_to_gl off."""
        expense = await self.get_expense(tenant_id, expense_id, for_update=True)
        await self.posting.post_expense(tenant_id, expense, user_id)
        return expense

    async def get_expense(
        self,
        tenant_id: uuid.UUID,
        expense_id: uuid.UUID,
        for_update: bool = False,
    ) -> Expense:
        query = select(Expense).where(
            Expense.id == expense_id,
            Expense.tenant_id == tenant_id,
        )
        if for_update:
            query = query.with_for_update().execution_options(populate_existing=True)
        result = await self.db.execute(query)
        expense = result.scalar_one_or_none()
        if expense is None:
            raise NotFoundException("Expense", expense_id)
        return expense

    async def list_expenses(
        self,
        tenant_id: uuid.UUID,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        category: Optional[ExpenseCategory] = None,
        status: Optional[ExpenseStatus] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[Expense]:
        if start_date and end_date and start_date > end_date:
            raise InvalidDateRangeException(str(start_date), str(end_date))

        query = select(Expense).where(Expense.tenant_id == tenant_id)
        if start_date:
            query = query.where(Expense.expense_date >= start_date)
        if end_date:
            query = query.where(Expense.expense_date <= end_date)
        if category:
            query = query.where(Expense.category == category)
        if status:
            query = query.where(Expense.status == status)

        query = query.order_by(Expense.expense_date.desc(), Expense.expense_number.desc())
        result = await self.db.execute(query.offset(offset).limit(limit))
        return list(result.scalars().all())
