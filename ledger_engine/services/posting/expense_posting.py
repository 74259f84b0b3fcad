"""
Ledger Engine - Expense Posting

Turns a recorded expense into a posted journal entry:

    Dr  Expense account            net amount + restricted GCT
    Dr  GCT Input Tax Receivable   claimable GCT
    Dr  Deferred GCT Input Credit  GCT held for phased recovery
        Cr  Cash / Bank / Accounts Payable   net amount + GCT

The expense is marked POSTED in the same unit of work.
"""

import logging
import uuid
from typing import Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ledger_engine.models.accounting import GLAccount, JournalEntry, JournalEntryType
from ledger_engine.models.expense import Expense, ExpenseCategory, ExpenseStatus, PaymentMethod
from ledger_engine.schemas.accounting import JournalEntryCreate, JournalLineCreate
from ledger_engine.services.accounting_service import AccountingService, SystemAccounts
from ledger_engine.utils.error_handling import InvalidStatusException
from ledger_engine.utils.money import ZERO, round2

logger = logging.getLogger(__name__)


EXPENSE_CATEGORY_TO_ACCOUNT: Dict[ExpenseCategory, str] = {
    ExpenseCategory.ADVERTISING: "6000",
    ExpenseCategory.BANK_FEES: "6010",
    ExpenseCategory.CONTRACTOR: "6020",
    ExpenseCategory.ENTERTAINMENT: "6060",
    ExpenseCategory.EQUIPMENT: "6040",
    ExpenseCategory.INSURANCE: "6050",
    ExpenseCategory.INVENTORY: "5000",
    ExpenseCategory.MEALS: "6060",
    ExpenseCategory.MOTOR_VEHICLE: "6180",
    ExpenseCategory.OFFICE_SUPPLIES: "6070",
    ExpenseCategory.PROFESSIONAL_SERVICES: "6080",
    ExpenseCategory.RENT: "6090",
    ExpenseCategory.REPAIRS: "6100",
    ExpenseCategory.RESTAURANT: "6060",
    ExpenseCategory.SALARIES: "6110",
    ExpenseCategory.SOFTWARE: "6130",
    ExpenseCategory.TAXES: "6140",
    ExpenseCategory.TELEPHONE: "6150",
    ExpenseCategory.TRAVEL: "6160",
    ExpenseCategory.UTILITIES: "6170",
    ExpenseCategory.VEHICLE: "6180",
    ExpenseCategory.VEHICLE_FUEL: "6180",
    ExpenseCategory.VEHICLE_MAINTENANCE: "6180",
    ExpenseCategory.OTHER: SystemAccounts.MISCELLANEOUS_EXPENSE,
}

PAYMENT_METHOD_TO_ACCOUNT: Dict[PaymentMethod, str] = {
    PaymentMethod.CASH: SystemAccounts.CASH,
    PaymentMethod.BANK: SystemAccounts.BANK,
    PaymentMethod.CREDIT: SystemAccounts.ACCOUNTS_PAYABLE,
}


class ExpensePostingAdapter:
    """Builds and posts the journal entry for an expense."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.accounting = AccountingService(db)

    async def _expense_account(self, tenant_id: uuid.UUID, expense: Expense) -> GLAccount:
        if expense.expense_account_id:
            return await self.accounting.get_account(tenant_id, expense.expense_account_id)
        code = EXPENSE_CATEGORY_TO_ACCOUNT.get(
            ExpenseCategory(expense.category), SystemAccounts.MISCELLANEOUS_EXPENSE,
        )
        return await self.accounting.require_account_by_code(
            tenant_id, code, f"{expense.category.value} expenses",
        )

    async def build_lines(self, tenant_id: uuid.UUID, expense: Expense) -> List[JournalLineCreate]:
        """Balanced, cent-rounded line set for the expense."""
        net = round2(expense.amount)
        claimable = round2(expense.gct_claimable)
        deferred = round2(expense.gct_deferred)
        restricted = round2(expense.gct_amount) - claimable - deferred
        label = f"{expense.expense_number}: {expense.description}"

        expense_account = await self._expense_account(tenant_id, expense)
        payment_account = await self.accounting.require_account_by_code(
            tenant_id,
            PAYMENT_METHOD_TO_ACCOUNT[PaymentMethod(expense.payment_method)],
            f"{expense.payment_method.value} payments",
        )

        lines = [
            JournalLineCreate(
                account_id=expense_account.id,
                debit_amount=net + restricted,
                description=label,
            ),
        ]
        if claimable > 0:
            gct_account = await self.accounting.require_account_by_code(
                tenant_id, SystemAccounts.GCT_INPUT_RECEIVABLE, "GCT input credit",
            )
            lines.append(JournalLineCreate(
                account_id=gct_account.id,
                debit_amount=claimable,
                description=f"GCT input credit: {expense.expense_number}",
            ))
        if deferred > 0:
            deferred_account = await self.accounting.require_account_by_code(
                tenant_id, SystemAccounts.GCT_DEFERRED_INPUT, "deferred GCT input credit",
            )
            lines.append(JournalLineCreate(
                account_id=deferred_account.id,
                debit_amount=deferred,
                description=f"GCT deferred for phased recovery: {expense.expense_number}",
            ))

        total_debit = sum((line.debit_amount for line in lines), ZERO)
        lines.append(JournalLineCreate(
            account_id=payment_account.id,
            credit_amount=total_debit,
            description=label,
        ))
        return lines

    async def post_expense(
        self,
        tenant_id: uuid.UUID,
        expense: Expense,
        user_id: Optional[uuid.UUID] = None,
    ) -> JournalEntry:
        """Create and post the entry, then mark the expense POSTED."""
        if expense.status == ExpenseStatus.POSTED or expense.journal_entry_id:
            raise InvalidStatusException("Expense", expense.status, ExpenseStatus.DRAFT)

        lines = await self.build_lines(tenant_id, expense)
        entry = await self.accounting.create_journal_entry(
            tenant_id,
            JournalEntryCreate(
                entry_date=expense.expense_date,
                description=f"Expense {expense.expense_number}: {expense.description}"[:500],
                reference=expense.expense_number,
                entry_type=JournalEntryType.EXPENSE,
                source_module="expenses",
                source_document_id=expense.id,
                lines=lines,
                auto_post=True,
            ),
            user_id,
        )

        expense.status = ExpenseStatus.POSTED
        expense.journal_entry_id = entry.id
        expense.updated_by_id = user_id
        await self.db.flush()

        logger.info(f"Posted expense {expense.expense_number} as {entry.entry_number}")
        return entry
