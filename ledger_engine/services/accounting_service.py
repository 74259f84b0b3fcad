"""
Ledger Engine - Accounting Service

Service layer for the chart of accounts and the general ledger.
This is the core engine every posting adapter goes through:
- Chart of accounts management (create, deactivate, default Jamaican chart)
- Journal entry lifecycle: DRAFT -> POSTED -> VOID, DRAFT -> VOID
- Running account balances maintained by post and void only
- Trial balance and balance verification

Methods flush but never commit. Balance-changing operations lock the entry
and its accounts (SELECT ... FOR UPDATE, accounts in id order) so postings
against the same account serialize inside the caller's transaction.
"""

import logging
import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ledger_engine.config import settings
from ledger_engine.models.accounting import (
    AccountType, NormalBalance,
    GLAccount, JournalEntry, JournalLine, JournalEntryStatus, JournalEntryType,
)
from ledger_engine.schemas.accounting import (
    GLAccountCreate,
    JournalEntryCreate, JournalEntryUpdate, JournalLineCreate,
    TrialBalanceItem, TrialBalanceReport,
    BalanceDiscrepancy, BalanceVerificationReport,
)
from ledger_engine.services.sequence_service import SequenceService
from ledger_engine.utils.error_handling import (
    AccountNotFoundException,
    BusinessRuleException,
    DuplicateEntryException,
    ErrorCode,
    InvalidAmountException,
    InvalidDateRangeException,
    InvalidStatusException,
    JournalEntryNotFoundException,
    MissingGLAccountException,
    UnbalancedEntryException,
    ValidationException,
)
from ledger_engine.utils.money import ZERO, round2, to_decimal, within_tolerance
from ledger_engine.utils.tagged_value import from_python

logger = logging.getLogger(__name__)


# =============================================================================
# SYSTEM ACCOUNTS
# =============================================================================

class SystemAccounts:
    """Account codes used by automatic postings."""
    CASH = "1000"
    BANK = "1020"
    ACCOUNTS_RECEIVABLE = "1100"
    GCT_INPUT_RECEIVABLE = "1150"
    GCT_DEFERRED_INPUT = "1160"
    INVENTORY = "1200"
    FIXED_ASSETS = "1500"
    ACCUMULATED_DEPRECIATION = "1510"
    ACCOUNTS_PAYABLE = "2000"
    GCT_PAYABLE = "2100"
    SALARIES_PAYABLE = "2300"
    OWNERS_EQUITY = "3000"
    RETAINED_EARNINGS = "3100"
    SALES_REVENUE = "4000"
    SERVICE_REVENUE = "4100"
    OTHER_INCOME = "4500"
    COST_OF_GOODS_SOLD = "5000"
    INVENTORY_VARIANCE = "5010"
    DEPRECIATION_EXPENSE = "6030"
    MISCELLANEOUS_EXPENSE = "6190"
    INTEREST_INCOME = "7000"
    INTEREST_EXPENSE = "7100"
    GAIN_ON_DISPOSAL = "7200"
    LOSS_ON_DISPOSAL = "7300"


DEFAULT_CHART_OF_ACCOUNTS: List[Tuple[str, str, AccountType]] = [
    # ASSETS
    ("1000", "Cash", AccountType.ASSET),
    ("1020", "Bank", AccountType.ASSET),
    ("1100", "Accounts Receivable", AccountType.ASSET),
    ("1150", "GCT Input Tax Receivable", AccountType.ASSET),
    ("1160", "Deferred GCT Input Credit", AccountType.ASSET),
    ("1200", "Inventory", AccountType.ASSET),
    ("1500", "Fixed Assets", AccountType.ASSET),
    ("1510", "Accumulated Depreciation", AccountType.ASSET),

    # LIABILITIES
    ("2000", "Accounts Payable", AccountType.LIABILITY),
    ("2100", "GCT Payable", AccountType.LIABILITY),
    ("2300", "Salaries Payable", AccountType.LIABILITY),

    # EQUITY
    ("3000", "Owner's Equity", AccountType.EQUITY),
    ("3100", "Retained Earnings", AccountType.EQUITY),

    # INCOME
    ("4000", "Sales Revenue", AccountType.INCOME),
    ("4100", "Service Revenue", AccountType.INCOME),
    ("4500", "Other Income", AccountType.INCOME),

    # COST OF SALES
    ("5000", "Cost of Goods Sold", AccountType.EXPENSE),
    ("5010", "Inventory Variance", AccountType.EXPENSE),

    # OPERATING EXPENSES
    ("6000", "Advertising & Marketing", AccountType.EXPENSE),
    ("6010", "Bank Fees", AccountType.EXPENSE),
    ("6020", "Contractor Services", AccountType.EXPENSE),
    ("6030", "Depreciation Expense", AccountType.EXPENSE),
    ("6040", "Equipment", AccountType.EXPENSE),
    ("6050", "Insurance", AccountType.EXPENSE),
    ("6060", "Meals & Entertainment", AccountType.EXPENSE),
    ("6070", "Office Supplies", AccountType.EXPENSE),
    ("6080", "Professional Services", AccountType.EXPENSE),
    ("6090", "Rent", AccountType.EXPENSE),
    ("6100", "Repairs & Maintenance", AccountType.EXPENSE),
    ("6110", "Salaries & Wages", AccountType.EXPENSE),
    ("6120", "Termination Benefits", AccountType.EXPENSE),
    ("6130", "Software & Subscriptions", AccountType.EXPENSE),
    ("6140", "Taxes & Licenses", AccountType.EXPENSE),
    ("6150", "Telephone & Internet", AccountType.EXPENSE),
    ("6160", "Travel", AccountType.EXPENSE),
    ("6170", "Utilities", AccountType.EXPENSE),
    ("6180", "Vehicle Expenses", AccountType.EXPENSE),
    ("6190", "Miscellaneous Expense", AccountType.EXPENSE),

    # OTHER INCOME & EXPENSE
    ("7000", "Interest Income", AccountType.INCOME),
    ("7100", "Interest Expense", AccountType.EXPENSE),
    ("7200", "Gain on Asset Disposal", AccountType.INCOME),
    ("7300", "Loss on Asset Disposal", AccountType.EXPENSE),
]


class AccountingService:
    """Service for chart of accounts and journal entry operations."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.sequences = SequenceService(db)

    # =========================================================================
    # CHART OF ACCOUNTS
    # =========================================================================

    async def get_chart_of_accounts(
        self,
        tenant_id: uuid.UUID,
        account_type: Optional[AccountType] = None,
        include_inactive: bool = False,
    ) -> List[GLAccount]:
        """Get chart of accounts for a tenant."""
        query = select(GLAccount).where(GLAccount.tenant_id == tenant_id)

        if account_type:
            query = query.where(GLAccount.account_type == account_type)
        if not include_inactive:
            query = query.where(GLAccount.is_active == True)  # noqa: E712

        query = query.order_by(GLAccount.account_code)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_account(self, tenant_id: uuid.UUID, account_id: uuid.UUID) -> GLAccount:
        """Get an account owned by the tenant or raise ACCOUNT_NOT_FOUND."""
        result = await self.db.execute(
            select(GLAccount).where(
                GLAccount.id == account_id,
                GLAccount.tenant_id == tenant_id,
            )
        )
        account = result.scalar_one_or_none()
        if account is None:
            raise AccountNotFoundException(account_id)
        return account

    async def get_account_by_code(
        self,
        tenant_id: uuid.UUID,
        account_code: str,
    ) -> Optional[GLAccount]:
        result = await self.db.execute(
            select(GLAccount).where(
                GLAccount.tenant_id == tenant_id,
                GLAccount.account_code == account_code,
            )
        )
        return result.scalar_one_or_none()

    async def require_account_by_code(
        self,
        tenant_id: uuid.UUID,
        account_code: str,
        purpose: str,
    ) -> GLAccount:
        """Resolve a system account for an automatic posting."""
        account = await self.get_account_by_code(tenant_id, account_code)
        if account is None or not account.is_active:
            raise MissingGLAccountException(account_code, purpose)
        return account

    async def create_account(
        self,
        tenant_id: uuid.UUID,
        data: GLAccountCreate,
        user_id: Optional[uuid.UUID] = None,
    ) -> GLAccount:
        """Create a new account in the chart of accounts."""
        existing = await self.get_account_by_code(tenant_id, data.account_code)
        if existing:
            raise DuplicateEntryException("GL account", "account_code", data.account_code)

        account = GLAccount(
            tenant_id=tenant_id,
            account_code=data.account_code,
            account_name=data.account_name,
            account_type=data.account_type,
            description=data.description,
            is_system_account=data.is_system_account,
            current_balance=ZERO,
            created_by_id=user_id,
            updated_by_id=user_id,
        )
        self.db.add(account)
        await self.db.flush()
        return account

    async def deactivate_account(
        self,
        tenant_id: uuid.UUID,
        account_id: uuid.UUID,
        user_id: Optional[uuid.UUID] = None,
    ) -> GLAccount:
        """Soft-deactivate an account. Accounts are never deleted."""
        account = await self.get_account(tenant_id, account_id)
        account.is_active = False
        account.updated_by_id = user_id
        await self.db.flush()
        logger.info(f"Deactivated GL account {account.account_code} for tenant {tenant_id}")
        return account

    async def create_default_chart_of_accounts(
        self,
        tenant_id: uuid.UUID,
        user_id: Optional[uuid.UUID] = None,
    ) -> List[GLAccount]:
        """
        Create the default Jamaican chart of accounts.

        Codes that already exist are left alone, so seeding twice is harmless.
        """
        existing_codes = set(
            (await self.db.execute(
                select(GLAccount.account_code).where(GLAccount.tenant_id == tenant_id)
            )).scalars().all()
        )

        created_accounts = []
        for code, name, account_type in DEFAULT_CHART_OF_ACCOUNTS:
            if code in existing_codes:
                continue
            account = GLAccount(
                tenant_id=tenant_id,
                account_code=code,
                account_name=name,
                account_type=account_type,
                is_system_account=True,
                current_balance=ZERO,
                created_by_id=user_id,
                updated_by_id=user_id,
            )
            self.db.add(account)
            created_accounts.append(account)

        await self.db.flush()
        logger.info(f"Seeded {len(created_accounts)} GL accounts for tenant {tenant_id}")
        return created_accounts

    # =========================================================================
    # LINE VALIDATION
    # =========================================================================

    async def _validate_lines(
        self,
        tenant_id: uuid.UUID,
        lines: List[JournalLineCreate],
    ) -> Tuple[List[JournalLine], Decimal, Decimal]:
        """
        Normalize a line set and check it against the ledger rules.

        Returns unsaved JournalLine objects plus the debit and credit totals.
        Nothing is written.
        """
        if len(lines) < 2:
            raise ValidationException(
                message=f"A journal entry needs at least 2 lines, got {len(lines)}",
                field="lines",
                code=ErrorCode.INSUFFICIENT_LINES,
            )

        normalized = []
        for idx, line in enumerate(lines, 1):
            debit = to_decimal(line.debit_amount)
            credit = to_decimal(line.credit_amount)
            if debit < 0:
                raise InvalidAmountException(debit, field=f"lines[{idx}].debit_amount")
            if credit < 0:
                raise InvalidAmountException(credit, field=f"lines[{idx}].credit_amount")

            debit = round2(debit)
            credit = round2(credit)
            if (debit > 0) == (credit > 0):
                raise ValidationException(
                    message=f"Line {idx} must have exactly one of debit or credit greater than zero",
                    field=f"lines[{idx}]",
                    code=ErrorCode.INVALID_LINE,
                    details={"debit_amount": str(debit), "credit_amount": str(credit)},
                )
            normalized.append((idx, line, debit, credit))

        account_ids = {line.account_id for line in lines}
        result = await self.db.execute(
            select(GLAccount).where(
                GLAccount.id.in_(list(account_ids)),
                GLAccount.tenant_id == tenant_id,
            )
        )
        accounts = {account.id: account for account in result.scalars().all()}

        journal_lines = []
        total_debit = ZERO
        total_credit = ZERO
        for idx, line, debit, credit in normalized:
            account = accounts.get(line.account_id)
            if account is None:
                raise AccountNotFoundException(
                    line.account_id,
                    message=f"Line {idx}: GL account '{line.account_id}' not found",
                )
            if not account.is_active:
                raise ValidationException(
                    message=f"Line {idx}: GL account {account.account_code} is inactive",
                    field=f"lines[{idx}].account_id",
                    code=ErrorCode.ACCOUNT_INACTIVE,
                )
            total_debit += debit
            total_credit += credit
            journal_lines.append(JournalLine(
                account_id=account.id,
                line_number=idx,
                description=line.description,
                debit_amount=debit,
                credit_amount=credit,
            ))

        if not within_tolerance(total_debit, total_credit, settings.balance_tolerance):
            raise UnbalancedEntryException(total_debit, total_credit)

        return journal_lines, total_debit, total_credit

    # =========================================================================
    # JOURNAL ENTRIES
    # =========================================================================

    async def _generate_entry_number(self, tenant_id: uuid.UUID) -> str:
        """Generate the next journal entry number (JE-00001)."""
        return await self.sequences.next_number(
            tenant_id, "journal_entry", settings.journal_entry_prefix,
        )

    async def get_journal_entry(
        self,
        tenant_id: uuid.UUID,
        entry_id: uuid.UUID,
        for_update: bool = False,
    ) -> JournalEntry:
        """Get a journal entry with its lines, optionally locking the row."""
        query = (
            select(JournalEntry)
            .where(
                JournalEntry.id == entry_id,
                JournalEntry.tenant_id == tenant_id,
            )
            .options(selectinload(JournalEntry.lines))
        )
        if for_update:
            query = query.with_for_update().execution_options(populate_existing=True)

        result = await self.db.execute(query)
        entry = result.scalar_one_or_none()
        if entry is None:
            raise JournalEntryNotFoundException(entry_id)
        return entry

    async def get_journal_entries(
        self,
        tenant_id: uuid.UUID,
        status: Optional[JournalEntryStatus] = None,
        entry_type: Optional[JournalEntryType] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        source_module: Optional[str] = None,
        source_document_id: Optional[uuid.UUID] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[JournalEntry]:
        """List journal entries with filters."""
        if start_date and end_date and start_date > end_date:
            raise InvalidDateRangeException(str(start_date), str(end_date))

        query = (
            select(JournalEntry)
            .where(JournalEntry.tenant_id == tenant_id)
            .options(selectinload(JournalEntry.lines))
        )
        if status:
            query = query.where(JournalEntry.status == status)
        if entry_type:
            query = query.where(JournalEntry.entry_type == entry_type)
        if start_date:
            query = query.where(JournalEntry.entry_date >= start_date)
        if end_date:
            query = query.where(JournalEntry.entry_date <= end_date)
        if source_module:
            query = query.where(JournalEntry.source_module == source_module)
        if source_document_id:
            query = query.where(JournalEntry.source_document_id == source_document_id)

        query = query.order_by(JournalEntry.entry_date.desc(), JournalEntry.entry_number.desc())
        query = query.offset(offset).limit(limit)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def create_journal_entry(
        self,
        tenant_id: uuid.UUID,
        data: JournalEntryCreate,
        user_id: Optional[uuid.UUID] = None,
    ) -> JournalEntry:
        """
        Create a DRAFT journal entry, or a POSTED one when data.auto_post is set.

        Validation happens before anything is written; a rejected entry
        consumes no entry number.
        """
        journal_lines, total_debit, total_credit = await self._validate_lines(tenant_id, data.lines)

        entry_number = await self._generate_entry_number(tenant_id)

        entry = JournalEntry(
            tenant_id=tenant_id,
            entry_number=entry_number,
            entry_date=data.entry_date,
            entry_type=data.entry_type,
            description=data.description,
            reference=data.reference,
            source_module=data.source_module,
            source_document_id=data.source_document_id,
            total_debit=total_debit,
            total_credit=total_credit,
            status=JournalEntryStatus.DRAFT,
            entry_metadata=from_python(data.entry_metadata) if data.entry_metadata is not None else None,
            created_by_id=user_id,
            updated_by_id=user_id,
            lines=journal_lines,
        )
        self.db.add(entry)
        await self.db.flush()

        logger.debug(f"Created journal entry {entry.entry_number} ({total_debit}) for tenant {tenant_id}")

        if data.auto_post:
            entry = await self.post_journal_entry(tenant_id, entry.id, user_id)

        return entry

    async def update_journal_entry(
        self,
        tenant_id: uuid.UUID,
        entry_id: uuid.UUID,
        data: JournalEntryUpdate,
        user_id: Optional[uuid.UUID] = None,
    ) -> JournalEntry:
        """Update a DRAFT entry; a new line set replaces the old one entirely."""
        entry = await self.get_journal_entry(tenant_id, entry_id, for_update=True)
        if entry.status != JournalEntryStatus.DRAFT:
            raise InvalidStatusException("Journal entry", entry.status, JournalEntryStatus.DRAFT)

        if data.lines is not None:
            journal_lines, total_debit, total_credit = await self._validate_lines(tenant_id, data.lines)

            # Old lines must be gone before the new ones reuse their line numbers
            entry.lines.clear()
            await self.db.flush()

            entry.lines.extend(journal_lines)
            entry.total_debit = total_debit
            entry.total_credit = total_credit

        if data.entry_date is not None:
            entry.entry_date = data.entry_date
        if data.description is not None:
            entry.description = data.description
        if data.reference is not None:
            entry.reference = data.reference

        entry.updated_by_id = user_id
        await self.db.flush()
        return entry

    async def _lock_accounts(self, account_ids: Iterable[uuid.UUID]) -> Dict[uuid.UUID, GLAccount]:
        """Lock accounts in id order so concurrent postings cannot deadlock."""
        result = await self.db.execute(
            select(GLAccount)
            .where(GLAccount.id.in_(sorted(set(account_ids))))
            .order_by(GLAccount.id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return {account.id: account for account in result.scalars().all()}

    async def _apply_lines(self, entry: JournalEntry, sign: int) -> None:
        """Add (sign=1) or remove (sign=-1) the entry's effect on account balances."""
        accounts = await self._lock_accounts(line.account_id for line in entry.lines)
        for line in entry.lines:
            account = accounts[line.account_id]
            delta = account.signed_delta(line.debit_amount, line.credit_amount)
            account.current_balance = round2(account.current_balance + sign * delta)

    async def post_journal_entry(
        self,
        tenant_id: uuid.UUID,
        entry_id: uuid.UUID,
        user_id: Optional[uuid.UUID] = None,
    ) -> JournalEntry:
        """Post a DRAFT entry: apply every line to its account, then mark POSTED."""
        entry = await self.get_journal_entry(tenant_id, entry_id, for_update=True)
        if entry.status != JournalEntryStatus.DRAFT:
            raise InvalidStatusException("Journal entry", entry.status, JournalEntryStatus.DRAFT)

        if len(entry.lines) < 2:
            raise ValidationException(
                message=f"A journal entry needs at least 2 lines, got {len(entry.lines)}",
                field="lines",
                code=ErrorCode.INSUFFICIENT_LINES,
            )

        total_debit = sum((line.debit_amount for line in entry.lines), ZERO)
        total_credit = sum((line.credit_amount for line in entry.lines), ZERO)
        if not within_tolerance(total_debit, total_credit, settings.balance_tolerance):
            raise UnbalancedEntryException(total_debit, total_credit)

        await self._apply_lines(entry, sign=1)

        entry.status = JournalEntryStatus.POSTED
        entry.posted_at = datetime.utcnow()
        entry.posted_by_id = user_id
        entry.updated_by_id = user_id

        await self.db.flush()
        logger.info(f"Posted journal entry {entry.entry_number} for tenant {tenant_id}")
        return entry

    async def void_journal_entry(
        self,
        tenant_id: uuid.UUID,
        entry_id: uuid.UUID,
        user_id: Optional[uuid.UUID] = None,
        reason: Optional[str] = None,
    ) -> JournalEntry:
        """
        Void an entry.

        DRAFT entries are marked VOID with no balance effect. POSTED entries
        have every line re-applied with the opposite sign first.
        """
        entry = await self.get_journal_entry(tenant_id, entry_id, for_update=True)
        if entry.status == JournalEntryStatus.VOID:
            raise InvalidStatusException(
                "Journal entry",
                entry.status,
                message=f"Journal entry {entry.entry_number} is already void",
            )

        was_posted = entry.status == JournalEntryStatus.POSTED
        if was_posted:
            await self._apply_lines(entry, sign=-1)

        entry.status = JournalEntryStatus.VOID
        entry.voided_at = datetime.utcnow()
        entry.voided_by_id = user_id
        entry.void_reason = reason
        entry.updated_by_id = user_id

        await self.db.flush()
        logger.info(
            f"Voided journal entry {entry.entry_number} for tenant {tenant_id}"
            f"{' (balances reversed)' if was_posted else ''}"
        )
        return entry

    async def delete_journal_entry(
        self,
        tenant_id: uuid.UUID,
        entry_id: uuid.UUID,
        user_id: Optional[uuid.UUID] = None,
    ) -> JournalEntry:
        """Soft-delete a DRAFT entry (it becomes VOID). Posted entries must be voided."""
        entry = await self.get_journal_entry(tenant_id, entry_id)
        if entry.status == JournalEntryStatus.POSTED:
            raise BusinessRuleException(
                message=f"Journal entry {entry.entry_number} is posted and cannot be deleted; void it instead",
                rule="posted_entries_are_immutable",
                code=ErrorCode.CANNOT_DELETE,
            )
        if entry.status == JournalEntryStatus.VOID:
            raise InvalidStatusException("Journal entry", entry.status, JournalEntryStatus.DRAFT)

        return await self.void_journal_entry(tenant_id, entry_id, user_id, reason="Deleted draft")

    # =========================================================================
    # REPORTS
    # =========================================================================

    async def get_trial_balance(self, tenant_id: uuid.UUID) -> TrialBalanceReport:
        """Generate trial balance from current account balances."""
        accounts = await self.get_chart_of_accounts(tenant_id, include_inactive=True)

        items = []
        total_debits = ZERO
        total_credits = ZERO

        for account in accounts:
            balance = account.current_balance

            if account.normal_balance == NormalBalance.DEBIT:
                debit_balance = balance if balance >= 0 else ZERO
                credit_balance = abs(balance) if balance < 0 else ZERO
            else:
                credit_balance = balance if balance >= 0 else ZERO
                debit_balance = abs(balance) if balance < 0 else ZERO

            if debit_balance > 0 or credit_balance > 0:
                items.append(TrialBalanceItem(
                    account_id=account.id,
                    account_code=account.account_code,
                    account_name=account.account_name,
                    account_type=account.account_type,
                    debit_balance=debit_balance,
                    credit_balance=credit_balance,
                ))
                total_debits += debit_balance
                total_credits += credit_balance

        return TrialBalanceReport(
            tenant_id=tenant_id,
            generated_at=datetime.utcnow(),
            items=items,
            total_debits=total_debits,
            total_credits=total_credits,
            is_balanced=total_debits == total_credits,
        )

    async def verify_account_balances(self, tenant_id: uuid.UUID) -> BalanceVerificationReport:
        """
        Recompute every account balance from POSTED lines and list mismatches.

        Read-only: stored balances are never corrected here.
        """
        totals_query = (
            select(
                JournalLine.account_id,
                func.sum(JournalLine.debit_amount),
                func.sum(JournalLine.credit_amount),
            )
            .join(JournalEntry, JournalEntry.id == JournalLine.journal_entry_id)
            .where(
                JournalEntry.tenant_id == tenant_id,
                JournalEntry.status == JournalEntryStatus.POSTED,
            )
            .group_by(JournalLine.account_id)
        )
        totals = {
            account_id: (to_decimal(debits or 0), to_decimal(credits or 0))
            for account_id, debits, credits in (await self.db.execute(totals_query)).all()
        }

        accounts = await self.get_chart_of_accounts(tenant_id, include_inactive=True)
        discrepancies = []
        for account in accounts:
            debits, credits = totals.get(account.id, (ZERO, ZERO))
            computed = round2(account.signed_delta(debits, credits))
            stored = round2(account.current_balance)
            if computed != stored:
                discrepancies.append(BalanceDiscrepancy(
                    account_id=account.id,
                    account_code=account.account_code,
                    stored_balance=stored,
                    computed_balance=computed,
                    difference=stored - computed,
                ))

        if discrepancies:
            logger.warning(
                f"Balance verification found {len(discrepancies)} discrepancies for tenant {tenant_id}"
            )

        return BalanceVerificationReport(
            tenant_id=tenant_id,
            accounts_checked=len(accounts),
            discrepancies=discrepancies,
        )
