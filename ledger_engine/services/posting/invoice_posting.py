"""
Ledger Engine - Sales Invoice Posting

    Dr  Accounts Receivable   invoice total
        Cr  Sales Revenue     subtotal
        Cr  GCT Payable       output GCT
"""

import logging
import uuid
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ledger_engine.models.accounting import JournalEntry, JournalEntryType
from ledger_engine.models.sales import InvoiceStatus, SalesInvoice
from ledger_engine.schemas.accounting import JournalEntryCreate, JournalLineCreate
from ledger_engine.services.accounting_service import AccountingService, SystemAccounts
from ledger_engine.utils.error_handling import InvalidStatusException
from ledger_engine.utils.money import round2

logger = logging.getLogger(__name__)


class InvoicePostingAdapter:
    """Builds and posts the journal entry for a sales invoice."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.accounting = AccountingService(db)

    async def build_lines(self, tenant_id: uuid.UUID, invoice: SalesInvoice) -> List[JournalLineCreate]:
        subtotal = round2(invoice.subtotal)
        gct = round2(invoice.gct_amount)

        receivable = await self.accounting.require_account_by_code(
            tenant_id, SystemAccounts.ACCOUNTS_RECEIVABLE, "sales invoices",
        )
        revenue = await self.accounting.require_account_by_code(
            tenant_id, SystemAccounts.SALES_REVENUE, "sales revenue",
        )

        lines = [
            JournalLineCreate(
                account_id=receivable.id,
                debit_amount=subtotal + gct,
                description=f"Invoice {invoice.invoice_number}: {invoice.customer_name}",
            ),
            JournalLineCreate(
                account_id=revenue.id,
                credit_amount=subtotal,
                description=f"Sales: {invoice.invoice_number}",
            ),
        ]
        if gct > 0:
            gct_payable = await self.accounting.require_account_by_code(
                tenant_id, SystemAccounts.GCT_PAYABLE, "GCT output tax",
            )
            lines.append(JournalLineCreate(
                account_id=gct_payable.id,
                credit_amount=gct,
                description=f"GCT output tax: {invoice.invoice_number}",
            ))
        return lines

    async def post_invoice(
        self,
        tenant_id: uuid.UUID,
        invoice: SalesInvoice,
        user_id: Optional[uuid.UUID] = None,
    ) -> JournalEntry:
        if invoice.status != InvoiceStatus.DRAFT:
            raise InvalidStatusException("Sales invoice", invoice.status, InvoiceStatus.DRAFT)

        lines = await self.build_lines(tenant_id, invoice)
        entry = await self.accounting.create_journal_entry(
            tenant_id,
            JournalEntryCreate(
                entry_date=invoice.invoice_date,
                description=f"Sales invoice {invoice.invoice_number}",
                reference=invoice.invoice_number,
                entry_type=JournalEntryType.SALES,
                source_module="sales",
                source_document_id=invoice.id,
                lines=lines,
                auto_post=True,
            ),
            user_id,
        )

        invoice.status = InvoiceStatus.POSTED
        invoice.journal_entry_id = entry.id
        invoice.updated_by_id = user_id
        await self.db.flush()

        logger.info(f"Posted invoice {invoice.invoice_number} as {entry.entry_number}")
        return entry
