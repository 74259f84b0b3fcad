"""
Ledger Engine - Sales Invoice Service

Issues sales invoices with per-line GCT and posts them through the
invoice posting adapter. Voiding an invoice voids its journal entry,
which reverses the receivable, revenue and output tax.
"""

import logging
import uuid
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ledger_engine.models.sales import InvoiceStatus, SalesInvoice, SalesInvoiceLine
from ledger_engine.schemas.sales import SalesInvoiceCreate
from ledger_engine.services.accounting_service import AccountingService
from ledger_engine.services.posting.invoice_posting import InvoicePostingAdapter
from ledger_engine.services.sequence_service import SequenceService
from ledger_engine.services.tax_calculators.gct_service import GCTCalculator
from ledger_engine.utils.error_handling import InvalidStatusException, NotFoundException
from ledger_engine.utils.money import ZERO, round2

logger = logging.getLogger(__name__)


class SalesService:
    """Service for sales invoices."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.sequences = SequenceService(db)
        self.accounting = AccountingService(db)
        self.posting = InvoicePostingAdapter(db)

    async def create_invoice(
        self,
        tenant_id: uuid.UUID,
        data: SalesInvoiceCreate,
        user_id: Optional[uuid.UUID] = None,
    ) -> SalesInvoice:
        lines = []
        for number, line in enumerate(data.lines, start=1):
            amount = round2(line.quantity * line.unit_price)
            lines.append(SalesInvoiceLine(
                line_number=number,
                description=line.description,
                quantity=line.quantity,
                unit_price=round2(line.unit_price),
                amount=amount,
                gct_rate_category=line.gct_rate_category,
                gct_amount=GCTCalculator.calculate_gct(amount, line.gct_rate_category),
            ))

        subtotal = sum((line.amount for line in lines), ZERO)
        gct_amount = sum((line.gct_amount for line in lines), ZERO)

        invoice = SalesInvoice(
            tenant_id=tenant_id,
            invoice_number=await self.sequences.next_number(tenant_id, "sales_invoice", "INV"),
            invoice_date=data.invoice_date,
            customer_name=data.customer_name,
            subtotal=subtotal,
            gct_amount=gct_amount,
            total_amount=subtotal + gct_amount,
            status=InvoiceStatus.DRAFT,
            lines=lines,
            created_by_id=user_id,
            updated_by_id=user_id,
        )
        self.db.add(invoice)
        await self.db.flush()

        if data.post_to_gl:
            await self.posting.post_invoice(tenant_id, invoice, user_id)

        return invoice

    async def get_invoice(
        self,
        tenant_id: uuid.UUID,
        invoice_id: uuid.UUID,
        for_update: bool = False,
    ) -> SalesInvoice:
        query = (
            select(SalesInvoice)
            .where(
                SalesInvoice.id == invoice_id,
                SalesInvoice.tenant_id == tenant_id,
            )
            .options(selectinload(SalesInvoice.lines))
        )
        if for_update:
            query = query.with_for_update().execution_options(populate_existing=True)
        result = await self.db.execute(query)
        invoice = result.scalar_one_or_none()
        if invoice is None:
            raise NotFoundException("Sales invoice", invoice_id)
        return invoice

    async def list_invoices(
        self,
        tenant_id: uuid.UUID,
        status: Optional[InvoiceStatus] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[SalesInvoice]:
        query = (
            select(SalesInvoice)
            .where(SalesInvoice.tenant_id == tenant_id)
            .options(selectinload(SalesInvoice.lines))
        )
        if status:
            query = query.where(SalesInvoice.status == status)
        query = query.order_by(SalesInvoice.invoice_date.desc(), SalesInvoice.invoice_number.desc())
        result = await self.db.execute(query.offset(offset).limit(limit))
        return list(result.scalars().all())

    async def post_invoice(
        self,
        tenant_id: uuid.UUID,
        invoice_id: uuid.UUID,
        user_id: Optional[uuid.UUID] = None,
    ) -> SalesInvoice:
        invoice = await self.get_invoice(tenant_id, invoice_id, for_update=True)
        await self.posting.post_invoice(tenant_id, invoice, user_id)
        return invoice

    async def void_invoice(
        self,
        tenant_id: uuid.UUID,
        invoice_id: uuid.UUID,
        reason: str,
        user_id: Optional[uuid.UUID] = None,
    ) -> SalesInvoice:
        """Void an invoice; a posted one has its journal entry voided too."""
        invoice = await self.get_invoice(tenant_id, invoice_id, for_update=True)
        if invoice.status == InvoiceStatus.VOID:
            raise InvalidStatusException(
                "Sales invoice",
                invoice.status,
                message=f"Sales invoice {invoice.invoice_number} is already void",
            )

        if invoice.journal_entry_id:
            await self.accounting.void_journal_entry(
                tenant_id, invoice.journal_entry_id, user_id, reason=reason,
            )

        invoice.status = InvoiceStatus.VOID
        invoice.updated_by_id = user_id
        await self.db.flush()

        logger.info(f"Voided sales invoice {invoice.invoice_number}: {reason}")
        return invoice
