"""
Ledger Engine - Sales Invoice Tests

Per-line output GCT and the receivable / revenue / GCT payable posting.
"""

import pytest
from datetime import date
from decimal import Decimal

from ledger_engine.models.accounting import JournalEntryStatus
from ledger_engine.models.sales import GCTRateCategory, InvoiceStatus
from ledger_engine.schemas.sales import SalesInvoiceCreate, SalesInvoiceLineCreate
from ledger_engine.services.accounting_service import AccountingService
from ledger_engine.services.sales_service import SalesService
from ledger_engine.utils.error_handling import InvalidStatusException


def invoice_data(post_to_gl=True):
    return SalesInvoiceCreate(
        invoice_date=date(2026, 5, 2),
        customer_name="Blue Mountain Tours Ltd",
        lines=[
            SalesInvoiceLineCreate(
                description="Catering",
                quantity=Decimal("2"),
                unit_price=Decimal("5000.00"),
                gct_rate_category=GCTRateCategory.STANDARD,
            ),
            SalesInvoiceLineCreate(
                description="Guided tour",
                quantity=Decimal("1"),
                unit_price=Decimal("8000.00"),
                gct_rate_category=GCTRateCategory.TOURISM,
            ),
            SalesInvoiceLineCreate(
                description="Basic food basket",
                quantity=Decimal("1"),
                unit_price=Decimal("2000.00"),
                gct_rate_category=GCTRateCategory.ZERO_RATED,
            ),
        ],
        post_to_gl=post_to_gl,
    )


class TestInvoiceTotals:
    """Test GCT per line and invoice totals."""

    @pytest.mark.asyncio
    async def test_gct_per_rate_category(self, db_session, tenant_id, chart):
        invoice = await SalesService(db_session).create_invoice(tenant_id, invoice_data(post_to_gl=False))

        assert [line.gct_amount for line in invoice.lines] == [
            Decimal("1500.00"), Decimal("800.00"), Decimal("0.00"),
        ]
        assert invoice.subtotal == Decimal("20000.00")
        assert invoice.gct_amount == Decimal("2300.00")
        assert invoice.total_amount == Decimal("22300.00")
        assert invoice.status == InvoiceStatus.DRAFT


class TestInvoicePosting:
    """Test the invoice journal entry and voiding."""

    @pytest.mark.asyncio
    async def test_posting_hits_receivable_revenue_and_gct(self, db_session, tenant_id, chart):
        invoice = await SalesService(db_session).create_invoice(tenant_id, invoice_data())

        assert invoice.status == InvoiceStatus.POSTED
        assert chart["1100"].current_balance == Decimal("22300.00")
        assert chart["4000"].current_balance == Decimal("20000.00")
        assert chart["2100"].current_balance == Decimal("2300.00")

    @pytest.mark.asyncio
    async def test_void_reverses_the_entry(self, db_session, tenant_id, chart):
        service = SalesService(db_session)
        invoice = await service.create_invoice(tenant_id, invoice_data())
        voided = await service.void_invoice(tenant_id, invoice.id, reason="Customer cancelled")

        assert voided.status == InvoiceStatus.VOID
        entry = await AccountingService(db_session).get_journal_entry(tenant_id, invoice.journal_entry_id)
        assert entry.status == JournalEntryStatus.VOID
        assert entry.void_reason == "Customer cancelled"
        assert chart["1100"].current_balance == Decimal("0.00")
        assert chart["2100"].current_balance == Decimal("0.00")

        with pytest.raises(InvalidStatusException):
            await service.void_invoice(tenant_id, invoice.id, reason="Again")

    @pytest.mark.asyncio
    async def test_void_draft_posts_nothing(self, db_session, tenant_id, chart):
        service = SalesService(db_session)
        invoice = await service.create_invoice(tenant_id, invoice_data(post_to_gl=False))
        await service.void_invoice(tenant_id, invoice.id, reason="Not needed")

        with pytest.raises(InvalidStatusException):
            await service.post_invoice(tenant_id, invoice.id)
        assert chart["1100"].current_balance == Decimal("0")
