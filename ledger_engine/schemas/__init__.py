"""
Ledger Engine - Schemas Package

Pydantic schemas for request/response validation.
"""

from ledger_engine.schemas.accounting import (
    GLAccountCreate,
    GLAccountResponse,
    JournalLineCreate,
    JournalEntryCreate,
    JournalEntryUpdate,
    JournalVoidRequest,
    JournalEntryResponse,
    TrialBalanceReport,
    BalanceVerificationReport,
)
from ledger_engine.schemas.expense import ExpenseCreate, ExpenseResponse
from ledger_engine.schemas.fixed_asset import (
    FixedAssetCreate,
    FixedAssetResponse,
    DisposalRequest,
    DisposalResponse,
    DepreciationRunRequest,
    DepreciationRunResponse,
)
from ledger_engine.schemas.fx import (
    ExchangeRateCreate,
    BankAccountCreate,
    RevaluationRequest,
    RevaluationSummaryResponse,
)
from ledger_engine.schemas.inventory import (
    StockCountCreate,
    StockCountItemCreate,
    ItemCountUpdate,
    StockCountResponse,
)
from ledger_engine.schemas.payroll import EmployeeCreate, GratuityRequest, GratuityResponse
from ledger_engine.schemas.sales import SalesInvoiceCreate, SalesInvoiceResponse
