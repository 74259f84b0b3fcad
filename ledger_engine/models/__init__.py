"""
Ledger Engine - SQLAlchemy Models Package

This package contains all database models for the engine.
"""

from ledger_engine.models.base import BaseModel, TimestampMixin, AuditMixin, TenantMixin
from ledger_engine.models.accounting import (
    AccountType,
    NormalBalance,
    JournalEntryStatus,
    JournalEntryType,
    GLAccount,
    JournalEntry,
    JournalLine,
    NumberSequence,
)
from ledger_engine.models.fixed_asset import (
    AssetStatus,
    DepreciationMethod,
    CapitalAllowanceClass,
    DisposalMethod,
    FixedAsset,
    DepreciationEntry,
    DisposalRecord,
)
from ledger_engine.models.fx import BankAccount, ExchangeRate, RevaluationEntry
from ledger_engine.models.expense import Expense, ExpenseCategory, ExpenseStatus, PaymentMethod
from ledger_engine.models.inventory import StockCount, StockCountItem, StockCountStatus
from ledger_engine.models.sales import (
    GCTRateCategory,
    InvoiceStatus,
    SalesInvoice,
    SalesInvoiceLine,
)
from ledger_engine.models.payroll import (
    PayFrequency,
    TerminationReason,
    PayrollRunType,
    PayrollRunStatus,
    Employee,
    PayrollRun,
    PayrollEntry,
)

__all__ = [
    # Base
    "BaseModel",
    "TimestampMixin",
    "AuditMixin",
    "TenantMixin",
    # General ledger
    "AccountType",
    "NormalBalance",
    "JournalEntryStatus",
    "JournalEntryType",
    "GLAccount",
    "JournalEntry",
    "JournalLine",
    "NumberSequence",
    # Fixed assets
    "AssetStatus",
    "DepreciationMethod",
    "CapitalAllowanceClass",
    "DisposalMethod",
    "FixedAsset",
    "DepreciationEntry",
    "DisposalRecord",
    # Foreign currency
    "BankAccount",
    "ExchangeRate",
    "RevaluationEntry",
    # Expenses
    "Expense",
    "ExpenseCategory",
    "ExpenseStatus",
    "PaymentMethod",
    # Inventory
    "StockCount",
    "StockCountItem",
    "StockCountStatus",
    # Sales
    "GCTRateCategory",
    "InvoiceStatus",
    "SalesInvoice",
    "SalesInvoiceLine",
    # Payroll
    "PayFrequency",
    "TerminationReason",
    "PayrollRunType",
    "PayrollRunStatus",
    "Employee",
    "PayrollRun",
    "PayrollEntry",
]
