"""
Ledger Engine - Posting Adapters

Translate business events into balanced journal entries.
"""

from ledger_engine.services.posting.asset_disposal import AssetDisposalAdapter
from ledger_engine.services.posting.depreciation_posting import DepreciationPostingAdapter
from ledger_engine.services.posting.expense_posting import (
    EXPENSE_CATEGORY_TO_ACCOUNT,
    PAYMENT_METHOD_TO_ACCOUNT,
    ExpensePostingAdapter,
)
from ledger_engine.services.posting.invoice_posting import InvoicePostingAdapter
from ledger_engine.services.posting.stock_count_posting import StockCountPostingAdapter

__all__ = [
    "AssetDisposalAdapter",
    "DepreciationPostingAdapter",
    "EXPENSE_CATEGORY_TO_ACCOUNT",
    "PAYMENT_METHOD_TO_ACCOUNT",
    "ExpensePostingAdapter",
    "InvoicePostingAdapter",
    "StockCountPostingAdapter",
]
