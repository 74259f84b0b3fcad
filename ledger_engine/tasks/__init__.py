"""
Ledger Engine - Background Tasks Package

Celery background tasks.
"""

from ledger_engine.tasks.celery_tasks import (
    monthly_fx_revaluation_task,
    annual_depreciation_task,
    verify_account_balances_task,
)

__all__ = [
    "monthly_fx_revaluation_task",
    "annual_depreciation_task",
    "verify_account_balances_task",
]
