"""
Ledger Engine - Routers Package

FastAPI route handlers.

Routers:
- accounting: Chart of accounts, journal entries, trial balance
- expenses: Expense recording and posting
- sales: Sales invoices
- inventory: Stock counts and variance posting
- fixed_assets: Asset register, depreciation, disposals
- fx: Exchange rates, bank accounts, revaluation
- tax: GCT and capital allowance calculations
- payroll: Employees and termination gratuity
"""

from ledger_engine.routers import (
    accounting,
    expenses,
    sales,
    inventory,
    fixed_assets,
    fx,
    tax,
    payroll,
)

all_routers = [
    accounting.router,
    expenses.router,
    sales.router,
    inventory.router,
    fixed_assets.router,
    fx.router,
    tax.router,
    payroll.router,
]
