"""
Ledger Engine - Services Package

Business logic services.
"""

from ledger_engine.services.accounting_service import AccountingService, SystemAccounts
from ledger_engine.services.sequence_service import SequenceService
from ledger_engine.services.expense_service import ExpenseService
from ledger_engine.services.sales_service import SalesService
from ledger_engine.services.inventory_service import InventoryService
from ledger_engine.services.fixed_asset_service import FixedAssetService
from ledger_engine.services.fx_service import FXService
from ledger_engine.services.payroll_service import PayrollService

# Tax Calculators
from ledger_engine.services.tax_calculators.gct_service import GCTService, GCTCalculator
from ledger_engine.services.tax_calculators.capital_allowance import CapitalAllowanceCalculator
from ledger_engine.services.tax_calculators.gratuity import GratuityCalculator
