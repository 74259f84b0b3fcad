"""
Ledger Engine - Tax Calculators Package

Jamaican statutory calculations.

Modules:
- capital_allowance: capital allowance classes, schedules, balancing adjustments
  and book depreciation
- gct_service: GCT rates, input credit restrictions and the GCT return
- gratuity: termination gratuity (2 weeks per year, capped at 5 years)
"""

from decimal import Decimal

from ledger_engine.services.tax_calculators.capital_allowance import (
    CAPITAL_ALLOWANCE_RULES,
    BookDepreciationCalculator,
    CapitalAllowanceCalculator,
)
from ledger_engine.services.tax_calculators.gct_service import (
    GCT_RATES,
    GCTCalculator,
    GCTService,
)
from ledger_engine.services.tax_calculators.gratuity import GratuityCalculator


# ===========================================
# CONVENIENCE FUNCTIONS
# ===========================================

def calculate_gct(amount: Decimal, is_exempt: bool = False) -> Decimal:
    """
    Calculate standard-rate GCT on an amount.
    
    Args:
        amount: Net amount
        is_exempt: Whether the supply is exempt
    
    Returns:
        GCT amount (15% or 0 if exempt)
    """
    if is_exempt:
        return Decimal("0.00")
    return GCTCalculator.calculate_gct(amount)


__all__ = [
    "CAPITAL_ALLOWANCE_RULES",
    "BookDepreciationCalculator",
    "CapitalAllowanceCalculator",
    "GCT_RATES",
    "GCTCalculator",
    "GCTService",
    "GratuityCalculator",
    "calculate_gct",
]
