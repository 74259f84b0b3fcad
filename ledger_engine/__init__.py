"""
Ledger Engine

General ledger posting and Jamaican statutory tax computation.
"""

__version__ = "1.0.0"
