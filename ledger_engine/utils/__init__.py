"""
Ledger Engine - Utilities Package
"""
