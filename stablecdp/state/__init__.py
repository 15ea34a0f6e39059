"""
Ledger state for the CDP engine
"""

from .collateral import CollateralTable, DebtTable

__all__ = [
    "CollateralTable",
    "DebtTable",
]
