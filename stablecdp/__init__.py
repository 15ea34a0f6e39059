"""
stablecdp: collateralized-debt-position engine for a price-pegged synthetic currency.
"""

__version__ = "0.1.0"
