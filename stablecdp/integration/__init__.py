"""
Imperative shell: the stateful engine and its collaborators.
"""

from .cdp_engine import CdpEngine
from .interfaces import CollateralToken, PeggedToken, PriceFeed
from .price_feeds import StaticPriceFeed
from .tokens import MintableToken, PeggedCurrency, Token

__all__ = [
    "CdpEngine",
    "CollateralToken",
    "PeggedToken",
    "PriceFeed",
    "StaticPriceFeed",
    "MintableToken",
    "PeggedCurrency",
    "Token",
]
