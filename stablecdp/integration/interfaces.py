"""Collaborator protocols consumed by the CDP engine shell."""

from __future__ import annotations

from typing import Protocol

from ..core.cdp.valuation import PriceQuote


class PriceFeed(Protocol):
    """Aggregator-style price feed for one collateral asset."""

    def latest_round_data(self) -> PriceQuote: ...


class CollateralToken(Protocol):
    """Standard fungible token used as collateral.

    `transfer_from` moves `owner`'s tokens on behalf of `spender`; both
    transfer calls report failure by returning False.
    """

    def transfer(self, sender: str, to: str, amount: int) -> bool: ...

    def transfer_from(self, spender: str, owner: str, to: str, amount: int) -> bool: ...

    def balance_of(self, account: str) -> int: ...


class PeggedToken(CollateralToken, Protocol):
    """Pegged-currency ledger; only its owner (the engine) may mint and burn."""

    def mint(self, caller: str, to: str, amount: int) -> bool: ...

    def burn(self, caller: str, amount: int) -> None: ...

    def total_supply(self) -> int: ...
