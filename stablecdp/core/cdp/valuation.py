"""Price conversion and account valuation.

A `PriceSnapshot` is read once per operation by the shell and passed into the
core, so every valuation inside one step uses the same prices and the same
exchange rate.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from .errors import CdpError, UnsupportedAssetError
from .math import (
    DEFAULT_FEED_DECIMALS,
    MAX_HEALTH_FACTOR,
    asset_amount_from_pegged_value as _exact_inverse,
    asset_amount_from_reference_value as _from_reference,
    health_factor as _health_factor,
    legacy_asset_amount_from_pegged_value as _legacy_inverse,
    liquidation_bonus as _liquidation_bonus,
    normalize_price,
    pegged_value as _pegged_value,
    reference_value as _reference_value,
)
from .types import CdpState, EngineConfig, PeggedInversion


@dataclass(frozen=True)
class PriceQuote:
    """Latest answer of a price feed (aggregator round data)."""

    price: int
    decimals: int = DEFAULT_FEED_DECIMALS
    round_id: int = 0
    updated_at: int = 0

    @property
    def price_18(self) -> int:
        return normalize_price(self.price, self.decimals)


class PriceSnapshot:
    """Immutable asset -> PriceQuote mapping for one operation.

    Assets listed in `unavailable` (e.g. stale quotes) raise their stored error
    only when a valuation actually needs them.
    """

    def __init__(
        self,
        quotes: Mapping[str, PriceQuote],
        unavailable: Mapping[str, CdpError] | None = None,
    ):
        self._quotes = dict(quotes)
        self._unavailable = dict(unavailable or {})

    def quote(self, asset: str) -> PriceQuote:
        if asset in self._unavailable:
            raise self._unavailable[asset]
        try:
            return self._quotes[asset]
        except KeyError:
            raise UnsupportedAssetError("no price for asset", asset=asset) from None

    def price_18(self, asset: str) -> int:
        return self.quote(asset).price_18

    def assets(self) -> tuple[str, ...]:
        return tuple(sorted(self._quotes))

    def __repr__(self) -> str:
        return f"PriceSnapshot({len(self._quotes)} quotes)"


# -- Price conversion --------------------------------------------------------

def reference_value(prices: PriceSnapshot, asset: str, amount: int) -> int:
    return _reference_value(prices.price_18(asset), amount)


def asset_amount_from_reference_value(prices: PriceSnapshot, asset: str, value: int) -> int:
    return _from_reference(prices.price_18(asset), value)


def pegged_value(prices: PriceSnapshot, asset: str, amount: int, exchange_rate: int) -> int:
    return _pegged_value(prices.price_18(asset), amount, exchange_rate)


def asset_amount_from_pegged_value(
    prices: PriceSnapshot,
    asset: str,
    value: int,
    exchange_rate: int,
    mode: PeggedInversion = PeggedInversion.EXACT,
) -> int:
    if mode is PeggedInversion.LEGACY:
        return _legacy_inverse(prices.price_18(asset), value, exchange_rate)
    return _exact_inverse(prices.price_18(asset), value, exchange_rate)


# -- Account valuation ---------------------------------------------------------

def collateral_value(config: EngineConfig, state: CdpState, prices: PriceSnapshot, account: str) -> int:
    """Pegged value of everything `account` has deposited, over accepted assets."""
    total = 0
    for asset in config.asset_ids:
        amount = state.collateral.get(account, asset)
        if amount == 0:
            continue
        total += pegged_value(prices, asset, amount, state.exchange_rate)
    return total


def account_health_factor(config: EngineConfig, state: CdpState, prices: PriceSnapshot, account: str) -> int:
    debt = state.debts.get(account)
    if debt == 0:
        return MAX_HEALTH_FACTOR
    value = collateral_value(config, state, prices, account)
    return _health_factor(value, debt, config.liquidation_threshold_pct)


def system_collateral_value(config: EngineConfig, state: CdpState, prices: PriceSnapshot) -> int:
    """Pegged value of all deposited collateral across accounts."""
    return sum(
        pegged_value(prices, asset, state.collateral.total_for_asset(asset), state.exchange_rate)
        for asset in config.asset_ids
    )


def is_system_solvent(config: EngineConfig, state: CdpState, prices: PriceSnapshot) -> bool:
    """Total collateral value covers total outstanding debt."""
    return system_collateral_value(config, state, prices) >= state.debts.total()


def liquidation_seizure(
    config: EngineConfig,
    state: CdpState,
    prices: PriceSnapshot,
    asset: str,
    debt_to_cover: int,
) -> tuple[int, int]:
    """Collateral equivalent of `debt_to_cover` plus the liquidator's bonus."""
    equivalent = asset_amount_from_pegged_value(
        prices, asset, debt_to_cover, state.exchange_rate, config.pegged_inversion,
    )
    return equivalent, _liquidation_bonus(equivalent, config.liquidation_bonus_pct)
