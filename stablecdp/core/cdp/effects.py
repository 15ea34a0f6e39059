"""Effect functions for the CDP engine.

One pure function per primitive action. Each computes the ``Effect`` from the
POST-state; the shell turns effects into token movements and audit events.
"""

from __future__ import annotations

from .errors import StalePriceError
from .types import ActionParams, CdpState, Effect, EngineConfig, Event
from .valuation import PriceSnapshot, account_health_factor, liquidation_seizure


def _reported_health_factor(
    config: EngineConfig, state: CdpState, prices: PriceSnapshot, account: str,
) -> int:
    """Health factor for the event record; 0 when a needed quote is stale."""
    try:
        return account_health_factor(config, state, prices, account)
    except StalePriceError:
        return 0


def effect_deposit_collateral(
    config: EngineConfig, state: CdpState, params: ActionParams, prices: PriceSnapshot,
) -> Effect:
    return Effect(
        event=Event.COLLATERAL_DEPOSITED,
        account=params.account,
        asset=params.asset,
        amount=params.amount,
        health_factor=_reported_health_factor(config, state, prices, params.account),
    )


def effect_redeem_collateral(
    config: EngineConfig, state: CdpState, params: ActionParams, prices: PriceSnapshot,
) -> Effect:
    return Effect(
        event=Event.COLLATERAL_REDEEMED,
        account=params.account,
        asset=params.asset,
        amount=params.amount,
        health_factor=account_health_factor(config, state, prices, params.account),
    )


def effect_mint(
    config: EngineConfig, state: CdpState, params: ActionParams, prices: PriceSnapshot,
) -> Effect:
    return Effect(
        event=Event.PEGGED_MINTED,
        account=params.account,
        amount=params.amount,
        health_factor=account_health_factor(config, state, prices, params.account),
    )


def effect_burn(
    config: EngineConfig, state: CdpState, params: ActionParams, prices: PriceSnapshot,
) -> Effect:
    return Effect(
        event=Event.PEGGED_BURNED,
        account=params.account,
        amount=params.amount,
        health_factor=account_health_factor(config, state, prices, params.account),
    )


def effect_liquidate(
    config: EngineConfig, state: CdpState, params: ActionParams, prices: PriceSnapshot,
) -> Effect:
    equivalent, bonus = liquidation_seizure(config, state, prices, params.asset, params.amount)
    return Effect(
        event=Event.LIQUIDATED,
        account=params.account,
        asset=params.asset,
        amount=params.amount,
        target=params.target,
        collateral_seized=equivalent + bonus,
        bonus=bonus,
        health_factor=account_health_factor(config, state, prices, params.target),
    )


def effect_set_exchange_rate(
    config: EngineConfig, state: CdpState, params: ActionParams, prices: PriceSnapshot,
) -> Effect:
    return Effect(
        event=Event.EXCHANGE_RATE_UPDATED,
        account=params.account,
        exchange_rate=state.exchange_rate,
    )
