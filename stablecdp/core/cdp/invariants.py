"""Invariant checkers for the CDP engine.

State-wide invariants take only the state; `check_all()` returns the list of
violated invariant IDs (empty = all pass). Health-factor invariants need prices
and are evaluated per account: the engine checks the accounts an action
touched, tests may check every account.
"""

from __future__ import annotations

from typing import Callable, Iterable

from .math import is_healthy
from .types import CdpState, EngineConfig
from .valuation import PriceSnapshot, account_health_factor, is_system_solvent


def inv_deposits_nonneg(s: CdpState) -> bool:
    return all(amount >= 0 for _, amount in s.collateral.items())


def inv_debts_nonneg(s: CdpState) -> bool:
    return all(amount >= 0 for _, amount in s.debts.items())


def inv_exchange_rate_positive(s: CdpState) -> bool:
    return s.exchange_rate > 0


INVARIANT_REGISTRY: dict[str, Callable[[CdpState], bool]] = {
    "inv_deposits_nonneg": inv_deposits_nonneg,
    "inv_debts_nonneg": inv_debts_nonneg,
    "inv_exchange_rate_positive": inv_exchange_rate_positive,
}


def check_all(state: CdpState) -> list[str]:
    """Return list of violated invariant IDs (empty = all pass)."""
    return [
        inv_id
        for inv_id, check_fn in INVARIANT_REGISTRY.items()
        if not check_fn(state)
    ]


def unhealthy_accounts(
    config: EngineConfig,
    state: CdpState,
    prices: PriceSnapshot,
    accounts: Iterable[str],
) -> list[tuple[str, int]]:
    """(account, health_factor) for every listed account with debt below the minimum."""
    broken = []
    for account in accounts:
        if state.debts.get(account) == 0:
            continue
        hf = account_health_factor(config, state, prices, account)
        if not is_healthy(hf, config.min_health_factor):
            broken.append((account, hf))
    return broken


def all_accounts_healthy(config: EngineConfig, state: CdpState, prices: PriceSnapshot) -> bool:
    return not unhealthy_accounts(config, state, prices, state.debts.accounts())


def system_solvent(config: EngineConfig, state: CdpState, prices: PriceSnapshot) -> bool:
    return is_system_solvent(config, state, prices)
