"""State construction and serialization for the CDP engine.

`initial_state(config)` returns an empty ledger at the configured exchange rate.

Round-trip property (tested): `state_from_dict(state_to_dict(s)) == s`.
Dict form is JSON-friendly and deterministically ordered.
"""

from __future__ import annotations

from typing import Any, Mapping

from ...state.collateral import CollateralTable, DebtTable
from .types import CdpState, EngineConfig


def initial_state(config: EngineConfig) -> CdpState:
    """Return the empty state at the configured initial exchange rate."""
    return CdpState(exchange_rate=config.initial_exchange_rate)


def state_to_dict(state: CdpState) -> dict[str, Any]:
    """Serialize a CdpState to a plain dict."""
    return {
        "collateral": [
            {"account": account, "asset": asset, "amount": amount}
            for (account, asset), amount in state.collateral.items()
        ],
        "debts": [
            {"account": account, "amount": amount}
            for account, amount in state.debts.items()
        ],
        "exchange_rate": state.exchange_rate,
    }


def _int_field(entry: Mapping[str, Any], name: str) -> int:
    val = entry[name]
    if isinstance(val, bool) or not isinstance(val, int):
        raise TypeError(f"{name!r} must be int, got {type(val).__name__}")
    return int(val)


def state_from_dict(d: Mapping[str, Any]) -> CdpState:
    """Deserialize a dict to a CdpState. Raises KeyError on missing fields."""
    collateral = CollateralTable()
    for entry in d["collateral"]:
        collateral.add(str(entry["account"]), str(entry["asset"]), _int_field(entry, "amount"))
    debts = DebtTable()
    for entry in d["debts"]:
        debts.add(str(entry["account"]), _int_field(entry, "amount"))
    return CdpState(
        collateral=collateral,
        debts=debts,
        exchange_rate=_int_field(d, "exchange_rate"),
    )
