"""Configuration loader: reads an engine YAML file, interpolates env vars, validates.

Two collateral layouts are accepted:

    collateral:                      # paired entries
      - {asset: WETH, feed: ETH/USD}

    assets: [WETH, WBTC]             # parallel lists (lengths must match)
    feeds: [ETH/USD, BTC/USD]
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Any, Mapping

import yaml

from .core.cdp.errors import ConfigurationMismatchError
from .core.cdp.math import LIQUIDATION_BONUS_PCT, LIQUIDATION_THRESHOLD_PCT, MIN_HEALTH_FACTOR
from .core.cdp.types import CollateralAsset, EngineConfig, PeggedInversion

logger = logging.getLogger(__name__)

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)}")


def _interpolate_env(value: Any) -> Any:
    """Recursively replace ${VAR} references with environment variable values."""
    if isinstance(value, str):
        return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: _interpolate_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate_env(item) for item in value]
    return value


def _int_field(raw: Mapping[str, Any], name: str, default: int | None) -> int | None:
    value = raw.get(name, default)
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigurationMismatchError(
            "config field must be an integer", field=name, value=value,
        ) from None


def config_from_mapping(raw: Mapping[str, Any]) -> EngineConfig:
    """Build an `EngineConfig` from a parsed YAML/JSON mapping."""
    kwargs: dict[str, Any] = dict(
        admin=str(raw.get("admin", "")),
        initial_exchange_rate=_int_field(raw, "initial_exchange_rate", 1),
        liquidation_threshold_pct=_int_field(raw, "liquidation_threshold_pct", LIQUIDATION_THRESHOLD_PCT),
        liquidation_bonus_pct=_int_field(raw, "liquidation_bonus_pct", LIQUIDATION_BONUS_PCT),
        min_health_factor=_int_field(raw, "min_health_factor", MIN_HEALTH_FACTOR),
        max_price_age_seconds=_int_field(raw, "max_price_age_seconds", None),
    )
    try:
        kwargs["pegged_inversion"] = PeggedInversion(raw.get("pegged_inversion", "exact"))
    except ValueError:
        raise ConfigurationMismatchError(
            "unknown pegged_inversion mode", mode=raw.get("pegged_inversion"),
        ) from None

    if "collateral" in raw:
        assets = tuple(
            CollateralAsset(asset_id=str(entry["asset"]), feed_id=str(entry["feed"]))
            for entry in raw["collateral"]
        )
        return EngineConfig(assets=assets, **kwargs)
    return EngineConfig.from_lists(
        [str(a) for a in raw.get("assets", [])],
        [str(f) for f in raw.get("feeds", [])],
        **kwargs,
    )


def load_config(path: str | Path) -> EngineConfig:
    """Load and validate an engine config file."""
    path = Path(path)
    raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    if not isinstance(raw, Mapping):
        raise ConfigurationMismatchError("config YAML must be a mapping", path=str(path))
    config = config_from_mapping(_interpolate_env(dict(raw)))
    logger.info("Loaded engine config from %s (%d collateral assets)", path, len(config.assets))
    return config
