"""`cdp`: pure-Python functional core of the collateralized-debt-position engine.

- deterministic, integer-only fixed-point transitions,
- state is never mutated in place (ledgers are copied per step),
- fail-closed guards, post-state invariant and health-factor checks.

Public API:
- `initial_state(config) -> CdpState`
- `step(config, state, params, prices) -> StepResult`
- `step_or_raise(config, state, params, prices) -> StepResult` (raises on rejection)
"""

from .engine import step, step_or_raise
from .errors import (
    CdpError,
    CdpInvariantError,
    ConfigurationMismatchError,
    DivisionByZeroError,
    HealthFactorViolationError,
    InsufficientCollateralError,
    InsufficientDebtError,
    InvalidAmountError,
    LiquidationIneffectiveError,
    PositionIsHealthyError,
    ReentrancyError,
    StalePriceError,
    TransferFailedError,
    UnauthorizedError,
    UnsupportedAssetError,
)
from .state import initial_state, state_from_dict, state_to_dict
from .types import (
    Action,
    ActionParams,
    CdpState,
    CollateralAsset,
    Effect,
    EngineConfig,
    Event,
    PeggedInversion,
    StepResult,
)
from .valuation import PriceQuote, PriceSnapshot

__all__ = [
    "step",
    "step_or_raise",
    "initial_state",
    "state_from_dict",
    "state_to_dict",
    "Action",
    "ActionParams",
    "CdpState",
    "CollateralAsset",
    "Effect",
    "EngineConfig",
    "Event",
    "PeggedInversion",
    "PriceQuote",
    "PriceSnapshot",
    "StepResult",
    "CdpError",
    "CdpInvariantError",
    "ConfigurationMismatchError",
    "DivisionByZeroError",
    "HealthFactorViolationError",
    "InsufficientCollateralError",
    "InsufficientDebtError",
    "InvalidAmountError",
    "LiquidationIneffectiveError",
    "PositionIsHealthyError",
    "ReentrancyError",
    "StalePriceError",
    "TransferFailedError",
    "UnauthorizedError",
    "UnsupportedAssetError",
]
