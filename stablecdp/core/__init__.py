"""
Core CDP algorithms (functional core)
"""

from .cdp import (
    Action,
    ActionParams,
    CdpState,
    EngineConfig,
    PriceQuote,
    PriceSnapshot,
    StepResult,
    initial_state,
    step,
    step_or_raise,
)
from .oracle import FreshnessPolicy, is_fresh, require_fresh

__all__ = [
    "Action",
    "ActionParams",
    "CdpState",
    "EngineConfig",
    "PriceQuote",
    "PriceSnapshot",
    "StepResult",
    "initial_state",
    "step",
    "step_or_raise",
    "FreshnessPolicy",
    "is_fresh",
    "require_fresh",
]
