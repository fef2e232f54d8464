"""Built-in middleware policies and preset combinations."""

from agentreducer.policies.middlewares import (
    take_assignable,
    take_future_resolve,
    take_latest,
    take_nothing,
    take_unstable_block,
    take_unstable_debounce,
    take_unstable_throttle,
)
from agentreducer.policies.presets import MiddlewarePresets

__all__ = [
    "MiddlewarePresets",
    "take_assignable",
    "take_future_resolve",
    "take_latest",
    "take_nothing",
    "take_unstable_block",
    "take_unstable_debounce",
    "take_unstable_throttle",
]
