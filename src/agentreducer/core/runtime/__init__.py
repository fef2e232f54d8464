"""Runtime primitives: environments, per-call runtime, committed actions."""

from agentreducer.core.runtime.models import (
    Action,
    DefaultActionType,
    Env,
    EnvLike,
    LifecycleEnv,
    Runtime,
)

__all__ = [
    "Action",
    "DefaultActionType",
    "Env",
    "EnvLike",
    "LifecycleEnv",
    "Runtime",
]
