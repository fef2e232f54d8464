"""Core functionalities: stateless primitives shared by agents and policies.

Architecture Note:
    core/ contains the runtime records and the middleware contract. They hold
    no state of their own beyond what a caller passes in.
    For stateful services, see agent/, sharing/, and store/.
"""

from agentreducer.core.futures import is_future, on_settled, schedule
from agentreducer.core.middleware import (
    MethodMiddlewares,
    Middleware,
    NextProcess,
    StateProcess,
    apply_middlewares,
    compose,
    default_middleware,
    is_lifecycle_middleware,
    to_lifecycle_middleware,
)
from agentreducer.core.runtime import (
    Action,
    DefaultActionType,
    Env,
    EnvLike,
    LifecycleEnv,
    Runtime,
)

__all__ = [
    # Runtime
    "Action",
    "DefaultActionType",
    "Env",
    "EnvLike",
    "LifecycleEnv",
    "Runtime",
    # Middleware
    "Middleware",
    "NextProcess",
    "StateProcess",
    "MethodMiddlewares",
    "apply_middlewares",
    "compose",
    "default_middleware",
    "is_lifecycle_middleware",
    "to_lifecycle_middleware",
    # Futures
    "is_future",
    "on_settled",
    "schedule",
]
