"""Middleware contract, composition, and per-method registration."""

from agentreducer.core.middleware.core import (
    apply_middlewares,
    compose,
    default_middleware,
    is_lifecycle_middleware,
    to_lifecycle_middleware,
)
from agentreducer.core.middleware.models import Middleware, NextProcess, StateProcess
from agentreducer.core.middleware.registry import MethodMiddlewares

__all__ = [
    "Middleware",
    "NextProcess",
    "StateProcess",
    "MethodMiddlewares",
    "apply_middlewares",
    "compose",
    "default_middleware",
    "is_lifecycle_middleware",
    "to_lifecycle_middleware",
]
