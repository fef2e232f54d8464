"""Explicit per-method middleware registration.

Usage:
    methods = MethodMiddlewares()

    class UserModel:
        state = {"id": 0}

        @methods.attach(MiddlewarePresets.take_latest())
        async def fetch_user(self, user_id: int, delay: float) -> dict:
            ...

    reducer = create(UserModel, method_middlewares=methods)
"""

from __future__ import annotations

import inspect
import warnings
from collections.abc import Callable
from typing import Any

from agentreducer.core.middleware.core import apply_middlewares
from agentreducer.core.middleware.models import Middleware


def _function_of(member: Any) -> Any:
    """Resolve the function object a class or instance member is built from."""
    if isinstance(member, (staticmethod, classmethod)):
        return member.__func__
    if inspect.ismethod(member):
        return member.__func__
    return member


class MethodMiddlewares:
    """Registry mapping method functions to their own middleware.

    Keyed by function identity, populated at class-definition time and passed
    to `create`. A wrapper that finds a registered method builds a branch with
    the registered middleware for it.
    """

    def __init__(self) -> None:
        self._by_function: dict[Any, Middleware] = {}

    def attach[F: Callable[..., Any]](self, *middlewares: Middleware) -> Callable[[F], F]:
        """Decorator registering middlewares for a method. Returns the method unchanged."""

        def decorator(fn: F) -> F:
            self.register(fn, *middlewares)
            return fn

        return decorator

    def register(self, fn: Any, *middlewares: Middleware) -> None:
        """Register middlewares for a function, static method or class method."""
        key = _function_of(fn)
        if key in self._by_function:
            warnings.warn(
                f"Middleware for {getattr(key, '__qualname__', key)!r} registered twice. "
                f"The last registration wins.",
                stacklevel=2,
            )
        self._by_function[key] = apply_middlewares(*middlewares)

    def lookup(self, model: Any, name: str) -> Middleware | None:
        """Find middleware registered for the member `name` of model."""
        try:
            member = inspect.getattr_static(model, name)
        except AttributeError:
            return None
        return self._by_function.get(_function_of(member))

    def __contains__(self, fn: Any) -> bool:
        return _function_of(fn) in self._by_function

    def __len__(self) -> int:
        return len(self._by_function)
