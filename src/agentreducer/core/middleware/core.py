"""Middleware composition.

Usage:
    middleware = apply_middlewares(take_latest(), take_future_resolve())
    reducer = create(UserModel, middleware)

Every middleware in a composite is evaluated against the same call. If any of
them vetoes, the composite vetoes. Otherwise their next processes are chained
so the first middleware sees the raw candidate first.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Sequence
from typing import Any

from agentreducer.core.futures import is_future
from agentreducer.core.middleware.models import (
    LIFECYCLE_ATTRIBUTE,
    Middleware,
    NextProcess,
    StateProcess,
)
from agentreducer.core.runtime import Runtime

_SCOPED_CACHES_KEY = "middleware_caches"


def is_lifecycle_middleware(middleware: Middleware) -> bool:
    """Check if middleware needs a lifecycle env with expire/rebuild."""
    return bool(getattr(middleware, LIFECYCLE_ATTRIBUTE, False))


def to_lifecycle_middleware(middleware: Middleware) -> Middleware:
    """Mark middleware as lifecycle-aware and return it."""
    setattr(middleware, LIFECYCLE_ATTRIBUTE, True)
    return middleware


def compose(next_processes: Sequence[NextProcess]) -> NextProcess:
    """Chain next processes right to left into one.

    The first process wraps all the others, so it receives the candidate first.
    """
    processes = tuple(next_processes)

    def composed(final: StateProcess) -> StateProcess:
        handler = final
        for next_process in reversed(processes):
            handler = next_process(handler)
        return handler

    return composed


def _passthrough(next_state_process: StateProcess) -> StateProcess:
    return next_state_process


def default_middleware(runtime: Runtime) -> NextProcess:
    """Terminal middleware appended to every composite.

    Passes candidates through. In legacy mode, deferred values and None are
    returned without reaching the commit.
    """
    if not runtime.env.legacy:
        return _passthrough

    def legacy_next_process(next_state_process: StateProcess) -> StateProcess:
        def legacy_state_process(result: Any) -> Any:
            if result is None or is_future(result):
                return result
            return next_state_process(result)

        return legacy_state_process

    return legacy_next_process


def apply_middlewares(*middlewares: Middleware) -> Middleware:
    """Compose middlewares into one effective middleware.

    Each middleware sees a runtime whose `cache` is its own dict, kept under
    the composite's cache so state survives between calls. The result is
    lifecycle-marked if any part is.

    Args:
        *middlewares: Middlewares in evaluation order.

    Returns:
        Composite middleware, vetoing when any part vetoes.
    """
    chain: tuple[Middleware, ...] = (*middlewares, default_middleware)

    def composite(runtime: Runtime) -> NextProcess | None:
        caches = runtime.cache.get(_SCOPED_CACHES_KEY)
        if caches is None:
            caches = [{} for _ in chain]
            runtime.cache[_SCOPED_CACHES_KEY] = caches
        next_processes = [
            middleware(dataclasses.replace(runtime, cache=caches[index]))
            for index, middleware in enumerate(chain)
        ]
        if any(next_process is None for next_process in next_processes):
            return None
        return compose(next_processes)  # type: ignore[arg-type]

    if any(is_lifecycle_middleware(m) for m in middlewares):
        to_lifecycle_middleware(composite)
    return composite
