"""Helpers for deferred values returned by action methods."""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Callable
from typing import Any


def is_future(value: Any) -> bool:
    """Check if value is a deferred result (any awaitable)."""
    return inspect.isawaitable(value)


def schedule(value: Any) -> Any:
    """Start a coroutine on the running loop so it runs without being awaited.

    Returns other values unchanged, and coroutines too when no loop is running.
    """
    if not inspect.iscoroutine(value):
        return value
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        return value
    return loop.create_task(value)


def on_settled(value: Any, callback: Callable[[], Any]) -> None:
    """Run callback once a deferred value settles, whatever its outcome.

    Non-deferred values count as already settled.
    """
    if not is_future(value):
        callback()
        return
    future = value if isinstance(value, asyncio.Future) else asyncio.ensure_future(value)
    future.add_done_callback(lambda _: callback())
