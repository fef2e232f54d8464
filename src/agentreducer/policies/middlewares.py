"""Built-in middleware policies.

Each factory returns a fresh middleware. Policies keep their between-call
state in `runtime.cache`, which the composer scopes per middleware, so two
policies in one chain never see each other's keys.

Usage:
    reducer = create(SearchModel, take_unstable_debounce(200), take_future_resolve())

Timer-based policies (throttle, trailing debounce) schedule on the running
asyncio loop. Durations are in milliseconds.
"""

from __future__ import annotations

import asyncio
import copy
import dataclasses
import logging
import time
from collections.abc import Callable, Mapping
from typing import Any

from pydantic import BaseModel

from agentreducer.agent.agent import is_agent
from agentreducer.core.futures import is_future, on_settled, schedule
from agentreducer.core.middleware import (
    Middleware,
    NextProcess,
    StateProcess,
    to_lifecycle_middleware,
)
from agentreducer.core.runtime import Runtime

logger = logging.getLogger(__name__)


def _pass_through(next_state_process: StateProcess) -> StateProcess:
    return next_state_process


def take_nothing() -> Middleware:
    """Run the method but never commit its result."""

    def middleware(runtime: Runtime) -> NextProcess:
        def next_process(next_state_process: StateProcess) -> StateProcess:
            def state_process(result: Any) -> Any:
                return result

            return state_process

        return next_process

    return middleware


def take_future_resolve() -> Middleware:
    """Commit the settled value of a deferred result.

    Plain results pass through synchronously. A deferred result is awaited in
    a task and its value handed on. Errors go to `runtime.reject`.

    Returns:
        Middleware whose state process returns the settling task for deferred
        results.
    """

    def middleware(runtime: Runtime) -> NextProcess:
        def next_process(next_state_process: StateProcess) -> StateProcess:
            def state_process(result: Any) -> Any:
                if not is_future(result):
                    return next_state_process(result)

                async def settle() -> Any:
                    try:
                        data = await result
                    except Exception as error:
                        return runtime.reject(error)
                    return next_state_process(data)

                return schedule(settle())

            return state_process

        return next_process

    return middleware


def _assign(state: Any, candidate: Mapping[str, Any]) -> Any:
    """Shallow-merge candidate onto a copy of state, keeping the state's type."""
    if isinstance(state, BaseModel):
        return state.model_copy(update=dict(candidate))
    if dataclasses.is_dataclass(state) and not isinstance(state, type):
        names = {item.name for item in dataclasses.fields(state) if item.init}
        unknown = candidate.keys() - names
        if unknown:
            logger.debug("ignoring keys %s unknown to %s", sorted(unknown), type(state).__name__)
        return dataclasses.replace(state, **{k: v for k, v in candidate.items() if k in names})
    if isinstance(state, dict):
        merged = copy.copy(state)
        merged.update(candidate)
        return merged
    return candidate


def take_assignable() -> Middleware:
    """Merge mapping results onto the current state instead of replacing it.

    Dict states are copied with their class preserved, dataclass states go
    through `dataclasses.replace` (keys that are not init fields are
    dropped), pydantic states through `model_copy`.
    Anything else passes through unchanged.
    """

    def middleware(runtime: Runtime) -> NextProcess:
        def next_process(next_state_process: StateProcess) -> StateProcess:
            def state_process(result: Any) -> Any:
                if not is_agent(runtime.agent) or not isinstance(result, Mapping):
                    return next_state_process(result)
                return next_state_process(_assign(runtime.model.state, result))

            return state_process

        return next_process

    return middleware


def take_unstable_block(block_ms: float | None = None) -> Middleware:
    """Veto calls while an earlier call is running.

    A call is running until its deferred result settles, or for `block_ms`
    when given, whichever comes first. Synchronous results release at once.

    Args:
        block_ms: Longest time one call may block the next, in milliseconds.
    """

    def middleware(runtime: Runtime) -> NextProcess | None:
        cache = runtime.cache
        now = time.monotonic()
        running = cache.get("running")
        if running is not None and (block_ms is None or (now - running) * 1000 < block_ms):
            logger.debug("%s blocked by a running call", runtime.method_name)
            return None
        cache["running"] = now

        def release() -> None:
            if cache.get("running") == now:
                cache["running"] = None

        def next_process(next_state_process: StateProcess) -> StateProcess:
            def state_process(result: Any) -> Any:
                if is_future(result):
                    data = next_state_process(result)
                    on_settled(result, release)
                    return data
                release()
                return next_state_process(result)

            return state_process

        return next_process

    return middleware


def _flush(caller: Callable[..., Any], cache: dict[str, Any]) -> None:
    """Invoke the method with the last remembered arguments through its pipeline."""
    cache["timer"] = None
    cache["last"] = time.monotonic()
    args, kwargs = cache.pop("pending", ((), {}))
    cache["flushing"] = True
    try:
        caller(*args, **kwargs)
    finally:
        cache["flushing"] = False


def take_unstable_throttle(wait_ms: float) -> Middleware:
    """Run at most once per window, replaying the last vetoed call at its end.

    The first call runs at once. Calls inside the window are vetoed, the
    latest arguments are kept, and one timer replays them when the window
    elapses.

    Args:
        wait_ms: Window length in milliseconds.
    """
    wait = wait_ms / 1000

    def middleware(runtime: Runtime) -> NextProcess | None:
        cache = runtime.cache
        if cache.get("flushing"):
            return _pass_through
        now = time.monotonic()
        last = cache.get("last")
        if last is not None and now - last < wait:
            cache["pending"] = (runtime.args, runtime.kwargs)
            if cache.get("timer") is None:
                loop = asyncio.get_running_loop()
                cache["timer"] = loop.call_later(wait - (now - last), _flush, runtime.caller, cache)
                logger.debug("%s throttled, replay scheduled", runtime.method_name)
            return None
        cache["last"] = now
        return _pass_through

    return middleware


def take_unstable_debounce(wait_ms: float, leading: bool = False) -> Middleware:
    """Collapse bursts of calls into one.

    Trailing (default): every call restarts a timer and is vetoed. When the
    timer fires, the method runs once with the arguments of the last call.
    Leading: the first call of a burst runs, the rest are vetoed until the
    calls stop for `wait_ms`.

    Args:
        wait_ms: Idle window in milliseconds.
        leading: Run at the start of a burst instead of its end.
    """
    wait = wait_ms / 1000

    def leading_middleware(runtime: Runtime) -> NextProcess | None:
        cache = runtime.cache
        now = time.monotonic()
        last = cache.get("last")
        cache["last"] = now
        if last is not None and now - last < wait:
            return None
        return _pass_through

    def trailing_middleware(runtime: Runtime) -> NextProcess | None:
        cache = runtime.cache
        if cache.get("flushing"):
            return _pass_through
        timer = cache.get("timer")
        if timer is not None:
            timer.cancel()
        loop = asyncio.get_running_loop()
        cache["pending"] = (runtime.args, runtime.kwargs)
        cache["timer"] = loop.call_later(wait, _flush, runtime.caller, cache)
        return None

    return leading_middleware if leading else trailing_middleware


def _failed(error: Exception) -> asyncio.Future[Any]:
    failed: asyncio.Future[Any] = asyncio.get_running_loop().create_future()
    failed.set_exception(error)
    return failed


def take_latest() -> Middleware:
    """Let only the most recently started deferred call commit.

    Every deferred result bumps a version counter and is awaited here. The
    settled value is handed on, and in the same step, when no newer call
    started meanwhile, the lifecycle env is rebuilt. Older calls resuming
    after that, even within the same loop iteration, commit through the
    retired branch and are discarded.

    A failure is handed on as a failed future, so take_future_resolve
    downstream reports it through `runtime.reject`.
    """

    def middleware(runtime: Runtime) -> NextProcess:
        def next_process(next_state_process: StateProcess) -> StateProcess:
            def state_process(result: Any) -> Any:
                if not is_future(result):
                    return next_state_process(result)
                cache = runtime.cache
                version = cache.get("version", 0) + 1
                cache["version"] = version

                async def latest() -> Any:
                    try:
                        data = await result
                    except Exception as error:
                        data = _failed(error)
                    outcome = next_state_process(data)
                    if cache.get("version") == version:
                        runtime.env.rebuild()  # type: ignore[attr-defined]
                    if is_future(outcome):
                        return await outcome
                    return outcome

                return schedule(latest())

            return state_process

        return next_process

    return to_lifecycle_middleware(middleware)
