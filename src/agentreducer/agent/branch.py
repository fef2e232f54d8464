"""Lifecycle branching: derived agents that can be retired and rebuilt mid-flight.

Usage:
    latest = branch(agent, MiddlewarePresets.take_latest())
    latest.fetch_user(1, 200)
    latest.fetch_user(2, 100)   # the first call's late result is discarded

    # Same thing for a whole agent, with several middlewares
    throttled = with_middleware(agent, take_unstable_throttle(200))

A branch shares the source agent's model and store slot, but commits through
its own LifecycleEnv. `expire()` retires the active branch permanently.
`rebuild()` retires it and swaps in a fresh one. The BranchAgent handed back
always resolves attributes against the active branch, so holders keep working
across rebuilds.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable
from typing import Any

from agentreducer.agent.agent import (
    Agent,
    AgentBase,
    CopyType,
    NotMutableError,
    create_agent,
    dependencies_of,
)
from agentreducer.core.members import is_action_member
from agentreducer.core.middleware import Middleware, apply_middlewares
from agentreducer.core.runtime import LifecycleEnv

logger = logging.getLogger(__name__)


class BranchAgent(AgentBase):
    """Stable handle following the active branch of a source agent.

    Args:
        source: Agent the branch derives from.
        active: First branch agent.
    """

    __slots__ = ("_source", "_active", "_calls", "__weakref__")

    def __init__(self, source: Any, active: Agent):
        object.__setattr__(self, "_source", source)
        object.__setattr__(self, "_active", active)
        object.__setattr__(self, "_calls", {})

    def _activate(self, active: Agent) -> None:
        object.__setattr__(self, "_active", active)

    @property
    def active_agent(self) -> Agent:
        """Branch agent currently receiving calls."""
        return object.__getattribute__(self, "_active")

    def __getattr__(self, name: str) -> Any:
        active: Agent = object.__getattribute__(self, "_active")
        value = getattr(active, name)
        if not is_action_member(dependencies_of(active).model, name):
            return value
        calls: dict[str, Callable[..., Any]] = object.__getattribute__(self, "_calls")
        call = calls.get(name)
        if call is None:

            def replaced_call(*args: Any, **kwargs: Any) -> Any:
                current = object.__getattribute__(self, "_active")
                return getattr(current, name)(*args, **kwargs)

            call = functools.update_wrapper(replaced_call, value)
            calls[name] = call
        return call

    def __setattr__(self, name: str, value: Any) -> None:
        raise NotMutableError(f"{name!r} in branch agent is not mutable")

    def __dir__(self) -> list[str]:
        return dir(object.__getattribute__(self, "_active"))

    def __repr__(self) -> str:
        return f"BranchAgent({object.__getattribute__(self, '_active')!r})"


def branch(
    agent: Any,
    middleware: Middleware | None = None,
    *,
    copy_type: CopyType = "copy",
) -> BranchAgent:
    """Derive an agent with its own expirable, rebuildable environment.

    Args:
        agent: Source agent (a branch agent resolves to its own source).
        middleware: Middleware of the branch. Lifecycle middleware receives the
            branch's LifecycleEnv as `runtime.env`.
        copy_type: "copy" for whole-agent branches, "decorator" for branches
            serving a single method's own middleware.

    Returns:
        BranchAgent following the active branch.

    Raises:
        ConfigurationError: If agent is not an agent.
    """
    dependencies = dependencies_of(agent)
    effective = apply_middlewares(middleware) if middleware is not None else apply_middlewares()
    handle: BranchAgent | None = None

    def build() -> Agent:
        env = LifecycleEnv(dependencies.env, on_rebuild=rebuild)
        return create_agent(
            dependencies.model,
            dependencies.store,
            env,
            effective,
            method_middlewares=dependencies.method_middlewares,
            copy_type=copy_type,
            source_agent=agent,
            registry=dependencies.registry,
            active_agent=active,
        )

    def active() -> Agent:
        return handle.active_agent  # type: ignore[union-attr]

    def rebuild() -> None:
        logger.debug("rebuilding %s branch of %s", copy_type, type(dependencies.model).__name__)
        if handle is not None:
            handle._activate(build())

    handle = BranchAgent(agent, build())
    return handle


def with_middleware(agent: Any, *middlewares: Middleware) -> BranchAgent:
    """Branch agent with middlewares composed in order."""
    return branch(agent, apply_middlewares(*middlewares), copy_type="copy")
