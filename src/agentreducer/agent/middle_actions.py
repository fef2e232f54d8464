"""Middle actions: helper classes orchestrating an agent's actions through middleware.

Usage:
    class Loading(MiddleActions[UserModel]):
        async def load(self, user_id: int) -> None:
            user = await api.fetch(user_id)
            self.agent.set_user(user)

    actions = use_middle_actions(Loading, MiddlewarePresets.take_latest(), agent=reducer.agent)
    await actions.load(1)

A middle action's return value is never committed. Its body commits by
calling actions on `self.agent`, which inside the body is a branch of the
agent the helper was built with. Every method gets its own branch, so
lifecycle middleware (take_latest) retires only the calls of that method.
Outside method bodies, `actions.agent` is still the original agent.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable
from typing import Any

from agentreducer.agent.agent import (
    Agent,
    AgentDependencies,
    ConfigurationError,
    NotMutableError,
    dependencies_of,
    is_agent,
)
from agentreducer.agent.branch import BranchAgent, branch
from agentreducer.core.futures import schedule
from agentreducer.core.members import is_action_member
from agentreducer.core.middleware import (
    MethodMiddlewares,
    Middleware,
    apply_middlewares,
    is_lifecycle_middleware,
)
from agentreducer.core.runtime import Env, EnvLike, Runtime
from agentreducer.sharing.errors import reject

logger = logging.getLogger(__name__)


class MiddleActions[A]:
    """Base for helper classes driving one agent.

    Args:
        agent: Agent the helper's methods commit through. May be None for
            helpers that only use plain middleware.
    """

    def __init__(self, agent: A | None = None):
        self.agent = agent


@functools.cache
def _view_class(cls: type) -> type:
    """Subclass of cls whose instances forward to a target, except for `agent`."""

    def __getattr__(self: Any, name: str) -> Any:
        return getattr(object.__getattribute__(self, "_target"), name)

    def __setattr__(self: Any, name: str, value: Any) -> None:
        setattr(object.__getattribute__(self, "_target"), name, value)

    return type(
        cls.__name__,
        (cls,),
        {"__getattr__": __getattr__, "__setattr__": __setattr__, "__module__": cls.__module__},
    )


def _view(target: Any, agent: Agent) -> Any:
    """Instance seen as `self` by one call: target's attributes, a branch `agent`."""
    view = object.__new__(_view_class(type(target)))
    object.__setattr__(view, "_target", target)
    object.__setattr__(view, "agent", agent)
    return view


def _serving_middleware(agent: Any) -> Middleware:
    """Middleware the agent's own calls run through."""
    if isinstance(agent, BranchAgent):
        agent = agent.active_agent
    return dependencies_of(agent).middleware


def _identity(result: Any) -> Any:
    return result


class MiddleActionsProxy:
    """Dispatching front of a middle-actions instance.

    Method reads return memoized callables running the method through
    middleware. Everything else reads and writes through to the instance.

    Args:
        target: Middle-actions instance.
        middleware: Middleware for methods without their own.
        method_middlewares: Registry of middleware attached to single methods.
    """

    __slots__ = ("_target", "_middleware", "_method_middlewares", "_calls", "__weakref__")

    def __init__(
        self,
        target: Any,
        middleware: Middleware,
        method_middlewares: MethodMiddlewares | None = None,
    ):
        object.__setattr__(self, "_target", target)
        object.__setattr__(self, "_middleware", middleware)
        object.__setattr__(self, "_method_middlewares", method_middlewares)
        object.__setattr__(self, "_calls", {})

    def __getattr__(self, name: str) -> Any:
        target = object.__getattribute__(self, "_target")
        value = getattr(target, name)
        if name == "agent" or not is_action_member(target, name):
            return value
        calls: dict[str, Callable[..., Any]] = object.__getattribute__(self, "_calls")
        call = calls.get(name)
        if call is None:
            call = _middle_action_runner(self, name)
            calls[name] = call
        return call

    def __setattr__(self, name: str, value: Any) -> None:
        target = object.__getattribute__(self, "_target")
        if name in object.__getattribute__(self, "_calls") or is_action_member(target, name):
            raise NotMutableError(f"{name!r} in middle actions is not mutable")
        setattr(target, name, value)

    def __dir__(self) -> list[str]:
        return sorted(set(dir(object.__getattribute__(self, "_target"))))

    def __repr__(self) -> str:
        return f"MiddleActionsProxy({object.__getattribute__(self, '_target')!r})"


def _middle_action_runner(proxy: MiddleActionsProxy, name: str) -> Callable[..., Any]:
    """Build the dispatchable callable of middle action `name`."""
    target = object.__getattribute__(proxy, "_target")
    method_middlewares: MethodMiddlewares | None = object.__getattribute__(
        proxy, "_method_middlewares"
    )
    attached = method_middlewares.lookup(target, name) if method_middlewares is not None else None
    middleware = attached if attached is not None else object.__getattribute__(proxy, "_middleware")
    source = target.agent
    handle = branch(source, _serving_middleware(source)) if source is not None else None
    dependencies: AgentDependencies | None = dependencies_of(source) if source is not None else None
    cache: dict[str, Any] = {}
    plain_env = Env()

    def reject_error(error: BaseException) -> Any:
        if dependencies is None:
            raise error
        return reject(dependencies.model, error, name, dependencies.model_registry())

    def caller(*args: Any, **kwargs: Any) -> Any:
        if handle is None and is_lifecycle_middleware(middleware):
            raise ConfigurationError(
                f"{type(target).__name__}.{name} uses lifecycle middleware but has no agent"
            )
        active = handle.active_agent if handle is not None else None
        env: EnvLike = dependencies_of(active).env if active is not None else plain_env
        runtime = Runtime(
            method_name=name,
            agent=None,
            model=target,
            env=env,
            cache=cache,
            caller=caller,
            reject=reject_error,
            args=args,
            kwargs=kwargs,
        )
        next_process = middleware(runtime)
        if next_process is None:
            logger.debug("%s.%s vetoed by middleware", type(target).__name__, name)
            return None
        bound = _view(target, active) if active is not None else target
        result = schedule(getattr(bound, name)(*args, **kwargs))
        return next_process(_identity)(result)

    functools.update_wrapper(caller, getattr(target, name))
    return caller


def use_middle_actions(
    middle_actions: Any,
    *middlewares: Middleware,
    agent: Any = None,
    method_middlewares: MethodMiddlewares | None = None,
) -> Any:
    """Put a middle-actions class or instance behind middleware.

    Args:
        middle_actions: MiddleActions subclass (instantiated with `agent`) or
            an instance holding its agent already.
        *middlewares: Middlewares for every method without its own.
        agent: Agent handed to the class. Ignored for instances.
        method_middlewares: Registry of middleware attached to single methods.

    Returns:
        MiddleActionsProxy over the instance.

    Raises:
        ConfigurationError: If a class comes without an agent, or the
            instance's `agent` is set to something that is not an agent.
    """
    if isinstance(middle_actions, type):
        if agent is None:
            raise ConfigurationError(
                f"{middle_actions.__name__} is a class; pass the agent to build it with"
            )
        instance = middle_actions(agent)
    else:
        instance = middle_actions
    held = getattr(instance, "agent", None)
    if held is not None and not is_agent(held):
        raise ConfigurationError(
            f"{type(instance).__name__}.agent must be an agent or None, got {type(held).__name__}"
        )
    middleware = apply_middlewares(*middlewares)
    return MiddleActionsProxy(instance, middleware, method_middlewares)
