"""Agent: interception wrapper routing model methods through middleware.

Usage:
    agent = create_agent(model, slot, Env(), apply_middlewares(take_assignable()))

    agent.state             # reads model.state
    agent.rename("Jimmy")   # runs the pipeline, then commits the result
    agent.title = "x"       # forwarded to the model
    agent.rename = print    # NotMutableError

Reading an action method returns a dispatchable callable, built once per
(wrapper, method) and memoized. Each call evaluates the wrapper's middleware
against a fresh Runtime sharing the method's long-lived cache. A veto returns
None without running the method body. Otherwise the body runs and its result
flows through the composed state processes into the commit.
"""

from __future__ import annotations

import functools
import inspect
import logging
import types
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Literal

from agentreducer.core.futures import schedule
from agentreducer.core.members import is_action_member
from agentreducer.core.middleware import MethodMiddlewares, Middleware
from agentreducer.core.runtime import Action, EnvLike, Runtime
from agentreducer.sharing.errors import reject
from agentreducer.sharing.registry import ModelRegistry, get_registry
from agentreducer.store.protocol import StoreSlot

logger = logging.getLogger(__name__)

type CopyType = Literal["copy", "decorator"]

_DEPENDENCIES_ATTRIBUTE = "_dependencies"
_SOURCE_ATTRIBUTE = "_source"


class ConfigurationError(Exception):
    """Raised when an agent is built or used against its configuration."""

    pass


class NotMutableError(ConfigurationError, AttributeError):
    """Raised when writing over an agent's method slot."""

    pass


@dataclass(frozen=True, slots=True)
class AgentDependencies:
    """Dependency bundle owned by exactly one wrapper.

    Fields are fixed at creation. Branches get a new bundle. The tables are
    filled lazily, one entry per method.
    """

    model: Any
    store: StoreSlot
    env: EnvLike
    middleware: Middleware
    method_middlewares: MethodMiddlewares | None = None
    copy_type: CopyType | None = None
    source_agent: Any = None
    registry: ModelRegistry | None = None
    active_agent: Callable[[], Agent] | None = None
    """Returns the agent currently serving this branch, for deferred replays."""
    caches: dict[str, dict[str, Any]] = field(default_factory=dict)
    """Runtime cache per method name."""
    callers: dict[str, Callable[..., Any]] = field(default_factory=dict)
    """Dispatchable callable per method name."""

    def model_registry(self) -> ModelRegistry:
        return self.registry if self.registry is not None else get_registry()


class AgentBase:
    """Marker base shared by agents and branch agents."""

    __slots__ = ()


class Agent(AgentBase):
    """Transparent stand-in for a model.

    Non-method attributes read and write through to the model. Action methods
    read as dispatchable callables and cannot be overwritten.

    Args:
        dependencies: Bundle this wrapper owns for its whole life.
    """

    __slots__ = (_DEPENDENCIES_ATTRIBUTE, "__weakref__")

    def __init__(self, dependencies: AgentDependencies):
        object.__setattr__(self, _DEPENDENCIES_ATTRIBUTE, dependencies)

    def __getattr__(self, name: str) -> Any:
        dependencies: AgentDependencies = object.__getattribute__(self, _DEPENDENCIES_ATTRIBUTE)
        model = dependencies.model
        value = getattr(model, name)
        if not is_action_member(model, name):
            return value
        return _produce_method(self, dependencies, name)

    def __setattr__(self, name: str, value: Any) -> None:
        if name == _DEPENDENCIES_ATTRIBUTE:
            raise ConfigurationError("Agent dependencies are set once at creation")
        dependencies: AgentDependencies = object.__getattribute__(self, _DEPENDENCIES_ATTRIBUTE)
        if name in dependencies.callers or is_action_member(dependencies.model, name):
            raise NotMutableError(f"{name!r} in agent is not mutable")
        setattr(dependencies.model, name, value)

    def __dir__(self) -> list[str]:
        dependencies: AgentDependencies = object.__getattribute__(self, _DEPENDENCIES_ATTRIBUTE)
        return sorted(set(dir(dependencies.model)))

    def __repr__(self) -> str:
        dependencies: AgentDependencies = object.__getattribute__(self, _DEPENDENCIES_ATTRIBUTE)
        return f"Agent({dependencies.model!r})"


def is_agent(value: Any) -> bool:
    """Check if value is an agent or a branch agent."""
    return isinstance(value, AgentBase)


def dependencies_of(agent: Any) -> AgentDependencies:
    """Get the dependency bundle of an agent.

    Branch agents resolve to the agent they were branched from.

    Raises:
        ConfigurationError: If agent is not an agent.
    """
    if isinstance(agent, Agent):
        return object.__getattribute__(agent, _DEPENDENCIES_ATTRIBUTE)
    if isinstance(agent, AgentBase):
        return dependencies_of(object.__getattribute__(agent, _SOURCE_ATTRIBUTE))
    raise ConfigurationError(f"{type(agent).__name__} is not an agent")


def _produce_method(agent: Agent, dependencies: AgentDependencies, name: str) -> Callable[..., Any]:
    """Pick the callable served for method `name`."""
    cached = dependencies.callers.get(name)
    if cached is not None:
        return cached
    if dependencies.copy_type is None and dependencies.method_middlewares is not None:
        attached = dependencies.method_middlewares.lookup(dependencies.model, name)
        if attached is not None:
            return _decorated_method(agent, dependencies, name, attached)
    return _action_runner(agent, dependencies, name)


def _decorated_method(
    agent: Agent, dependencies: AgentDependencies, name: str, middleware: Middleware
) -> Callable[..., Any]:
    """Serve a method through a decorator branch built with its own middleware."""
    # Import here to avoid circular dependency at module level
    from agentreducer.agent.branch import branch

    decorated = branch(agent, middleware, copy_type="decorator")
    method = getattr(decorated, name)
    dependencies.callers[name] = method
    return method


def _bound_method(agent: Agent, dependencies: AgentDependencies, name: str) -> Callable[..., Any]:
    """Resolve the real method body.

    Bound to the raw model, so actions called from inside another action do
    not commit. Legacy mode binds to the wrapper instead.
    """
    model = dependencies.model
    method = getattr(model, name)
    if dependencies.env.legacy and inspect.ismethod(method) and method.__self__ is model:
        return types.MethodType(method.__func__, agent)
    return method


def _committer(
    dependencies: AgentDependencies, name: str, params: tuple[Any, ...]
) -> Callable[[Any], Any]:
    """Build the terminal state process committing one call's result."""

    def commit(next_state: Any) -> Any:
        env = dependencies.env
        model = dependencies.model
        if env.expired:
            logger.debug("discarding %s result on expired env", name)
            return next_state
        namespace = getattr(model, "namespace", None)
        action_type = name if namespace is None else f"{namespace}{env.namespace_separator}{name}"
        prev_state = model.state
        if not env.strict:
            model.state = next_state
        dependencies.store.dispatch(
            Action(type=action_type, state=next_state, prev_state=prev_state, params=params)
        )
        return next_state

    return commit


def _action_runner(
    agent: Agent, dependencies: AgentDependencies, name: str
) -> Callable[..., Any]:
    """Turn model method `name` into a dispatchable callable and memoize it."""
    model = dependencies.model
    cache = dependencies.caches.setdefault(name, {})
    registry = dependencies.model_registry()

    def reject_error(error: BaseException) -> Any:
        return reject(model, error, name, registry)

    def caller(*args: Any, **kwargs: Any) -> Any:
        runtime = Runtime(
            method_name=name,
            agent=agent,
            model=model,
            env=dependencies.env,
            cache=cache,
            caller=replay,
            reject=reject_error,
            args=args,
            kwargs=kwargs,
        )
        next_process = dependencies.middleware(runtime)
        if next_process is None:
            logger.debug("%s.%s vetoed by middleware", type(model).__name__, name)
            return None
        method = _bound_method(agent, dependencies, name)
        candidate = schedule(method(*args, **kwargs))
        state_process = next_process(_committer(dependencies, name, args))
        return state_process(candidate)

    def replay(*args: Any, **kwargs: Any) -> Any:
        if dependencies.active_agent is None:
            return caller(*args, **kwargs)
        return getattr(dependencies.active_agent(), name)(*args, **kwargs)

    functools.update_wrapper(caller, getattr(model, name))
    dependencies.callers[name] = caller
    return caller


def create_agent(
    model: Any,
    store: StoreSlot,
    env: EnvLike,
    middleware: Middleware,
    *,
    method_middlewares: MethodMiddlewares | None = None,
    copy_type: CopyType | None = None,
    source_agent: Any = None,
    registry: ModelRegistry | None = None,
    active_agent: Callable[[], Agent] | None = None,
) -> Agent:
    """Wrap model into an agent with its own dependency bundle.

    Args:
        model: Object holding `state` and action methods.
        store: Slot receiving committed actions.
        env: Flags consulted at commit time.
        middleware: Effective middleware, usually from apply_middlewares().
        method_middlewares: Registry of middleware attached to single methods.
        copy_type: Set for branches; "decorator" copies never re-apply
            method-attached middleware.
        source_agent: Agent a branch was built from.
        registry: Model registry for record lookups.
        active_agent: Resolves the branch agent now in service. Timer replays
            call through it so they survive rebuilds.

    Returns:
        New Agent over model.
    """
    if not hasattr(model, "state"):
        raise ConfigurationError(f"{type(model).__name__} has no `state` attribute")
    dependencies = AgentDependencies(
        model=model,
        store=store,
        env=env,
        middleware=middleware,
        method_middlewares=method_middlewares,
        copy_type=copy_type,
        source_agent=source_agent,
        registry=registry,
        active_agent=active_agent,
    )
    logger.debug("created %s agent over %s", copy_type or "source", type(model).__name__)
    return Agent(dependencies)
