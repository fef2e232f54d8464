"""Construction surface: build an agent over a model and manage its connection.

Usage:
    reducer = create(Counter)
    reducer.connect(lambda state: print("state", state))
    reducer.agent.step_up()
    reducer.state           # 1
    reducer.disconnect()

    # Shared instance, lifecycle middleware, external store
    reducer = create(
        todo_ref.current,
        MiddlewarePresets.take_latest(),
        store=store,
        settings=AgentSettings(strict=False),
    )
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from agentreducer.agent.agent import AgentBase, create_agent
from agentreducer.agent.branch import branch
from agentreducer.config import AgentSettings
from agentreducer.core.middleware import (
    MethodMiddlewares,
    Middleware,
    apply_middlewares,
    is_lifecycle_middleware,
)
from agentreducer.core.runtime import Env, EnvLike
from agentreducer.sharing.connector import ModelConnector
from agentreducer.sharing.registry import Listener, ModelRegistry
from agentreducer.store.local import ModelStoreSlot
from agentreducer.store.protocol import Store
from agentreducer.tracing.models import StateChange


class AgentReducer:
    """Result of `create`: one agent plus the connector and slot it commits through.

    Args:
        agent: Wrapper over the model (a branch agent for lifecycle middleware).
        model: Model instance.
        env: Env every commit consults.
        connector: Connector of this reducer.
        slot: Store slot the agent dispatches to.
    """

    def __init__(
        self,
        agent: AgentBase,
        model: Any,
        env: EnvLike,
        connector: ModelConnector,
        slot: ModelStoreSlot,
    ):
        self.agent = agent
        self.model = model
        self.env = env
        self.connector = connector
        self.slot = slot
        self.initial_state = model.state

    @property
    def state(self) -> Any:
        return self.model.state

    @property
    def namespace(self) -> str | None:
        return getattr(self.model, "namespace", None)

    def connect(self, listener: Listener | None = None) -> None:
        """Listen for state changes made through other wrappers of the model."""
        self.connector.connect(listener)

    def disconnect(self) -> None:
        """Stop listening.

        Raises:
            ConnectionStateError: If connect() was never called.
        """
        self.connector.disconnect()

    def record_changes(self) -> Callable[[], list[StateChange]]:
        """Start recording committed actions.

        Returns:
            Function that stops recording and returns the changes seen so far.
        """
        recorder = self.slot.start_recording()

        def stop() -> list[StateChange]:
            self.slot.stop_recording()
            return list(recorder.changes)

        return stop

    def __repr__(self) -> str:
        return f"AgentReducer({type(self.model).__name__}, state={self.model.state!r})"


def create(
    model_or_class: Any,
    *middlewares: Middleware,
    env: EnvLike | None = None,
    store: Store | None = None,
    settings: AgentSettings | None = None,
    method_middlewares: MethodMiddlewares | None = None,
    registry: ModelRegistry | None = None,
) -> AgentReducer:
    """Wrap a model, or a class instantiated without arguments, into an agent.

    Args:
        model_or_class: Model instance or class.
        *middlewares: Middlewares applied to every method, in evaluation order.
        env: Explicit env. Built from settings when omitted.
        store: External reducer-style store receiving committed actions.
        settings: Settings the env is built from (AgentSettings() when omitted).
        method_middlewares: Registry of middleware attached to single methods.
        registry: Model registry (defaults to the process-local one).

    Returns:
        AgentReducer over the model.

    Raises:
        ConfigurationError: If the model has no `state` attribute.
    """
    model = model_or_class() if isinstance(model_or_class, type) else model_or_class
    if env is None:
        env = Env.from_settings(settings or AgentSettings())
    connector = ModelConnector(model, registry)
    slot = ModelStoreSlot(model, connector, store)
    middleware = apply_middlewares(*middlewares)

    if is_lifecycle_middleware(middleware):
        source = create_agent(
            model,
            slot,
            env,
            apply_middlewares(),
            method_middlewares=method_middlewares,
            registry=registry,
        )
        agent: AgentBase = branch(source, middleware)
    else:
        agent = create_agent(
            model,
            slot,
            env,
            middleware,
            method_middlewares=method_middlewares,
            registry=registry,
        )
    return AgentReducer(agent, model, env, connector, slot)
