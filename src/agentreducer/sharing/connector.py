"""Model connector: listener registration and state fan-out for one model instance.

Usage:
    connector = ModelConnector(model)
    connector.connect(lambda state: render(state))

    # Called by the store slot on every commit through any wrapper of model
    connector.notify(next_state, action, dispatch)

    connector.disconnect()

Each wrapper owns its own connector. Connectors of the same model share the
model's listener list, so a commit through one wrapper reaches the listeners
of all the others within the same synchronous call.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from agentreducer.core.members import action_method_names
from agentreducer.core.runtime import Action, DefaultActionType
from agentreducer.sharing.registry import (
    Listener,
    ModelRecord,
    ModelRegistry,
    SharingType,
    get_registry,
)

logger = logging.getLogger(__name__)


class ConnectionStateError(Exception):
    """Raised when a connector is disconnected before it was connected."""

    pass


def _noop_listener() -> Listener:
    def ignore_state(state: Any) -> None:
        return None

    return ignore_state


def _initialize(model: Any, record: ModelRecord) -> None:
    """One-time setup on the first connection ever made to model."""
    record.method_names = action_method_names(model)
    if record.sharing_type is SharingType.WEAK and record.reset is None:
        record.reset = record.on_release


class ModelConnector:
    """Connects one wrapper to the listener registry of its model.

    Args:
        model: Model instance the wrapper is built on.
        registry: Registry holding model records (defaults to the process-local one).
    """

    def __init__(self, model: Any, registry: ModelRegistry | None = None):
        self._model = model
        self._registry = registry if registry is not None else get_registry()
        self._listener: Listener | None = None

    @property
    def model(self) -> Any:
        return self._model

    @property
    def connected(self) -> bool:
        return self._listener is not None

    def _record(self) -> ModelRecord:
        return self._registry.record(self._model)

    def connect(self, listener: Listener | None = None) -> None:
        """Register listener on the model. A connected connector ignores further calls."""
        if self._listener is not None:
            logger.debug("connector for %s already connected", type(self._model).__name__)
            return
        record = self._record()
        if record.method_names is None:
            _initialize(self._model, record)
        self._listener = listener if listener is not None else _noop_listener()
        record.listeners.append(self._listener)

    def notify(self, next_state: Any, action: Action, dispatch: Callable[[Action], Any]) -> None:
        """Publish a committed state to the model and every other listener, then dispatch.

        Nothing is written or fanned out when the state is identical to the
        previous one or when the action is the mute marker.
        """
        changed = next_state is not action.prev_state
        if changed and action.type != DefaultActionType.MUTE_STATE:
            self._model.state = next_state
            record = self._registry.get(self._model)
            listeners = list(record.listeners) if record is not None else []
            for listener in listeners:
                if listener is self._listener:
                    continue
                listener(next_state)
        dispatch(action)

    def disconnect(self) -> None:
        """Remove this connector's listener.

        When the model is left with no listener and a reset hook was
        installed, the hook fires once.

        Raises:
            ConnectionStateError: If called before connect().
        """
        if self._listener is None:
            raise ConnectionStateError("connect() must be called before disconnect()")
        listener, self._listener = self._listener, None
        record = self._registry.get(self._model)
        if record is None:
            return
        for index, existing in enumerate(record.listeners):
            if existing is listener:
                del record.listeners[index]
                break
        if not record.listeners and record.reset is not None:
            reset, record.reset = record.reset, None
            logger.debug("resetting weakly shared %s", type(self._model).__name__)
            reset()

    def is_connecting(self) -> bool:
        """Check if the model has any listener."""
        record = self._registry.get(self._model)
        return record is not None and bool(record.listeners)
