"""Default store slot writing model state, plus a reducer for external stores.

Usage:
    slot = ModelStoreSlot(model, ModelConnector(model))
    slot.dispatch(Action(type="step_up", state=1, prev_state=0))
    assert model.state == 1

    # Plugging the model into an external reducer-style store
    reducer = create_reducer(model)
    store = SomeStore(reducer, model.state)
    handle = create(model, store=store)
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from agentreducer.core.members import is_action_member
from agentreducer.core.runtime import Action, DefaultActionType
from agentreducer.sharing.connector import ModelConnector
from agentreducer.store.protocol import Store
from agentreducer.tracing.models import ChangeRecorder


class ModelStoreSlot:
    """Store slot that commits into the model through its connector.

    The connector writes `model.state` and notifies co-sharing wrappers. The
    action is then recorded and forwarded to the external store, if any.

    Args:
        model: Model instance holding `state`.
        connector: Connector of the wrapper this slot serves.
        store: Optional external store receiving every committed action.
    """

    def __init__(
        self,
        model: Any,
        connector: ModelConnector,
        store: Store | None = None,
    ):
        self._model = model
        self._connector = connector
        self._store = store
        self._recorder: ChangeRecorder | None = None

    @property
    def connector(self) -> ModelConnector:
        return self._connector

    @property
    def store(self) -> Store | None:
        return self._store

    def get_state(self) -> Any:
        return self._model.state

    def dispatch(self, action: Action) -> None:
        self._connector.notify(action.state, action, self._forward)

    def start_recording(self) -> ChangeRecorder:
        """Record every action committed through this slot until stopped."""
        self._recorder = ChangeRecorder()
        return self._recorder

    def stop_recording(self) -> None:
        self._recorder = None

    def _forward(self, action: Action) -> None:
        if self._recorder is not None:
            self._recorder.record(action)
        if self._store is not None:
            self._store.dispatch(action)


def parse_action_type(action_type: str, separator: str = ":") -> tuple[str | None, str]:
    """Split an action type into (namespace, method name)."""
    namespace, sep, name = action_type.partition(separator)
    if not sep:
        return None, action_type
    return namespace, name


def create_reducer(model: Any, separator: str = ":") -> Callable[[Any, Action | None], Any]:
    """Create a reducer-style function for an external store.

    The state has already been produced by the wrapper, so the reducer returns
    `action.state` for actions naming a method of model, and the current state
    for anything else.

    Args:
        model: Model whose actions the reducer accepts.
        separator: Namespace separator used in action types.

    Returns:
        Function `(state, action) -> next_state`.
    """

    def reducer(state: Any = None, action: Action | None = None) -> Any:
        current = model.state if state is None else state
        if action is None:
            return current
        namespace, name = parse_action_type(action.type, separator)
        model_namespace = getattr(model, "namespace", None)
        if model_namespace is not None and namespace != model_namespace:
            return current
        if name == DefaultActionType.INITIAL_STATE:
            return current if action.state is None else action.state
        if is_action_member(model, name):
            return action.state
        return current

    return reducer
