"""Tests for the `create` construction surface."""

import pytest

from agentreducer import (
    AgentReducer,
    BranchAgent,
    ConnectionStateError,
    Env,
    create,
    create_reducer,
    take_latest,
)
from agentreducer.agent import Agent, dependencies_of
from agentreducer.core import DefaultActionType
from agentreducer.core.runtime import Action
from agentreducer.sharing import get_registry
from agentreducer.store import ModelStoreSlot, Store, parse_action_type
from agentreducer.tracing import StateChange


class ListStore:
    """Minimal reducer-style store."""

    def __init__(self, reducer, state):
        self._reducer = reducer
        self._state = state
        self._listeners = []

    def dispatch(self, action):
        self._state = self._reducer(self._state, action)
        for listener in list(self._listeners):
            listener()

    def get_state(self):
        return self._state

    def subscribe(self, listener):
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)


class Named:
    namespace = "todo"
    state = ()

    def add(self, item):
        return (*self.state, item)


def test_create_from_class(counter_cls):
    reducer = create(counter_cls)
    assert isinstance(reducer, AgentReducer)
    assert isinstance(reducer.model, counter_cls)
    assert isinstance(reducer.agent, Agent)
    assert isinstance(reducer.slot, ModelStoreSlot)
    assert reducer.initial_state == 0
    assert reducer.namespace is None


def test_create_from_instance(counter_cls):
    model = counter_cls()
    model.state = 5
    reducer = create(model)
    assert reducer.model is model
    assert reducer.initial_state == 5


def test_explicit_env_is_used(counter_cls):
    env = Env(strict=False)
    assert create(counter_cls, env=env).env is env


def test_empty_custom_registry_is_used(counter_cls, registry):
    """CRITICAL: Connections go to the registry passed in, even while empty."""
    reducer = create(counter_cls, registry=registry)
    reducer.connect()
    assert registry.get(reducer.model).method_names == frozenset({"step_up", "step_down", "step"})
    assert get_registry().get(reducer.model) is None
    assert dependencies_of(reducer.agent).model_registry() is registry
    reducer.disconnect()


def test_lifecycle_middleware_builds_branch_agent(counter_cls):
    reducer = create(counter_cls, take_latest())
    assert isinstance(reducer.agent, BranchAgent)
    reducer.agent.step_up()
    assert reducer.state == 1


def test_connect_twice_is_ignored(counter):
    counter.connect()
    counter.connect()
    assert counter.connector.is_connecting()
    counter.disconnect()
    assert not counter.connector.is_connecting()


def test_disconnect_before_connect_raises(counter):
    with pytest.raises(ConnectionStateError):
        counter.disconnect()


def test_record_changes_stops(counter):
    stop = counter.record_changes()
    counter.agent.step_up()
    counter.agent.step(2)
    changes = stop()
    counter.agent.step_up()
    assert changes == [StateChange("step_up", 1), StateChange("step", 3)]
    assert changes[1].to_dict() == {"type": "step", "state": 3}


def test_unchanged_state_is_still_recorded(counter):
    stop = counter.record_changes()
    counter.agent.step(0)
    assert stop() == [StateChange("step", 0)]


def test_external_store_receives_actions():
    model = Named()
    store = ListStore(create_reducer(model), model.state)
    assert isinstance(store, Store)
    notified = []
    store.subscribe(lambda: notified.append(store.get_state()))
    reducer = create(model, store=store)
    reducer.agent.add("milk")
    assert store.get_state() == ("milk",)
    assert notified == [("milk",)]
    assert reducer.namespace == "todo"


def test_reducer_ignores_foreign_actions():
    model = Named()
    reducer = create_reducer(model)
    assert reducer(("a",), Action(type="other:add", state=("b",))) == ("a",)
    assert reducer(("a",), Action(type="todo:remove", state=("b",))) == ("a",)
    assert reducer(("a",), Action(type="todo:add", state=("b",))) == ("b",)
    assert reducer(("a",), None) == ("a",)
    assert reducer(None, None) == ()


def test_reducer_accepts_initial_state_action():
    model = Named()
    reducer = create_reducer(model)
    seeded = Action(type=f"todo:{DefaultActionType.INITIAL_STATE}", state=("x",))
    assert reducer((), seeded) == ("x",)


def test_parse_action_type():
    assert parse_action_type("todo:add") == ("todo", "add")
    assert parse_action_type("add") == (None, "add")
    assert parse_action_type("todo/add", "/") == ("todo", "add")


def test_repr_mentions_model(counter):
    assert "FixtureCounter" in repr(counter)
    assert "FixtureCounter" in repr(counter.agent)
