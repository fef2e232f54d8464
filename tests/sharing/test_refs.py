"""Tests for sharing references, the model registry, and the error channel.

Critical Invariants:
- Persistent sharing keeps instance and state across connect/disconnect cycles
- Weak sharing rebuilds a default instance once every wrapper disconnected
- The registry never keeps a model alive
"""

import gc

import pytest

from agentreducer import SharingRef, SharingType, create, sharing, subscribe_error, weak_sharing
from agentreducer.sharing import ModelRegistry, get_registry, has_error_listener, reject


class Todos:
    state = ()

    def __init__(self, *items):
        if items:
            self.state = items

    def add(self, item):
        return (*self.state, item)


def test_current_is_built_once():
    ref = sharing(lambda: Todos)
    assert ref.sharing_type is SharingType.PERSISTENT
    assert isinstance(ref, SharingRef)
    assert ref.current is ref.current


def test_factory_may_return_instance():
    instance = Todos("a")
    ref = sharing(lambda: instance)
    assert ref.current is instance


def test_initial_is_idempotent():
    ref = sharing(lambda *items: Todos(*items))
    first = ref.initial("a", "b")
    assert first.state == ("a", "b")
    assert ref.initial("c") is first
    assert ref.current is first


def test_persistent_sharing_survives_disconnect():
    ref = sharing(lambda: Todos)
    reducer = create(ref.current)
    reducer.connect()
    reducer.agent.add("milk")
    reducer.disconnect()
    assert ref.current is reducer.model
    assert ref.current.state == ("milk",)


def test_weak_sharing_resets_after_last_disconnect():
    """CRITICAL: A weakly shared instance is rebuilt at default state."""
    ref = weak_sharing(lambda: Todos)
    assert ref.sharing_type is SharingType.WEAK
    first = create(ref.current)
    second = create(ref.current)
    first.connect()
    second.connect()
    first.agent.add("milk")
    first.disconnect()
    assert ref.current is first.model
    second.disconnect()
    fresh = ref.current
    assert fresh is not first.model
    assert fresh.state == ()


def test_weak_sharing_allows_new_initial_after_reset():
    ref = weak_sharing(lambda *items: Todos(*items))
    reducer = create(ref.initial("a"))
    reducer.connect()
    reducer.disconnect()
    assert ref.initial("b").state == ("b",)


def test_weak_sharing_without_connection_keeps_instance():
    ref = weak_sharing(lambda: Todos)
    instance = ref.current
    create(instance)
    assert ref.current is instance


def test_repr_shows_sharing_type():
    assert "WEAK" in repr(weak_sharing(lambda: Todos))


# Registry


def test_registry_drops_collected_models():
    registry = ModelRegistry()
    model = Todos()
    registry.record(model)
    assert len(registry) == 1
    del model
    gc.collect()
    assert len(registry) == 0


def test_registry_forget():
    registry = ModelRegistry()
    model = Todos()
    assert registry.record(model) is registry.record(model)
    assert model in registry
    registry.forget(model)
    assert registry.get(model) is None
    assert model not in registry


# Error channel


def test_reject_without_listener_raises():
    registry = ModelRegistry()
    with pytest.raises(KeyError):
        reject(Todos(), KeyError("missing"), "add", registry)


def test_subscribe_error_dedupes_and_unsubscribes():
    registry = ModelRegistry()
    model = Todos()
    seen = []

    def listener(error, method_name):
        seen.append(method_name)

    unsubscribe = subscribe_error(model, listener, registry)
    subscribe_error(model, listener, registry)
    assert has_error_listener(model, registry)
    reject(model, ValueError("x"), "add", registry)
    assert seen == ["add"]
    unsubscribe()
    assert not has_error_listener(model, registry)


def test_empty_custom_registry_is_used():
    """CRITICAL: An empty registry is still the one records go to."""
    registry = ModelRegistry()
    assert len(registry) == 0
    ref = SharingRef(Todos, SharingType.WEAK, registry)
    model = ref.current
    assert registry.get(model).sharing_type is SharingType.WEAK
    assert get_registry().get(model) is None


def test_error_listener_lands_in_empty_custom_registry():
    registry = ModelRegistry()
    model = Todos()
    subscribe_error(model, lambda error, method_name: None, registry)
    assert has_error_listener(model, registry)
    assert not has_error_listener(model)
