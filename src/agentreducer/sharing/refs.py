"""Sharing references: lazily built model instances shared by many wrappers.

Usage:
    counter_ref = sharing(lambda: Counter)        # persistent
    todos_ref = weak_sharing(lambda: TodoList)    # reset when nobody listens

    first = create(counter_ref.current)
    second = create(counter_ref.current)

The factory may return a class (instantiated without arguments) or an instance.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from agentreducer.sharing.registry import ModelRegistry, SharingType, get_registry

logger = logging.getLogger(__name__)

type Factory[T] = Callable[..., T | type[T]]


class SharingRef[T]:
    """Handle over exactly one shared model instance.

    `current` builds the instance on first read. `initial(*args)` builds it
    from factory arguments and is idempotent after its first call.

    Args:
        factory: Returns the model class or instance.
        sharing_type: PERSISTENT keeps the instance forever. WEAK discards it
            once its listener count returns to zero.
        registry: Registry holding model records.
    """

    def __init__(
        self,
        factory: Factory[T],
        sharing_type: SharingType,
        registry: ModelRegistry | None = None,
    ):
        self._factory = factory
        self._sharing_type = sharing_type
        self._registry = registry if registry is not None else get_registry()
        self._current: T | None = None
        self._initialed = False

    @property
    def sharing_type(self) -> SharingType:
        return self._sharing_type

    @property
    def current(self) -> T:
        """The shared instance, built from the factory on first read."""
        if self._current is None:
            self._current = self._build(())
        return self._current

    def initial(self, *args: Any) -> T:
        """Build the shared instance with factory arguments.

        Later calls return the instance built by the first one, whatever
        arguments they pass.
        """
        if self._current is not None and self._initialed:
            return self._current
        self._initialed = True
        self._current = self._build(args)
        return self._current

    def _build(self, args: tuple[Any, ...]) -> T:
        produced = self._factory(*args)
        instance: T = produced() if isinstance(produced, type) else produced
        record = self._registry.record(instance)
        record.sharing_type = self._sharing_type
        if self._sharing_type is SharingType.WEAK:
            key = id(instance)
            record.on_release = lambda: self._release(key)
        return instance

    def _release(self, key: int) -> None:
        """Discard the instance with identity key so the next read rebuilds it."""
        if self._current is None or id(self._current) != key:
            return
        logger.debug("discarding weakly shared %s", type(self._current).__name__)
        self._current = None
        self._initialed = False

    def __repr__(self) -> str:
        return f"SharingRef({self._sharing_type.name}, current={self._current!r})"


def sharing[T](factory: Factory[T], registry: ModelRegistry | None = None) -> SharingRef[T]:
    """Create a persistent sharing reference.

    The instance and its state survive any number of connect/disconnect cycles.
    """
    return SharingRef(factory, SharingType.PERSISTENT, registry)


def weak_sharing[T](factory: Factory[T], registry: ModelRegistry | None = None) -> SharingRef[T]:
    """Create a weak sharing reference.

    When every wrapper connected to the instance disconnects, the instance is
    discarded and the next `current` read builds a fresh one at default state.
    """
    return SharingRef(factory, SharingType.WEAK, registry)
