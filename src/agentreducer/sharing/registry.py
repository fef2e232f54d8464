"""Identity-keyed side table of per-model records.

Listener lists, reset hooks, and error listeners live here rather than on the
model object. Records are keyed by `id(model)` and dropped by a weakref
finalizer, so the table never extends a model's lifetime.
"""

from __future__ import annotations

import logging
import weakref
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any

logger = logging.getLogger(__name__)

type Listener = Callable[[Any], Any]
type ErrorListener = Callable[[BaseException, str], Any]


class SharingType(Enum):
    """How a shared model instance behaves once nobody listens."""

    PERSISTENT = auto()
    """Never destroyed; state survives connect/disconnect cycles."""

    WEAK = auto()
    """Discarded when the listener count returns to zero."""


@dataclass
class ModelRecord:
    """Mutable bookkeeping for one model instance."""

    listeners: list[Listener] = field(default_factory=list)
    error_listeners: list[ErrorListener] = field(default_factory=list)
    sharing_type: SharingType | None = None
    on_release: Callable[[], None] | None = None
    """Discard callback supplied by a weak sharing ref."""
    reset: Callable[[], None] | None = None
    """Hook installed on first connection; fires once when listeners drop to zero."""
    method_names: frozenset[str] | None = None
    """Action method names stamped on first connection."""


class ModelRegistry:
    """Process-local table from model identity to ModelRecord."""

    def __init__(self) -> None:
        self._records: dict[int, ModelRecord] = {}

    def record(self, model: Any) -> ModelRecord:
        """Get the record of model, creating it on first access."""
        key = id(model)
        existing = self._records.get(key)
        if existing is not None:
            return existing
        created = ModelRecord()
        self._records[key] = created
        try:
            weakref.finalize(model, self._records.pop, key, None)
        except TypeError:
            logger.debug(
                "%s does not support weak references; its record lives until forget()",
                type(model).__name__,
            )
        return created

    def get(self, model: Any) -> ModelRecord | None:
        """Get the record of model without creating one."""
        return self._records.get(id(model))

    def forget(self, model: Any) -> None:
        """Drop the record of model."""
        self._records.pop(id(model), None)

    def __contains__(self, model: Any) -> bool:
        return id(model) in self._records

    def __len__(self) -> int:
        return len(self._records)


# Module-level registry instance
_registry = ModelRegistry()


def get_registry() -> ModelRegistry:
    """Access the model registry.

    Returns:
        The process-local ModelRegistry instance.
    """
    return _registry
