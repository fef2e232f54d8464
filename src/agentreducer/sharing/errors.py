"""Error subscription channel for rejected deferred results.

Usage:
    unsubscribe = subscribe_error(model, lambda error, method: log(error, method))
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from agentreducer.sharing.registry import ErrorListener, ModelRegistry, get_registry


def subscribe_error(
    model: Any, listener: ErrorListener, registry: ModelRegistry | None = None
) -> Callable[[], None]:
    """Register an error listener on model. Registering the same listener twice is a no-op.

    Returns:
        Function removing the listener.
    """
    record = (registry if registry is not None else get_registry()).record(model)
    if not any(existing is listener for existing in record.error_listeners):
        record.error_listeners.append(listener)

    def unsubscribe() -> None:
        for index, existing in enumerate(record.error_listeners):
            if existing is listener:
                del record.error_listeners[index]
                return

    return unsubscribe


def has_error_listener(model: Any, registry: ModelRegistry | None = None) -> bool:
    """Check if any error listener is registered on model."""
    record = (registry if registry is not None else get_registry()).get(model)
    return record is not None and bool(record.error_listeners)


def reject(
    model: Any, error: BaseException, method_name: str, registry: ModelRegistry | None = None
) -> None:
    """Hand error to the model's error listeners, or raise it when there are none.

    Raises:
        BaseException: The error itself when nobody listens.
    """
    record = (registry if registry is not None else get_registry()).get(model)
    if record is None or not record.error_listeners:
        raise error
    for listener in list(record.error_listeners):
        listener(error, method_name)
