"""Store protocols for swappable commit targets.

The store slot is where a wrapper hands committed actions:
- ModelStoreSlot writes the model and fans out to co-sharing wrappers (default)
- Any reducer-style store can sit behind it (forwarded actions)

Usage:
    slot = ModelStoreSlot(model, connector, store=redux_like_store)
    agent = create_agent(model, slot, env, middleware)
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

from agentreducer.core.runtime import Action


@runtime_checkable
class StoreSlot(Protocol):
    """Commit target of one wrapper."""

    def get_state(self) -> Any:
        """Current canonical state."""
        ...

    def dispatch(self, action: Action) -> Any:
        """Perform the canonical update for action."""
        ...


@runtime_checkable
class Store(Protocol):
    """Externally supplied reducer-style store."""

    def dispatch(self, action: Action) -> Any:
        """Reduce action into the store state."""
        ...

    def get_state(self) -> Any:
        """Current store state."""
        ...

    def subscribe(self, listener: Callable[[], Any]) -> Callable[[], Any]:
        """Register a change listener and return its unsubscribe function."""
        ...
