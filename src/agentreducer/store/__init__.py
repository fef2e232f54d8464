"""Store slots: commit targets for wrappers.

Usage:
    slot = ModelStoreSlot(model, ModelConnector(model))
    agent = create_agent(model, slot, Env(), apply_middlewares())
"""

from agentreducer.store.local import ModelStoreSlot, create_reducer, parse_action_type
from agentreducer.store.protocol import Store, StoreSlot

__all__ = [
    "ModelStoreSlot",
    "Store",
    "StoreSlot",
    "create_reducer",
    "parse_action_type",
]
