"""Model sharing: connectors, identity registry, sharing references, error channel."""

from agentreducer.sharing.connector import ConnectionStateError, ModelConnector
from agentreducer.sharing.errors import has_error_listener, reject, subscribe_error
from agentreducer.sharing.refs import SharingRef, sharing, weak_sharing
from agentreducer.sharing.registry import (
    ModelRecord,
    ModelRegistry,
    SharingType,
    get_registry,
)

__all__ = [
    "ConnectionStateError",
    "ModelConnector",
    "ModelRecord",
    "ModelRegistry",
    "SharingRef",
    "SharingType",
    "get_registry",
    "has_error_listener",
    "reject",
    "sharing",
    "subscribe_error",
    "weak_sharing",
]
