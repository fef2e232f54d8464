"""AgentReducer: plain model objects as reducer-style state machines.

Usage:
    from agentreducer import create, MiddlewarePresets

    class Counter:
        state = 0

        def step_up(self) -> int:
            return self.state + 1

    reducer = create(Counter)
    reducer.connect()
    reducer.agent.step_up()
    reducer.agent.step_up()
    assert reducer.state == 2
"""

__version__ = "0.1.0"

# Agents
from agentreducer.agent import (
    Agent,
    AgentReducer,
    BranchAgent,
    ConfigurationError,
    MiddleActions,
    NotMutableError,
    branch,
    create,
    create_agent,
    is_agent,
    use_middle_actions,
    with_middleware,
)

# Configuration
from agentreducer.config import AgentSettings

# Core primitives
from agentreducer.core import (
    Action,
    DefaultActionType,
    Env,
    LifecycleEnv,
    MethodMiddlewares,
    Middleware,
    Runtime,
    apply_middlewares,
    default_middleware,
    to_lifecycle_middleware,
)

# Policies
from agentreducer.policies import (
    MiddlewarePresets,
    take_assignable,
    take_future_resolve,
    take_latest,
    take_nothing,
    take_unstable_block,
    take_unstable_debounce,
    take_unstable_throttle,
)

# Sharing
from agentreducer.sharing import (
    ConnectionStateError,
    ModelConnector,
    SharingRef,
    SharingType,
    sharing,
    subscribe_error,
    weak_sharing,
)

# Store
from agentreducer.store import ModelStoreSlot, Store, StoreSlot, create_reducer

# Tracing
from agentreducer.tracing import StateChange

__all__ = [
    # Version
    "__version__",
    # Agents
    "Agent",
    "AgentReducer",
    "BranchAgent",
    "branch",
    "create",
    "create_agent",
    "is_agent",
    "with_middleware",
    "MiddleActions",
    "use_middle_actions",
    # Core
    "Action",
    "DefaultActionType",
    "Env",
    "LifecycleEnv",
    "MethodMiddlewares",
    "Middleware",
    "Runtime",
    "apply_middlewares",
    "default_middleware",
    "to_lifecycle_middleware",
    # Policies
    "MiddlewarePresets",
    "take_assignable",
    "take_future_resolve",
    "take_latest",
    "take_nothing",
    "take_unstable_block",
    "take_unstable_debounce",
    "take_unstable_throttle",
    # Sharing
    "ConnectionStateError",
    "ModelConnector",
    "SharingRef",
    "SharingType",
    "sharing",
    "subscribe_error",
    "weak_sharing",
    # Store
    "ModelStoreSlot",
    "Store",
    "StoreSlot",
    "create_reducer",
    # Tracing
    "StateChange",
    # Configuration
    "AgentSettings",
    # Errors
    "ConfigurationError",
    "NotMutableError",
]
