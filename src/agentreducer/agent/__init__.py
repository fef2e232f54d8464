"""Agents: interception wrappers, lifecycle branches, middle actions, and the `create` surface."""

from agentreducer.agent.agent import (
    Agent,
    AgentBase,
    AgentDependencies,
    ConfigurationError,
    CopyType,
    NotMutableError,
    create_agent,
    dependencies_of,
    is_agent,
)
from agentreducer.agent.branch import BranchAgent, branch, with_middleware
from agentreducer.agent.middle_actions import MiddleActions, MiddleActionsProxy, use_middle_actions
from agentreducer.agent.reducer import AgentReducer, create

__all__ = [
    # Wrapper
    "Agent",
    "AgentBase",
    "AgentDependencies",
    "CopyType",
    "create_agent",
    "dependencies_of",
    "is_agent",
    # Branching
    "BranchAgent",
    "branch",
    "with_middleware",
    # Middle actions
    "MiddleActions",
    "MiddleActionsProxy",
    "use_middle_actions",
    # Construction
    "AgentReducer",
    "create",
    # Errors
    "ConfigurationError",
    "NotMutableError",
]
