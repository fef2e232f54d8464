"""Configuration module using Pydantic Settings.

Provides typed defaults for agent environments with environment variable support.

Usage:
    from agentreducer.config import AgentSettings

    settings = AgentSettings(legacy=True)
"""

from agentreducer.config.settings import AgentSettings

__all__ = [
    "AgentSettings",
]
