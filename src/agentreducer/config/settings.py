"""Configuration settings using Pydantic Settings.

Provides typed defaults for agent environments with environment variable support.

Usage:
    from agentreducer.config import AgentSettings

    # Load from environment variables (AGENT_REDUCER_*)
    settings = AgentSettings()

    # Or override with explicit values
    settings = AgentSettings(strict=False)
    reducer = create(Counter, settings=settings)
"""

from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class AgentSettings(BaseSettings):
    """Default flags for environments built by `create`.

    Attributes:
        strict: Suppress the eager `model.state` write before the store slot commits.
        legacy: Switch the terminal middleware to the swallow-future/None policy and
            run method bodies bound to the wrapper.
        namespace_separator: Joins a model namespace and a method name in action types.

    Environment Variables:
        AGENT_REDUCER_STRICT
        AGENT_REDUCER_LEGACY
        AGENT_REDUCER_NAMESPACE_SEPARATOR
    """

    model_config = SettingsConfigDict(
        env_prefix="AGENT_REDUCER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    strict: bool = True
    legacy: bool = False
    namespace_separator: str = ":"
