"""Runtime models: environments, per-call runtime, and committed actions."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from agentreducer.config import AgentSettings


class DefaultActionType(StrEnum):
    """Reserved action types that never name a model method."""

    INITIAL_STATE = "@@AGENT_REDUCER_INITIAL_STATE"
    """Seeds an external reducer with the model's state."""

    MUTE_STATE = "@@AGENT_MUTE_STATE"
    """Forwarded to the dispatcher without writing state or notifying listeners."""


@runtime_checkable
class EnvLike(Protocol):
    """Flags consulted at commit time."""

    @property
    def expired(self) -> bool: ...

    @property
    def strict(self) -> bool: ...

    @property
    def legacy(self) -> bool: ...

    @property
    def namespace_separator(self) -> str: ...


@dataclass
class Env:
    """Mutable environment owned by one `create` call.

    Setting `expired` hard-disables commits for every wrapper built on this env.
    """

    expired: bool = False
    strict: bool = True
    legacy: bool = False
    namespace_separator: str = ":"

    @classmethod
    def from_settings(cls, settings: AgentSettings) -> Env:
        """Build an env from settings defaults."""
        return cls(
            strict=settings.strict,
            legacy=settings.legacy,
            namespace_separator=settings.namespace_separator,
        )


class LifecycleEnv:
    """Read-only view over a parent env with its own monotonic expiry.

    `expired` is true once `expire()` or `rebuild()` ran here, or when any
    ancestor reports expired. Other flags resolve against the parent.

    Args:
        parent: Env this lifecycle derives from.
        on_rebuild: Called by `rebuild()` after expiring, to build a replacement.
    """

    __slots__ = ("_parent", "_expired", "_on_rebuild")

    def __init__(self, parent: EnvLike, on_rebuild: Callable[[], None] | None = None):
        self._parent = parent
        self._expired = False
        self._on_rebuild = on_rebuild

    @property
    def parent(self) -> EnvLike:
        return self._parent

    @property
    def expired(self) -> bool:
        return self._expired or self._parent.expired

    @property
    def strict(self) -> bool:
        return self._parent.strict

    @property
    def legacy(self) -> bool:
        return self._parent.legacy

    @property
    def namespace_separator(self) -> str:
        return self._parent.namespace_separator

    def expire(self) -> None:
        """Retire this lifecycle permanently."""
        self._expired = True

    def rebuild(self) -> None:
        """Retire this lifecycle and ask the owner to build a fresh one."""
        self._expired = True
        if self._on_rebuild is not None:
            self._on_rebuild()

    def __repr__(self) -> str:
        return f"LifecycleEnv(expired={self.expired}, parent={self._parent!r})"


@dataclass(frozen=True, slots=True)
class Action:
    """Record handed to a store slot when a method result is committed."""

    type: str
    state: Any
    prev_state: Any = None
    params: tuple[Any, ...] = ()


@dataclass(slots=True)
class Runtime:
    """Per-call context passed to middleware.

    A new Runtime is built for every invocation, but `cache` is the same dict
    across repeated calls of one method on one wrapper. It is the only state
    middleware may keep between calls.
    """

    method_name: str
    agent: Any
    model: Any
    env: EnvLike
    cache: dict[str, Any]
    caller: Callable[..., Any]
    reject: Callable[[BaseException], Any]
    args: tuple[Any, ...] = ()
    kwargs: dict[str, Any] = field(default_factory=dict)
