"""Middleware type aliases.

A middleware inspects the per-call Runtime and either vetoes the call by
returning None, or returns a NextProcess. The NextProcess receives the
downstream StateProcess and returns the StateProcess that the candidate
value returned by the model method flows into.

    middleware(runtime) -> next_process | None
    next_process(next_state_process) -> state_process
    state_process(candidate) -> Any
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from agentreducer.core.runtime import Runtime

type StateProcess = Callable[[Any], Any]
"""Transforms a candidate value, usually ending in a call to the next process."""

type NextProcess = Callable[[StateProcess], StateProcess]
"""Wraps the downstream state process."""

type Middleware = Callable[[Runtime], NextProcess | None]
"""Policy evaluated once per call; None vetoes the call."""

LIFECYCLE_ATTRIBUTE = "lifecycle"
"""Attribute marking a middleware that needs a rebuildable lifecycle env."""
