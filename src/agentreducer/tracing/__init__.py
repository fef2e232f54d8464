"""Recording of committed state changes."""

from agentreducer.tracing.models import ChangeRecorder, StateChange

__all__ = [
    "ChangeRecorder",
    "StateChange",
]
