"""State change records.

Usage:
    stop = reducer.record_changes()
    reducer.agent.step_up()
    changes = stop()   # [StateChange(type="step_up", state=1)]
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from agentreducer.core.runtime import Action


@dataclass(frozen=True, slots=True)
class StateChange:
    """One committed action as seen by a store slot.

    Attributes:
        type: Action type, including any namespace prefix.
        state: State committed by the action.
    """

    type: str
    state: Any

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dictionary."""
        return {"type": self.type, "state": self.state}


@dataclass(slots=True)
class ChangeRecorder:
    """Accumulates StateChanges in commit order."""

    changes: list[StateChange] = field(default_factory=list)

    def record(self, action: Action) -> None:
        self.changes.append(StateChange(type=action.type, state=action.state))

    def __len__(self) -> int:
        return len(self.changes)
