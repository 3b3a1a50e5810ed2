"""
Stream state tracking for the Surf streamer.
Tracks tool turns, executed actions and how the stream ended.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class StreamStatus(Enum):
    """Current status of one stream() call."""

    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    STOPPED = "stopped"
    FAILED = "failed"


@dataclass
class ActionRecord:
    """Record of a single executed action."""

    turn: int
    action_type: str
    payload: Dict[str, Any]
    ok: bool
    result: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "turn": self.turn,
            "action_type": self.action_type,
            "action": self.payload,
            "ok": self.ok,
            "result": self.result,
        }


@dataclass
class StreamState:
    """
    Bookkeeping for one conversation run.
    The turn counter only advances on tool turns.
    """

    turn_count: int = 0
    status: StreamStatus = StreamStatus.IDLE
    actions: List[ActionRecord] = field(default_factory=list)
    reasoning: List[str] = field(default_factory=list)
    error: Optional[str] = None

    def add_action(self, record: ActionRecord) -> None:
        self.actions.append(record)
        self.turn_count = record.turn

    def add_reasoning(self, text: str) -> None:
        self.reasoning.append(text)

    @property
    def failed_actions(self) -> List[ActionRecord]:
        return [a for a in self.actions if not a.ok]

    def is_terminal(self) -> bool:
        return self.status in (StreamStatus.COMPLETED, StreamStatus.STOPPED, StreamStatus.FAILED)

    def mark_running(self) -> None:
        self.status = StreamStatus.RUNNING

    def mark_completed(self) -> None:
        self.status = StreamStatus.COMPLETED

    def mark_stopped(self) -> None:
        self.status = StreamStatus.STOPPED

    def mark_failed(self, error: str) -> None:
        self.status = StreamStatus.FAILED
        self.error = error

    def to_dict(self) -> Dict[str, Any]:
        return {
            "turn_count": self.turn_count,
            "status": self.status.value,
            "error": self.error,
            "reasoning": "".join(self.reasoning),
            "actions": [a.to_dict() for a in self.actions],
        }
