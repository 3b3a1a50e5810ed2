"""
Task definition for the Surf CLI.
A task is a goal handed to the streamer as the first user message.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass
class Task:
    """A goal for the agent, optionally bounded in tool turns."""

    goal: str
    max_actions: Optional[int] = None
    run_id: str = field(default_factory=lambda: datetime.now().strftime("%Y%m%d_%H%M%S"))

    def __post_init__(self):
        if not self.goal or not self.goal.strip():
            raise ValueError("Task goal cannot be empty")
        if self.max_actions is not None and self.max_actions < 1:
            raise ValueError("max_actions must be at least 1")
