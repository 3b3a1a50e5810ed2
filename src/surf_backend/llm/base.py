from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterator, Optional, Sequence

from ..execution.resolution import ResolutionScaler
from ..execution.sandbox import DesktopSandbox
from ..schemas.events import ActionResponse, ChatMessage, SSEEvent


class ComputerInteractionStreamer(ABC):
    """
    Every model provider must implement this exact interface.
    The caller should not care which model is driving the desktop.
    """

    instructions: str
    desktop: DesktopSandbox
    resolution_scaler: ResolutionScaler

    @abstractmethod
    def stream(
        self,
        messages: Sequence[ChatMessage],
        stop_event: Optional[threading.Event] = None,
    ) -> Iterator[SSEEvent]:
        """
        Input: conversation so far (last message is the new user turn)
        Output: reasoning, action and completion events until the model
        stops calling tools, ``stop_event`` is set, or an error occurs.
        """
        raise NotImplementedError

    @abstractmethod
    def execute_action(
        self,
        args: Dict[str, Any],
        stop_event: Optional[threading.Event] = None,
    ) -> ActionResponse:
        """Perform one tool call on the desktop. Never raises; ``stop_event`` cuts waits short."""
        raise NotImplementedError
