from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Tuple


Coordinate = Tuple[int, int]


class DesktopSandbox(ABC):
    """
    Primitive input/output operations of a virtual desktop.
    The streamer only ever talks to the desktop through these.

    Coordinates are in the desktop's native pixel space.
    """

    @abstractmethod
    def screenshot(self) -> bytes:
        """Capture the screen as PNG bytes."""
        raise NotImplementedError

    @abstractmethod
    def screen_size(self) -> Coordinate:
        """Native (width, height) of the screen."""
        raise NotImplementedError

    @abstractmethod
    def left_click(self, x: int, y: int) -> None:
        raise NotImplementedError

    @abstractmethod
    def right_click(self, x: int, y: int) -> None:
        raise NotImplementedError

    @abstractmethod
    def middle_click(self, x: int, y: int) -> None:
        raise NotImplementedError

    @abstractmethod
    def double_click(self, x: int, y: int) -> None:
        raise NotImplementedError

    @abstractmethod
    def move_mouse(self, x: int, y: int) -> None:
        raise NotImplementedError

    @abstractmethod
    def write(self, text: str) -> None:
        """Type text into the focused element."""
        raise NotImplementedError

    @abstractmethod
    def press(self, key: str) -> None:
        """Press a key or a "+"-joined combination like "Control+c"."""
        raise NotImplementedError

    @abstractmethod
    def scroll(self, direction: str, amount: int) -> None:
        """Scroll ``amount`` wheel clicks towards up/down/left/right."""
        raise NotImplementedError

    @abstractmethod
    def drag(self, start: Coordinate, end: Coordinate) -> None:
        raise NotImplementedError

    def close(self) -> None:
        """Release the desktop. No-op unless the backend owns a remote VM."""
