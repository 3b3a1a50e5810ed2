"""
e2b_desktop.py - E2B desktop sandbox backend
=============================================
Wraps an ``e2b_desktop.Sandbox`` (an Ubuntu micro VM in the cloud) behind
the DesktopSandbox interface. E2B reads E2B_API_KEY from the environment.

USAGE:
    desktop = E2BDesktop.create(resolution=(1024, 768))
    print(desktop.stream_url())   # live VNC view
    ...
    desktop.close()
"""

from __future__ import annotations

from typing import Any, Optional, Tuple

from e2b_desktop import Sandbox

from ..utils.constants import DEFAULT_RESOLUTION
from ..utils.logger import get_logger
from .sandbox import Coordinate, DesktopSandbox

logger = get_logger(__name__)


class E2BDesktop(DesktopSandbox):
    """Forwards every primitive to the remote E2B sandbox."""

    def __init__(self, sandbox: Any, resolution: Tuple[int, int] = DEFAULT_RESOLUTION):
        self._sandbox = sandbox
        self._resolution = resolution
        self._streaming = False

    @classmethod
    def create(
        cls,
        resolution: Tuple[int, int] = DEFAULT_RESOLUTION,
        timeout: Optional[int] = None,
    ) -> "E2BDesktop":
        """Start a new remote desktop."""
        kwargs = {"resolution": resolution}
        if timeout:
            kwargs["timeout"] = timeout
        sandbox = Sandbox.create(**kwargs)
        logger.info(f"Started E2B desktop {sandbox.sandbox_id} at {resolution[0]}x{resolution[1]}")
        return cls(sandbox, resolution)

    @property
    def sandbox_id(self) -> str:
        return self._sandbox.sandbox_id

    def stream_url(self) -> str:
        """Start the VNC stream (once) and return its browser URL."""
        if not self._streaming:
            self._sandbox.stream.start()
            self._streaming = True
        return self._sandbox.stream.get_url()

    def screenshot(self) -> bytes:
        return bytes(self._sandbox.screenshot())

    def screen_size(self) -> Coordinate:
        return self._resolution

    def left_click(self, x: int, y: int) -> None:
        self._sandbox.left_click(x, y)

    def right_click(self, x: int, y: int) -> None:
        self._sandbox.right_click(x, y)

    def middle_click(self, x: int, y: int) -> None:
        self._sandbox.middle_click(x, y)

    def double_click(self, x: int, y: int) -> None:
        self._sandbox.double_click(x, y)

    def move_mouse(self, x: int, y: int) -> None:
        self._sandbox.move_mouse(x, y)

    def write(self, text: str) -> None:
        self._sandbox.write(text)

    def press(self, key: str) -> None:
        self._sandbox.press(key)

    def scroll(self, direction: str, amount: int) -> None:
        self._sandbox.scroll(direction=direction, amount=amount)

    def drag(self, start: Coordinate, end: Coordinate) -> None:
        self._sandbox.drag(start, end)

    def close(self) -> None:
        if self._streaming:
            try:
                self._sandbox.stream.stop()
            except Exception as e:
                logger.warning(f"Could not stop VNC stream: {e}")
            self._streaming = False
        self._sandbox.kill()
        logger.info(f"Killed E2B desktop {self.sandbox_id}")
