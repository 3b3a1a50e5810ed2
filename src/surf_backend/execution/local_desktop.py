"""
local_desktop.py - Local display backend
=========================================
Drives whatever display the DISPLAY env var points to (for instance an
Xvfb screen inside a container) through PyAutoGUI.

The streamer does not care whether it clicks a remote E2B VM or a local
X server, only that both speak DesktopSandbox.

HOW PYAUTOGUI SCROLLS:
pyautogui.scroll(n) with n > 0 moves the wheel UP, n < 0 DOWN.
hscroll(n) with n > 0 moves RIGHT.
"""

from __future__ import annotations

import io
from typing import Any, Optional

from PIL import Image

from ..utils.logger import get_logger
from .sandbox import Coordinate, DesktopSandbox

logger = get_logger(__name__)


# Key name mapping: X11/LLM names → PyAutoGUI names
KEY_NAME_MAP = {
    # Super/Windows key
    "super_l": "win",
    "super_r": "win",
    "super": "win",
    "meta": "win",
    "win": "win",
    # Control
    "control": "ctrl",
    "control_l": "ctrl",
    "control_r": "ctrl",
    # Alt
    "alt_l": "alt",
    "alt_r": "alt",
    # Shift
    "shift_l": "shift",
    "shift_r": "shift",
    # Return/Enter
    "return": "enter",
    # Escape
    "escape": "esc",
    # Navigation
    "page_up": "pageup",
    "page_down": "pagedown",
    "arrowup": "up",
    "arrowdown": "down",
    "arrowleft": "left",
    "arrowright": "right",
    "back": "backspace",
}


def normalize_key(key: str) -> str:
    """Map an X11/browser key name (Super_L, Control) to PyAutoGUI's (win, ctrl)."""
    key_lower = key.lower().strip()
    return KEY_NAME_MAP.get(key_lower, key_lower)


class LocalDesktop(DesktopSandbox):
    """
    Controls a local desktop via PyAutoGUI.

    USAGE:
        desktop = LocalDesktop()
        png = desktop.screenshot()
        desktop.left_click(100, 200)
    """

    def __init__(self, gui: Optional[Any] = None, type_interval: float = 0.02):
        """
        Args:
            gui: PyAutoGUI-compatible module. Imported lazily because
                 pyautogui needs a live display at import time.
            type_interval: Delay between typed characters. Too fast and
                 some apps miss keystrokes.
        """
        if gui is None:
            import pyautogui as gui

            # Corner-of-screen abort makes no sense on a virtual display
            gui.FAILSAFE = False
            gui.PAUSE = 0.1
        self._gui = gui
        self._type_interval = type_interval

    def screenshot(self) -> bytes:
        image: Image.Image = self._gui.screenshot()
        buffer = io.BytesIO()
        image.save(buffer, format="PNG")
        return buffer.getvalue()

    def screen_size(self) -> Coordinate:
        width, height = self._gui.size()
        return int(width), int(height)

    def left_click(self, x: int, y: int) -> None:
        self._gui.click(x, y)

    def right_click(self, x: int, y: int) -> None:
        self._gui.rightClick(x, y)

    def middle_click(self, x: int, y: int) -> None:
        self._gui.middleClick(x, y)

    def double_click(self, x: int, y: int) -> None:
        self._gui.doubleClick(x, y)

    def move_mouse(self, x: int, y: int) -> None:
        self._gui.moveTo(x, y)

    def write(self, text: str) -> None:
        self._gui.write(text, interval=self._type_interval)

    def press(self, key: str) -> None:
        """
        Press a single key or a combination.

        EXAMPLES:
            press("Enter")           # Press Enter
            press("Control+c")       # Copy
            press("ctrl+shift+t")    # Reopen closed tab
        """
        keys = [normalize_key(k) for k in key.split("+") if k.strip()]
        if not keys:
            raise ValueError(f"No key to press in {key!r}")
        if len(keys) > 1:
            self._gui.hotkey(*keys)
        else:
            self._gui.press(keys[0])

    def scroll(self, direction: str, amount: int) -> None:
        if direction == "up":
            self._gui.scroll(amount)
        elif direction == "down":
            self._gui.scroll(-amount)
        elif direction == "left":
            self._gui.hscroll(-amount)
        elif direction == "right":
            self._gui.hscroll(amount)
        else:
            raise ValueError(f"Unknown scroll direction: {direction}")

    def drag(self, start: Coordinate, end: Coordinate, duration: float = 0.5) -> None:
        self._gui.moveTo(*start)
        self._gui.dragTo(end[0], end[1], duration=duration, button="left")
