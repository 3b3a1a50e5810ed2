from __future__ import annotations

import base64
import io
import threading
import time

import pytest
from PIL import Image

from conftest import FakeClient, FakeDesktop
from surf_backend.execution.resolution import ResolutionScaler
from surf_backend.llm.google_streamer import GoogleComputerStreamer


@pytest.fixture
def streamer(make_streamer):
    return make_streamer()[0]


@pytest.mark.parametrize(
    "args, expected",
    [
        ({"action_type": "click", "x": 10, "y": 20}, ("left_click", 10, 20)),
        ({"action_type": "click", "x": 10, "y": 20, "button": "right"}, ("right_click", 10, 20)),
        ({"action_type": "click", "x": 10, "y": 20, "button": "middle"}, ("middle_click", 10, 20)),
        ({"action_type": "double_click", "x": 5, "y": 6}, ("double_click", 5, 6)),
        ({"action_type": "move", "x": 7.6, "y": 8.2}, ("move_mouse", 8, 8)),
        ({"action_type": "type", "text": "ls -la"}, ("write", "ls -la")),
        ({"action_type": "keypress", "keys": ["Control", "c"]}, ("press", "Control+c")),
        ({"action_type": "keypress", "keys": ["Enter"]}, ("press", "Enter")),
        ({"action_type": "scroll", "scroll_y": -3}, ("scroll", "up", 3)),
        ({"action_type": "scroll", "scroll_y": 2}, ("scroll", "down", 2)),
        ({"action_type": "scroll", "direction": "left", "amount": 4}, ("scroll", "left", 4)),
        ({"action_type": "scroll", "scroll_y": 0.3}, ("scroll", "down", 1)),
        ({"action_type": "scroll", "scroll_y": -0.4}, ("scroll", "up", 1)),
        ({"action_type": "drag", "path": [{"x": 1, "y": 2}, {"x": 30, "y": 40}]}, ("drag", (1, 2), (30, 40))),
    ],
)
def test_actions_reach_the_desktop(streamer, desktop, args, expected):
    response = streamer.execute_action(args)
    assert response.error is False
    assert response.result == f"Action {args['action_type']} executed successfully."
    assert desktop.calls == [expected]


@pytest.mark.parametrize(
    "args",
    [
        {"action_type": "scroll", "scroll_y": 0},
        {"action_type": "scroll", "scroll_x": 5},
        {"action_type": "scroll"},
        {"action_type": "scroll", "direction": "down"},
        {"action_type": "wait", "duration_ms": 0},
    ],
)
def test_degenerate_actions_are_noops(streamer, desktop, args):
    response = streamer.execute_action(args)
    assert response.error is False
    assert desktop.calls == []


def test_drag_needs_exactly_two_points(streamer, desktop):
    response = streamer.execute_action({
        "action_type": "drag",
        "path": [{"x": 1, "y": 1}, {"x": 2, "y": 2}, {"x": 3, "y": 3}],
    })
    assert response.error is True
    assert response.result == (
        "Error executing action drag: Drag action requires a path with exactly two points."
    )
    assert desktop.calls == []


def test_drag_points_are_scaled():
    desktop = FakeDesktop(size=(2560, 1600))

    streamer = GoogleComputerStreamer(desktop, ResolutionScaler(desktop), client=FakeClient([]))
    streamer.execute_action({"action_type": "drag", "path": [{"x": 0, "y": 0}, {"x": 100, "y": 50}]})
    assert desktop.calls == [("drag", (0, 0), (200, 100))]


def test_unknown_action_is_an_error(streamer):
    response = streamer.execute_action({"action_type": "fly"})
    assert response.error is True
    assert response.result == "Error executing action fly: Unknown action type: fly"


def test_desktop_failures_are_caught(streamer, desktop):
    desktop.fail_on = "left_click"
    response = streamer.execute_action({"action_type": "click", "x": 1, "y": 1})
    assert response.error is True
    assert "left_click exploded" in response.result


def test_screenshot_action_returns_scaled_image(streamer):
    response = streamer.execute_action({"action_type": "screenshot"})
    assert response.error is False
    assert response.result == "Screenshot taken."
    with Image.open(io.BytesIO(base64.b64decode(response.screenshot))) as image:
        assert image.size == (1024, 768)


def test_wait_sleeps_for_duration(streamer):
    started = time.monotonic()
    response = streamer.execute_action({"action_type": "wait", "duration_ms": 50})
    assert response.error is False
    assert time.monotonic() - started >= 0.04


def test_wait_returns_early_when_stopped(streamer):
    stop = threading.Event()
    stop.set()
    started = time.monotonic()
    streamer.execute_action({"action_type": "wait", "duration_ms": 5000}, stop_event=stop)
    assert time.monotonic() - started < 1
