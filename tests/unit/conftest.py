from __future__ import annotations

import io
from types import SimpleNamespace
from typing import Any, Dict, List, Optional, Sequence

import pytest
from google.genai import types
from PIL import Image

from surf_backend.execution.resolution import ResolutionScaler
from surf_backend.execution.sandbox import DesktopSandbox
from surf_backend.llm.google_streamer import GoogleComputerStreamer


def make_png(size=(1024, 768), color=(30, 60, 90)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


class FakeDesktop(DesktopSandbox):
    """Records every primitive call instead of touching a screen."""

    def __init__(self, size=(1024, 768), fail_on: Optional[str] = None):
        self.size = size
        self.calls: List[tuple] = []
        self.fail_on = fail_on
        self.closed = False

    def _record(self, name, *args):
        if name == self.fail_on:
            raise RuntimeError(f"{name} exploded")
        self.calls.append((name,) + args)

    def screenshot(self) -> bytes:
        return make_png(self.size)

    def screen_size(self):
        return self.size

    def left_click(self, x, y):
        self._record("left_click", x, y)

    def right_click(self, x, y):
        self._record("right_click", x, y)

    def middle_click(self, x, y):
        self._record("middle_click", x, y)

    def double_click(self, x, y):
        self._record("double_click", x, y)

    def move_mouse(self, x, y):
        self._record("move_mouse", x, y)

    def write(self, text):
        self._record("write", text)

    def press(self, key):
        self._record("press", key)

    def scroll(self, direction, amount):
        self._record("scroll", direction, amount)

    def drag(self, start, end):
        self._record("drag", start, end)

    def close(self):
        self.closed = True


def text_chunk(text: str) -> types.GenerateContentResponse:
    return types.GenerateContentResponse(candidates=[
        types.Candidate(content=types.Content(role="model", parts=[types.Part(text=text)]))
    ])


def call_chunk(name: str = "computer_action", **args: Any) -> types.GenerateContentResponse:
    return types.GenerateContentResponse(candidates=[
        types.Candidate(content=types.Content(role="model", parts=[
            types.Part(function_call=types.FunctionCall(name=name, args=args))
        ]))
    ])


def calls_chunk(*calls: Dict[str, Any]) -> types.GenerateContentResponse:
    return types.GenerateContentResponse(candidates=[
        types.Candidate(content=types.Content(role="model", parts=[
            types.Part(function_call=types.FunctionCall(name="computer_action", args=args))
            for args in calls
        ]))
    ])


class FakeChat:
    """Replays one scripted list of chunks per send_message_stream call."""

    def __init__(self, turns: Sequence[Sequence[Any]]):
        self.turns = [list(t) for t in turns]
        self.sent: List[Any] = []

    def send_message_stream(self, message):
        self.sent.append(message)
        if not self.turns:
            raise AssertionError("Unexpected extra model turn")
        for chunk in self.turns.pop(0):
            if isinstance(chunk, Exception):
                raise chunk
            yield chunk


class FakeClient:
    def __init__(self, turns: Sequence[Sequence[Any]]):
        self.chat = FakeChat(turns)
        self.created: List[Dict[str, Any]] = []
        self.chats = SimpleNamespace(create=self._create)

    def _create(self, model, config, history):
        self.created.append({"model": model, "config": config, "history": history})
        return self.chat


@pytest.fixture
def desktop():
    return FakeDesktop()


@pytest.fixture
def make_streamer(desktop):
    def _make(turns=(), max_actions=None, scaler=None):
        client = FakeClient(turns)
        streamer = GoogleComputerStreamer(
            desktop,
            scaler or ResolutionScaler(desktop),
            client=client,
            max_actions=max_actions,
        )
        return streamer, client
    return _make
