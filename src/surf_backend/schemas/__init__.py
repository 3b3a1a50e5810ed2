"""Schemas module for the Surf streamer."""

from .actions import (
    Action,
    ActionBase,
    ActionParseError,
    ClickAction,
    DoubleClickAction,
    DragAction,
    KeypressAction,
    MoveAction,
    Point,
    ScreenshotAction,
    ScrollAction,
    TypeAction,
    WaitAction,
    parse_action,
)
from .events import ActionResponse, ChatMessage, SSEEvent, SSEEventType
from .tasks import Task

__all__ = [
    "Action",
    "ActionBase",
    "ActionParseError",
    "ClickAction",
    "DoubleClickAction",
    "DragAction",
    "KeypressAction",
    "MoveAction",
    "Point",
    "ScreenshotAction",
    "ScrollAction",
    "TypeAction",
    "WaitAction",
    "parse_action",
    "ActionResponse",
    "ChatMessage",
    "SSEEvent",
    "SSEEventType",
    "Task",
]
