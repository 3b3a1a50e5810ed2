"""
Event and message models exchanged with the streaming client.
The streamer yields SSEEvents; callers send ChatMessages in.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel


class SSEEventType(str, Enum):
    """Kinds of events emitted while streaming."""

    REASONING = "reasoning"
    ACTION = "action"
    ACTION_COMPLETED = "action_completed"
    DONE = "done"
    ERROR = "error"


class SSEEvent(BaseModel):
    type: SSEEventType
    content: Optional[str] = None
    action: Optional[Dict[str, Any]] = None

    def to_sse(self) -> str:
        """Render as one server-sent-event frame."""
        payload = self.model_dump(mode="json", exclude_none=True)
        return f"data: {json.dumps(payload)}\n\n"


@dataclass
class ActionResponse:
    """Outcome of one executed action, fed back to the model."""

    result: str
    error: bool = False
    screenshot: Optional[str] = None  # base64 PNG


class ImageURL(BaseModel):
    url: str


class TextItem(BaseModel):
    type: Literal["text"] = "text"
    text: str


class ImageItem(BaseModel):
    type: Literal["image_url"] = "image_url"
    image_url: ImageURL


ContentItem = Union[str, TextItem, ImageItem]


class ChatMessage(BaseModel):
    role: str
    content: Union[str, List[ContentItem]]
