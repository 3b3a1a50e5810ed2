"""
Gemini computer-use streamer.

Runs the model turn -> tool turn loop: the model streams reasoning and
calls ``computer_action``; each call is executed on the desktop and its
result plus a fresh screenshot go back as the next turn.
"""

from __future__ import annotations

import base64
import binascii
import logging
import os
import threading
from typing import Any, Dict, Generator, Iterator, List, Optional, Sequence, Union

from google import genai
from google.genai import types

from ..agent.state import ActionRecord, StreamState
from ..execution.resolution import ResolutionScaler
from ..execution.sandbox import DesktopSandbox
from ..schemas.actions import (
    ClickAction,
    DoubleClickAction,
    DragAction,
    KeypressAction,
    MoveAction,
    ScreenshotAction,
    ScrollAction,
    TypeAction,
    WaitAction,
    parse_action,
)
from ..schemas.events import (
    ActionResponse,
    ChatMessage,
    ImageItem,
    SSEEvent,
    SSEEventType,
    TextItem,
)
from ..utils.constants import (
    COMPUTER_ACTION,
    DEFAULT_MODEL,
    FALLBACK_PROMPT,
    STOPPED_MESSAGE,
)
from ..utils.logger import get_logger, truncate
from .base import ComputerInteractionStreamer
from .prompt_templates import INSTRUCTIONS

logger = get_logger(__name__)

ROLE_MAP = {"user": "user", "assistant": "model"}

SAFETY_CATEGORIES = (
    types.HarmCategory.HARM_CATEGORY_HARASSMENT,
    types.HarmCategory.HARM_CATEGORY_HATE_SPEECH,
    types.HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT,
    types.HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT,
)


def _nullable(type_: str, description: str, **kwargs: Any) -> types.Schema:
    return types.Schema(type=type_, description=description, nullable=True, **kwargs)


def computer_action_declaration() -> types.FunctionDeclaration:
    """The single tool the model may call."""
    point = types.Schema(
        type="OBJECT",
        properties={"x": types.Schema(type="NUMBER"), "y": types.Schema(type="NUMBER")},
    )
    return types.FunctionDeclaration(
        name=COMPUTER_ACTION,
        description=(
            "Perform an action on the virtual computer. "
            "You will get a new screenshot after the action is performed."
        ),
        parameters=types.Schema(
            type="OBJECT",
            properties={
                "action_type": types.Schema(
                    type="STRING",
                    description=(
                        "The type of action: click, double_click, type, keypress, "
                        "scroll, move, drag, screenshot, wait"
                    ),
                ),
                "x": _nullable("NUMBER", "x-coordinate for mouse actions (click, double_click, move)"),
                "y": _nullable("NUMBER", "y-coordinate for mouse actions (click, double_click, move)"),
                "button": _nullable("STRING", "Mouse button (left, right, middle) for click action"),
                "text": _nullable("STRING", "Text to type for type action"),
                "keys": _nullable(
                    "ARRAY",
                    "Keys to press (e.g., ['Control', 'c']) for keypress action. "
                    "For single keys like Enter, use ['Enter'].",
                    items=types.Schema(type="STRING"),
                ),
                "scroll_x": _nullable("NUMBER", "Horizontal scroll amount for scroll action"),
                "scroll_y": _nullable("NUMBER", "Vertical scroll amount for scroll action"),
                "direction": _nullable("STRING", "Scroll direction ('up', 'down', 'left', 'right')"),
                "amount": _nullable("NUMBER", "Scroll amount (positive integer)"),
                "path": _nullable(
                    "ARRAY",
                    "Path for drag action, array of two points: [{x,y}, {x,y}]",
                    items=point,
                ),
                "duration_ms": _nullable("NUMBER", "Duration in milliseconds for wait action"),
            },
            required=["action_type"],
        ),
    )


def _decode_data_url(url: str) -> Optional[types.Part]:
    """``data:image/png;base64,...`` -> inline image part, or None without data."""
    header, sep, data = url.partition(",")
    if not sep or not data:
        return None
    mime_type = "image/png"
    if header.startswith("data:") and ";" in header:
        mime_type = header[len("data:"):].split(";", 1)[0] or mime_type
    try:
        raw = base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError):
        logger.warning("Skipping image with invalid base64 data")
        return None
    return types.Part.from_bytes(data=raw, mime_type=mime_type)


def to_contents(messages: Sequence[Union[ChatMessage, Dict[str, Any]]]) -> List[types.Content]:
    """Convert chat messages into Gemini contents, dropping unknown roles and empty turns."""
    contents: List[types.Content] = []
    for msg in messages:
        if not isinstance(msg, ChatMessage):
            msg = ChatMessage.model_validate(msg)

        role = ROLE_MAP.get(msg.role)
        if role is None:
            logger.debug(f"Skipping message with role {msg.role!r}")
            continue

        parts: List[types.Part] = []
        items = [msg.content] if isinstance(msg.content, str) else msg.content
        for item in items:
            if isinstance(item, str):
                parts.append(types.Part.from_text(text=item))
            elif isinstance(item, TextItem):
                parts.append(types.Part.from_text(text=item.text))
            elif isinstance(item, ImageItem):
                part = _decode_data_url(item.image_url.url)
                if part is not None:
                    parts.append(part)

        if parts:
            contents.append(types.Content(role=role, parts=parts))
    return contents


def _chunk_parts(chunk: types.GenerateContentResponse) -> Iterator[types.Part]:
    if not chunk.candidates:
        return
    content = chunk.candidates[0].content
    if content and content.parts:
        yield from content.parts


class GoogleComputerStreamer(ComputerInteractionStreamer):
    """
    Gemini function-calling adapter over a DesktopSandbox.

    USAGE:
        streamer = GoogleComputerStreamer(desktop, ResolutionScaler(desktop))
        for event in streamer.stream([ChatMessage(role="user", content="Open Firefox")]):
            print(event.to_sse())
    """

    def __init__(
        self,
        desktop: DesktopSandbox,
        resolution_scaler: ResolutionScaler,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        client: Optional[Any] = None,
        max_actions: Optional[int] = None,
    ):
        self.desktop = desktop
        self.resolution_scaler = resolution_scaler
        self.instructions = INSTRUCTIONS
        self.last_state: Optional[StreamState] = None
        self._model_name = model or DEFAULT_MODEL
        self._max_actions = max_actions

        if client is None:
            api_key = api_key or os.environ.get("GOOGLE_API_KEY") or os.environ.get("GEMINI_API_KEY")
            if not api_key:
                raise ValueError(
                    "GOOGLE_API_KEY is not set. Set it as an environment variable "
                    "or pass api_key to the constructor."
                )
            client = genai.Client(api_key=api_key)
        self._client = client

    @property
    def model(self) -> str:
        return self._model_name

    def get_tools(self) -> List[types.Tool]:
        return [types.Tool(function_declarations=[computer_action_declaration()])]

    def get_config(self) -> types.GenerateContentConfig:
        return types.GenerateContentConfig(
            system_instruction=self.instructions,
            tools=self.get_tools(),
            safety_settings=[
                types.SafetySetting(
                    category=category,
                    threshold=types.HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
                )
                for category in SAFETY_CATEGORIES
            ],
            automatic_function_calling=types.AutomaticFunctionCallingConfig(disable=True),
        )

    # ─────────────────────────────────────────────────────────────
    # TURN LOOP
    # ─────────────────────────────────────────────────────────────

    def stream(
        self,
        messages: Sequence[ChatMessage],
        stop_event: Optional[threading.Event] = None,
    ) -> Iterator[SSEEvent]:
        stop_event = stop_event or threading.Event()
        state = StreamState()
        self.last_state = state
        state.mark_running()

        try:
            history = to_contents(messages)
            message = history.pop().parts if history else [types.Part.from_text(text=FALLBACK_PROMPT)]

            if logger.isEnabledFor(logging.DEBUG):
                logger.debug(
                    f"Gemini request: model={self._model_name} "
                    f"history={truncate([c.model_dump(exclude_none=True, mode='json') for c in history])} "
                    f"last_message={truncate([p.model_dump(exclude_none=True, mode='json') for p in message], 500)}"
                )

            chat = self._client.chats.create(
                model=self._model_name,
                config=self.get_config(),
                history=history,
            )

            while True:
                calls: List[types.FunctionCall] = []
                for chunk in chat.send_message_stream(message):
                    if stop_event.is_set():
                        yield self._stop(state)
                        return
                    for part in _chunk_parts(chunk):
                        if part.text:
                            logger.debug(f"Gemini reasoning text: {truncate(part.text)}")
                            state.add_reasoning(part.text)
                            yield SSEEvent(type=SSEEventType.REASONING, content=part.text)
                        if part.function_call:
                            calls.append(part.function_call)

                if not calls:
                    break
                if stop_event.is_set():
                    yield self._stop(state)
                    return
                if self._max_actions is not None and state.turn_count >= self._max_actions:
                    error = f"Action limit of {self._max_actions} reached"
                    logger.warning(error)
                    state.mark_failed(error)
                    yield SSEEvent(type=SSEEventType.ERROR, content=error)
                    yield SSEEvent(type=SSEEventType.DONE)
                    return

                message = yield from self._tool_turn(calls, state, stop_event)

            logger.debug("Gemini stream finished.")
            state.mark_completed()
            yield SSEEvent(type=SSEEventType.DONE)

        except Exception as e:
            logger.error(f"Gemini streamer error: {e}", exc_info=True)
            error = str(e) or "An error occurred with the Google AI service. Please try again."
            state.mark_failed(error)
            yield SSEEvent(type=SSEEventType.ERROR, content=error)
            yield SSEEvent(type=SSEEventType.DONE)

    def _stop(self, state: StreamState) -> SSEEvent:
        logger.debug("Stream aborted by stop event.")
        state.mark_stopped()
        return SSEEvent(type=SSEEventType.DONE, content=STOPPED_MESSAGE)

    def _tool_turn(
        self,
        calls: List[types.FunctionCall],
        state: StreamState,
        stop_event: threading.Event,
    ) -> Generator[SSEEvent, None, List[types.Part]]:
        """Execute the first call; generator whose return value is the next message."""
        logger.debug(f"Gemini function calls: {truncate([c.model_dump(exclude_none=True) for c in calls])}")
        call = calls[0]
        args = dict(call.args or {})
        payload = {**args, "action_type": args.get("action_type")}

        yield SSEEvent(type=SSEEventType.ACTION, action=payload)

        if call.name == COMPUTER_ACTION:
            response = self.execute_action(payload, stop_event)
        else:
            logger.warning(f"Model called unknown tool: {call.name}")
            response = ActionResponse(result=f"Unknown tool: {call.name}", error=True)
        logger.debug(f"Action executed, response: {response.result}")

        state.add_action(ActionRecord(
            turn=state.turn_count + 1,
            action_type=str(payload["action_type"]),
            payload=payload,
            ok=not response.error,
            result=response.result,
        ))
        yield SSEEvent(type=SSEEventType.ACTION_COMPLETED)

        screenshot = self.resolution_scaler.take_screenshot()

        parts = [self._function_response(call.name, response.result, response.error)]
        # Gemini wants one response per call; only the first one runs
        for skipped in calls[1:]:
            parts.append(self._function_response(
                skipped.name, "Skipped: only one action is executed per turn.", True
            ))
        parts.append(types.Part.from_bytes(data=screenshot, mime_type="image/png"))
        return parts

    @staticmethod
    def _function_response(name: str, result: str, error: bool) -> types.Part:
        return types.Part.from_function_response(
            name=name,
            response={"name": name, "content": {"result": result, "error": error}},
        )

    # ─────────────────────────────────────────────────────────────
    # ACTION DISPATCH
    # ─────────────────────────────────────────────────────────────

    def execute_action(
        self,
        args: Dict[str, Any],
        stop_event: Optional[threading.Event] = None,
    ) -> ActionResponse:
        action_type = args.get("action_type") if isinstance(args, dict) else None
        logger.debug(f"Executing action {action_type}: {truncate(args)}")

        try:
            action = parse_action(args)

            if isinstance(action, ScreenshotAction):
                data = self.resolution_scaler.take_screenshot()
                return ActionResponse(
                    result="Screenshot taken.",
                    screenshot=base64.b64encode(data).decode("utf-8"),
                )
            elif isinstance(action, ClickAction):
                self._handle_click(action)
            elif isinstance(action, DoubleClickAction):
                x, y = self.resolution_scaler.scale_to_original_space((action.x, action.y))
                self.desktop.double_click(x, y)
            elif isinstance(action, TypeAction):
                self.desktop.write(action.text)
            elif isinstance(action, KeypressAction):
                self.desktop.press("+".join(action.keys))
            elif isinstance(action, MoveAction):
                x, y = self.resolution_scaler.scale_to_original_space((action.x, action.y))
                self.desktop.move_mouse(x, y)
            elif isinstance(action, ScrollAction):
                self._handle_scroll(action)
            elif isinstance(action, DragAction):
                self._handle_drag(action)
            elif isinstance(action, WaitAction):
                self._handle_wait(action, stop_event)
            else:
                raise ValueError(f"Unknown action type: {action_type}")

            return ActionResponse(result=f"Action {action_type} executed successfully.")

        except Exception as e:
            logger.error(f"Error executing action {action_type}: {e}")
            return ActionResponse(
                result=f"Error executing action {action_type}: {e}",
                error=True,
            )

    def _handle_click(self, action: ClickAction) -> None:
        x, y = self.resolution_scaler.scale_to_original_space((action.x, action.y))
        if action.button == "left":
            self.desktop.left_click(x, y)
        elif action.button == "right":
            self.desktop.right_click(x, y)
        elif action.button == "middle":
            self.desktop.middle_click(x, y)

    def _handle_scroll(self, action: ScrollAction) -> None:
        if action.scroll_y is not None:
            # Any nonzero scroll moves the wheel at least one click
            amount = max(1, round(abs(action.scroll_y)))
            if action.scroll_y < 0:
                self.desktop.scroll("up", amount)
            elif action.scroll_y > 0:
                self.desktop.scroll("down", amount)
        elif action.scroll_x is not None:
            logger.warning(
                "Horizontal scroll (scroll_x) is not supported with generic amounts. "
                "Use direction/amount for horizontal scrolling."
            )
        elif action.direction and action.amount is not None:
            self.desktop.scroll(action.direction, action.amount)
        else:
            logger.warning("Scroll action requires scroll_x, scroll_y, or direction and amount.")

    def _handle_drag(self, action: DragAction) -> None:
        if len(action.path) != 2:
            raise ValueError("Drag action requires a path with exactly two points.")
        start = self.resolution_scaler.scale_to_original_space((action.path[0].x, action.path[0].y))
        end = self.resolution_scaler.scale_to_original_space((action.path[1].x, action.path[1].y))
        self.desktop.drag(start, end)

    def _handle_wait(self, action: WaitAction, stop_event: Optional[threading.Event]) -> None:
        if action.duration_ms <= 0:
            logger.warning("Wait action requires a positive duration_ms.")
            return
        (stop_event or threading.Event()).wait(action.duration_ms / 1000)
