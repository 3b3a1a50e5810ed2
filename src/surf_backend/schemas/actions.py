from __future__ import annotations

from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter, ValidationError


class ActionParseError(ValueError):
    """Raised when function-call arguments do not describe a known action."""


# Base action (all actions have these)
class ActionBase(BaseModel):
    action_type: str


class Point(BaseModel):
    x: float
    y: float


# ---- Pointer actions ----

class ClickAction(ActionBase):
    action_type: Literal["click"] = "click"
    x: float
    y: float
    button: Literal["left", "right", "middle"] = "left"


class DoubleClickAction(ActionBase):
    action_type: Literal["double_click"] = "double_click"
    x: float
    y: float


class MoveAction(ActionBase):
    action_type: Literal["move"] = "move"
    x: float
    y: float


class DragAction(ActionBase):
    action_type: Literal["drag"] = "drag"
    path: List[Point] = Field(description="Start and end point of the drag")


class ScrollAction(ActionBase):
    action_type: Literal["scroll"] = "scroll"
    scroll_x: Optional[float] = None
    scroll_y: Optional[float] = Field(default=None, description="Negative = up, positive = down")
    direction: Optional[Literal["up", "down", "left", "right"]] = None
    amount: Optional[int] = Field(default=None, ge=0)


# ---- Keyboard actions ----

class TypeAction(ActionBase):
    action_type: Literal["type"] = "type"
    text: str


class KeypressAction(ActionBase):
    action_type: Literal["keypress"] = "keypress"
    keys: List[str] = Field(min_length=1, description="Key names like ['Control', 'c']")


# ---- Passive actions ----

class ScreenshotAction(ActionBase):
    action_type: Literal["screenshot"] = "screenshot"


class WaitAction(ActionBase):
    action_type: Literal["wait"] = "wait"
    duration_ms: float


Action = Annotated[
    Union[
        ClickAction,
        DoubleClickAction,
        TypeAction,
        KeypressAction,
        ScrollAction,
        MoveAction,
        DragAction,
        ScreenshotAction,
        WaitAction,
    ],
    Field(discriminator="action_type"),
]

ACTION_TYPES = (
    "click",
    "double_click",
    "type",
    "keypress",
    "scroll",
    "move",
    "drag",
    "screenshot",
    "wait",
)

_action_adapter: TypeAdapter = TypeAdapter(Action)


def parse_action(args: Dict[str, Any]) -> Action:
    """
    Validate raw ``computer_action`` arguments into a typed action.

    The model fills unused nullable parameters with ``None``; those are
    dropped before validation so defaults apply.
    """
    if not isinstance(args, dict):
        raise ActionParseError(f"Expected an object, got {type(args).__name__}")

    data = {k: v for k, v in args.items() if v is not None}
    action_type = data.get("action_type")
    if not action_type:
        raise ActionParseError("Missing 'action_type' in action arguments")
    if action_type not in ACTION_TYPES:
        raise ActionParseError(f"Unknown action type: {action_type}")

    try:
        return _action_adapter.validate_python(data)
    except ValidationError as e:
        raise ActionParseError(f"Invalid {action_type} action: {e}") from e
