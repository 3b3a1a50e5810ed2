from .state import ActionRecord, StreamState, StreamStatus

__all__ = [
    "ActionRecord",
    "StreamState",
    "StreamStatus",
]
