"""Model streamers for the Surf agent."""

from .base import ComputerInteractionStreamer
from .google_streamer import GoogleComputerStreamer, computer_action_declaration, to_contents
from .prompt_templates import INSTRUCTIONS, build_task_message

__all__ = [
    "ComputerInteractionStreamer",
    "GoogleComputerStreamer",
    "computer_action_declaration",
    "to_contents",
    "INSTRUCTIONS",
    "build_task_message",
]
