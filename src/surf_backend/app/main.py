"""
main.py - Entry point for Surf
"""

from __future__ import annotations

import argparse
import signal
import sys
import threading
from pathlib import Path
from typing import Iterable, Optional, Sequence, Tuple

import yaml

from surf_backend.agent.state import StreamState, StreamStatus
from surf_backend.execution import DesktopSandbox, E2BDesktop, LocalDesktop, ResolutionScaler
from surf_backend.llm import ComputerInteractionStreamer, GoogleComputerStreamer, build_task_message
from surf_backend.schemas.events import SSEEvent, SSEEventType
from surf_backend.schemas.tasks import Task
from surf_backend.utils.constants import DEFAULT_MODEL, DEFAULT_RESOLUTION
from surf_backend.utils.logger import get_logger

logger = get_logger(__name__)


def parse_resolution(value: str) -> Tuple[int, int]:
    """'1024x768' -> (1024, 768)"""
    try:
        width, height = (int(v) for v in value.lower().split("x"))
    except ValueError:
        raise argparse.ArgumentTypeError(f"Resolution must look like 1024x768, got {value!r}")
    if width <= 0 or height <= 0:
        raise argparse.ArgumentTypeError(f"Resolution must be positive, got {value!r}")
    return width, height


def load_task(task_path: str, max_actions: Optional[int] = None) -> Task:
    path = Path(task_path)
    if not path.exists():
        print(f"Error: Task file not found at {path}")
        sys.exit(1)

    with open(path, "r") as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            print(f"Error parsing YAML: {e}")
            sys.exit(1)

    if not isinstance(data, dict):
        print(f"Error validating task: expected a mapping, got {type(data).__name__}")
        sys.exit(1)
    if max_actions is not None:
        data["max_actions"] = max_actions
    try:
        return Task(**data)
    except (TypeError, ValueError) as e:
        print(f"Error validating task: {e}")
        sys.exit(1)


def create_desktop(backend: str, resolution: Tuple[int, int]) -> DesktopSandbox:
    if backend == "local":
        return LocalDesktop()
    return E2BDesktop.create(resolution=resolution)


def run_stream(
    streamer: ComputerInteractionStreamer,
    task: Task,
    stop_event: threading.Event,
    sse: bool = False,
) -> StreamState:
    """Stream one task to stdout and return the final stream state."""
    messages = [build_task_message(task.goal, streamer.resolution_scaler.take_screenshot())]
    events: Iterable[SSEEvent] = streamer.stream(messages, stop_event=stop_event)

    for event in events:
        if sse:
            sys.stdout.write(event.to_sse())
            sys.stdout.flush()
            continue

        if event.type == SSEEventType.REASONING:
            print(event.content, end="", flush=True)
        elif event.type == SSEEventType.ACTION:
            print(f"\n🖱️  ACTION: {event.action}")
        elif event.type == SSEEventType.ACTION_COMPLETED:
            print("   ✔ done")
        elif event.type == SSEEventType.ERROR:
            print(f"\n💥 ERROR: {event.content}")
        elif event.type == SSEEventType.DONE and event.content:
            print(f"\n🛑 {event.content}")

    state = getattr(streamer, "last_state", None)
    return state if state is not None else StreamState()


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Surf CLI")
    parser.add_argument("goal", nargs="?", help="The task for the agent to perform")
    parser.add_argument("--task", help="Path to a task YAML file (goal, max_actions)")
    parser.add_argument("--model", default=DEFAULT_MODEL, help="Gemini model to use")
    parser.add_argument("--backend", choices=["e2b", "local"], default="e2b",
                        help="Remote E2B sandbox or the local display")
    parser.add_argument("--resolution", type=parse_resolution, default=DEFAULT_RESOLUTION,
                        help="Sandbox resolution, e.g. 1024x768 (e2b only)")
    parser.add_argument("--max-actions", type=int, default=None, help="Max tool turns")
    parser.add_argument("--sse", action="store_true", help="Print raw server-sent-event frames")
    args = parser.parse_args(argv)

    if args.task:
        task = load_task(args.task, args.max_actions)
    elif args.goal:
        try:
            task = Task(goal=args.goal, max_actions=args.max_actions)
        except ValueError as e:
            parser.error(str(e))
    else:
        parser.error("a goal or --task is required")

    # First Ctrl+C asks the stream to stop, a second one aborts
    stop_event = threading.Event()

    def _request_stop(signum, frame):
        if stop_event.is_set():
            raise KeyboardInterrupt
        print("\n🛑 Stopping after the current step... (Ctrl+C again to abort)")
        stop_event.set()

    print(f"🤖 Initializing Surf with model: {args.model} ({args.backend} desktop)")
    desktop: Optional[DesktopSandbox] = None
    previous_handler = signal.signal(signal.SIGINT, _request_stop)

    try:
        desktop = create_desktop(args.backend, args.resolution)
        if isinstance(desktop, E2BDesktop):
            print(f"📺 Live view: {desktop.stream_url()}")

        scaler = ResolutionScaler(desktop)
        streamer = GoogleComputerStreamer(
            desktop, scaler, model=args.model, max_actions=task.max_actions
        )

        print(f"🚀 Starting task: {task.goal}")
        print("-" * 50)
        state = run_stream(streamer, task, stop_event, sse=args.sse)
        print("-" * 50)

        print(f"Actions: {len(state.actions)} ({len(state.failed_actions)} failed), status: {state.status.value}")
        if state.status == StreamStatus.FAILED:
            print(f"❌ TASK FAILED: {state.error}")
            return 1
        return 0

    except KeyboardInterrupt:
        print("\n🛑 Task cancelled by user.")
        return 130
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        print(f"\n💥 Fatal error: {e}")
        return 1
    finally:
        signal.signal(signal.SIGINT, previous_handler)
        if desktop is not None:
            desktop.close()


if __name__ == "__main__":
    sys.exit(main())
