"""
Logging utilities for the Surf streamer.
All package loggers hang off one configured "surf_backend" logger.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from typing import Any, Optional

from .constants import LOG_TRUNCATE

ROOT_LOGGER = "surf_backend"


def get_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """
    Get a logger under the package root.

    Args:
        name: Logger name (typically __name__).
        level: Log level (DEBUG, INFO, WARNING, ERROR).
               Defaults to SURF_LOG_LEVEL env var or INFO.

    Returns:
        Configured logging.Logger instance.
    """
    root = logging.getLogger(ROOT_LOGGER)

    if not root.handlers:
        # Only configure if not already configured
        log_level = level or os.environ.get("SURF_LOG_LEVEL", "INFO")
        root.setLevel(getattr(logging, log_level.upper(), logging.INFO))

        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        ))
        root.addHandler(handler)
    elif level:
        root.setLevel(getattr(logging, level.upper(), logging.INFO))

    if name == ROOT_LOGGER or name.startswith(ROOT_LOGGER + "."):
        return logging.getLogger(name)
    return root.getChild(name)


def truncate(value: Any, limit: int = LOG_TRUNCATE) -> str:
    """Render a value for a debug line, cut to ``limit`` characters."""
    if not isinstance(value, str):
        try:
            value = json.dumps(value, default=str)
        except (TypeError, ValueError):
            value = repr(value)
    if len(value) <= limit:
        return value
    return value[:limit] + f"... [{len(value) - limit} more]"
