"""Logging helpers and shared defaults."""

from .logger import get_logger, truncate

__all__ = ["get_logger", "truncate"]
