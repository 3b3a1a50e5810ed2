"""Surf: a Gemini agent that operates a virtual desktop."""

__version__ = "0.1.0"
