"""Shared defaults for the streamer, scaler and CLI."""

DEFAULT_MODEL = "gemini-2.5-flash"

# Sandbox resolution used when the CLI is not told otherwise
DEFAULT_RESOLUTION = (1024, 768)

# Resolutions the model sees screenshots in. The scaler picks the one whose
# aspect ratio is closest to the sandbox's.
TARGET_RESOLUTIONS = {
    "XGA": (1024, 768),
    "WXGA": (1280, 800),
    "FWXGA": (1366, 768),
}

COMPUTER_ACTION = "computer_action"

FALLBACK_PROMPT = "What can you do?"
STOPPED_MESSAGE = "Generation stopped by user"

# Debug log payloads are cut to this many characters
LOG_TRUNCATE = 1000
