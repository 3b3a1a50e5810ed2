"""
Coordinate and screenshot scaling between the sandbox and the model.

The model sees screenshots at a standard resolution. Coordinates it reports
are in that space and must be mapped back before they reach the sandbox.
"""

from __future__ import annotations

import io
from typing import Dict, Optional, Sequence, Tuple

from PIL import Image

from ..utils.constants import TARGET_RESOLUTIONS
from ..utils.logger import get_logger
from .sandbox import Coordinate, DesktopSandbox

logger = get_logger(__name__)


def pick_scaled_resolution(
    original: Coordinate,
    targets: Optional[Dict[str, Coordinate]] = None,
) -> Coordinate:
    """
    Choose the model-facing resolution for a screen.

    The target with the closest aspect ratio wins. Screens that already fit
    inside it are kept as they are; larger ones shrink with their aspect
    ratio preserved.
    """
    width, height = original
    if width <= 0 or height <= 0:
        raise ValueError(f"Invalid resolution: {width}x{height}")

    targets = targets or TARGET_RESOLUTIONS
    ratio = width / height
    target_w, target_h = min(
        targets.values(), key=lambda r: abs(r[0] / r[1] - ratio)
    )

    if width <= target_w and height <= target_h:
        return width, height

    factor = min(target_w / width, target_h / height)
    return max(1, round(width * factor)), max(1, round(height * factor))


def _map(point: Sequence[float], src: Coordinate, dst: Coordinate) -> Coordinate:
    x = round(float(point[0]) * dst[0] / src[0])
    y = round(float(point[1]) * dst[1] / src[1])
    return min(max(x, 0), dst[0] - 1), min(max(y, 0), dst[1] - 1)


class ResolutionScaler:
    """Linear mapping between sandbox and model coordinate spaces."""

    def __init__(self, desktop: DesktopSandbox, original_resolution: Optional[Coordinate] = None):
        self.desktop = desktop
        self.original_resolution: Coordinate = tuple(original_resolution or desktop.screen_size())
        self.scaled_resolution: Coordinate = pick_scaled_resolution(self.original_resolution)
        logger.debug(
            f"Resolution scaler: sandbox {self.original_resolution} -> model {self.scaled_resolution}"
        )

    @property
    def is_identity(self) -> bool:
        return self.original_resolution == self.scaled_resolution

    def scale_to_original_space(self, point: Sequence[float]) -> Coordinate:
        """Model coordinates -> sandbox coordinates."""
        return _map(point, self.scaled_resolution, self.original_resolution)

    def scale_to_model_space(self, point: Sequence[float]) -> Coordinate:
        """Sandbox coordinates -> model coordinates."""
        return _map(point, self.original_resolution, self.scaled_resolution)

    def take_screenshot(self) -> bytes:
        """Sandbox screenshot as PNG bytes at the model resolution."""
        data = self.desktop.screenshot()
        if self.is_identity:
            return data

        with Image.open(io.BytesIO(data)) as image:
            resized = image.resize(self.scaled_resolution, Image.Resampling.LANCZOS)
        buffer = io.BytesIO()
        resized.save(buffer, format="PNG")
        return buffer.getvalue()
