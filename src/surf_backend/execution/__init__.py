"""
execution - Desktop control module
===================================
Everything that touches the virtual desktop.

USAGE:
    from surf_backend.execution import E2BDesktop, ResolutionScaler

    desktop = E2BDesktop.create(resolution=(1024, 768))
    scaler = ResolutionScaler(desktop)
    png = scaler.take_screenshot()
"""

from .sandbox import Coordinate, DesktopSandbox
from .resolution import ResolutionScaler, pick_scaled_resolution
from .e2b_desktop import E2BDesktop
from .local_desktop import LocalDesktop, normalize_key

__all__ = [
    "Coordinate",
    "DesktopSandbox",
    "ResolutionScaler",
    "pick_scaled_resolution",
    "E2BDesktop",
    "LocalDesktop",
    "normalize_key",
]
