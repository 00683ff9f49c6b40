"""
LightSync: mirror Nanoleaf color state to Cync bulbs.

Decodes the Nanoleaf server-sent-events stream into color changes and fans
each change out to every configured sink, isolating per-sink failures.
"""

__version__ = "0.1.0"
__author__ = "LightSync Team"

from lightsync.core.config import Settings
from lightsync.core.state import ColorHSB, ColorRGB
from lightsync.sync.coordinator import SyncCoordinator

__all__ = [
    "ColorHSB",
    "ColorRGB",
    "Settings",
    "SyncCoordinator",
    "__version__",
]
