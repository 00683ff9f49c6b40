"""Core system components for LightSync."""

from lightsync.core.state import (
    Attribute,
    ColorChangeEvent,
    ColorHSB,
    ColorRGB,
    PowerOffPolicy,
    StateDelta,
    SyncState,
)
from lightsync.core.config import Settings
from lightsync.core.ports import ColorSink, EventSource
from lightsync.core.exceptions import (
    LightSyncError,
    SourceUnavailableError,
    FrameDecodeError,
    SinkDispatchError,
    SyncAlreadyRunningError,
)

__all__ = [
    "Attribute",
    "ColorChangeEvent",
    "ColorHSB",
    "ColorRGB",
    "PowerOffPolicy",
    "StateDelta",
    "SyncState",
    "Settings",
    "ColorSink",
    "EventSource",
    "LightSyncError",
    "SourceUnavailableError",
    "FrameDecodeError",
    "SinkDispatchError",
    "SyncAlreadyRunningError",
]
