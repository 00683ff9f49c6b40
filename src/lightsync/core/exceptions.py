"""
Custom Exceptions for LightSync.

Provides a hierarchy of exceptions for the stream, sync and device layers,
enabling targeted error handling and graceful degradation.
"""

from __future__ import annotations

from typing import Optional


class LightSyncError(Exception):
    """Base exception for all LightSync errors."""

    def __init__(self, message: str, recoverable: bool = True):
        super().__init__(message)
        self.message = message
        self.recoverable = recoverable


# =============================================================================
# Source Errors
# =============================================================================


class SourceError(LightSyncError):
    """Base exception for source-side (push stream) errors."""
    pass


class SourceUnavailableError(SourceError):
    """Source stream could not be opened or was lost mid-session."""

    def __init__(self, source: str, reason: str):
        super().__init__(
            f"Source '{source}' unavailable: {reason}",
            recoverable=False
        )
        self.source = source
        self.reason = reason


# =============================================================================
# Stream Errors
# =============================================================================


class StreamError(LightSyncError):
    """Base exception for push-stream decoding errors."""
    pass


class FrameDecodeError(StreamError):
    """A single frame carried a payload that could not be decoded."""

    def __init__(self, reason: str, payload: Optional[str] = None):
        super().__init__(f"Frame decode error: {reason}", recoverable=True)
        self.reason = reason
        self.payload = payload


# =============================================================================
# Sink Errors
# =============================================================================


class SinkError(LightSyncError):
    """Base exception for sink-side errors."""
    pass


class SinkDispatchError(SinkError):
    """Delivering a command to one sink failed."""

    def __init__(self, sink: str, reason: str):
        super().__init__(f"Dispatch to sink '{sink}' failed: {reason}", recoverable=True)
        self.sink = sink
        self.reason = reason


# =============================================================================
# Sync State Errors
# =============================================================================


class SyncStateError(LightSyncError):
    """Operation invoked in the wrong lifecycle state."""

    def __init__(self, message: str):
        super().__init__(message, recoverable=True)


class SyncAlreadyRunningError(SyncStateError):
    """start() called while a session is already active."""

    def __init__(self, state: str):
        super().__init__(f"Sync is already running (state: {state})")
        self.state = state


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigError(LightSyncError):
    """Base exception for configuration errors."""
    pass


class DeviceConfigError(ConfigError):
    """Invalid or incomplete device configuration."""

    def __init__(self, device: str, reason: str):
        super().__init__(f"Device config error '{device}': {reason}", recoverable=False)
        self.device = device
        self.reason = reason
