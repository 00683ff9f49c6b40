"""
Capability contracts the sync core depends on.

Device clients satisfy these structurally; nothing needs to inherit from
them. The Nanoleaf controller is both an EventSource and a ColorSink, which
lets one-shot color and effect commands reach the source too.
"""

from __future__ import annotations

from typing import AsyncIterator, Protocol, runtime_checkable

from lightsync.core.state import ColorRGB


@runtime_checkable
class EventSource(Protocol):
    """Upstream device that pushes its state as text lines."""

    name: str

    def stream_lines(self) -> AsyncIterator[str]:
        """
        Yield raw push-stream lines until the connection closes.

        Cancelling the consuming task ends the stream. Connection refused,
        rejected credentials and stream resets all raise
        SourceUnavailableError.
        """
        ...


@runtime_checkable
class ColorSink(Protocol):
    """Downstream device that mirrors colors."""

    name: str

    async def apply_color(self, color: ColorRGB) -> bool:
        ...

    async def apply_effect(self, name: str) -> bool:
        ...
