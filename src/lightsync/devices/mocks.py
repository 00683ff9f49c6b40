"""
Mock Devices for Testing.

Provides mock implementations of the Nanoleaf source and Cync sinks for
running the sync loop without real hardware.
"""

from __future__ import annotations

import asyncio
import json
from typing import AsyncIterator, Iterable, Optional, Sequence, Union

import structlog

from lightsync.core.state import Attribute, ColorRGB

logger = structlog.get_logger()


def build_state_frame(
    events: Sequence[tuple[Union[Attribute, int], Union[int, bool]]],
    event_type: Optional[str] = "1",
) -> list[str]:
    """Encode attribute/value pairs as the lines of one push-stream frame."""
    payload = {"events": [{"attr": int(attr), "value": value} for attr, value in events]}
    lines = []
    if event_type is not None:
        lines.append(f"id: {event_type}")
    lines.append(f"data: {json.dumps(payload)}")
    lines.append("")
    return lines


class MockNanoleafSource:
    """
    Mock Nanoleaf controller.

    Replays scripted lines when given, otherwise generates a slow hue sweep
    forever. Color and effect writes are recorded.
    """

    def __init__(
        self,
        lines: Optional[Iterable[str]] = None,
        interval_s: float = 0.5,
        hue_step: int = 15,
        name: str = "mock-nanoleaf",
    ) -> None:
        self.name = name
        self._lines = list(lines) if lines is not None else None
        self.interval_s = interval_s
        self.hue_step = hue_step
        self.colors: list[ColorRGB] = []
        self.effects: list[str] = []
        self.connections = 0

    async def stream_lines(self) -> AsyncIterator[str]:
        self.connections += 1
        logger.info("Mock Nanoleaf stream opened")

        if self._lines is not None:
            for line in self._lines:
                await asyncio.sleep(0)
                yield line
            return

        for line in build_state_frame(
            [(Attribute.POWER, True), (Attribute.BRIGHTNESS, 80), (Attribute.SATURATION, 100)]
        ):
            yield line

        hue = 0
        while True:
            for line in build_state_frame([(Attribute.HUE, hue)]):
                yield line
            hue = (hue + self.hue_step) % 360
            await asyncio.sleep(self.interval_s)

    async def apply_color(self, color: ColorRGB) -> bool:
        self.colors.append(color)
        return True

    async def apply_effect(self, name: str) -> bool:
        self.effects.append(name)
        return True


class MockSink:
    """Mock Cync sink that records every command."""

    def __init__(self, name: str = "mock-sink", fail: bool = False, delay_s: float = 0.0) -> None:
        self.name = name
        self.fail = fail
        self.delay_s = delay_s
        self.colors: list[ColorRGB] = []
        self.effects: list[str] = []

    async def apply_color(self, color: ColorRGB) -> bool:
        if self.delay_s:
            await asyncio.sleep(self.delay_s)
        if self.fail:
            return False
        self.colors.append(color)
        logger.info("Mock sink color", sink=self.name, rgb=color.as_tuple())
        return True

    async def apply_effect(self, name: str) -> bool:
        if self.fail:
            return False
        self.effects.append(name)
        return True
