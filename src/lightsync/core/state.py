"""
State Definitions for LightSync.

This module defines the color values, stream deltas and session state that
flow from the source push stream through the accumulator to the sinks.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum, IntEnum
from typing import Optional, Union


class Attribute(IntEnum):
    """Nanoleaf state attribute ids carried in stream events."""

    POWER = 1
    BRIGHTNESS = 2
    HUE = 3
    SATURATION = 4


class PowerOffPolicy(str, Enum):
    """How an "off" power state affects color emission."""

    IGNORE = "ignore"  # track power, never gate emission
    SUPPRESS = "suppress"  # emit nothing while off
    BLACKOUT = "blackout"  # emit black while off


class SyncState(Enum):
    """Coordinator lifecycle."""

    IDLE = "idle"
    LISTENING = "listening"
    STOPPING = "stopping"


@dataclass(frozen=True)
class ColorRGB:
    """Additive color, each channel 0-255."""

    r: int
    g: int
    b: int

    def __post_init__(self) -> None:
        for channel, value in (("r", self.r), ("g", self.g), ("b", self.b)):
            if not 0 <= value <= 255:
                raise ValueError(f"RGB channel {channel} out of range: {value}")

    def as_tuple(self) -> tuple[int, int, int]:
        return (self.r, self.g, self.b)

    @property
    def hex(self) -> str:
        return f"#{self.r:02x}{self.g:02x}{self.b:02x}"


BLACK = ColorRGB(0, 0, 0)


@dataclass(frozen=True)
class ColorHSB:
    """Hue in degrees (0-359), saturation and brightness in percent (0-100)."""

    hue: int
    saturation: int
    brightness: int


@dataclass(frozen=True)
class StateDelta:
    """One attribute change extracted from a stream frame."""

    attribute: Attribute
    value: Union[int, bool]


@dataclass
class AccumulatedState:
    """
    Latest known source state for one stream session.

    Every field stays None until the source first reports it.
    """

    power: Optional[bool] = None
    hue: Optional[int] = None
    saturation: Optional[int] = None
    brightness: Optional[int] = None

    @property
    def hsb(self) -> Optional[ColorHSB]:
        """Complete HSB color, or None while any component is unknown."""
        if self.hue is None or self.saturation is None or self.brightness is None:
            return None
        return ColorHSB(self.hue, self.saturation, self.brightness)

    def copy(self) -> AccumulatedState:
        return replace(self)


@dataclass(frozen=True)
class ColorChangeEvent:
    """A complete color that changed versus the previous batch."""

    rgb: ColorRGB
    hsb: Optional[ColorHSB] = None
