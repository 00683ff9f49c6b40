"""HSB <-> RGB conversion with fixed rounding rules."""

from __future__ import annotations

import math

from lightsync.core.state import ColorHSB, ColorRGB

HUE_DEGREES = 360
SECTOR_DEGREES = 60
PERCENT_MAX = 100
CHANNEL_MAX = 255


def round_half_up(value: float) -> int:
    """
    Round to the nearest integer, halves away from zero.

    Every value converted here is non-negative, so this is floor(x + 0.5).
    """
    return int(math.floor(value + 0.5))


def _clamp_fraction(percent: float) -> float:
    return max(0.0, min(1.0, percent / PERCENT_MAX))


def hsb_to_rgb(h: int, s: int, b: int) -> ColorRGB:
    """
    Convert hue (degrees), saturation and brightness (percent) to RGB.

    Hue wraps modulo 360, saturation and brightness clamp to 0-100. A hue on
    an exact multiple of 60 starts the next sector with fraction 0, so the
    sector boundaries stay continuous.
    """
    hue = h % HUE_DEGREES
    sat = _clamp_fraction(s)
    bri = _clamp_fraction(b)

    if sat == 0:
        gray = round_half_up(bri * CHANNEL_MAX)
        return ColorRGB(gray, gray, gray)

    position = hue / SECTOR_DEGREES
    sector = int(math.floor(position)) % 6
    fraction = position - math.floor(position)

    p = bri * (1 - sat)
    q = bri * (1 - fraction * sat)
    t = bri * (1 - (1 - fraction) * sat)

    if sector == 0:
        r, g, bl = bri, t, p
    elif sector == 1:
        r, g, bl = q, bri, p
    elif sector == 2:
        r, g, bl = p, bri, t
    elif sector == 3:
        r, g, bl = p, q, bri
    elif sector == 4:
        r, g, bl = t, p, bri
    else:
        r, g, bl = bri, p, q

    return ColorRGB(
        round_half_up(r * CHANNEL_MAX),
        round_half_up(g * CHANNEL_MAX),
        round_half_up(bl * CHANNEL_MAX),
    )


def rgb_to_hsb(r: int, g: int, b: int) -> ColorHSB:
    """
    Convert 0-255 RGB channels to integer hue, saturation and brightness.

    On ties the red branch wins over green, green over blue.
    """
    red = r / CHANNEL_MAX
    green = g / CHANNEL_MAX
    blue = b / CHANNEL_MAX

    high = max(red, green, blue)
    low = min(red, green, blue)
    delta = high - low

    sectors = 0.0
    if delta != 0:
        if high == red:
            sectors = ((green - blue) / delta) % 6
        elif high == green:
            sectors = (blue - red) / delta + 2
        else:
            sectors = (red - green) / delta + 4

    hue = round_half_up(sectors * SECTOR_DEGREES) % HUE_DEGREES
    saturation = 0.0 if high == 0 else delta / high

    return ColorHSB(
        hue,
        round_half_up(saturation * PERCENT_MAX),
        round_half_up(high * PERCENT_MAX),
    )


def hsb_color_to_rgb(color: ColorHSB) -> ColorRGB:
    return hsb_to_rgb(color.hue, color.saturation, color.brightness)


def rgb_color_to_hsb(color: ColorRGB) -> ColorHSB:
    return rgb_to_hsb(color.r, color.g, color.b)
