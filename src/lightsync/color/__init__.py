"""Color model helpers."""

from lightsync.color.convert import (
    CHANNEL_MAX,
    HUE_DEGREES,
    PERCENT_MAX,
    hsb_color_to_rgb,
    hsb_to_rgb,
    rgb_color_to_hsb,
    rgb_to_hsb,
    round_half_up,
)

__all__ = [
    "CHANNEL_MAX",
    "HUE_DEGREES",
    "PERCENT_MAX",
    "hsb_color_to_rgb",
    "hsb_to_rgb",
    "rgb_color_to_hsb",
    "rgb_to_hsb",
    "round_half_up",
]
