"""
State Accumulator: folds stream deltas into the latest known color.

Emits a ColorChangeEvent at the end of a frame's batch when the batch
changed something and the color is complete.
"""

from __future__ import annotations

from typing import Iterable, Optional

import structlog

from lightsync.color.convert import hsb_color_to_rgb
from lightsync.core.state import (
    BLACK,
    AccumulatedState,
    Attribute,
    ColorChangeEvent,
    PowerOffPolicy,
    StateDelta,
)

logger = structlog.get_logger()

_FIELDS = {
    Attribute.POWER: "power",
    Attribute.BRIGHTNESS: "brightness",
    Attribute.HUE: "hue",
    Attribute.SATURATION: "saturation",
}


class StateAccumulator:
    """
    Owns the AccumulatedState for one stream session.

    Redundant pushes (same attribute, same value) are deduplicated, so a
    repeated frame never produces a second event.
    """

    def __init__(
        self,
        power_policy: PowerOffPolicy = PowerOffPolicy.IGNORE,
        initial: Optional[AccumulatedState] = None,
    ):
        self.power_policy = PowerOffPolicy(power_policy)
        self._state = initial.copy() if initial is not None else AccumulatedState()

    @property
    def state(self) -> AccumulatedState:
        return self._state

    def snapshot(self) -> AccumulatedState:
        return self._state.copy()

    def apply(self, deltas: Iterable[StateDelta]) -> Optional[ColorChangeEvent]:
        """Apply one frame's deltas and return the resulting event, if any."""
        changed = False
        power_changed = False

        for delta in deltas:
            field = _FIELDS[delta.attribute]
            if getattr(self._state, field) == delta.value:
                continue
            setattr(self._state, field, delta.value)

            if delta.attribute is Attribute.POWER:
                logger.debug("Source power changed", on=delta.value)
                power_changed = True
                if self.power_policy is not PowerOffPolicy.IGNORE:
                    changed = True
            else:
                changed = True

        if not changed:
            return None
        return self._build_event(power_changed)

    def _build_event(self, power_changed: bool) -> Optional[ColorChangeEvent]:
        is_off = self._state.power is False

        if is_off and self.power_policy is PowerOffPolicy.SUPPRESS:
            return None
        if is_off and self.power_policy is PowerOffPolicy.BLACKOUT:
            # Black goes out once, on the off transition.
            return ColorChangeEvent(rgb=BLACK) if power_changed else None

        hsb = self._state.hsb
        if hsb is None:
            return None
        return ColorChangeEvent(rgb=hsb_color_to_rgb(hsb), hsb=hsb)
