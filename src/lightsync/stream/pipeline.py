"""
Event Pipeline: decoder plus accumulator for a single stream session.

A new pipeline is created for every connection so that state from a dropped
stream never leaks into the next one unless explicitly seeded.
"""

from __future__ import annotations

from typing import Optional

import structlog

from lightsync.core.exceptions import FrameDecodeError
from lightsync.core.state import AccumulatedState, ColorChangeEvent, PowerOffPolicy
from lightsync.stream.accumulator import StateAccumulator
from lightsync.stream.decoder import FrameDecoder, parse_frame_payload

logger = structlog.get_logger()


class EventPipeline:
    """Turns raw stream lines into ColorChangeEvents."""

    def __init__(
        self,
        power_policy: PowerOffPolicy = PowerOffPolicy.IGNORE,
        initial: Optional[AccumulatedState] = None,
    ):
        self.decoder = FrameDecoder()
        self.accumulator = StateAccumulator(power_policy, initial=initial)

        # Stats
        self._lines = 0
        self._frames = 0
        self._skipped_frames = 0
        self._decode_errors = 0
        self._events = 0

    def feed_line(self, line: str) -> Optional[ColorChangeEvent]:
        """Process one line; return an event when it completes a changed color."""
        self._lines += 1
        frame = self.decoder.feed_line(line)
        if frame is None:
            return None

        self._frames += 1
        if not frame.is_state:
            self._skipped_frames += 1
            logger.debug("Skipping non-state frame", event_type=frame.event_type)
            return None

        try:
            deltas = parse_frame_payload(frame.data)
        except FrameDecodeError as e:
            self._decode_errors += 1
            logger.warning("Dropping malformed frame", error=e.reason, data=frame.data)
            return None

        event = self.accumulator.apply(deltas)
        if event is not None:
            self._events += 1
            logger.debug("Color changed", rgb=event.rgb.as_tuple(), hsb=event.hsb)
        return event

    def get_stats(self) -> dict:
        """Get decoding statistics."""
        return {
            "lines": self._lines,
            "frames": self._frames,
            "skipped_frames": self._skipped_frames,
            "decode_errors": self._decode_errors,
            "events": self._events,
        }
