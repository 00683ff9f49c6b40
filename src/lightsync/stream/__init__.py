"""Push-stream decoding and state accumulation."""

from lightsync.stream.accumulator import StateAccumulator
from lightsync.stream.decoder import Frame, FrameDecoder, parse_frame_payload
from lightsync.stream.pipeline import EventPipeline

__all__ = [
    "EventPipeline",
    "Frame",
    "FrameDecoder",
    "StateAccumulator",
    "parse_frame_payload",
]
