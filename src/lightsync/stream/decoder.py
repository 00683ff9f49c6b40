"""
Push-stream frame decoding.

The Nanoleaf event stream is server-sent-events shaped text:

    id: 1
    data: {"events":[{"attr":2,"value":50},{"attr":3,"value":120}]}
    <blank line>

The variant used here carries the event *type* in the ``id:`` field rather
than ``event:``, so ``id:`` is authoritative for the type of a frame.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Optional

import structlog

from lightsync.core.exceptions import FrameDecodeError
from lightsync.core.state import Attribute, StateDelta

logger = structlog.get_logger()

DATA_PREFIX = "data:"
ID_PREFIX = "id:"
EVENT_PREFIX = "event:"
COMMENT_PREFIX = ":"

STATE_EVENT_TYPE = "1"

_NUMERIC_ATTRIBUTES = frozenset(
    {Attribute.BRIGHTNESS, Attribute.HUE, Attribute.SATURATION}
)


@dataclass(frozen=True)
class Frame:
    """One complete event, delimited by a blank line."""

    event_type: Optional[str]
    data: str

    @property
    def is_state(self) -> bool:
        """True for state frames; a frame without a type is assumed to be one."""
        return self.event_type is None or self.event_type == STATE_EVENT_TYPE


class FrameDecoder:
    """
    Reassembles frames from individual stream lines.

    Not thread-safe; one decoder belongs to one stream session.
    """

    def __init__(self) -> None:
        self._data: list[str] = []
        self._id_type: Optional[str] = None
        self._event_type: Optional[str] = None

    def feed_line(self, line: str) -> Optional[Frame]:
        """Consume one line; return a Frame when a blank line completes one."""
        line = line.rstrip("\r\n")

        if not line.strip():
            return self._flush()

        if line.startswith(DATA_PREFIX):
            self._data.append(line[len(DATA_PREFIX):].strip())
        elif line.startswith(ID_PREFIX):
            self._id_type = line[len(ID_PREFIX):].strip()
        elif line.startswith(EVENT_PREFIX):
            self._event_type = line[len(EVENT_PREFIX):].strip()
        # Comments and unknown fields are ignored.
        return None

    def reset(self) -> None:
        self._data = []
        self._id_type = None
        self._event_type = None

    def _flush(self) -> Optional[Frame]:
        data = "".join(self._data)
        event_type = self._id_type if self._id_type is not None else self._event_type
        self.reset()
        if not data:
            return None
        return Frame(event_type=event_type or None, data=data)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _coerce_numeric(value: Any) -> Optional[int]:
    if _is_int(value):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def parse_frame_payload(data: str) -> list[StateDelta]:
    """
    Parse a state frame payload into deltas, in payload order.

    Malformed individual entries are skipped. A payload that is not a JSON
    object with an ``events`` list raises FrameDecodeError.
    """
    try:
        root = json.loads(data)
    except json.JSONDecodeError as e:
        raise FrameDecodeError(f"invalid JSON: {e}", payload=data) from e

    if not isinstance(root, dict):
        raise FrameDecodeError("payload is not an object", payload=data)

    entries = root.get("events")
    if not isinstance(entries, list):
        raise FrameDecodeError("missing 'events' list", payload=data)

    deltas: list[StateDelta] = []
    for entry in entries:
        if not isinstance(entry, dict) or "attr" not in entry or "value" not in entry:
            continue

        attr_id = entry["attr"]
        if not _is_int(attr_id):
            continue
        try:
            attribute = Attribute(attr_id)
        except ValueError:
            continue

        value = entry["value"]
        if attribute is Attribute.POWER:
            if isinstance(value, bool):
                deltas.append(StateDelta(attribute, value))
            continue

        if attribute in _NUMERIC_ATTRIBUTES:
            number = _coerce_numeric(value)
            if number is None:
                logger.debug("Skipping non-numeric value", attr=attr_id, value=value)
                continue
            deltas.append(StateDelta(attribute, number))

    return deltas
