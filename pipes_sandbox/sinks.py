"""Segment events and the sinks that consume them."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Protocol, TextIO, Tuple

from .lattice import Direction, offset_for
from .vector import Vector3

LOGGER = logging.getLogger(__name__)

ColorTag = Tuple[float, float, float]


@dataclass(frozen=True)
class SegmentEvent:
    """One unit of pipe from ``start`` along ``direction``."""

    index: int
    start: Vector3
    direction: Direction
    color: ColorTag
    length: float

    @property
    def end(self) -> Vector3:
        return self.start + offset_for(self.direction) * self.length

    def as_payload(self) -> Dict[str, object]:
        return {
            "type": "segment",
            "index": self.index,
            "start": list(self.start.as_tuple()),
            "end": list(self.end.as_tuple()),
            "direction": self.direction.label,
            "color": list(self.color),
        }


class SegmentSink(Protocol):
    """Protocol describing the renderer-facing consumer of segments."""

    def emit(self, event: SegmentEvent) -> None:
        """Receive a freshly grown segment; fire-and-forget."""


@dataclass
class RecordingSink:
    """Keeps every emitted event in memory for tests and metrics."""

    events: List[SegmentEvent] = field(default_factory=list)

    def emit(self, event: SegmentEvent) -> None:
        self.events.append(event)

    def __len__(self) -> int:
        return len(self.events)


class JsonlSegmentSink:
    """Writes one JSON object per segment to ``handle``."""

    def __init__(self, handle: TextIO) -> None:
        self._handle = handle

    def emit(self, event: SegmentEvent) -> None:
        # //1.- Flush per line so a tailing consumer sees segments as they grow.
        self._handle.write(json.dumps(event.as_payload()) + "\n")
        self._handle.flush()


class LoggingSink:
    """Reports segments through :mod:`logging` for headless runs."""

    def __init__(self, level: int = logging.INFO) -> None:
        self._level = level

    def emit(self, event: SegmentEvent) -> None:
        LOGGER.log(
            self._level,
            "Segment %d from %s heading %s",
            event.index,
            event.start,
            event.direction.label,
        )


class FanOutSink:
    """Forwards every event to each wrapped sink in order."""

    def __init__(self, sinks: Iterable[SegmentSink]) -> None:
        self._sinks = tuple(sinks)

    def emit(self, event: SegmentEvent) -> None:
        for sink in self._sinks:
            sink.emit(event)
