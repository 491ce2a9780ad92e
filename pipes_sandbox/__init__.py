"""Pipes sandbox package.

Grows a single connected pipe through a bounded 3D lattice, one segment
per host tick, in the spirit of the classic pipes screensaver. Rendering
lives elsewhere: the engine only reports segments to a sink.
"""

from .vector import Vector3
from .errors import PipesError, ConfigurationError, RelocationExhausted
from .lattice import ALL_DIRECTIONS, BoundingBox, Direction, Lattice, in_bounds, offset_for
from .occupancy import LatticeGrid, Occupancy, OccupancySet, build_occupancy
from .sampler import DirectionChoice, DirectionSampler, RandomSource
from .relocation import DEFAULT_ATTEMPT_BUDGET, RelocationSearch
from .sinks import FanOutSink, JsonlSegmentSink, LoggingSink, RecordingSink, SegmentEvent, SegmentSink
from .engine import GrowthConfig, GrowthEngine, GrowthSession, GrowthState, TickOutcome, TickResult

__all__ = [
    "Vector3",
    "PipesError",
    "ConfigurationError",
    "RelocationExhausted",
    "ALL_DIRECTIONS",
    "BoundingBox",
    "Direction",
    "Lattice",
    "in_bounds",
    "offset_for",
    "LatticeGrid",
    "Occupancy",
    "OccupancySet",
    "build_occupancy",
    "DirectionChoice",
    "DirectionSampler",
    "RandomSource",
    "DEFAULT_ATTEMPT_BUDGET",
    "RelocationSearch",
    "FanOutSink",
    "JsonlSegmentSink",
    "LoggingSink",
    "RecordingSink",
    "SegmentEvent",
    "SegmentSink",
    "GrowthConfig",
    "GrowthEngine",
    "GrowthSession",
    "GrowthState",
    "TickOutcome",
    "TickResult",
]
