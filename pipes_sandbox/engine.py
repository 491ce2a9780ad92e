"""Tick-driven growth engine extending a single pipe through the lattice.

The engine owns the growth session and the occupancy record. Each call to
:meth:`GrowthEngine.tick` runs exactly one discrete step to completion:

* the first tick starts the session at the origin,
* later ticks extend the tip along a uniformly chosen free direction,
* a tip boxed in on all six sides triggers a relocation within that same
  tick,
* a relocation that runs out of attempts ends the session for good.
"""
from __future__ import annotations

import enum
import logging
import math
import random
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional

from .errors import ConfigurationError, RelocationExhausted
from .lattice import BoundingBox, Direction, Lattice
from .occupancy import Occupancy, build_occupancy
from .relocation import DEFAULT_ATTEMPT_BUDGET, RelocationSearch
from .sampler import DirectionSampler, RandomSource
from .sinks import ColorTag, RecordingSink, SegmentEvent, SegmentSink
from .vector import Vector3

LOGGER = logging.getLogger(__name__)

OCCUPANCY_KINDS = ("set", "grid")


def _integral(value: Any, name: str) -> int:
    # Whole-number floats such as 100.0 are accepted; 2.7 is not silently truncated.
    if isinstance(value, bool):
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")
    if isinstance(value, float):
        if not value.is_integer():
            raise ConfigurationError(f"{name} must be an integer, got {value!r}")
        return int(value)
    if isinstance(value, str):
        return int(value.strip())
    if isinstance(value, int):
        return value
    raise ConfigurationError(f"{name} must be an integer, got {value!r}")


@dataclass(frozen=True)
class GrowthConfig:
    """Immutable session parameters validated on construction."""

    step_length: float = 2.0
    range_length: float = 20.0
    range_width: float = 20.0
    range_height: float = 20.0
    relocation_attempt_budget: int = DEFAULT_ATTEMPT_BUDGET
    occupancy: str = "set"

    def __post_init__(self) -> None:
        # //1.- Reject every malformed value before an engine can be built from it.
        for name in ("step_length", "range_length", "range_width", "range_height"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ConfigurationError(f"{name} must be a number")
            if not math.isfinite(value) or value <= 0:
                raise ConfigurationError(f"{name} must be positive, got {value!r}")
        budget = self.relocation_attempt_budget
        if isinstance(budget, bool) or not isinstance(budget, int) or budget <= 0:
            raise ConfigurationError("relocation_attempt_budget must be a positive integer")
        if self.occupancy not in OCCUPANCY_KINDS:
            raise ConfigurationError(f"occupancy must be one of {OCCUPANCY_KINDS}, got {self.occupancy!r}")

    @property
    def box(self) -> BoundingBox:
        return BoundingBox(self.range_length, self.range_width, self.range_height)

    @property
    def lattice(self) -> Lattice:
        return Lattice(self.step_length)

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "GrowthConfig":
        defaults = cls()
        try:
            return cls(
                step_length=float(payload.get("step_length", defaults.step_length)),
                range_length=float(payload.get("range_length", defaults.range_length)),
                range_width=float(payload.get("range_width", defaults.range_width)),
                range_height=float(payload.get("range_height", defaults.range_height)),
                relocation_attempt_budget=_integral(
                    payload.get("relocation_attempt_budget", defaults.relocation_attempt_budget),
                    "relocation_attempt_budget",
                ),
                occupancy=str(payload.get("occupancy", defaults.occupancy)),
            )
        except (TypeError, ValueError) as exc:
            if isinstance(exc, ConfigurationError):
                raise
            raise ConfigurationError(f"invalid growth configuration: {exc}") from exc


class GrowthState(enum.Enum):
    INITIALIZING = "initializing"
    GROWING = "growing"
    RELOCATING = "relocating"
    EXHAUSTED = "exhausted"


class TickOutcome(enum.Enum):
    STARTED = "started"
    GREW = "grew"
    RELOCATED = "relocated"
    EXHAUSTED = "exhausted"


@dataclass(frozen=True)
class TickResult:
    """What a single tick did, for hosts that care."""

    outcome: TickOutcome
    segment: Optional[SegmentEvent] = None
    error: Optional[RelocationExhausted] = None
    stalled: bool = False


@dataclass
class GrowthSession:
    """Mutable tip state; only the owning engine writes to it."""

    tip_position: Vector3 = field(default_factory=Vector3.zero)
    tip_direction: Optional[Direction] = None
    color: ColorTag = (1.0, 1.0, 1.0)
    segments: int = 0
    stalls: int = 0
    relocations: int = 0


def random_color(rng: RandomSource) -> ColorTag:
    return (rng.uniform(0.0, 1.0), rng.uniform(0.0, 1.0), rng.uniform(0.0, 1.0))


class GrowthEngine:
    """Owns one growth session and advances it one step per tick."""

    def __init__(
        self,
        config: GrowthConfig,
        sink: Optional[SegmentSink] = None,
        *,
        rng: Optional[RandomSource] = None,
        color_rng: Optional[RandomSource] = None,
        sampler: Optional[DirectionSampler] = None,
        relocation: Optional[RelocationSearch] = None,
    ) -> None:
        self._config = config
        self._lattice = config.lattice
        self._box = config.box
        source = rng if rng is not None else random.Random()
        self._sink: SegmentSink = sink if sink is not None else RecordingSink()
        self._color_rng = color_rng if color_rng is not None else source
        self._sampler = sampler if sampler is not None else DirectionSampler(self._lattice, source)
        self._relocation = (
            relocation
            if relocation is not None
            else RelocationSearch(
                self._lattice,
                source,
                attempt_budget=config.relocation_attempt_budget,
            )
        )
        self._occupancy: Occupancy = build_occupancy(config.occupancy, self._lattice, self._box)
        self._session = GrowthSession()
        self._state = GrowthState.INITIALIZING
        self._error: Optional[RelocationExhausted] = None

    @property
    def config(self) -> GrowthConfig:
        return self._config

    @property
    def state(self) -> GrowthState:
        return self._state

    @property
    def session(self) -> GrowthSession:
        return self._session

    @property
    def occupancy(self) -> Occupancy:
        return self._occupancy

    @property
    def sink(self) -> SegmentSink:
        return self._sink

    @property
    def exhausted(self) -> bool:
        return self._state is GrowthState.EXHAUSTED

    def tick(self) -> TickResult:
        """Advance the state machine by exactly one step."""

        if self._state is GrowthState.INITIALIZING:
            return self._start()
        if self._state is GrowthState.EXHAUSTED:
            return TickResult(TickOutcome.EXHAUSTED, error=self._error)

        choice = self._sampler.choose(self._session.tip_position, self._occupancy, self._box)
        if choice is not None:
            segment = self._extend(choice.direction)
            return TickResult(TickOutcome.GREW, segment=segment)

        # //2.- A boxed in tip is recoverable: note it and relocate within this tick.
        self._session.stalls += 1
        LOGGER.warning("No available direction to generate new pipe from %s", self._session.tip_position)
        self._state = GrowthState.RELOCATING
        return self._relocate()

    def run(self, ticks: int) -> List[TickResult]:
        """Tick up to ``ticks`` times, stopping early once the session is exhausted."""

        results: List[TickResult] = []
        for _ in range(ticks):
            result = self.tick()
            results.append(result)
            if result.outcome is TickOutcome.EXHAUSTED:
                break
        return results

    def _start(self) -> TickResult:
        origin = Vector3.zero()
        self._session.tip_position = origin
        self._session.color = random_color(self._color_rng)
        self._occupancy.insert(origin)
        # //3.- The opening heading is unconstrained; only later steps are filtered.
        segment = self._extend(self._sampler.any_direction())
        self._state = GrowthState.GROWING
        LOGGER.info("Started pipe growth session heading %s", segment.direction.label)
        return TickResult(TickOutcome.STARTED, segment=segment)

    def _relocate(self) -> TickResult:
        """Restart the pipe at a random free cell and try to grow from it.

        The returned result is always ``RELOCATED`` unless the search is
        exhausted, but ``segment`` is ``None`` when the new cell has no free
        neighbour. The engine stays ``GROWING`` in that case and the next
        tick stalls and relocates again.
        """

        try:
            position = self._relocation.find(self._occupancy, self._box)
        except RelocationExhausted as exc:
            self._state = GrowthState.EXHAUSTED
            self._error = exc
            LOGGER.error("Unable to find a new starting position: %s", exc)
            return TickResult(TickOutcome.EXHAUSTED, error=exc, stalled=True)

        session = self._session
        session.relocations += 1
        session.tip_position = position
        session.color = random_color(self._color_rng)
        self._occupancy.insert(position)
        self._state = GrowthState.GROWING

        # //4.- Head off in a free direction so the restarted pipe never overlaps.
        choice = self._sampler.choose(position, self._occupancy, self._box)
        if choice is None:
            session.tip_direction = self._sampler.any_direction()
            LOGGER.debug("Relocated tip %s is enclosed; waiting for the next tick", position)
            return TickResult(TickOutcome.RELOCATED, stalled=True)
        segment = self._extend(choice.direction)
        return TickResult(TickOutcome.RELOCATED, segment=segment, stalled=True)

    def _extend(self, direction: Direction) -> SegmentEvent:
        session = self._session
        event = SegmentEvent(
            index=session.segments,
            start=session.tip_position,
            direction=direction,
            color=session.color,
            length=self._config.step_length,
        )
        self._sink.emit(event)
        session.segments += 1
        session.tip_position = self._lattice.step(session.tip_position, direction)
        session.tip_direction = direction
        self._occupancy.insert(session.tip_position)
        LOGGER.debug("Created pipe at %s with direction %s", event.start, direction.label)
        return event
