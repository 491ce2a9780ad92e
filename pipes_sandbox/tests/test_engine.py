"""Tests for the tick-driven growth engine."""
from __future__ import annotations

import logging
import random
from typing import Optional

import pytest

from pipes_sandbox.engine import GrowthConfig, GrowthEngine, GrowthState, TickOutcome
from pipes_sandbox.errors import ConfigurationError, RelocationExhausted
from pipes_sandbox.lattice import BoundingBox, Direction, Lattice
from pipes_sandbox.occupancy import Occupancy
from pipes_sandbox.relocation import RelocationSearch
from pipes_sandbox.sampler import DirectionChoice, DirectionSampler
from pipes_sandbox.sinks import RecordingSink
from pipes_sandbox.vector import Vector3


def _engine(config: GrowthConfig, seed: int = 0) -> tuple[GrowthEngine, RecordingSink]:
    sink = RecordingSink()
    return GrowthEngine(config, sink, rng=random.Random(seed)), sink


class ScriptedSampler(DirectionSampler):
    """Reports a stuck tip whenever the queue says so, otherwise samples normally."""

    def __init__(self, lattice: Lattice, stuck: list[bool]) -> None:
        super().__init__(lattice, random.Random(0))
        self._stuck = list(stuck)

    def choose(self, tip: Vector3, occupancy: Occupancy, box: BoundingBox) -> Optional[DirectionChoice]:
        if self._stuck and self._stuck.pop(0):
            return None
        return super().choose(tip, occupancy, box)

    def any_direction(self) -> Direction:
        return Direction.RIGHT


class ScriptedRelocation(RelocationSearch):
    """Hands out fixed cells and remembers whether each was free when found."""

    def __init__(self, lattice: Lattice, targets: list[Vector3]) -> None:
        super().__init__(lattice, random.Random(0))
        self._targets = list(targets)
        self.free_when_found: list[bool] = []

    def find(self, occupancy: Occupancy, box: BoundingBox) -> Vector3:
        target = self._targets.pop(0)
        self.free_when_found.append(not occupancy.contains(target))
        self.last_attempts = 1
        return target


# //1.- The first tick starts at the origin and emits the opening segment.
def test_first_tick_starts_session_at_origin():
    engine, sink = _engine(GrowthConfig(), seed=4)
    assert engine.state is GrowthState.INITIALIZING
    result = engine.tick()
    assert result.outcome is TickOutcome.STARTED
    assert engine.state is GrowthState.GROWING
    assert sink.events[0].start == Vector3.zero()
    assert result.segment is sink.events[0]
    session = engine.session
    assert session.tip_direction is result.segment.direction
    assert session.tip_position == result.segment.end
    assert len(engine.occupancy) == 2
    assert all(0.0 <= channel <= 1.0 for channel in session.color)


# //2.- Each growth step starts where the previous one ended and keeps the colour.
def test_growth_steps_are_connected():
    engine, sink = _engine(GrowthConfig(), seed=8)
    results = engine.run(30)
    grew = [result for result in results if result.outcome is TickOutcome.GREW]
    assert grew
    for previous, current in zip(sink.events, sink.events[1:]):
        if current.color == previous.color:
            assert current.start == previous.end
    assert engine.session.segments == len(sink.events)


# //3.- Lattice, bounds and overlap invariants hold across long sessions for both stores.
@pytest.mark.parametrize("occupancy", ["set", "grid"])
def test_long_session_invariants(occupancy):
    config = GrowthConfig(
        step_length=2.0,
        range_length=10.0,
        range_width=10.0,
        range_height=10.0,
        occupancy=occupancy,
    )
    engine, sink = _engine(config, seed=21)
    engine.run(2000)
    lattice = config.lattice
    box = config.box
    keys = [lattice.key_for(event.start) for event in sink.events]
    assert len(keys) == len(set(keys))
    for event in sink.events:
        assert lattice.is_on_lattice(event.start)
        assert box.contains(event.start)
        assert event.length == config.step_length
    assert len(engine.occupancy) <= lattice.cell_count(box)


# //4.- Stalls are logged and recovered by relocating within the same tick.
def test_stall_triggers_relocation(caplog):
    caplog.set_level(logging.WARNING, logger="pipes_sandbox.engine")
    config = GrowthConfig(step_length=2.0, range_length=4.0, range_width=4.0, range_height=4.0)
    engine, _ = _engine(config, seed=2)
    results = engine.run(500)
    assert engine.session.stalls >= 1
    assert any(result.stalled for result in results)
    assert "No available direction to generate new pipe" in caplog.text
    relocated = [result for result in results if result.outcome is TickOutcome.RELOCATED]
    assert engine.session.relocations == len(relocated)
    assert engine.state in (GrowthState.GROWING, GrowthState.EXHAUSTED)


# //5.- Exhaustion is terminal: later ticks report it without sampling again.
def test_exhausted_session_stays_exhausted(caplog):
    caplog.set_level(logging.ERROR, logger="pipes_sandbox.engine")
    config = GrowthConfig(step_length=2.0, range_length=2.0, range_width=2.0, range_height=2.0)
    engine, sink = _engine(config, seed=1)
    results = engine.run(50)
    assert [result.outcome for result in results] == [TickOutcome.STARTED, TickOutcome.EXHAUSTED]
    assert isinstance(results[-1].error, RelocationExhausted)
    assert engine.exhausted
    assert "Unable to find a new starting position" in caplog.text
    emitted = len(sink.events)
    for _ in range(5):
        again = engine.tick()
        assert again.outcome is TickOutcome.EXHAUSTED
        assert again.error is results[-1].error
    assert len(sink.events) == emitted == 1


def test_default_engine_records_segments():
    engine = GrowthEngine(GrowthConfig())
    engine.tick()
    assert isinstance(engine.sink, RecordingSink)
    assert len(engine.sink) == 1
    assert engine.session.tip_direction in set(Direction)


@pytest.mark.parametrize(
    "overrides",
    [
        {"step_length": 0},
        {"step_length": -2.0},
        {"range_length": 0.0},
        {"range_height": -1.0},
        {"relocation_attempt_budget": 0},
        {"occupancy": "bitset"},
    ],
)
def test_invalid_config_is_rejected(overrides):
    with pytest.raises(ConfigurationError):
        GrowthConfig(**overrides)


def test_config_from_mapping_coerces_and_validates():
    config = GrowthConfig.from_mapping({"step_length": "1.5", "range_width": 9, "occupancy": "grid"})
    assert config.step_length == 1.5
    assert config.range_width == 9.0
    assert config.range_length == 20.0
    assert config.relocation_attempt_budget == 100
    with pytest.raises(ConfigurationError):
        GrowthConfig.from_mapping({"step_length": "wide"})


def test_config_from_mapping_rejects_fractional_budget():
    assert GrowthConfig.from_mapping({"relocation_attempt_budget": 40.0}).relocation_attempt_budget == 40
    assert GrowthConfig.from_mapping({"relocation_attempt_budget": "25"}).relocation_attempt_budget == 25
    for value in (2.7, "2.7", True, None, [3]):
        with pytest.raises(ConfigurationError):
            GrowthConfig.from_mapping({"relocation_attempt_budget": value})


# //6.- A relocated pipe restarts at the found cell with a fresh colour.
def test_relocated_segment_starts_at_found_cell():
    config = GrowthConfig()
    lattice = config.lattice
    target = Vector3(-6.0, 4.0, 2.0)
    relocation = ScriptedRelocation(lattice, [target])
    sink = RecordingSink()
    engine = GrowthEngine(
        config,
        sink,
        rng=random.Random(1),
        color_rng=random.Random(3),
        sampler=ScriptedSampler(lattice, [True, False]),
        relocation=relocation,
    )
    first = engine.tick()
    assert first.segment.end == Vector3(2.0, 0.0, 0.0)
    assert not engine.occupancy.contains(target)

    result = engine.tick()
    assert result.outcome is TickOutcome.RELOCATED
    assert result.stalled
    assert result.segment is not None
    assert result.segment.start == target
    assert result.segment.start != first.segment.end
    assert result.segment.color != first.segment.color
    assert result.segment.color == engine.session.color
    assert relocation.free_when_found == [True]
    assert engine.occupancy.contains(target)
    assert engine.occupancy.contains(result.segment.end)
    assert engine.session.tip_position == result.segment.end
    assert engine.session.stalls == 1
    assert engine.session.relocations == 1
    assert engine.state is GrowthState.GROWING
    assert sink.events == [first.segment, result.segment]


# //7.- An enclosed relocation cell emits nothing and the following tick stalls again.
def test_enclosed_relocation_stalls_on_next_tick(caplog):
    caplog.set_level(logging.DEBUG, logger="pipes_sandbox.engine")
    config = GrowthConfig()
    lattice = config.lattice
    enclosed = Vector3(8.0, -2.0, 0.0)
    second = Vector3(-4.0, 0.0, 6.0)
    relocation = ScriptedRelocation(lattice, [enclosed, second])
    sink = RecordingSink()
    engine = GrowthEngine(
        config,
        sink,
        rng=random.Random(1),
        sampler=ScriptedSampler(lattice, [True, True, True, False]),
        relocation=relocation,
    )
    engine.tick()

    result = engine.tick()
    assert result.outcome is TickOutcome.RELOCATED
    assert result.segment is None
    assert result.stalled
    assert engine.state is GrowthState.GROWING
    assert engine.session.tip_position == enclosed
    assert engine.session.tip_direction is Direction.RIGHT
    assert engine.occupancy.contains(enclosed)
    assert len(engine.occupancy) == 3
    assert len(sink.events) == 1
    assert "is enclosed" in caplog.text

    again = engine.tick()
    assert again.outcome is TickOutcome.RELOCATED
    assert again.stalled
    assert engine.session.stalls == 2
    assert engine.session.relocations == 2
    assert again.segment is not None
    assert again.segment.start == second
    assert relocation.free_when_found == [True, True]
    assert len(sink.events) == 2


# //8.- Sessions on a 0.1 lattice fill the wall cells without leaving the box.
def test_non_dyadic_step_session_stays_in_box():
    config = GrowthConfig(step_length=0.1, range_length=0.6, range_width=0.6, range_height=0.6)
    engine, sink = _engine(config, seed=13)
    engine.run(3000)
    lattice = config.lattice
    box = config.box
    keys = [lattice.key_for(event.start) for event in sink.events]
    assert len(keys) == len(set(keys))
    for event in sink.events:
        assert box.contains(event.start)
        assert box.contains(event.end)
    assert any(max(abs(k) for k in key) == 3 for key in keys)
    assert len(engine.occupancy) <= lattice.cell_count(box)
