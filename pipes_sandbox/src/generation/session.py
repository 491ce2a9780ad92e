"""Helpers wiring seeds and settings into a ready growth engine."""
from __future__ import annotations

from typing import List, Optional

from ...engine import GrowthConfig, GrowthEngine, TickResult
from ...relocation import RelocationSearch
from ...sampler import DirectionSampler
from ...sinks import SegmentSink
from .config import GenerationSeeds


# //1.- Give each subsystem its own generator so reseeding one never shifts another.
def build_seeded_engine(
    config: GrowthConfig,
    seeds: GenerationSeeds,
    sink: Optional[SegmentSink] = None,
) -> GrowthEngine:
    generators = seeds.create_generators()
    lattice = config.lattice
    return GrowthEngine(
        config,
        sink,
        color_rng=generators["color"],
        sampler=DirectionSampler(lattice, generators["direction"]),
        relocation=RelocationSearch(
            lattice,
            generators["relocation"],
            attempt_budget=config.relocation_attempt_budget,
        ),
    )


# //2.- Drive a fresh session for a fixed number of host ticks.
def run_session(
    config: GrowthConfig,
    seeds: GenerationSeeds,
    *,
    ticks: int,
    sink: Optional[SegmentSink] = None,
) -> tuple[GrowthEngine, List[TickResult]]:
    engine = build_seeded_engine(config, seeds, sink)
    return engine, engine.run(ticks)
