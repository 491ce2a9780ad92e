"""Metrics export for verifying grown pipe sessions across seeds."""
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import List, Sequence

from ...engine import GrowthEngine
from ...sinks import RecordingSink
from .config import GenerationSeeds
from .session import run_session
from .settings import GrowthSettings


# //1.- Encapsulate per-seed metrics derived from a finished session.
@dataclass(frozen=True)
class SessionMetrics:
    seed: GenerationSeeds
    ticks: int
    segments: int
    stalls: int
    relocations: int
    occupied_cells: int
    fill_ratio: float
    exhausted: bool
    on_lattice: bool
    no_overlap: bool


# //2.- Aggregate statistics for a collection of seeds plus invariant summary.
@dataclass(frozen=True)
class MetricsSummary:
    metrics: Sequence[SessionMetrics]
    all_on_lattice: bool
    no_overlap: bool
    any_exhausted: bool


# //3.- Compute metrics for a single session from the engine and its recorded segments.
def _compute_metrics_for_session(
    engine: GrowthEngine,
    sink: RecordingSink,
    *,
    ticks: int,
    seeds: GenerationSeeds,
) -> SessionMetrics:
    lattice = engine.config.lattice
    starts = [lattice.key_for(event.start) for event in sink.events]
    on_lattice = all(lattice.is_on_lattice(event.start) for event in sink.events)
    cell_count = lattice.cell_count(engine.config.box)
    session = engine.session
    return SessionMetrics(
        seed=seeds,
        ticks=ticks,
        segments=session.segments,
        stalls=session.stalls,
        relocations=session.relocations,
        occupied_cells=len(engine.occupancy),
        fill_ratio=min(1.0, len(engine.occupancy) / cell_count),
        exhausted=engine.exhausted,
        on_lattice=on_lattice,
        no_overlap=len(starts) == len(set(starts)),
    )


# //4.- Orchestrate sessions across multiple seeds collecting metrics.
def collect_growth_metrics(
    *,
    seeds: Sequence[GenerationSeeds],
    settings: GrowthSettings,
) -> MetricsSummary:
    metrics: List[SessionMetrics] = []
    ticks = settings.session.tick_count
    for seed in seeds:
        sink = RecordingSink()
        engine, _ = run_session(settings.growth, seed, ticks=ticks, sink=sink)
        metrics.append(_compute_metrics_for_session(engine, sink, ticks=ticks, seeds=seed))
    return MetricsSummary(
        metrics=tuple(metrics),
        all_on_lattice=all(metric.on_lattice for metric in metrics),
        no_overlap=all(metric.no_overlap for metric in metrics),
        any_exhausted=any(metric.exhausted for metric in metrics),
    )


# //5.- Export metrics summary to JSON for CI validation or dashboards.
def export_growth_metrics(
    summary: MetricsSummary,
    *,
    filepath: str,
) -> None:
    payload = {
        "all_on_lattice": summary.all_on_lattice,
        "no_overlap": summary.no_overlap,
        "any_exhausted": summary.any_exhausted,
        "metrics": [
            {
                "direction_seed": metric.seed.direction_seed,
                "relocation_seed": metric.seed.relocation_seed,
                "color_seed": metric.seed.color_seed,
                "ticks": metric.ticks,
                "segments": metric.segments,
                "stalls": metric.stalls,
                "relocations": metric.relocations,
                "occupied_cells": metric.occupied_cells,
                "fill_ratio": metric.fill_ratio,
                "exhausted": metric.exhausted,
            }
            for metric in summary.metrics
        ],
    }
    with open(filepath, "w", encoding="utf-8") as handle:
        json.dump(payload, handle, indent=2)
