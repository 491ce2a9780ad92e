"""Seeding, settings and metrics utilities for pipe growth sessions."""
from .config import GenerationSeeds, load_generation_config
from .settings import GrowthSettings, SessionSettings, load_growth_settings
from .session import build_seeded_engine, run_session
from .metrics import SessionMetrics, MetricsSummary, collect_growth_metrics, export_growth_metrics

__all__ = [
    "GenerationSeeds",
    "load_generation_config",
    "GrowthSettings",
    "SessionSettings",
    "load_growth_settings",
    "build_seeded_engine",
    "run_session",
    "SessionMetrics",
    "MetricsSummary",
    "collect_growth_metrics",
    "export_growth_metrics",
]
