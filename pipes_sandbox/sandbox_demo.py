"""Headless demonstration harness for the pipes sandbox."""
from __future__ import annotations

import argparse
import logging
import sys
from typing import Sequence, TextIO

from .errors import ConfigurationError
from .sinks import FanOutSink, JsonlSegmentSink, LoggingSink, SegmentSink
from .src.generation import GenerationSeeds, load_generation_config, load_growth_settings, run_session

LOGGER = logging.getLogger(__name__)

EXIT_EXHAUSTED = 2


def create_parser() -> argparse.ArgumentParser:
    # //1.- Construct the top-level parser shared across tests and runtime execution.
    parser = argparse.ArgumentParser(description="Grow a pipe through a bounded 3D lattice")
    parser.add_argument("--config-dir", help="Directory holding growth.json (default: bundled config)")
    parser.add_argument("--ticks", type=int, help="Number of host ticks to run (default: tick_count setting)")
    parser.add_argument("--seed", type=int, help="Seed every subsystem; otherwise PIPES_* environment seeds apply")
    parser.add_argument("--jsonl", default="-", help="Write segments as JSON lines to this path (default: stdout)")
    parser.add_argument("--log-level", default="WARNING", help="Logging level for diagnostics")
    parser.add_argument("--log-segments", action="store_true", help="Also report every segment through logging")
    return parser


def _open_output(path: str) -> TextIO:
    return sys.stdout if path == "-" else open(path, "w", encoding="utf-8")


def run(args: Sequence[str] | None = None) -> int:
    # //2.- Parse arguments, run one session, and report how it ended.
    parsed = create_parser().parse_args(args)
    logging.basicConfig(
        level=getattr(logging, str(parsed.log_level).upper(), logging.WARNING),
        format="[%(asctime)s] %(levelname)s %(message)s",
    )
    try:
        settings = load_growth_settings(parsed.config_dir)
    except (ConfigurationError, OSError) as exc:
        LOGGER.error("Failed to load growth settings: %s", exc)
        return 1
    seeds = GenerationSeeds.uniform(parsed.seed) if parsed.seed is not None else load_generation_config()
    ticks = parsed.ticks if parsed.ticks is not None else settings.session.tick_count

    output = _open_output(parsed.jsonl)
    try:
        sinks: list[SegmentSink] = [JsonlSegmentSink(output)]
        if parsed.log_segments:
            sinks.append(LoggingSink())
        sink = FanOutSink(sinks)
        engine, _ = run_session(settings.growth, seeds, ticks=ticks, sink=sink)
    finally:
        if output is not sys.stdout:
            output.close()

    session = engine.session
    print(
        f"segments={session.segments} stalls={session.stalls} "
        f"relocations={session.relocations} occupied={len(engine.occupancy)} "
        f"state={engine.state.value}",
        file=sys.stderr,
    )
    # //3.- A session that ran out of relocation attempts is reported through the exit code.
    return EXIT_EXHAUSTED if engine.exhausted else 0


def main() -> int:
    """Console script entry point."""

    return run()


if __name__ == "__main__":  # pragma: no cover - exercised via ``python -m`` execution
    raise SystemExit(main())
