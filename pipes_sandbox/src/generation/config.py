"""Seed helpers for deterministic pipe growth sessions."""
from __future__ import annotations

import os
import random
from dataclasses import dataclass
from typing import Dict, Optional

from ...errors import ConfigurationError


# //1.- Define dataclass to encapsulate generation seeds for reproducibility.
@dataclass(frozen=True)
class GenerationSeeds:
    """Seeds driving the stochastic parts of pipe growth."""

    direction_seed: int = 0
    relocation_seed: int = 0
    color_seed: int = 0

    # //2.- Build seeds from a mapping, defaulting every missing entry to zero.
    @classmethod
    def from_mapping(cls, payload: Optional[Dict[str, int]] = None) -> "GenerationSeeds":
        if not payload:
            return cls()
        try:
            return cls(
                direction_seed=int(payload.get("direction_seed", 0)),
                relocation_seed=int(payload.get("relocation_seed", 0)),
                color_seed=int(payload.get("color_seed", 0)),
            )
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"invalid generation seed: {exc}") from exc

    # //3.- Allow overriding seeds through environment variables for integration tests.
    @classmethod
    def from_environment(cls, prefix: str = "PIPES") -> "GenerationSeeds":
        mapping: Dict[str, int] = {}
        for field_name in ("direction_seed", "relocation_seed", "color_seed"):
            raw = os.getenv(f"{prefix}_{field_name.upper()}")
            if raw is not None:
                mapping[field_name] = raw  # type: ignore[assignment]
        return cls.from_mapping(mapping)

    # //4.- Same seed for every subsystem; handy for CLI runs.
    @classmethod
    def uniform(cls, seed: int) -> "GenerationSeeds":
        return cls(direction_seed=seed, relocation_seed=seed + 1, color_seed=seed + 2)

    # //5.- One independent generator per subsystem.
    def create_generators(self) -> Dict[str, random.Random]:
        return {
            "direction": random.Random(self.direction_seed),
            "relocation": random.Random(self.relocation_seed),
            "color": random.Random(self.color_seed),
        }


# //6.- Provide canonical configuration accessor used across modules.
def load_generation_config(
    mapping: Optional[Dict[str, int]] = None,
    *,
    env_prefix: str = "PIPES",
) -> GenerationSeeds:
    if mapping is not None:
        return GenerationSeeds.from_mapping(mapping)
    return GenerationSeeds.from_environment(prefix=env_prefix)
