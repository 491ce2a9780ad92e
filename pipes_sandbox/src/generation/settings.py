"""Structured loader for pipe growth settings."""
from __future__ import annotations

import json
import os
from dataclasses import dataclass

from ...engine import GrowthConfig
from ...errors import ConfigurationError

SETTINGS_FILENAME = "growth.json"


# //1.- Host side knobs that are not part of the immutable engine configuration.
@dataclass(frozen=True)
class SessionSettings:
    tick_count: int


# //2.- Aggregate complete settings for downstream modules.
@dataclass(frozen=True)
class GrowthSettings:
    growth: GrowthConfig
    session: SessionSettings


# //3.- Resolve the bundled default configuration directory lazily.
def _default_config_directory() -> str:
    base_dir = os.path.dirname(os.path.dirname(os.path.dirname(__file__)))
    return os.path.join(base_dir, "config")


# //4.- Load a single JSON configuration file and coerce to dictionary.
def _read_json_config(path: str) -> dict:
    with open(path, "r", encoding="utf-8") as handle:
        try:
            payload = json.load(handle)
        except json.JSONDecodeError as exc:
            raise ConfigurationError(f"{path} is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise ConfigurationError(f"{path} must contain a JSON object")
    return payload


# //5.- Interpret session settings, rejecting a negative tick count.
def _load_session_settings(payload: dict) -> SessionSettings:
    try:
        tick_count = int(payload.get("tick_count", 0))
    except (TypeError, ValueError) as exc:
        raise ConfigurationError("tick_count must be an integer") from exc
    if tick_count < 0:
        raise ConfigurationError("tick_count must not be negative")
    return SessionSettings(tick_count=tick_count)


# //6.- Public helper assembling the full settings bundle.
def load_growth_settings(config_dir: str | None = None) -> GrowthSettings:
    directory = config_dir or _default_config_directory()
    payload = _read_json_config(os.path.join(directory, SETTINGS_FILENAME))
    growth = GrowthConfig.from_mapping(payload)
    session = _load_session_settings(payload)
    return GrowthSettings(growth=growth, session=session)
