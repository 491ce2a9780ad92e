"""Error types surfaced by the pipe growth core."""
from __future__ import annotations


class PipesError(Exception):
    """Base class for every error raised by the sandbox."""


# //1.- Construction time failure raised before any session state exists.
class ConfigurationError(PipesError, ValueError):
    pass


# //2.- Session-fatal signal raised when no free start cell could be found.
class RelocationExhausted(PipesError, RuntimeError):
    def __init__(self, attempts: int) -> None:
        super().__init__(f"Unable to find a new starting position after {attempts} attempts")
        self.attempts = attempts
