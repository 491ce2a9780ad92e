"""Bounded random search for a fresh start cell once growth stalls."""
from __future__ import annotations

import logging

from .errors import ConfigurationError, RelocationExhausted
from .lattice import BoundingBox, Lattice
from .occupancy import Occupancy
from .sampler import RandomSource
from .vector import Vector3

LOGGER = logging.getLogger(__name__)

DEFAULT_ATTEMPT_BUDGET = 100


class RelocationSearch:
    """Samples the box uniformly and snaps each sample onto the lattice."""

    def __init__(
        self,
        lattice: Lattice,
        rng: RandomSource,
        *,
        attempt_budget: int = DEFAULT_ATTEMPT_BUDGET,
    ) -> None:
        if attempt_budget <= 0:
            raise ConfigurationError("relocation attempt budget must be positive")
        self._lattice = lattice
        self._rng = rng
        self.attempt_budget = attempt_budget
        self.last_attempts = 0

    def sample(self, box: BoundingBox) -> Vector3:
        hx, hy, hz = box.half_extents
        raw = Vector3(
            self._rng.uniform(-hx, hx),
            self._rng.uniform(-hy, hy),
            self._rng.uniform(-hz, hz),
        )
        # //1.- Clamp snapped indices so a sample near a wall never rounds outside the box.
        nx, ny, nz = self._lattice.index_extent(box)
        kx, ky, kz = self._lattice.key_for(raw)
        key = (max(-nx, min(nx, kx)), max(-ny, min(ny, ky)), max(-nz, min(nz, kz)))
        return self._lattice.position_for(key)

    def find(self, occupancy: Occupancy, box: BoundingBox) -> Vector3:
        """Return an unoccupied lattice cell or raise :class:`RelocationExhausted`."""

        for attempt in range(1, self.attempt_budget + 1):
            candidate = self.sample(box)
            if not occupancy.contains(candidate):
                self.last_attempts = attempt
                LOGGER.debug("Relocated to %s after %d attempt(s)", candidate, attempt)
                return candidate
        self.last_attempts = self.attempt_budget
        raise RelocationExhausted(self.attempt_budget)
