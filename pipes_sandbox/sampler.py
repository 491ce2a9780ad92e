"""Randomised direction selection for the growing pipe tip."""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, MutableSequence, Optional, Protocol, Sequence, TypeVar

from .lattice import ALL_DIRECTIONS, BoundingBox, Direction, Lattice
from .occupancy import Occupancy
from .vector import Vector3

T = TypeVar("T")


class RandomSource(Protocol):
    """Subset of :class:`random.Random` the growth components rely on."""

    def uniform(self, a: float, b: float) -> float:
        """Return a float drawn uniformly from ``[a, b]``."""

    def shuffle(self, x: MutableSequence) -> None:
        """Permute ``x`` in place, every ordering equally likely."""

    def choice(self, seq: Sequence[T]) -> T:
        """Return one element of ``seq`` chosen uniformly."""


# //1.- Tagged success value; ``None`` from the sampler means no direction exists.
@dataclass(frozen=True)
class DirectionChoice:
    direction: Direction
    next_position: Vector3


class DirectionSampler:
    """Picks the first valid heading from a uniformly shuffled enumeration.

    Shuffling before filtering keeps the choice uniform over whichever
    directions survive the bounds and occupancy checks.
    """

    def __init__(self, lattice: Lattice, rng: RandomSource) -> None:
        self._lattice = lattice
        self._rng = rng

    def shuffled_directions(self) -> List[Direction]:
        directions = list(ALL_DIRECTIONS)
        self._rng.shuffle(directions)
        return directions

    def choose(
        self,
        tip: Vector3,
        occupancy: Occupancy,
        box: BoundingBox,
    ) -> Optional[DirectionChoice]:
        for direction in self.shuffled_directions():
            candidate = self._lattice.step(tip, direction)
            if self._lattice.in_bounds(candidate, box) and not occupancy.contains(candidate):
                return DirectionChoice(direction=direction, next_position=candidate)
        return None

    def any_direction(self) -> Direction:
        return self._rng.choice(ALL_DIRECTIONS)
