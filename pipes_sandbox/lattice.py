"""Lattice geometry helpers shared by every growth component.

Positions handed around by the engine are plain :class:`Vector3` values,
but identity is always decided on the integer lattice key so floating
point drift can never register the same cell twice.
"""
from __future__ import annotations

import enum
import math
from dataclasses import dataclass
from typing import Tuple

from .errors import ConfigurationError
from .vector import Vector3

LatticeKey = Tuple[int, int, int]

BOUNDS_TOLERANCE = 1e-9


class Direction(enum.Enum):
    """The six axis-aligned headings a pipe segment can take."""

    UP = (0, 1, 0)
    DOWN = (0, -1, 0)
    LEFT = (-1, 0, 0)
    RIGHT = (1, 0, 0)
    FORWARD = (0, 0, 1)
    BACK = (0, 0, -1)

    @property
    def opposite(self) -> "Direction":
        x, y, z = self.value
        return Direction((-x, -y, -z))

    @property
    def label(self) -> str:
        return self.name.lower()


ALL_DIRECTIONS: Tuple[Direction, ...] = tuple(Direction)


def offset_for(direction: Direction) -> Vector3:
    """Return the unit offset vector for ``direction``; never the zero vector."""

    return Vector3.from_iter(direction.value)


# //1.- Axis aligned box centred on the origin; x uses length, y width, z height.
@dataclass(frozen=True)
class BoundingBox:
    range_length: float
    range_width: float
    range_height: float

    def __post_init__(self) -> None:
        for name in ("range_length", "range_width", "range_height"):
            value = getattr(self, name)
            if not math.isfinite(value) or value <= 0.0:
                raise ConfigurationError(f"{name} must be a positive number, got {value!r}")

    @property
    def half_extents(self) -> Tuple[float, float, float]:
        return (self.range_length / 2, self.range_width / 2, self.range_height / 2)

    # //2.- Inclusive on both faces; the slack absorbs rounding in products like 3 * 0.1.
    def contains(self, position: Vector3) -> bool:
        return all(
            abs(coordinate) <= half + BOUNDS_TOLERANCE * max(1.0, half)
            for coordinate, half in zip(position.as_tuple(), self.half_extents)
        )


def in_bounds(position: Vector3, box: BoundingBox) -> bool:
    return box.contains(position)


@dataclass(frozen=True)
class Lattice:
    """Discrete grid spaced ``step_length`` apart along every axis."""

    step_length: float

    def __post_init__(self) -> None:
        if not math.isfinite(self.step_length) or self.step_length <= 0.0:
            raise ConfigurationError(f"step_length must be a positive number, got {self.step_length!r}")

    def key_for(self, position: Vector3) -> LatticeKey:
        step = self.step_length
        return (round(position.x / step), round(position.y / step), round(position.z / step))

    def position_for(self, key: LatticeKey) -> Vector3:
        step = self.step_length
        return Vector3(key[0] * step, key[1] * step, key[2] * step)

    def snap(self, position: Vector3) -> Vector3:
        return self.position_for(self.key_for(position))

    def step(self, position: Vector3, direction: Direction) -> Vector3:
        # //3.- Step in key space so repeated moves never accumulate rounding error.
        kx, ky, kz = self.key_for(position)
        dx, dy, dz = direction.value
        return self.position_for((kx + dx, ky + dy, kz + dz))

    def is_on_lattice(self, position: Vector3, tolerance: float = 1e-9) -> bool:
        snapped = self.snap(position)
        return (
            abs(snapped.x - position.x) <= tolerance
            and abs(snapped.y - position.y) <= tolerance
            and abs(snapped.z - position.z) <= tolerance
        )

    def index_extent(self, box: BoundingBox) -> Tuple[int, int, int]:
        """Largest integer ``n`` per axis with ``n * step_length`` still inside ``box``."""

        return tuple(  # type: ignore[return-value]
            int(math.floor(half / self.step_length + BOUNDS_TOLERANCE)) for half in box.half_extents
        )

    def cell_count(self, box: BoundingBox) -> int:
        nx, ny, nz = self.index_extent(box)
        return (2 * nx + 1) * (2 * ny + 1) * (2 * nz + 1)

    # //4.- Bounds in key space agree exactly with ``index_extent`` for any step length.
    def key_in_bounds(self, key: LatticeKey, box: BoundingBox) -> bool:
        return all(abs(k) <= n for k, n in zip(key, self.index_extent(box)))

    def in_bounds(self, position: Vector3, box: BoundingBox) -> bool:
        return self.key_in_bounds(self.key_for(position), box)
