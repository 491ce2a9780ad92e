"""Append-only records of the lattice cells already filled by pipe."""
from __future__ import annotations

from typing import Iterator, Protocol, Set

import numpy as np

from .lattice import BoundingBox, Lattice, LatticeKey
from .vector import Vector3


class Occupancy(Protocol):
    """Membership interface shared by the set and grid backed stores."""

    def contains(self, position: Vector3) -> bool:
        """Return ``True`` when the cell holding ``position`` is filled."""

    def insert(self, position: Vector3) -> None:
        """Mark the cell holding ``position`` as filled."""

    def __len__(self) -> int:
        """Return the number of distinct filled cells."""


class OccupancySet:
    """Hash set of lattice keys; grows without bound for the session lifetime."""

    def __init__(self, lattice: Lattice) -> None:
        self._lattice = lattice
        self._keys: Set[LatticeKey] = set()

    def contains(self, position: Vector3) -> bool:
        return self._lattice.key_for(position) in self._keys

    __contains__ = contains

    def insert(self, position: Vector3) -> None:
        self._keys.add(self._lattice.key_for(position))

    def __len__(self) -> int:
        return len(self._keys)

    def __iter__(self) -> Iterator[Vector3]:
        for key in self._keys:
            yield self._lattice.position_for(key)


class LatticeGrid:
    """Fixed-size boolean grid covering every lattice cell inside ``box``.

    The allocation is ``cell_count(box)`` bytes regardless of path length.
    Cells outside the box (only reachable by the unchecked first step of a
    session in a box narrower than one step) land in a small overflow set.
    """

    def __init__(self, lattice: Lattice, box: BoundingBox) -> None:
        self._lattice = lattice
        self._extent = np.array(lattice.index_extent(box), dtype=np.int64)
        shape = tuple(int(n) * 2 + 1 for n in self._extent)
        self._cells = np.zeros(shape, dtype=bool)
        self._overflow: Set[LatticeKey] = set()
        self._count = 0

    def _index(self, key: LatticeKey):
        index = np.asarray(key, dtype=np.int64) + self._extent
        if np.any(index < 0) or np.any(index >= self._cells.shape):
            return None
        return tuple(int(i) for i in index)

    def contains(self, position: Vector3) -> bool:
        key = self._lattice.key_for(position)
        index = self._index(key)
        if index is None:
            return key in self._overflow
        return bool(self._cells[index])

    __contains__ = contains

    def insert(self, position: Vector3) -> None:
        key = self._lattice.key_for(position)
        index = self._index(key)
        if index is None:
            if key not in self._overflow:
                self._overflow.add(key)
                self._count += 1
            return
        if not self._cells[index]:
            self._cells[index] = True
            self._count += 1

    def __len__(self) -> int:
        return self._count

    def __iter__(self) -> Iterator[Vector3]:
        for index in np.argwhere(self._cells):
            key = tuple(int(i) for i in index - self._extent)
            yield self._lattice.position_for(key)  # type: ignore[arg-type]
        for key in self._overflow:
            yield self._lattice.position_for(key)

    @property
    def fill_ratio(self) -> float:
        return float(np.count_nonzero(self._cells)) / float(self._cells.size)


def build_occupancy(kind: str, lattice: Lattice, box: BoundingBox) -> Occupancy:
    if kind == "grid":
        return LatticeGrid(lattice, box)
    return OccupancySet(lattice)
