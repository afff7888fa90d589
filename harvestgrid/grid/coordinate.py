"""Grid coordinates and the world-to-grid projection.

Cells are addressed by integer ``(x, z)`` pairs.  The grid is centred on
the world origin, so an even-sized axis runs from ``-size // 2`` up to
``size // 2 - 1``.  Anything that falls outside the configured bounds
resolves to ``INVALID_COORDINATE``, which every grid-mutating operation
treats as "no target".
"""

from __future__ import annotations

import math
from collections.abc import Iterator
from dataclasses import dataclass
from typing import NamedTuple


class GridCoordinate(NamedTuple):
    """Integer cell address.  Compared and hashed by value."""

    x: int
    z: int


INVALID_COORDINATE = GridCoordinate(-999, -999)


@dataclass(frozen=True)
class GridProjector:
    """Maps world positions onto grid cells.

    Cell ``(x, z)`` covers ``[x * cell_size, (x + 1) * cell_size)`` on
    each axis, and the block of cells is centred on the world origin:
    a 2x2 grid holds cells -1 and 0 on both axes.

    Attributes:
        size_x: Number of columns.
        size_z: Number of rows.
        cell_size: World units per cell edge.
    """

    size_x: int
    size_z: int
    cell_size: float = 1.0

    def __post_init__(self) -> None:
        if self.size_x < 1 or self.size_z < 1:
            msg = f"grid must be at least 1x1, got {self.size_x}x{self.size_z}"
            raise ValueError(msg)
        if self.cell_size <= 0:
            msg = f"cell_size must be > 0, got {self.cell_size}"
            raise ValueError(msg)

    @property
    def min_x(self) -> int:
        """Lowest valid column index."""
        return -(self.size_x // 2)

    @property
    def min_z(self) -> int:
        """Lowest valid row index."""
        return -(self.size_z // 2)

    @property
    def origin(self) -> tuple[float, float]:
        """World position of the grid's lowest corner."""
        return (self.min_x * self.cell_size, self.min_z * self.cell_size)

    def in_bounds(self, coordinate: GridCoordinate) -> bool:
        """Return True if *coordinate* addresses a real cell."""
        return (
            self.min_x <= coordinate.x < self.min_x + self.size_x
            and self.min_z <= coordinate.z < self.min_z + self.size_z
        )

    def cells(self) -> Iterator[GridCoordinate]:
        """Yield every cell, row by row."""
        for z in range(self.min_z, self.min_z + self.size_z):
            for x in range(self.min_x, self.min_x + self.size_x):
                yield GridCoordinate(x, z)

    def index_of(self, coordinate: GridCoordinate) -> tuple[int, int]:
        """Array index ``(row, column)`` of *coordinate* in a ``[z, x]`` array."""
        return (coordinate.z - self.min_z, coordinate.x - self.min_x)

    def to_grid(self, position: tuple[float, float]) -> GridCoordinate:
        """Resolve a world position to its cell, or the invalid sentinel."""
        px, pz = position
        coordinate = GridCoordinate(
            math.floor(px / self.cell_size),
            math.floor(pz / self.cell_size),
        )
        if not self.in_bounds(coordinate):
            return INVALID_COORDINATE
        return coordinate

    def to_world(self, coordinate: GridCoordinate) -> tuple[float, float]:
        """Return the world-space centre of *coordinate*'s cell."""
        half = self.cell_size * 0.5
        return (
            coordinate.x * self.cell_size + half,
            coordinate.z * self.cell_size + half,
        )
