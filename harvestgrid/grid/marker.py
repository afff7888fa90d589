"""GridPositionMarker — the placement preview that follows a drag.

Purely cosmetic: it only reads occupancy and never changes the grid.
"""

from __future__ import annotations

from dataclasses import dataclass

from harvestgrid.grid.coordinate import INVALID_COORDINATE, GridCoordinate


@dataclass
class GridPositionMarker:
    """Preview state for the cell under the pointer.

    Attributes:
        coordinate: Most recently resolved cell (or the sentinel).
        visible: Whether the marker should be drawn.
        blocked: True if the cell is already occupied.
    """

    coordinate: GridCoordinate = INVALID_COORDINATE
    visible: bool = False
    blocked: bool = False

    def show(self, coordinate: GridCoordinate, *, blocked: bool) -> None:
        self.coordinate = coordinate
        self.visible = True
        self.blocked = blocked

    def reset(self) -> None:
        """Hide the marker and forget its cell."""
        self.coordinate = INVALID_COORDINATE
        self.visible = False
        self.blocked = False
