"""Event payloads published on the EventBus.

Events are plain frozen dataclasses with no behaviour.  Command events
flow from the host into the simulation; notification events flow out of
it to whoever is listening.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from harvestgrid.crops.crop import Crop
    from harvestgrid.crops.data import CropType
    from harvestgrid.grid.coordinate import GridCoordinate
    from harvestgrid.grid.manager import PlacementMode

Position = tuple[float, float]


# -- Notifications -----------------------------------------------------------


@dataclass(frozen=True)
class HarvestEffect:
    """Descriptor for the effect played when a harvest completes.

    Attributes:
        name: Effect asset name.
        duration: Frames the effect stays on screen.
    """

    name: str = "harvest_burst"
    duration: int = 20


@dataclass(frozen=True)
class CropAdvanced:
    """A crop entered a new state (including marked and terminal states)."""

    crop: Crop


@dataclass(frozen=True)
class CropHarvested:
    """A crop completed its harvest and was removed from the grid."""

    crop: Crop
    effect: HarvestEffect
    coordinate: GridCoordinate
    value: int


@dataclass(frozen=True)
class CropDragStarted:
    """A crop type was picked up for placement."""

    crop_type: CropType


# -- Commands ----------------------------------------------------------------


@dataclass(frozen=True)
class ModeSelected:
    """Switch the grid's placement mode."""

    mode: PlacementMode


@dataclass(frozen=True)
class CropTypeSelected:
    """Pick the crop type to place with the next drag/drop."""

    crop_type: CropType


@dataclass(frozen=True)
class PointerDrag:
    """Pointer held and moving, in world units."""

    position: Position


@dataclass(frozen=True)
class PointerDrop:
    """Pointer released after a drag."""

    position: Position


@dataclass(frozen=True)
class PointerTap:
    """Pointer pressed and released without dragging."""

    position: Position
