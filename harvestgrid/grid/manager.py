"""GridManager — spatial index, economy, placement mode and crop ticking.

The grid owns the mapping from cell to crop, the money balance, and the
two fixed-rate loops: the crop tick and the placement-marker poll.  All
commands arrive either as direct method calls or as input events on the
bus; invalid commands are refused silently.

Each ``update(dt)``:

1. Advance the crop tick timer and tick every indexed crop per step.
2. Advance the marker timer and re-resolve the marker while dragging.
"""

from __future__ import annotations

import logging
from enum import Enum, auto
from types import MappingProxyType
from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

from harvestgrid.crops.crop import Crop, CropStateError
from harvestgrid.crops.data import CropType
from harvestgrid.crops.state import CropState
from harvestgrid.events import (
    CropAdvanced,
    CropDragStarted,
    CropHarvested,
    CropTypeSelected,
    HarvestEffect,
    ModeSelected,
    PointerDrag,
    PointerDrop,
    PointerTap,
    Position,
)
from harvestgrid.grid.coordinate import (
    INVALID_COORDINATE,
    GridCoordinate,
    GridProjector,
)
from harvestgrid.grid.marker import GridPositionMarker
from harvestgrid.system.clock import FixedRateTimer

if TYPE_CHECKING:
    from collections.abc import Mapping

    from harvestgrid.crops.data import CropData
    from harvestgrid.grid.pool_manager import CropPoolManager
    from harvestgrid.system.event_bus import EventBus

logger = logging.getLogger(__name__)


class PlacementMode(Enum):
    """How a tap or drop on the grid is interpreted."""

    NONE = auto()
    PLANT = auto()
    WATER = auto()
    HARVEST = auto()


# Mode -> (state the crop must be in, state it is marked into)
_MARK_RULES: dict[PlacementMode, tuple[CropState, CropState]] = {
    PlacementMode.WATER: (CropState.WATER_NEEDED, CropState.WATER_MARKED),
    PlacementMode.HARVEST: (CropState.HARVEST_NEEDED, CropState.HARVEST_MARKED),
}


class GridManager:
    """Owns crop placement, the economy and the crop tick loop.

    Attributes:
        projector: World-to-grid projection and bounds.
        crop_data: Crop type tables, keyed by type.
        harvest_effect: Effect descriptor attached to harvest events.
        marker: Placement preview state.
        mode: Current placement mode.
        selected_crop: Crop type to place on the next drop.
        tick_timer: Drives ``tick`` at a fixed period.
        marker_timer: Drives ``update_marker`` while dragging.
    """

    def __init__(
        self,
        *,
        projector: GridProjector,
        crop_data: Mapping[CropType, CropData],
        pool_manager: CropPoolManager,
        bus: EventBus,
        initial_money: int,
        tick_interval: float = 1.0,
        marker_interval: float = 0.2,
        harvest_effect: HarvestEffect | None = None,
    ) -> None:
        if initial_money < 0:
            msg = f"initial_money must be >= 0, got {initial_money}"
            raise ValueError(msg)
        self.projector = projector
        self.crop_data = dict(crop_data)
        self.harvest_effect = harvest_effect or HarvestEffect()
        self.marker = GridPositionMarker()
        self.mode = PlacementMode.NONE
        self.selected_crop = CropType.NONE
        self.tick_timer = FixedRateTimer(period=tick_interval, running=False)
        self.marker_timer = FixedRateTimer(period=marker_interval, running=False)

        self._pool_manager = pool_manager
        self._bus = bus
        self._money = initial_money
        self._grid: dict[GridCoordinate, Crop] = {}
        self._coordinates: dict[Crop, GridCoordinate] = {}
        self._pointer: Position | None = None
        self._enabled = False

    # -- Lifecycle --

    def enable(self) -> None:
        """Subscribe to the bus and start the crop tick loop."""
        if self._enabled:
            return
        self._enabled = True
        self.tick_timer.start()
        self._subscribe()

    def disable(self) -> None:
        """Unsubscribe and stop both loops, discarding marker state."""
        if not self._enabled:
            return
        self._enabled = False
        self._unsubscribe()
        self._stop_marker()
        self.tick_timer.stop()

    # -- Queries --

    @property
    def money(self) -> int:
        """Current balance."""
        return self._money

    @property
    def crop_grid(self) -> Mapping[GridCoordinate, Crop]:
        """Read-only view of the cell -> crop index."""
        return MappingProxyType(self._grid)

    def get_cell(self, coordinate: GridCoordinate) -> Crop | None:
        """Return the crop at *coordinate*, or None if the cell is empty."""
        return self._grid.get(coordinate)

    def coordinate_of(self, crop: Crop) -> GridCoordinate:
        """Return the cell *crop* occupies, or the invalid sentinel."""
        return self._coordinates.get(crop, INVALID_COORDINATE)

    def contains(self, crop: Crop) -> bool:
        """True if *crop* is currently placed on this grid."""
        return crop in self._coordinates

    def cells_in_state(self, state: CropState) -> list[GridCoordinate]:
        """Cells whose crop is currently in *state*."""
        return [coord for coord, crop in self._grid.items() if crop.state is state]

    def occupancy(self) -> NDArray[np.int8]:
        """Crop state per cell as an array indexed ``[z, x]`` (0 = empty).

        Row and column 0 hold the projector's lowest cell, so use
        ``projector.index_of`` to find a coordinate's entry.
        """
        p = self.projector
        grid = np.zeros((p.size_z, p.size_x), dtype=np.int8)
        for coord, crop in self._grid.items():
            grid[p.index_of(coord)] = int(crop.state)
        return grid

    # -- Commands --

    def set_mode(self, mode: PlacementMode) -> None:
        self.mode = mode

    def select_crop_type(self, crop_type: CropType) -> bool:
        """Pick *crop_type* for the next placement if it is affordable.

        Returns:
            True if the selection was accepted.
        """
        data = self.crop_data.get(crop_type)
        if data is None or self._money < data.plant_cost:
            logger.debug(
                "cannot select %s with balance %d",
                crop_type.value,
                self._money,
            )
            return False
        self.selected_crop = crop_type
        self._bus.publish(CropDragStarted(crop_type=crop_type))
        return True

    def place_crop(
        self,
        coordinate: GridCoordinate,
        crop_type: CropType,
    ) -> Crop | None:
        """Plant a crop of *crop_type* at *coordinate*.

        Refused (returns None, nothing changes) when the cell is invalid
        or occupied, the type is unknown, or the balance is too low.

        Returns:
            The newly planted crop, or None if refused.
        """
        off_grid = not self.projector.in_bounds(coordinate)
        if coordinate == INVALID_COORDINATE or off_grid:
            logger.debug("placement refused: %s is off the grid", coordinate)
            return None
        if coordinate in self._grid:
            logger.debug("placement refused: %s is occupied", coordinate)
            return None
        data = self.crop_data.get(crop_type)
        if data is None:
            logger.debug("placement refused: no crop data for %s", crop_type.value)
            return None
        if self._money < data.plant_cost:
            logger.debug(
                "placement refused: %s costs %d, balance %d",
                crop_type.value,
                data.plant_cost,
                self._money,
            )
            return None

        self._money -= data.plant_cost
        crop = self._pool_manager.get_crop()
        crop.position = self.projector.to_world(coordinate)
        self._set_cell(coordinate, crop)
        crop.initialize(data)
        logger.debug(
            "planted %s at %s, balance %d",
            crop_type.value,
            coordinate,
            self._money,
        )
        return crop

    def mark_cell(self, coordinate: GridCoordinate, command: PlacementMode) -> bool:
        """Flag the crop at *coordinate* for a worker.

        A water command only applies to a crop that needs water, and a
        harvest command only to a crop that is ripe; anything else is
        ignored.

        Returns:
            True if the crop was marked.
        """
        crop = self._grid.get(coordinate)
        rule = _MARK_RULES.get(command)
        if crop is None or rule is None:
            return False
        required, marked = rule
        if crop.state is not required:
            return False
        crop.set_state(marked)
        return True

    # -- Scheduling --

    def update(self, dt: float) -> int:
        """Advance both fixed-rate loops by *dt* seconds.

        Returns:
            Number of crop ticks performed.
        """
        steps = self.tick_timer.advance(dt)
        for _ in range(steps):
            self.tick()
        if self.marker_timer.advance(dt):
            self.update_marker()
        return steps

    def tick(self) -> None:
        """Tick every crop currently on the grid once."""
        for crop in list(self._grid.values()):
            # A handler earlier in this pass may have removed it
            if crop in self._coordinates:
                crop.tick()

    def update_marker(self) -> None:
        """Re-resolve the marker cell from the last drag position."""
        if self._pointer is None:
            self.marker.reset()
            return
        coordinate = self.projector.to_grid(self._pointer)
        if coordinate == INVALID_COORDINATE:
            self.marker.reset()
            return
        self.marker.show(coordinate, blocked=coordinate in self._grid)

    # -- Index mutation --

    def _set_cell(self, coordinate: GridCoordinate, crop: Crop) -> None:
        self._grid[coordinate] = crop
        self._coordinates[crop] = coordinate

    def _clear_cell(self, crop: Crop) -> GridCoordinate:
        coordinate = self._coordinates.pop(crop, None)
        if coordinate is None:
            msg = f"crop {crop.crop_id} is not on the grid"
            raise CropStateError(msg)
        del self._grid[coordinate]
        return coordinate

    def _stop_marker(self) -> None:
        self.marker_timer.stop()
        self._pointer = None
        self.marker.reset()

    # -- Events --

    def _subscribe(self) -> None:
        self._bus.subscribe(ModeSelected, self._on_mode_selected)
        self._bus.subscribe(CropTypeSelected, self._on_crop_type_selected)
        self._bus.subscribe(CropAdvanced, self._on_crop_advanced)
        self._bus.subscribe(PointerDrag, self._on_pointer_drag)
        self._bus.subscribe(PointerDrop, self._on_pointer_drop)
        self._bus.subscribe(PointerTap, self._on_pointer_tap)

    def _unsubscribe(self) -> None:
        self._bus.unsubscribe(ModeSelected, self._on_mode_selected)
        self._bus.unsubscribe(CropTypeSelected, self._on_crop_type_selected)
        self._bus.unsubscribe(CropAdvanced, self._on_crop_advanced)
        self._bus.unsubscribe(PointerDrag, self._on_pointer_drag)
        self._bus.unsubscribe(PointerDrop, self._on_pointer_drop)
        self._bus.unsubscribe(PointerTap, self._on_pointer_tap)

    def _on_mode_selected(self, event: ModeSelected) -> None:
        self.set_mode(event.mode)

    def _on_crop_type_selected(self, event: CropTypeSelected) -> None:
        self.select_crop_type(event.crop_type)

    def _on_crop_advanced(self, event: CropAdvanced) -> None:
        """Pay out and recycle a crop whose harvest just completed."""
        crop = event.crop
        if crop.state is not CropState.NONE:
            return
        if crop.data is None:
            msg = f"crop {crop.crop_id} finished without crop data"
            raise CropStateError(msg)

        coordinate = self._clear_cell(crop)
        value = crop.data.harvest_value
        self._money += value
        logger.debug(
            "harvested %s at %s, balance %d",
            crop.data.crop_type.value,
            coordinate,
            self._money,
        )

        self._bus.publish(
            CropHarvested(
                crop=crop,
                effect=self.harvest_effect,
                coordinate=coordinate,
                value=value,
            ),
        )
        self._pool_manager.release_crop(crop)

    def _on_pointer_drag(self, event: PointerDrag) -> None:
        if self.mode is not PlacementMode.PLANT or self.selected_crop is CropType.NONE:
            return
        first = self._pointer is None
        self._pointer = event.position
        if first:
            self.marker_timer.start()
            self.update_marker()

    def _on_pointer_drop(self, event: PointerDrop) -> None:
        if self.mode is not PlacementMode.PLANT or self.selected_crop is CropType.NONE:
            return
        self.place_crop(self.projector.to_grid(event.position), self.selected_crop)
        self._stop_marker()
        self.selected_crop = CropType.NONE

    def _on_pointer_tap(self, event: PointerTap) -> None:
        self.selected_crop = CropType.NONE
        self.mark_cell(self.projector.to_grid(event.position), self.mode)
