"""Tests for harvestgrid.ui.crop_stats."""

from __future__ import annotations

from harvestgrid.crops.data import CropType
from harvestgrid.crops.state import CropState
from harvestgrid.grid.coordinate import GridCoordinate
from harvestgrid.grid.manager import GridManager, PlacementMode
from harvestgrid.system.event_bus import EventBus
from harvestgrid.ui.crop_stats import CropStats


class TestCropStats:
    """Counter bookkeeping across the crop cycle."""

    def _stats(self, bus: EventBus) -> CropStats:
        stats = CropStats(bus, [CropType.CORN, CropType.TOMATO])
        stats.enable()
        return stats

    def test_counts_follow_cycle(self, grid: GridManager, bus: EventBus) -> None:
        stats = self._stats(bus)
        crop = grid.place_crop(GridCoordinate(0, 0), CropType.CORN)
        corn = stats.get(CropType.CORN)
        assert (corn.growing, corn.needs_water, corn.ready_to_harvest) == (1, 0, 0)

        for _ in range(3):
            grid.tick()
        assert (corn.growing, corn.needs_water, corn.ready_to_harvest) == (0, 1, 0)

        grid.mark_cell(GridCoordinate(0, 0), PlacementMode.WATER)
        assert (corn.growing, corn.needs_water, corn.ready_to_harvest) == (1, 0, 0)

        crop.set_state(CropState.SPROUT)
        grid.tick()
        grid.tick()
        assert (corn.growing, corn.needs_water, corn.ready_to_harvest) == (0, 0, 1)

        grid.mark_cell(GridCoordinate(0, 0), PlacementMode.HARVEST)
        crop.set_state(CropState.NONE)
        assert (corn.growing, corn.needs_water, corn.ready_to_harvest) == (0, 0, 0)

    def test_types_counted_separately(self, grid: GridManager, bus: EventBus) -> None:
        stats = self._stats(bus)
        grid.place_crop(GridCoordinate(0, 0), CropType.CORN)
        grid.place_crop(GridCoordinate(-1, 0), CropType.TOMATO)
        grid.place_crop(GridCoordinate(0, -1), CropType.TOMATO)
        assert stats.get(CropType.CORN).growing == 1
        assert stats.get(CropType.TOMATO).growing == 2
        assert stats.summary(CropType.TOMATO) == "2 growing, 0 need water, 0 ripe"

    def test_disabled_stats_stop_counting(
        self,
        grid: GridManager,
        bus: EventBus,
    ) -> None:
        stats = self._stats(bus)
        stats.disable()
        grid.place_crop(GridCoordinate(0, 0), CropType.CORN)
        assert stats.get(CropType.CORN).growing == 0
