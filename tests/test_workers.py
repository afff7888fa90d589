"""Tests for harvestgrid.workers — queueing, movement, interaction."""

from __future__ import annotations

import numpy as np
import pytest

from harvestgrid.crops.crop import Crop
from harvestgrid.crops.data import CropType
from harvestgrid.crops.state import CropState
from harvestgrid.grid.coordinate import GridCoordinate
from harvestgrid.grid.manager import GridManager, PlacementMode
from harvestgrid.system.event_bus import EventBus
from harvestgrid.workers.worker import Activity, Worker, WorkerConfig, move_towards


def _waterer(**overrides) -> WorkerConfig:
    params = {
        "name": "waterer",
        "target_state": CropState.WATER_MARKED,
        "next_state": CropState.SPROUT,
        "start_position": (0.0, -1.0),
        "speed": 4.0,
        "interaction_time": 0.5,
    }
    params.update(overrides)
    return WorkerConfig(**params)


def _run(worker: Worker, seconds: float, dt: float = 0.25) -> None:
    for _ in range(round(seconds / dt)):
        worker.update(dt)


def _plant_thirsty(grid: GridManager, coordinate: GridCoordinate) -> Crop:
    crop = grid.place_crop(coordinate, CropType.CORN)
    while crop.state is CropState.SEED:
        crop.tick()
    return crop


class TestMoveTowards:
    def test_partial_step(self) -> None:
        result = move_towards(np.array([0.0, 0.0]), np.array([3.0, 4.0]), 2.5)
        assert np.allclose(result, [1.5, 2.0])

    def test_reaches_target(self) -> None:
        result = move_towards(np.array([0.0, 0.0]), np.array([1.0, 0.0]), 5.0)
        assert np.array_equal(result, [1.0, 0.0])


class TestWorkerConfig:
    def test_from_dict_parses_state_names(self) -> None:
        cfg = WorkerConfig.from_dict(
            {
                "name": "h",
                "target_state": "harvest_marked",
                "next_state": "none",
                "speed": 3,
            },
        )
        assert cfg.target_state is CropState.HARVEST_MARKED
        assert cfg.next_state is CropState.NONE
        assert cfg.speed == 3.0
        assert cfg.interaction_time == 1.0

    def test_speed_must_be_positive(self) -> None:
        with pytest.raises(ValueError):
            _waterer(speed=0.0)


class TestWorkerQueue:
    """Queue discipline driven by notifications."""

    def test_queues_only_target_state(self, grid: GridManager, bus: EventBus) -> None:
        worker = Worker(_waterer(), bus, grid)
        worker.enable()
        crop = _plant_thirsty(grid, GridCoordinate(0, 0))
        assert list(worker.queue) == []
        grid.mark_cell(GridCoordinate(0, 0), PlacementMode.WATER)
        assert list(worker.queue) == [crop]

    def test_disabled_worker_ignores_notifications(
        self,
        grid: GridManager,
        bus: EventBus,
    ) -> None:
        worker = Worker(_waterer(), bus, grid)
        worker.enable()
        worker.disable()
        _plant_thirsty(grid, GridCoordinate(0, 0))
        grid.mark_cell(GridCoordinate(0, 0), PlacementMode.WATER)
        assert list(worker.queue) == []

    def test_services_crop_and_advances_it(
        self,
        grid: GridManager,
        bus: EventBus,
    ) -> None:
        worker = Worker(_waterer(), bus, grid)
        worker.enable()
        crop = _plant_thirsty(grid, GridCoordinate(-1, -1))
        grid.mark_cell(GridCoordinate(-1, -1), PlacementMode.WATER)

        worker.update(0.1)
        assert worker.activity is Activity.WALKING
        assert worker.target is crop
        _run(worker, 3.0)
        assert crop.state is CropState.SPROUT
        assert worker.completed == 1
        assert list(worker.queue) == []

    def test_fifo_order(self, grid: GridManager, bus: EventBus) -> None:
        worker = Worker(_waterer(), bus, grid)
        worker.enable()
        first = _plant_thirsty(grid, GridCoordinate(-1, -1))
        second = _plant_thirsty(grid, GridCoordinate(0, 0))
        grid.mark_cell(GridCoordinate(-1, -1), PlacementMode.WATER)
        grid.mark_cell(GridCoordinate(0, 0), PlacementMode.WATER)

        order: list[Crop] = []
        while len(order) < 2:
            worker.update(0.1)
            for crop in (first, second):
                if crop.state is CropState.SPROUT and crop not in order:
                    order.append(crop)
        assert order == [first, second]

    def test_returns_home_when_idle(self, grid: GridManager, bus: EventBus) -> None:
        worker = Worker(_waterer(), bus, grid)
        worker.enable()
        _plant_thirsty(grid, GridCoordinate(-1, -1))
        grid.mark_cell(GridCoordinate(-1, -1), PlacementMode.WATER)
        _run(worker, 6.0)
        assert worker.activity is Activity.IDLE
        assert np.allclose(worker.position, [0.0, -1.0])

    def test_drops_crop_removed_from_grid(
        self,
        grid: GridManager,
        bus: EventBus,
    ) -> None:
        worker = Worker(_waterer(), bus, grid)
        worker.enable()
        crop = _plant_thirsty(grid, GridCoordinate(0, 0))
        grid.mark_cell(GridCoordinate(0, 0), PlacementMode.WATER)
        # Harvested out from under the worker
        crop.set_state(CropState.NONE)
        assert not grid.contains(crop)

        _run(worker, 3.0)
        assert worker.completed == 0
        assert list(worker.queue) == []
        assert crop.state is CropState.NONE

    def test_second_worker_drops_already_serviced_crop(
        self,
        grid: GridManager,
        bus: EventBus,
    ) -> None:
        fast = Worker(_waterer(name="fast", speed=10.0), bus, grid)
        slow = Worker(_waterer(name="slow", speed=0.5), bus, grid)
        fast.enable()
        slow.enable()
        crop = _plant_thirsty(grid, GridCoordinate(0, 0))
        grid.mark_cell(GridCoordinate(0, 0), PlacementMode.WATER)

        _run(fast, 2.0)
        assert crop.state is CropState.SPROUT
        _run(slow, 10.0)
        assert slow.completed == 0
        assert crop.state is CropState.SPROUT
