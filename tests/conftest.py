"""Shared fixtures for the HarvestGrid test suite."""

from __future__ import annotations

import pytest

from harvestgrid.crops.crop import Crop
from harvestgrid.crops.data import CropData, CropType, CropVisual
from harvestgrid.grid.coordinate import GridProjector
from harvestgrid.grid.manager import GridManager
from harvestgrid.grid.pool_manager import CropPoolManager
from harvestgrid.simulation.config import GameSettings
from harvestgrid.simulation.engine import FarmEngine
from harvestgrid.system.event_bus import EventBus


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def corn_data() -> CropData:
    """Corn: costs 10, pays 25, grows 3 then 2 ticks."""
    return CropData(
        crop_type=CropType.CORN,
        plant_cost=10,
        harvest_value=25,
        growth_time_stage1=3,
        growth_time_stage2=2,
        visuals=(
            CropVisual("corn_seed"),
            CropVisual("corn_sprout"),
            CropVisual("corn_ripe"),
        ),
    )


@pytest.fixture
def tomato_data() -> CropData:
    return CropData(
        crop_type=CropType.TOMATO,
        plant_cost=20,
        harvest_value=60,
        growth_time_stage1=5,
        growth_time_stage2=4,
    )


@pytest.fixture
def crop(bus: EventBus) -> Crop:
    """A standalone crop, marked in use as if leased from a pool."""
    crop = Crop(bus=bus, crop_id=1)
    crop.set_active(True)
    return crop


@pytest.fixture
def pool_manager(bus: EventBus) -> CropPoolManager:
    """Crop pool for a 2x2 grid."""
    return CropPoolManager(2, 2, bus)


@pytest.fixture
def grid(
    bus: EventBus,
    pool_manager: CropPoolManager,
    corn_data: CropData,
    tomato_data: CropData,
) -> GridManager:
    """An enabled 2x2 grid with 100 money and corn/tomato tables."""
    grid = GridManager(
        projector=GridProjector(size_x=2, size_z=2),
        crop_data={CropType.CORN: corn_data, CropType.TOMATO: tomato_data},
        pool_manager=pool_manager,
        bus=bus,
        initial_money=100,
    )
    grid.enable()
    return grid


@pytest.fixture
def small_settings(corn_data: CropData) -> GameSettings:
    """2x2 grid, 100 money, corn only, no workers."""
    return GameSettings(
        grid_size_x=2,
        grid_size_z=2,
        initial_money=100,
        crops={CropType.CORN: corn_data},
        workers=[],
    )


@pytest.fixture
def engine(small_settings: GameSettings) -> FarmEngine:
    return FarmEngine(settings=small_settings)
