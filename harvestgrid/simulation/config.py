"""Config — load game settings and crop tables from YAML files.

Grid dimensions, the starting balance, loop periods, crop type tables
and worker definitions live in YAML and are parsed into typed
dataclasses here.  Everything is read once at startup and treated as
immutable afterwards.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from harvestgrid.crops.data import CropData, CropType, CropVisual
from harvestgrid.crops.state import CropState
from harvestgrid.events import HarvestEffect
from harvestgrid.workers.worker import WorkerConfig

logger = logging.getLogger(__name__)


def default_crops() -> dict[CropType, CropData]:
    """Corn and tomato tables used when no config overrides them."""
    return {
        CropType.CORN: CropData(
            crop_type=CropType.CORN,
            plant_cost=10,
            harvest_value=25,
            growth_time_stage1=3,
            growth_time_stage2=2,
            visuals=(
                CropVisual("corn_seed", (139, 115, 85)),
                CropVisual("corn_sprout", (120, 190, 80)),
                CropVisual("corn_ripe", (240, 210, 60)),
            ),
        ),
        CropType.TOMATO: CropData(
            crop_type=CropType.TOMATO,
            plant_cost=20,
            harvest_value=60,
            growth_time_stage1=5,
            growth_time_stage2=4,
            visuals=(
                CropVisual("tomato_seed", (139, 115, 85)),
                CropVisual("tomato_sprout", (90, 170, 70)),
                CropVisual("tomato_ripe", (220, 60, 50)),
            ),
        ),
    }


def default_workers() -> list[WorkerConfig]:
    """One waterer and one harvester standing just off the default grid."""
    return [
        WorkerConfig(
            name="waterer",
            target_state=CropState.WATER_MARKED,
            next_state=CropState.SPROUT,
            start_position=(-4.0, -3.5),
            speed=2.0,
        ),
        WorkerConfig(
            name="harvester",
            target_state=CropState.HARVEST_MARKED,
            next_state=CropState.NONE,
            start_position=(4.0, -3.5),
            speed=2.0,
        ),
    ]


@dataclass
class GameSettings:
    """Top-level game configuration.

    Attributes:
        cell_size: World units per grid cell.
        grid_size_x: Number of grid columns.
        grid_size_z: Number of grid rows.
        initial_money: Starting balance.
        tick_interval: Seconds per crop tick.
        marker_interval: Seconds between placement-marker updates.
        drag_threshold: Screen pixels the pointer must travel before a
            press counts as a drag.
        crops: Crop type tables keyed by type.
        workers: Worker definitions.
        harvest_effect: Effect descriptor attached to harvests.
    """

    cell_size: float = 1.0
    grid_size_x: int = 8
    grid_size_z: int = 6
    initial_money: int = 100
    tick_interval: float = 1.0
    marker_interval: float = 0.2
    drag_threshold: float = 20.0

    crops: dict[CropType, CropData] = field(default_factory=default_crops)
    workers: list[WorkerConfig] = field(default_factory=default_workers)
    harvest_effect: HarvestEffect = field(default_factory=HarvestEffect)

    def __post_init__(self) -> None:
        if self.grid_size_x < 1 or self.grid_size_z < 1:
            msg = (
                f"grid must be at least 1x1, "
                f"got {self.grid_size_x}x{self.grid_size_z}"
            )
            raise ValueError(msg)
        if self.initial_money < 0:
            msg = f"initial_money must be >= 0, got {self.initial_money}"
            raise ValueError(msg)

    @property
    def capacity(self) -> int:
        """Maximum number of crops on the grid at once."""
        return self.grid_size_x * self.grid_size_z

    @classmethod
    def from_yaml(cls, path: str | Path) -> GameSettings:
        """Load settings from a YAML file.

        Args:
            path: Path to the YAML config file.

        Returns:
            A populated GameSettings instance.

        Raises:
            FileNotFoundError: If the config file does not exist.
        """
        path = Path(path)
        with path.open("r") as f:
            data = yaml.safe_load(f) or {}

        crops = _parse_crops(data["crops"]) if "crops" in data else default_crops()
        workers = (
            [WorkerConfig.from_dict(w) for w in data["workers"]]
            if "workers" in data
            else default_workers()
        )
        effect = data.get("harvest_effect", {})

        return cls(
            cell_size=float(data.get("cell_size", cls.cell_size)),
            grid_size_x=data.get("grid_size_x", cls.grid_size_x),
            grid_size_z=data.get("grid_size_z", cls.grid_size_z),
            initial_money=data.get("initial_money", cls.initial_money),
            tick_interval=float(data.get("tick_interval", cls.tick_interval)),
            marker_interval=float(
                data.get("marker_interval", cls.marker_interval),
            ),
            drag_threshold=float(
                data.get("drag_threshold", cls.drag_threshold),
            ),
            crops=crops,
            workers=workers,
            harvest_effect=HarvestEffect(
                name=effect.get("name", HarvestEffect.name),
                duration=int(effect.get("duration", HarvestEffect.duration)),
            ),
        )


def _parse_crops(raw: dict[str, dict[str, Any]]) -> dict[CropType, CropData]:
    """Map lowercase crop names onto crop tables, skipping unknown names."""
    name_map: dict[str, CropType] = {
        ct.value: ct for ct in CropType if ct is not CropType.NONE
    }
    crops: dict[CropType, CropData] = {}
    for name, table in raw.items():
        crop_type = name_map.get(str(name).lower())
        if crop_type is None:
            logger.warning("ignoring unknown crop type %r in config", name)
            continue
        crops[crop_type] = CropData.from_dict(crop_type, table)
    return crops
