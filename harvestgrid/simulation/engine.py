"""FarmEngine — the context object that wires every subsystem together.

The host builds one engine from ``GameSettings`` and drives it.  Nothing
here is global: each engine owns its own bus, pool, grid and workers,
so several can coexist (tests build dozens).

Each ``update(dt)``:

1. Advance the grid's fixed-rate loops (crop ticks, marker poll).
2. Step every worker's movement and interaction.

``simulate`` wraps ``update`` in a fixed-frame loop and, with autoplay
on, stands in for the player so a headless run exercises the whole
plant, water, harvest cycle.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from harvestgrid.crops.state import CropState
from harvestgrid.grid.coordinate import GridProjector
from harvestgrid.grid.manager import GridManager, PlacementMode
from harvestgrid.grid.pool_manager import CropPoolManager
from harvestgrid.simulation.config import GameSettings
from harvestgrid.system.event_bus import EventBus
from harvestgrid.ui.crop_stats import CropStats
from harvestgrid.workers.worker import Worker

logger = logging.getLogger(__name__)


@dataclass
class FarmEngine:
    """Drives the farm forward tick by tick.

    Attributes:
        settings: Loaded game configuration.
        bus: Event bus shared by every subsystem of this engine.
        projector: World-to-grid projection.
        pool_manager: Crop pool sized to the grid.
        grid: Placement, economy and crop ticking.
        workers: AI farmhands.
        stats: Per-type crop counters.
        tick: Number of crop ticks performed.
    """

    settings: GameSettings
    isolate_handlers: bool = False
    bus: EventBus = field(init=False)
    projector: GridProjector = field(init=False)
    pool_manager: CropPoolManager = field(init=False)
    grid: GridManager = field(init=False)
    workers: list[Worker] = field(init=False, default_factory=list)
    stats: CropStats = field(init=False)
    tick: int = 0

    def __post_init__(self) -> None:
        """Build and enable every subsystem from settings."""
        s = self.settings
        self.bus = EventBus(isolate_handlers=self.isolate_handlers)
        self.projector = GridProjector(
            size_x=s.grid_size_x,
            size_z=s.grid_size_z,
            cell_size=s.cell_size,
        )
        self.pool_manager = CropPoolManager(s.grid_size_x, s.grid_size_z, self.bus)
        self.grid = GridManager(
            projector=self.projector,
            crop_data=s.crops,
            pool_manager=self.pool_manager,
            bus=self.bus,
            initial_money=s.initial_money,
            tick_interval=s.tick_interval,
            marker_interval=s.marker_interval,
            harvest_effect=s.harvest_effect,
        )
        self.stats = CropStats(self.bus, s.crops)
        self.workers = [Worker(cfg, self.bus, self.grid) for cfg in s.workers]

        self.grid.enable()
        self.stats.enable()
        for worker in self.workers:
            worker.enable()
        logger.debug(
            "engine ready: %dx%d grid, %d crop type(s), %d worker(s)",
            s.grid_size_x,
            s.grid_size_z,
            len(s.crops),
            len(self.workers),
        )

    def step(self) -> None:
        """Advance every crop by exactly one tick."""
        self.grid.tick()
        self.tick += 1

    def run(self, ticks: int) -> None:
        """Run a fixed number of crop ticks.

        Args:
            ticks: Number of ticks to advance.
        """
        for _ in range(ticks):
            self.step()

    def update(self, dt: float) -> None:
        """Advance the real-time loops by *dt* seconds."""
        self.tick += self.grid.update(dt)
        for worker in self.workers:
            worker.update(dt)

    def autoplay(self) -> None:
        """Issue one round of player commands.

        Flags every thirsty or ripe crop for the workers, then plants the
        cheapest affordable crop type in the first empty cell.
        """
        grid = self.grid
        for coord in grid.cells_in_state(CropState.WATER_NEEDED):
            grid.mark_cell(coord, PlacementMode.WATER)
        for coord in grid.cells_in_state(CropState.HARVEST_NEEDED):
            grid.mark_cell(coord, PlacementMode.HARVEST)

        if not grid.crop_data:
            return
        cheapest = min(grid.crop_data.values(), key=lambda d: d.plant_cost)
        if grid.money < cheapest.plant_cost:
            return
        for coord in self.projector.cells():
            if grid.get_cell(coord) is None:
                grid.place_crop(coord, cheapest.crop_type)
                return

    def simulate(
        self,
        seconds: float,
        dt: float = 0.1,
        *,
        autoplay: bool = True,
    ) -> None:
        """Run the real-time loops for *seconds* of simulated time.

        Args:
            seconds: Simulated time to cover.
            dt: Frame length in seconds.
            autoplay: Play a round of ``autoplay`` commands every frame.
        """
        if dt <= 0:
            msg = f"dt must be > 0, got {dt}"
            raise ValueError(msg)
        for _ in range(round(seconds / dt)):
            if autoplay:
                self.autoplay()
            self.update(dt)

    def close(self) -> None:
        """Disable every subsystem and drop parked crops."""
        for worker in self.workers:
            worker.disable()
        self.stats.disable()
        self.grid.disable()
        self.pool_manager.clear()
