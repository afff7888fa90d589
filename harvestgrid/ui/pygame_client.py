"""Pygame 2D host for the HarvestGrid simulation.

Translates mouse and keyboard input into bus commands, advances the
engine in real time and draws the grid, crops, need icons, the
placement marker, workers and a stats panel.  Harvest bursts are pooled.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar

import numpy as np
import pygame

from harvestgrid.crops.data import CropType
from harvestgrid.crops.state import CropState
from harvestgrid.events import (
    CropHarvested,
    CropTypeSelected,
    ModeSelected,
    PointerDrag,
    PointerDrop,
    PointerTap,
)
from harvestgrid.grid.manager import PlacementMode
from harvestgrid.system.pool import ObjectPool
from harvestgrid.workers.worker import Activity

if TYPE_CHECKING:
    from harvestgrid.grid.coordinate import GridCoordinate
    from harvestgrid.simulation.engine import FarmEngine

# Colour palette
_BG = (40, 30, 20)
_SOIL = (95, 70, 45)
_TILLED = (80, 55, 35)
_GRID_LINE = (70, 50, 30)
_MARKER_OK = (240, 240, 240)
_MARKER_BLOCKED = (230, 60, 60)
_WATER_ICON = (70, 150, 255)
_HARVEST_ICON = (255, 220, 70)
_BURST = np.array([255, 240, 150], dtype=np.float64)

_WORKER_COLOURS: dict[Activity, tuple[int, int, int]] = {
    Activity.IDLE: (180, 180, 180),
    Activity.WALKING: (100, 200, 255),
    Activity.INTERACTING: (255, 160, 60),
    Activity.RETURNING: (150, 150, 220),
}

_ICON_STATES: dict[CropState, tuple[int, int, int]] = {
    CropState.WATER_NEEDED: _WATER_ICON,
    CropState.WATER_MARKED: _WATER_ICON,
    CropState.HARVEST_NEEDED: _HARVEST_ICON,
    CropState.HARVEST_MARKED: _HARVEST_ICON,
}

# Marked crops draw a hollow icon
_MARKED_STATES = frozenset({CropState.WATER_MARKED, CropState.HARVEST_MARKED})


@dataclass(eq=False)
class HarvestBurst:
    """A short-lived expanding ring drawn where a crop was harvested."""

    x: float = 0.0
    z: float = 0.0
    frames_left: int = 0
    duration: int = 1
    active: bool = False

    def set_active(self, active: bool) -> None:
        self.active = active


class PygameRenderer:
    """Renders a FarmEngine into a Pygame window and feeds it input.

    Attributes:
        engine: The engine to drive and display.
        cell_px: Pixel size of each grid cell.
        screen: The Pygame display surface.
    """

    _MODE_KEYS: ClassVar[dict[int, PlacementMode]] = {
        pygame.K_1: PlacementMode.PLANT,
        pygame.K_2: PlacementMode.WATER,
        pygame.K_3: PlacementMode.HARVEST,
        pygame.K_ESCAPE: PlacementMode.NONE,
    }
    _CROP_KEYS: ClassVar[dict[int, CropType]] = {
        pygame.K_c: CropType.CORN,
        pygame.K_t: CropType.TOMATO,
    }

    def __init__(self, engine: FarmEngine, cell_px: int = 64) -> None:
        """Initialise the renderer.

        Args:
            engine: The engine to render.
            cell_px: Pixel width/height per grid cell.
        """
        self.engine = engine
        self.cell_px = cell_px
        self._px_per_unit = cell_px / engine.settings.cell_size
        self._margin = cell_px

        self._pointer_start: tuple[int, int] | None = None
        self._dragging = False
        self._bursts: list[HarvestBurst] = []
        self._burst_pool: ObjectPool[HarvestBurst] = ObjectPool(
            factory=HarvestBurst,
            initial_size=5,
            prewarm=True,
        )

        w = engine.projector.size_x * cell_px + 2 * self._margin
        h = engine.projector.size_z * cell_px + 2 * self._margin
        self._panel_width = 320
        self._win_w = w + self._panel_width
        self._win_h = max(h, 320)

        pygame.init()
        self.screen = pygame.display.set_mode((self._win_w, self._win_h))
        pygame.display.set_caption("HarvestGrid")
        self.clock = pygame.time.Clock()
        self.font = pygame.font.SysFont("monospace", 14)
        self.running = True

        engine.bus.subscribe(CropHarvested, self._on_crop_harvested)

    def run(self, fps: int = 60) -> None:
        """Main loop: handle input, advance the engine, render.

        Args:
            fps: Target frames per second.
        """
        while self.running:
            dt = self.clock.tick(fps) / 1000.0
            self._handle_events()
            self.engine.update(dt)
            self._draw()

        self.engine.bus.unsubscribe(CropHarvested, self._on_crop_harvested)
        for burst in self._bursts:
            self._burst_pool.release(burst)
        self._bursts.clear()
        self._burst_pool.clear()
        pygame.quit()

    # -- Coordinate mapping --

    def screen_to_world(self, pos: tuple[int, int]) -> tuple[float, float]:
        ox, oz = self.engine.projector.origin
        return (
            (pos[0] - self._margin) / self._px_per_unit + ox,
            (pos[1] - self._margin) / self._px_per_unit + oz,
        )

    def world_to_screen(self, x: float, z: float) -> tuple[int, int]:
        ox, oz = self.engine.projector.origin
        return (
            int((x - ox) * self._px_per_unit) + self._margin,
            int((z - oz) * self._px_per_unit) + self._margin,
        )

    def cell_rect(self, coordinate: GridCoordinate) -> tuple[int, int, int, int]:
        """Screen rectangle covered by *coordinate*'s cell."""
        row, col = self.engine.projector.index_of(coordinate)
        cs = self.cell_px
        return (self._margin + col * cs, self._margin + row * cs, cs, cs)

    # -- Input --

    def _handle_events(self) -> None:
        """Turn Pygame input into simulation commands."""
        bus = self.engine.bus
        threshold = self.engine.settings.drag_threshold
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_q:
                    self.running = False
                elif event.key in self._MODE_KEYS:
                    bus.publish(ModeSelected(mode=self._MODE_KEYS[event.key]))
                elif event.key in self._CROP_KEYS:
                    bus.publish(CropTypeSelected(crop_type=self._CROP_KEYS[event.key]))
            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                self._pointer_start = event.pos
                self._dragging = False
            elif event.type == pygame.MOUSEMOTION and self._pointer_start is not None:
                sx, sy = self._pointer_start
                moved = ((event.pos[0] - sx) ** 2 + (event.pos[1] - sy) ** 2) ** 0.5
                if not self._dragging and moved > threshold:
                    self._dragging = True
                if self._dragging:
                    bus.publish(PointerDrag(position=self.screen_to_world(event.pos)))
            elif event.type == pygame.MOUSEBUTTONUP and event.button == 1:
                world = self.screen_to_world(event.pos)
                if self._dragging:
                    bus.publish(PointerDrop(position=world))
                else:
                    bus.publish(PointerTap(position=world))
                self._pointer_start = None
                self._dragging = False

    def _on_crop_harvested(self, event: CropHarvested) -> None:
        burst = self._burst_pool.get()
        burst.x, burst.z = event.crop.position
        burst.duration = max(1, event.effect.duration)
        burst.frames_left = burst.duration
        self._bursts.append(burst)

    # -- Drawing --

    def _draw(self) -> None:
        """Render one frame."""
        self.screen.fill(_BG)
        self._draw_grid()
        self._draw_crops()
        self._draw_need_icons()
        self._draw_marker()
        self._draw_workers()
        self._draw_bursts()
        self._draw_info_panel()
        pygame.display.flip()

    def _draw_grid(self) -> None:
        """Draw soil, tilled where a crop is planted."""
        occupancy = self.engine.grid.occupancy()
        for coord in self.engine.projector.cells():
            rect = self.cell_rect(coord)
            tilled = occupancy[self.engine.projector.index_of(coord)] != 0
            pygame.draw.rect(self.screen, _TILLED if tilled else _SOIL, rect)
            pygame.draw.rect(self.screen, _GRID_LINE, rect, 1)

    def _draw_crops(self) -> None:
        radius = max(4, self.cell_px // 3)
        for crop in self.engine.grid.crop_grid.values():
            if crop.visual is None:
                continue
            centre = self.world_to_screen(*crop.position)
            pygame.draw.circle(self.screen, crop.visual.colour, centre, radius)

    def _draw_need_icons(self) -> None:
        """Draw a water or harvest icon over every cell that needs one.

        Marked cells get a hollow icon until a worker has serviced them.
        """
        grid = self.engine.grid
        offset = max(4, self.cell_px // 3)
        icon_radius = max(3, offset // 3)
        for state, colour in _ICON_STATES.items():
            width = 2 if state in _MARKED_STATES else 0
            for coord in grid.cells_in_state(state):
                cx, cz = self.world_to_screen(*grid.projector.to_world(coord))
                centre = (cx + offset, cz - offset)
                pygame.draw.circle(self.screen, colour, centre, icon_radius, width)

    def _draw_marker(self) -> None:
        marker = self.engine.grid.marker
        if not marker.visible:
            return
        rect = self.cell_rect(marker.coordinate)
        colour = _MARKER_BLOCKED if marker.blocked else _MARKER_OK
        pygame.draw.rect(self.screen, colour, rect, 3)

    def _draw_workers(self) -> None:
        size = max(4, self.cell_px // 4)
        for worker in self.engine.workers:
            x, z = self.world_to_screen(*worker.position)
            colour = _WORKER_COLOURS.get(worker.activity, (200, 200, 200))
            rect = (x - size // 2, z - size // 2, size, size)
            pygame.draw.rect(self.screen, colour, rect)

    def _draw_bursts(self) -> None:
        """Draw expanding rings and return finished ones to their pool."""
        still_running: list[HarvestBurst] = []
        for burst in self._bursts:
            t = 1.0 - burst.frames_left / burst.duration
            colour = (_BURST * (1.0 - 0.6 * t)).astype(int).tolist()
            radius = int(self.cell_px * (0.2 + 0.5 * t))
            centre = self.world_to_screen(burst.x, burst.z)
            pygame.draw.circle(self.screen, colour, centre, radius, 2)
            burst.frames_left -= 1
            if burst.frames_left > 0:
                still_running.append(burst)
            else:
                self._burst_pool.release(burst)
        self._bursts = still_running

    def _draw_info_panel(self) -> None:
        """Draw a stats panel on the right side of the window."""
        grid = self.engine.grid
        panel_x = self._win_w - self._panel_width + 10
        y = 10

        lines = [
            f"Tick: {self.engine.tick}",
            f"Money: {grid.money}",
            f"Mode: {grid.mode.name}",
            f"Selected: {grid.selected_crop.name}",
            "",
            "--- Crops ---",
        ]
        for crop_type, data in grid.crop_data.items():
            lines += [
                f"{crop_type.name} ({data.plant_cost} -> {data.harvest_value})",
                f"  {self.engine.stats.summary(crop_type)}",
            ]

        lines += [
            "",
            "--- Controls ---",
            "1/2/3: plant/water/harvest",
            "C/T: pick corn/tomato",
            "drag: place, click: mark",
            "ESC: no mode, Q: quit",
        ]

        for line in lines:
            surf = self.font.render(line, True, (220, 220, 220))
            self.screen.blit(surf, (panel_x, y))
            y += 18
