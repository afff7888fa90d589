"""Worker — an AI farmhand that services marked crops.

Each worker listens for crops entering its target state (for example
``WATER_MARKED``), queues them in arrival order, walks to each in turn,
performs a timed interaction and then moves the crop on to its next
state (for example ``SPROUT``).  With nothing queued it walks back to
where it started.

Movement is a per-frame step driven by ``update(dt)``: the worker
checks whether it is close enough yet rather than blocking.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING, Any

import numpy as np
from numpy.typing import NDArray

from harvestgrid.crops.state import CropState
from harvestgrid.events import CropAdvanced

if TYPE_CHECKING:
    from harvestgrid.crops.crop import Crop
    from harvestgrid.grid.manager import GridManager
    from harvestgrid.system.event_bus import EventBus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WorkerConfig:
    """Static parameters for one worker.

    Attributes:
        name: Label for logs and the renderer.
        target_state: Crop state that puts a crop in this worker's queue.
        next_state: State the crop is moved to after the interaction.
        start_position: Idle position in world units.
        speed: World units travelled per second.
        arrival_threshold: Distance at which a target counts as reached.
        interaction_time: Seconds spent working on a crop.
    """

    name: str
    target_state: CropState
    next_state: CropState
    start_position: tuple[float, float] = (0.0, 0.0)
    speed: float = 1.0
    arrival_threshold: float = 0.1
    interaction_time: float = 1.0

    def __post_init__(self) -> None:
        if self.speed <= 0:
            msg = f"worker {self.name}: speed must be > 0"
            raise ValueError(msg)
        if self.interaction_time < 0:
            msg = f"worker {self.name}: interaction_time must be >= 0"
            raise ValueError(msg)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> WorkerConfig:
        """Build a config from a parsed YAML mapping.

        States are given by enum name, e.g. ``water_marked``.
        """
        return cls(
            name=str(data["name"]),
            target_state=CropState[str(data["target_state"]).upper()],
            next_state=CropState[str(data["next_state"]).upper()],
            start_position=tuple(data.get("start_position", (0.0, 0.0))),
            speed=float(data.get("speed", cls.speed)),
            arrival_threshold=float(
                data.get("arrival_threshold", cls.arrival_threshold),
            ),
            interaction_time=float(
                data.get("interaction_time", cls.interaction_time),
            ),
        )


class Activity(Enum):
    """What the worker is doing this frame."""

    IDLE = auto()
    WALKING = auto()
    INTERACTING = auto()
    RETURNING = auto()


def move_towards(
    current: NDArray[np.float64],
    target: NDArray[np.float64],
    max_distance: float,
) -> NDArray[np.float64]:
    """Step from *current* toward *target* by at most *max_distance*."""
    delta = target - current
    distance = float(np.linalg.norm(delta))
    if distance <= max_distance or distance == 0.0:
        return target.copy()
    return current + delta / distance * max_distance


class Worker:
    """Queue-driven farmhand.

    Attributes:
        config: Static worker parameters.
        position: Current world position.
        activity: Current activity.
        queue: Crops waiting to be serviced, oldest first.
    """

    def __init__(self, config: WorkerConfig, bus: EventBus, grid: GridManager) -> None:
        self.config = config
        self.position: NDArray[np.float64] = np.array(
            config.start_position,
            dtype=np.float64,
        )
        self.activity = Activity.IDLE
        self.queue: deque[Crop] = deque()
        self.completed = 0
        self._start = self.position.copy()
        self._bus = bus
        self._grid = grid
        self._target: Crop | None = None
        self._interaction_left = 0.0
        self._enabled = False

    @property
    def target(self) -> Crop | None:
        """The crop being walked to or worked on."""
        return self._target

    def enable(self) -> None:
        if self._enabled:
            return
        self._enabled = True
        self._bus.subscribe(CropAdvanced, self._on_crop_advanced)

    def disable(self) -> None:
        """Unsubscribe and stand down; in-flight movement is discarded."""
        if not self._enabled:
            return
        self._enabled = False
        self._bus.unsubscribe(CropAdvanced, self._on_crop_advanced)
        self._target = None
        self.activity = Activity.IDLE

    def update(self, dt: float) -> None:
        """Advance movement and interaction by *dt* seconds."""
        if not self._enabled:
            return
        match self.activity:
            case Activity.IDLE:
                self._acquire_next_target()
            case Activity.WALKING:
                self._walk(dt)
            case Activity.INTERACTING:
                self._interaction_left -= dt
                if self._interaction_left <= 0:
                    self._finish_interaction()
            case Activity.RETURNING:
                self._return_home(dt)

    def _acquire_next_target(self) -> None:
        if self.queue:
            self._target = self.queue[0]
            self.activity = Activity.WALKING
        elif not self._near(self._start, 0.0):
            self.activity = Activity.RETURNING

    def _walk(self, dt: float) -> None:
        if self._target is None:
            self.activity = Activity.IDLE
            return
        goal = np.array(self._target.position, dtype=np.float64)
        if not self._near(goal, self.config.arrival_threshold):
            self.position = move_towards(self.position, goal, self.config.speed * dt)
        if self._near(goal, self.config.arrival_threshold):
            self.activity = Activity.INTERACTING
            self._interaction_left = self.config.interaction_time

    def _return_home(self, dt: float) -> None:
        if self.queue:
            self._acquire_next_target()
            return
        self.position = move_towards(self.position, self._start, self.config.speed * dt)
        if self._near(self._start, 0.0):
            self.activity = Activity.IDLE

    def _finish_interaction(self) -> None:
        """Dequeue the head crop and advance it if it is still ours."""
        crop = self.queue.popleft()
        self._target = None
        self.activity = Activity.IDLE
        if not self._grid.contains(crop) or crop.state is not self.config.target_state:
            logger.debug(
                "%s dropped crop %d (state %s, on grid: %s)",
                self.config.name,
                crop.crop_id,
                crop.state.name,
                self._grid.contains(crop),
            )
            return
        self.completed += 1
        logger.debug("%s finished crop %d", self.config.name, crop.crop_id)
        crop.set_state(self.config.next_state)

    def _near(self, point: NDArray[np.float64], threshold: float) -> bool:
        return float(np.linalg.norm(point - self.position)) <= threshold

    def _on_crop_advanced(self, event: CropAdvanced) -> None:
        if event.crop.state is self.config.target_state:
            self.queue.append(event.crop)
            logger.debug(
                "%s queued crop %d (%d waiting)",
                self.config.name,
                event.crop.crop_id,
                len(self.queue),
            )
