"""Crop — a single planted crop and its growth state machine.

Transitions are either timer-driven (``tick``) or commanded from outside
(the grid marking a crop, a worker finishing its interaction).  Every
transition goes through ``set_state`` so exactly one ``CropAdvanced``
notification is published per change, after the crop's fields are
already up to date.

State flow::

    SEED --timer--> WATER_NEEDED --water--> WATER_MARKED --worker--> SPROUT
    SPROUT --timer--> HARVEST_NEEDED --harvest--> HARVEST_MARKED --worker--> NONE
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from harvestgrid.crops.state import CropState
from harvestgrid.events import CropAdvanced

if TYPE_CHECKING:
    from harvestgrid.crops.data import CropData, CropVisual
    from harvestgrid.system.event_bus import EventBus

logger = logging.getLogger(__name__)


class CropStateError(RuntimeError):
    """Raised when a crop is driven in a way the grid should never allow."""


@dataclass(eq=False)
class Crop:
    """A pooled crop instance.

    Identity equality: two crops are the same only if they are the same
    object, so crops can key dictionaries and sets.

    Attributes:
        bus: Where advance notifications are published.
        crop_id: Stable id assigned by the pool factory.
        state: Current growth stage.
        data: Crop type table; ``None`` until first initialised.
        grow_timer: Ticks left before the automatic transition.
        next_state: State entered when ``grow_timer`` runs out, or
            ``NONE`` when the crop waits for an outside command.
        visual: Currently displayed stage.
        position: World-space centre of the crop's cell.
        active: True while leased from the pool.
    """

    bus: EventBus = field(repr=False)
    crop_id: int = 0
    state: CropState = CropState.NONE
    data: CropData | None = field(default=None, repr=False)
    grow_timer: int = 0
    next_state: CropState = CropState.NONE
    visual: CropVisual | None = field(default=None, repr=False)
    position: tuple[float, float] = (0.0, 0.0)
    active: bool = False

    @property
    def is_waiting(self) -> bool:
        """True if the crop needs an outside command to advance."""
        return self.next_state is CropState.NONE

    def set_active(self, active: bool) -> None:
        self.active = active

    def initialize(self, data: CropData) -> None:
        """Attach a crop type table and start growing from ``SEED``."""
        self.data = data
        self.grow_timer = 0
        self.visual = None
        self.set_state(CropState.SEED)

    def set_state(self, state: CropState) -> None:
        """Enter *state*, apply its timer and visuals, then notify.

        Args:
            state: The state to enter.

        Raises:
            CropStateError: If *state* needs crop data that was never set.
        """
        self.state = state
        self.next_state = CropState.NONE

        match state:
            case CropState.SEED:
                data = self._require_data()
                self.visual = data.visuals[0]
                self.grow_timer = data.growth_time_stage1
                self.next_state = CropState.WATER_NEEDED
            case CropState.SPROUT:
                data = self._require_data()
                self.visual = data.visuals[1]
                self.grow_timer = data.growth_time_stage2
                self.next_state = CropState.HARVEST_NEEDED
            case CropState.HARVEST_NEEDED:
                self.visual = self._require_data().visuals[2]

        logger.debug("crop %d -> %s", self.crop_id, state.name)
        self.bus.publish(CropAdvanced(crop=self))

    def tick(self) -> None:
        """Advance the growth timer by one simulation tick.

        Does nothing while the crop is waiting on a command.

        Raises:
            CropStateError: If the crop is parked in its pool.
        """
        if not self.active:
            msg = f"crop {self.crop_id} ticked while not in use"
            raise CropStateError(msg)
        if self.next_state is CropState.NONE:
            return

        self.grow_timer -= 1
        if self.grow_timer > 0:
            return

        self.set_state(self.next_state)

    def _require_data(self) -> CropData:
        if self.data is None:
            msg = f"crop {self.crop_id} has no crop data; call initialize() first"
            raise CropStateError(msg)
        return self.data
