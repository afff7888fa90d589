"""CropStats — per-type crop counters fed purely by notifications.

Tracks how many crops of each type are growing, need water or are ready
to harvest.  The renderer's stats panel reads from here; nothing in the
simulation depends on it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from harvestgrid.crops.state import CropState
from harvestgrid.events import CropAdvanced

if TYPE_CHECKING:
    from collections.abc import Iterable

    from harvestgrid.crops.data import CropType
    from harvestgrid.system.event_bus import EventBus


@dataclass
class MonitoredStates:
    """Counters for one crop type."""

    growing: int = 0
    needs_water: int = 0
    ready_to_harvest: int = 0


# New state -> (state it was counted under before, state to count it under now)
_TRANSITIONS: dict[CropState, tuple[CropState | None, CropState | None]] = {
    CropState.SEED: (None, CropState.SEED),
    CropState.WATER_NEEDED: (CropState.SEED, CropState.WATER_NEEDED),
    CropState.WATER_MARKED: (CropState.WATER_NEEDED, CropState.WATER_MARKED),
    CropState.SPROUT: (CropState.WATER_MARKED, CropState.SPROUT),
    CropState.HARVEST_NEEDED: (CropState.SPROUT, CropState.HARVEST_NEEDED),
    CropState.HARVEST_MARKED: (CropState.HARVEST_NEEDED, None),
}


class CropStats:
    """Counts crops per type and stage bucket."""

    def __init__(self, bus: EventBus, crop_types: Iterable[CropType]) -> None:
        self._bus = bus
        self._stats: dict[CropType, MonitoredStates] = {
            ct: MonitoredStates() for ct in crop_types
        }
        self._enabled = False

    def enable(self) -> None:
        if not self._enabled:
            self._enabled = True
            self._bus.subscribe(CropAdvanced, self._on_crop_advanced)

    def disable(self) -> None:
        if self._enabled:
            self._enabled = False
            self._bus.unsubscribe(CropAdvanced, self._on_crop_advanced)

    def get(self, crop_type: CropType) -> MonitoredStates:
        """Counters for *crop_type* (zeros for an unregistered type)."""
        return self._stats.get(crop_type, MonitoredStates())

    def summary(self, crop_type: CropType) -> str:
        s = self.get(crop_type)
        return (
            f"{s.growing} growing, {s.needs_water} need water, "
            f"{s.ready_to_harvest} ripe"
        )

    def _on_crop_advanced(self, event: CropAdvanced) -> None:
        crop = event.crop
        if crop.data is None or crop.state not in _TRANSITIONS:
            return
        stats = self._stats.get(crop.data.crop_type)
        if stats is None:
            return
        before, after = _TRANSITIONS[crop.state]
        if before is not None:
            _update_stat(stats, before, -1)
        if after is not None:
            _update_stat(stats, after, 1)


def _update_stat(stats: MonitoredStates, state: CropState, delta: int) -> None:
    match state:
        case CropState.WATER_NEEDED:
            stats.needs_water += delta
        case CropState.SEED | CropState.WATER_MARKED | CropState.SPROUT:
            stats.growing += delta
        case CropState.HARVEST_NEEDED:
            stats.ready_to_harvest += delta
