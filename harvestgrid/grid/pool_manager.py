"""CropPoolManager — crop pool sized to the whole grid.

The pool is prewarmed with one crop per cell, so placing a crop never
builds a new instance at runtime.
"""

from __future__ import annotations

import itertools
from typing import TYPE_CHECKING

from harvestgrid.crops.crop import Crop
from harvestgrid.system.pool import ObjectPool

if TYPE_CHECKING:
    from harvestgrid.system.event_bus import EventBus


class CropPoolManager:
    """Leases and reclaims crops, tracking the ones in use.

    Attributes:
        capacity: Maximum crops that can be placed at once.
        active_crops: Crops currently leased, in lease order.
    """

    def __init__(self, size_x: int, size_z: int, bus: EventBus) -> None:
        """Build and prewarm a pool of ``size_x * size_z`` crops.

        Args:
            size_x: Grid columns.
            size_z: Grid rows.
            bus: Event bus handed to every crop the pool builds.
        """
        self.capacity = size_x * size_z
        self.active_crops: list[Crop] = []
        self._bus = bus
        self._ids = itertools.count(1)
        self._pool: ObjectPool[Crop] = ObjectPool(
            factory=self._build_crop,
            initial_size=self.capacity,
            on_get=self._on_get_from_pool,
            on_release=self._on_release_to_pool,
            prewarm=True,
        )

    @property
    def pool(self) -> ObjectPool[Crop]:
        return self._pool

    def get_crop(self) -> Crop:
        """Lease a crop from the pool."""
        return self._pool.get()

    def release_crop(self, crop: Crop) -> None:
        """Return a crop to the pool.

        Raises:
            PoolError: If *crop* is not currently leased.
        """
        self._pool.release(crop)

    def clear(self) -> None:
        """Drop all parked crops."""
        self._pool.clear()

    def _build_crop(self) -> Crop:
        return Crop(bus=self._bus, crop_id=next(self._ids))

    def _on_get_from_pool(self, crop: Crop) -> None:
        self.active_crops.append(crop)

    def _on_release_to_pool(self, crop: Crop) -> None:
        self.active_crops.remove(crop)
