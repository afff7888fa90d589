"""CropState — the stages a planted crop moves through."""

from __future__ import annotations

from enum import IntEnum


class CropState(IntEnum):
    """Growth stage of a crop.

    ``NONE`` is both the parked state of a pooled crop and the terminal
    state reached after a harvest completes.  The ``*_MARKED`` states
    mean the player has flagged the crop and a worker is on its way.
    """

    NONE = 0
    SEED = 1
    WATER_NEEDED = 2
    WATER_MARKED = 3
    SPROUT = 4
    HARVEST_NEEDED = 5
    HARVEST_MARKED = 6
