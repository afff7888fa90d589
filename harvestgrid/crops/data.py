"""Crop type tables — cost, value, growth timings and visual stages.

One ``CropData`` exists per crop type.  It is built once from config and
shared read-only by every crop of that type.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)

STAGE_COUNT = 3


class CropType(Enum):
    """Plantable crop kinds."""

    NONE = "none"
    CORN = "corn"
    TOMATO = "tomato"


@dataclass(frozen=True)
class CropVisual:
    """Appearance of one growth stage.

    Attributes:
        name: Asset name for the stage.
        colour: RGB colour used by the 2D renderer.
    """

    name: str = "empty"
    colour: tuple[int, int, int] = (120, 120, 120)


@dataclass(frozen=True)
class CropData:
    """Static configuration for a single crop type.

    Attributes:
        crop_type: Which crop this table describes.
        plant_cost: Money deducted when the crop is placed.
        harvest_value: Money credited when the harvest completes.
        growth_time_stage1: Ticks from Seed until water is needed.
        growth_time_stage2: Ticks from Sprout until harvest is needed.
        visuals: Exactly three stages (seed, sprout, ripe).
    """

    crop_type: CropType
    plant_cost: int
    harvest_value: int
    growth_time_stage1: int
    growth_time_stage2: int
    visuals: tuple[CropVisual, ...] = (CropVisual(), CropVisual(), CropVisual())

    def __post_init__(self) -> None:
        if self.crop_type is CropType.NONE:
            msg = "CropData needs a concrete crop type"
            raise ValueError(msg)
        for name in ("plant_cost", "harvest_value"):
            if getattr(self, name) < 0:
                msg = f"{name} must be >= 0 for {self.crop_type.value}"
                raise ValueError(msg)
        for name in ("growth_time_stage1", "growth_time_stage2"):
            if getattr(self, name) < 1:
                msg = f"{name} must be >= 1 tick for {self.crop_type.value}"
                raise ValueError(msg)
        if len(self.visuals) != STAGE_COUNT:
            object.__setattr__(
                self,
                "visuals",
                fit_stage_count(list(self.visuals), self.crop_type),
            )

    @classmethod
    def from_dict(cls, crop_type: CropType, data: dict[str, Any]) -> CropData:
        """Build a table from a parsed YAML mapping.

        Args:
            crop_type: The crop the mapping belongs to.
            data: Keys ``plant_cost``, ``harvest_value``,
                ``growth_time_stage1``, ``growth_time_stage2`` and an
                optional ``visuals`` list of ``{name, colour}`` entries.

        Raises:
            KeyError: If a required numeric key is missing.
        """
        visuals = [
            CropVisual(
                name=str(v.get("name", "empty")),
                colour=tuple(v.get("colour", CropVisual.colour)),
            )
            for v in data.get("visuals", [])
        ]
        return cls(
            crop_type=crop_type,
            plant_cost=int(data["plant_cost"]),
            harvest_value=int(data["harvest_value"]),
            growth_time_stage1=int(data["growth_time_stage1"]),
            growth_time_stage2=int(data["growth_time_stage2"]),
            visuals=tuple(visuals),
        )


def fit_stage_count(
    visuals: list[CropVisual],
    crop_type: CropType,
) -> tuple[CropVisual, ...]:
    """Trim or pad *visuals* to exactly ``STAGE_COUNT`` entries."""
    if len(visuals) != STAGE_COUNT:
        logger.warning(
            "%s has %d visual stage(s), expected %d",
            crop_type.value,
            len(visuals),
            STAGE_COUNT,
        )
    fitted = visuals[:STAGE_COUNT]
    while len(fitted) < STAGE_COUNT:
        fitted.append(CropVisual())
    return tuple(fitted)
