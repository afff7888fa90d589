"""FixedRateTimer — turns elapsed wall time into whole fixed steps.

The host calls ``advance(dt)`` every frame; the timer reports how many
periods have fully elapsed and carries the remainder forward.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class FixedRateTimer:
    """Accumulator-based fixed-period driver.

    Attributes:
        period: Seconds per step (must be > 0).
        running: Stopped timers ignore ``advance``.
        accumulator: Seconds carried toward the next step.
    """

    period: float
    running: bool = True
    accumulator: float = 0.0

    def __post_init__(self) -> None:
        if self.period <= 0:
            msg = f"period must be > 0, got {self.period}"
            raise ValueError(msg)

    def advance(self, dt: float) -> int:
        """Add *dt* seconds and return the number of steps now due."""
        if not self.running:
            return 0
        self.accumulator += dt
        steps = int(self.accumulator // self.period)
        self.accumulator -= steps * self.period
        return steps

    def start(self) -> None:
        self.running = True

    def stop(self) -> None:
        """Halt the timer and discard any partial period."""
        self.running = False
        self.accumulator = 0.0
