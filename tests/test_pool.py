"""Tests for harvestgrid.system.pool and harvestgrid.system.clock."""

from __future__ import annotations

from dataclasses import dataclass

import pytest

from harvestgrid.system.clock import FixedRateTimer
from harvestgrid.system.pool import ObjectPool, PoolError


@dataclass(eq=False)
class Token:
    active: bool = False

    def set_active(self, active: bool) -> None:
        self.active = active


def _conserved(pool: ObjectPool[Token]) -> bool:
    return pool.available_count + pool.leased_count == pool.total_count


class TestObjectPool:
    """Lease/return discipline and conservation."""

    def test_prewarm_builds_initial_size(self) -> None:
        pool = ObjectPool(Token, initial_size=4, prewarm=True)
        assert pool.available_count == 4
        assert pool.leased_count == 0
        assert pool.total_count == 4

    def test_no_prewarm_builds_lazily(self) -> None:
        pool = ObjectPool(Token, initial_size=4)
        assert pool.total_count == 0
        token = pool.get()
        assert token.active
        assert pool.total_count == 1

    def test_get_reuses_released_instance(self) -> None:
        pool = ObjectPool(Token, initial_size=1, prewarm=True)
        first = pool.get()
        pool.release(first)
        assert not first.active
        assert pool.get() is first
        assert pool.total_count == 1

    def test_get_builds_when_empty(self) -> None:
        pool = ObjectPool(Token, initial_size=1, prewarm=True)
        a = pool.get()
        b = pool.get()
        assert a is not b
        assert pool.total_count == 2
        assert _conserved(pool)

    def test_callbacks_fire_in_order(self) -> None:
        log: list[tuple[str, bool]] = []
        pool = ObjectPool(
            Token,
            on_get=lambda t: log.append(("get", t.active)),
            on_release=lambda t: log.append(("release", t.active)),
        )
        token = pool.get()
        pool.release(token)
        # on_get sees the instance already active, on_release before deactivation
        assert log == [("get", True), ("release", True)]

    def test_release_not_leased_raises(self) -> None:
        pool = ObjectPool(Token, initial_size=1, prewarm=True)
        with pytest.raises(PoolError):
            pool.release(Token())

    def test_double_release_raises(self) -> None:
        pool = ObjectPool(Token)
        token = pool.get()
        pool.release(token)
        with pytest.raises(PoolError):
            pool.release(token)
        assert _conserved(pool)

    def test_clear_only_drops_available(self) -> None:
        destroyed: list[Token] = []
        pool = ObjectPool(
            Token,
            initial_size=3,
            prewarm=True,
            on_destroy=destroyed.append,
        )
        leased = pool.get()
        pool.clear()
        assert pool.available_count == 0
        assert len(destroyed) == 2
        assert pool.is_leased(leased)
        assert pool.total_count == 1
        assert _conserved(pool)

    def test_conservation_through_mixed_use(self) -> None:
        pool = ObjectPool(Token, initial_size=2, prewarm=True)
        held = [pool.get() for _ in range(5)]
        assert _conserved(pool)
        for token in held[:3]:
            pool.release(token)
        assert _conserved(pool)
        assert pool.leased() == held[3:]

    def test_negative_initial_size_rejected(self) -> None:
        with pytest.raises(ValueError):
            ObjectPool(Token, initial_size=-1)


class TestFixedRateTimer:
    """Accumulator stepping."""

    def test_whole_periods(self) -> None:
        timer = FixedRateTimer(period=1.0)
        assert timer.advance(0.5) == 0
        assert timer.advance(0.5) == 1
        assert timer.advance(2.25) == 2
        assert timer.accumulator == pytest.approx(0.25)

    def test_stopped_timer_does_not_step(self) -> None:
        timer = FixedRateTimer(period=0.2, running=False)
        assert timer.advance(5.0) == 0

    def test_stop_discards_partial_period(self) -> None:
        timer = FixedRateTimer(period=1.0)
        timer.advance(0.9)
        timer.stop()
        timer.start()
        assert timer.advance(0.2) == 0

    def test_period_must_be_positive(self) -> None:
        with pytest.raises(ValueError):
            FixedRateTimer(period=0.0)
