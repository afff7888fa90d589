"""ObjectPool — reusable-instance pool with a lease/return discipline.

Instances are either *available* (held by the pool) or *leased* (owned
by a caller until released).  The pool only ever hands out instances
it built itself through its factory.
"""

from __future__ import annotations

import logging
from typing import Callable, Generic, Protocol, TypeVar

logger = logging.getLogger(__name__)


class Poolable(Protocol):
    """Anything the pool can switch between live and parked."""

    def set_active(self, active: bool) -> None: ...


T = TypeVar("T", bound=Poolable)


class PoolError(RuntimeError):
    """Raised when the lease/return discipline is broken."""


class ObjectPool(Generic[T]):
    """A stack-based pool of ``T`` instances.

    Attributes:
        factory: Builds a fresh, inactive instance.
    """

    def __init__(
        self,
        factory: Callable[[], T],
        initial_size: int = 0,
        *,
        on_get: Callable[[T], None] | None = None,
        on_release: Callable[[T], None] | None = None,
        on_destroy: Callable[[T], None] | None = None,
        prewarm: bool = False,
    ) -> None:
        """Create the pool.

        Args:
            factory: Zero-argument callable returning a new instance.
            initial_size: Number of instances built up front when
                ``prewarm`` is set.
            on_get: Called with each instance as it is leased.
            on_release: Called with each instance as it is returned.
            on_destroy: Called with each instance dropped by ``clear``.
            prewarm: If True, build ``initial_size`` instances now.
        """
        if initial_size < 0:
            msg = f"initial_size must be >= 0, got {initial_size}"
            raise ValueError(msg)
        self.factory = factory
        self._on_get = on_get
        self._on_release = on_release
        self._on_destroy = on_destroy
        self._available: list[T] = []
        self._leased: dict[int, T] = {}
        self._created = 0

        if prewarm:
            self._prewarm(initial_size)

    @property
    def available_count(self) -> int:
        """Instances parked in the pool."""
        return len(self._available)

    @property
    def leased_count(self) -> int:
        """Instances currently owned by callers."""
        return len(self._leased)

    @property
    def total_count(self) -> int:
        """Instances built by this pool and not yet destroyed."""
        return self._created

    def is_leased(self, instance: T) -> bool:
        """Return True if *instance* is currently out on lease."""
        return id(instance) in self._leased

    def leased(self) -> list[T]:
        """Snapshot of the leased partition."""
        return list(self._leased.values())

    def get(self) -> T:
        """Lease an instance, reusing a parked one when possible."""
        instance = self._available.pop() if self._available else self._create()
        self._leased[id(instance)] = instance
        instance.set_active(True)
        if self._on_get is not None:
            self._on_get(instance)
        return instance

    def release(self, instance: T) -> None:
        """Return a leased instance to the pool.

        Raises:
            PoolError: If *instance* is not currently leased from this pool.
        """
        if id(instance) not in self._leased:
            msg = f"{instance!r} is not leased from this pool"
            raise PoolError(msg)
        if self._on_release is not None:
            self._on_release(instance)
        instance.set_active(False)
        del self._leased[id(instance)]
        self._available.append(instance)

    def clear(self) -> None:
        """Destroy every parked instance.  Leased instances are untouched."""
        dropped = len(self._available)
        while self._available:
            instance = self._available.pop()
            if self._on_destroy is not None:
                self._on_destroy(instance)
            self._created -= 1
        logger.debug("pool cleared, %d instance(s) dropped", dropped)

    def _create(self) -> T:
        instance = self.factory()
        instance.set_active(False)
        self._created += 1
        return instance

    def _prewarm(self, count: int) -> None:
        if self._available:
            return
        for _ in range(count):
            self._available.append(self._create())

    def __len__(self) -> int:
        return len(self._available)

    def __repr__(self) -> str:
        return (
            f"ObjectPool(available={len(self._available)}, "
            f"leased={len(self._leased)})"
        )
