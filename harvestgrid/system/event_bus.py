"""EventBus — typed publish/subscribe registry.

Decouples the systems that *announce* a state change (crops, the grid)
from the systems that *react* to it (workers, counters, the renderer).
Handlers are keyed by the event's class and called synchronously, in
registration order, from inside ``publish``.

Usage::

    bus = EventBus()
    bus.subscribe(CropAdvanced, on_crop_advanced)
    bus.publish(CropAdvanced(crop=crop))
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, Callable

logger = logging.getLogger(__name__)

Handler = Callable[[Any], None]


class EventBus:
    """Synchronous event dispatcher owned by one simulation context.

    Attributes:
        isolate_handlers: If True, every handler runs even when an
            earlier one raises, and all failures are re-raised together
            as an ``ExceptionGroup``.  If False (the default) the first
            failure propagates straight out of ``publish``.
    """

    def __init__(self, *, isolate_handlers: bool = False) -> None:
        self.isolate_handlers = isolate_handlers
        self._handlers: dict[type, list[Handler]] = defaultdict(list)
        self._published: dict[str, int] = defaultdict(int)

    def subscribe(self, event_type: type, handler: Handler) -> None:
        """Register *handler* for events of *event_type*.

        Registering the same handler twice delivers each event to it
        twice; it must then be unsubscribed twice.
        """
        handlers = self._handlers[event_type]
        if handler in handlers:
            logger.warning(
                "%r subscribed twice to %s",
                handler,
                event_type.__name__,
            )
        handlers.append(handler)

    def unsubscribe(self, event_type: type, handler: Handler) -> None:
        """Remove one registration of *handler*; unknown handlers are ignored."""
        handlers = self._handlers.get(event_type)
        if not handlers:
            return
        try:
            handlers.remove(handler)
        except ValueError:
            return
        if not handlers:
            del self._handlers[event_type]

    def publish(self, event: Any) -> None:
        """Deliver *event* to every handler registered for its type.

        The handler list is copied before dispatch, so handlers added or
        removed while this call is running do not affect it.

        Args:
            event: The payload.  Handlers must treat it as read-only.

        Raises:
            Exception: Whatever the first failing handler raised, when
                handlers are not isolated.
            ExceptionGroup: All handler failures, when they are.
        """
        event_type = type(event)
        self._published[event_type.__name__] += 1
        handlers = self._handlers.get(event_type)
        if not handlers:
            return

        if not self.isolate_handlers:
            for handler in list(handlers):
                handler(event)
            return

        failures: list[Exception] = []
        for handler in list(handlers):
            try:
                handler(event)
            except Exception as exc:  # noqa: BLE001
                logger.exception(
                    "handler %r failed for %s",
                    handler,
                    event_type.__name__,
                )
                failures.append(exc)
        if failures:
            msg = f"{len(failures)} handler(s) failed for {event_type.__name__}"
            raise ExceptionGroup(msg, failures)

    def handler_count(self, event_type: type) -> int:
        """Number of registrations currently held for *event_type*."""
        return len(self._handlers.get(event_type, ()))

    def stats(self) -> dict[str, int]:
        """Return cumulative publish counts by event class name."""
        return dict(self._published)

    def __repr__(self) -> str:
        return f"EventBus(types={len(self._handlers)})"
