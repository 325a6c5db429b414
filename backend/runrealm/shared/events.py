"""
In-process event bus.

Tracker and registry publish lifecycle events here; UI adapters,
the registry and tests subscribe. Subscriber failures are logged and
never reach the publisher.
"""

import logging
from collections import defaultdict
from typing import Any, Callable

logger = logging.getLogger(__name__)

Handler = Callable[[dict[str, Any]], None]


# Run lifecycle
RUN_STARTED = "run:started"
RUN_PAUSED = "run:paused"
RUN_RESUMED = "run:resumed"
RUN_COMPLETED = "run:completed"
RUN_CANCELLED = "run:cancelled"
RUN_STATUS_CHANGED = "run:status_changed"
RUN_POINT_ADDED = "run:point_added"
RUN_LAP = "run:lap"
RUN_STATS_UPDATED = "run:stats_updated"
RUN_IMPORTED = "run:imported"
RUN_PLANNED_ROUTE_ACTIVATED = "run:planned_route_activated"

# Territories
TERRITORY_ELIGIBLE = "territory:eligible"
TERRITORY_CLAIMED = "territory:claimed"
TERRITORY_CLAIM_FAILED = "territory:claim_failed"
TERRITORY_NEARBY_UPDATED = "territory:nearby_updated"
TERRITORY_INTENT_CREATED = "territory:intent_created"
TERRITORY_INTENT_CANCELLED = "territory:intent_cancelled"
TERRITORY_INTENT_FULFILLED = "territory:intent_fulfilled"
CROSS_CHAIN_CLAIM_REQUESTED = "crosschain:claim_requested"


class EventBus:
    """
    Synchronous publish/subscribe.

    Usage:
        bus = EventBus()
        unsubscribe = bus.subscribe(RUN_STARTED, lambda payload: ...)
        bus.emit(RUN_STARTED, {"run_id": "..."})
    """

    def __init__(self):
        self._handlers: dict[str, list[Handler]] = defaultdict(list)

    def subscribe(self, event: str, handler: Handler) -> Callable[[], None]:
        """Register handler; returns a callable that removes it."""
        self._handlers[event].append(handler)

        def unsubscribe() -> None:
            if handler in self._handlers[event]:
                self._handlers[event].remove(handler)

        return unsubscribe

    def emit(self, event: str, payload: dict[str, Any] | None = None) -> None:
        """Deliver payload to every handler of event, in subscription order."""
        payload = payload or {}
        for handler in list(self._handlers.get(event, ())):
            try:
                handler(payload)
            except Exception:
                logger.exception(f"Event handler for {event} failed")

