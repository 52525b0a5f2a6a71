"""In-process event bus.

Implements EventBusPort with synchronous delivery in subscription order.
"""

import logging
from collections.abc import Mapping
from typing import Any

from changebridge.core.models import EventHandler
from changebridge.core.ports import EventBusPort

logger = logging.getLogger(__name__)


class InMemoryEventBus(EventBusPort):
    """Pub/sub bus that calls handlers directly on publish."""

    def __init__(self) -> None:
        self._subscribers: dict[str, list[EventHandler]] = {}

    def subscribe(self, event: str, handler: EventHandler) -> None:
        self._subscribers.setdefault(event, []).append(handler)
        logger.debug(f"Subscribed {getattr(handler, '__name__', handler)!s} to {event}")

    def unsubscribe(self, event: str, handler: EventHandler) -> None:
        if event in self._subscribers:
            self._subscribers[event] = [
                h for h in self._subscribers[event] if h != handler
            ]

    def publish(self, event: str, payload: Mapping[str, Any]) -> None:
        """Deliver ``payload`` to every handler of ``event``.

        A failing handler is logged and skipped so the rest still run.
        """
        handlers = list(self._subscribers.get(event, []))
        if not handlers:
            logger.debug(f"No handlers for {event}")
            return

        for handler in handlers:
            try:
                handler(payload)
            except Exception as e:
                logger.error(
                    f"Handler {getattr(handler, '__name__', handler)!s} failed for {event}: {e}",
                    exc_info=True,
                )

    def handler_count(self, event: str) -> int:
        return len(self._subscribers.get(event, []))
