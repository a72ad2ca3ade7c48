"""
In-process event bus fanning committed domain events out to subscribers.
"""

import logging
from typing import Awaitable, Callable, Dict, List, Optional, Sequence, Type

from preopflow.application.ports.services.event_publisher import EventPublisher
from preopflow.domain.events.circuit_events import DomainEvent

logger = logging.getLogger("preopflow")

EventHandler = Callable[[DomainEvent], Awaitable[None]]


class InMemoryEventBus(EventPublisher):
    """Subscribers register per event type, or for every event with ``None``."""

    def __init__(self) -> None:
        self._handlers: Dict[Optional[str], List[EventHandler]] = {}

    def subscribe(
        self, handler: EventHandler, event_type: Optional[Type[DomainEvent]] = None
    ) -> None:
        key = event_type.__name__ if event_type is not None else None
        self._handlers.setdefault(key, []).append(handler)

    def clear(self) -> None:
        self._handlers.clear()

    async def publish(self, events: Sequence[DomainEvent]) -> None:
        for event in events:
            handlers = self._handlers.get(event.event_type, []) + self._handlers.get(None, [])
            for handler in handlers:
                try:
                    await handler(event)
                except Exception as e:
                    # The transaction already committed; a failing subscriber
                    # must not turn the command into an error
                    logger.error(
                        f"Event handler failed for {event.event_type}: {e}", exc_info=True
                    )


async def log_event(event: DomainEvent) -> None:
    """Default subscriber: one structured log line per event."""
    logger.info(f"event {event.event_type}", extra={"extra_data": {"event": event.to_dict()}})
