"""
Event publisher port.
"""

from abc import ABC, abstractmethod
from typing import Sequence

from ....domain.events.circuit_events import DomainEvent


class EventPublisher(ABC):
    """Delivers committed domain events to interested parties (display refresh, audit)."""

    @abstractmethod
    async def publish(self, events: Sequence[DomainEvent]) -> None:
        pass
