"""
Priority rotation repository interface.
"""

from abc import ABC, abstractmethod

from ....domain.entities.queue_rotation import QueueRotation


class RotationRepository(ABC):
    """Stores one consecutive-priority counter per step queue."""

    @abstractmethod
    async def get(self, queue_key: str) -> QueueRotation:
        """Return the counter for a queue, a fresh zero counter if none is stored."""
        pass

    @abstractmethod
    async def save(self, rotation: QueueRotation) -> QueueRotation:
        pass
