"""
Announcement repository interface.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from ....domain.entities.announcement import CallAnnouncement
from ....domain.enums.circuit import CircuitStep


class AnnouncementRepository(ABC):
    """Abstract repository for call announcements."""

    @abstractmethod
    async def save(self, announcement: CallAnnouncement) -> CallAnnouncement:
        pass

    @abstractmethod
    async def find_active(
        self,
        limit: Optional[int] = None,
        patient_id: Optional[str] = None,
        step: Optional[CircuitStep] = None,
    ) -> List[CallAnnouncement]:
        """Active announcements, newest first."""
        pass

    @abstractmethod
    async def delete_for_patient(self, patient_id: str) -> int:
        pass
