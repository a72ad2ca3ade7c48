"""
Station repository interface.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from ....domain.entities.station import Station
from ....domain.enums.circuit import CircuitStep


class StationRepository(ABC):
    """Abstract repository for stations."""

    @abstractmethod
    async def save(self, station: Station) -> Station:
        pass

    @abstractmethod
    async def find_by_id(self, station_id: str) -> Optional[Station]:
        pass

    @abstractmethod
    async def find_by_step_and_number(
        self, step: CircuitStep, station_number: int
    ) -> Optional[Station]:
        pass

    @abstractmethod
    async def find_all(
        self, step: Optional[CircuitStep] = None, active_only: bool = False
    ) -> List[Station]:
        """Stations ordered by step, then station number."""
        pass

    @abstractmethod
    async def find_bound_to_patient(self, patient_id: str) -> List[Station]:
        pass

    @abstractmethod
    async def claim(self, station_id: str) -> None:
        """Take a write claim on the station row for the current transaction.

        Two transactions claiming the same station cannot both commit.
        """
        pass

    @abstractmethod
    async def count(self) -> int:
        pass
