"""
Unit of work port.

Every command and query runs inside one unit of work. Leaving the context
without calling ``commit`` discards every write made through its
repositories.
"""

from abc import ABC, abstractmethod
from typing import List

from ...domain.events.circuit_events import DomainEvent
from .repositories.announcement_repo import AnnouncementRepository
from .repositories.patient_repo import PatientRepository
from .repositories.rotation_repo import RotationRepository
from .repositories.station_repo import StationRepository
from .repositories.step_repo import StepRepository


class UnitOfWork(ABC):
    patients: PatientRepository
    steps: StepRepository
    stations: StationRepository
    announcements: AnnouncementRepository
    rotations: RotationRepository

    def __init__(self) -> None:
        self.events: List[DomainEvent] = []
        self.committed = False

    def collect(self, event: DomainEvent) -> None:
        """Queue an event for publication after commit."""
        self.events.append(event)

    async def __aenter__(self) -> "UnitOfWork":
        self.events = []
        self.committed = False
        await self._begin()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        try:
            if not self.committed:
                await self.rollback()
        finally:
            await self._close()

    async def commit(self) -> None:
        await self._commit()
        self.committed = True

    async def rollback(self) -> None:
        self.events = []
        await self._rollback()

    @abstractmethod
    async def _begin(self) -> None:
        pass

    @abstractmethod
    async def _commit(self) -> None:
        pass

    @abstractmethod
    async def _rollback(self) -> None:
        pass

    @abstractmethod
    async def _close(self) -> None:
        pass
