"""
In-memory unit of work: the store lock is held for the whole unit and a
snapshot taken at the start is restored on rollback.
"""

from typing import Optional

from preopflow.application.ports.unit_of_work import UnitOfWork

from .repositories import (
    InMemoryAnnouncementRepository,
    InMemoryPatientRepository,
    InMemoryRotationRepository,
    InMemoryStationRepository,
    InMemoryStepRepository,
)
from .store import InMemoryStore, StoreState


class InMemoryUnitOfWork(UnitOfWork):
    def __init__(self, store: InMemoryStore) -> None:
        super().__init__()
        self._store = store
        self._snapshot: Optional[StoreState] = None
        self.patients = InMemoryPatientRepository(store)
        self.steps = InMemoryStepRepository(store)
        self.stations = InMemoryStationRepository(store)
        self.announcements = InMemoryAnnouncementRepository(store)
        self.rotations = InMemoryRotationRepository(store)

    async def _begin(self) -> None:
        await self._store.lock.acquire()
        self._snapshot = self._store.snapshot()

    async def _commit(self) -> None:
        self._snapshot = None

    async def _rollback(self) -> None:
        if self._snapshot is not None:
            self._store.restore(self._snapshot)
            self._snapshot = None

    async def _close(self) -> None:
        if self._store.lock.locked():
            self._store.lock.release()
