"""
MongoDB unit of work: one multi-document transaction per command.

Requires a replica set (transactions are unavailable on standalone servers).
"""

import logging

from motor.motor_asyncio import AsyncIOMotorClient
from pymongo.errors import PyMongoError

from preopflow.application.ports.unit_of_work import UnitOfWork
from preopflow.core.exceptions import DatabaseError
from preopflow.domain.errors import ConcurrentUpdateError

from .repositories.announcement_repository import MongoAnnouncementRepository
from .repositories.patient_repository import MongoPatientRepository
from .repositories.rotation_repository import MongoRotationRepository
from .repositories.station_repository import MongoStationRepository
from .repositories.step_repository import MongoStepRepository

logger = logging.getLogger("preopflow")

TRANSIENT_LABEL = "TransientTransactionError"


def translate_mongo_error(error: PyMongoError) -> Exception:
    """Write conflicts become ConcurrentUpdateError, everything else DatabaseError."""
    if error.has_error_label(TRANSIENT_LABEL):
        return ConcurrentUpdateError("circuit state")
    return DatabaseError(f"MongoDB operation failed: {error}", details={"error": str(error)})


class MongoUnitOfWork(UnitOfWork):
    def __init__(self, client: AsyncIOMotorClient) -> None:
        super().__init__()
        self._client = client
        self._session = None

    async def _begin(self) -> None:
        self._session = await self._client.start_session()
        self._session.start_transaction()
        self.patients = MongoPatientRepository(self._session)
        self.steps = MongoStepRepository(self._session)
        self.stations = MongoStationRepository(self._session)
        self.announcements = MongoAnnouncementRepository(self._session)
        self.rotations = MongoRotationRepository(self._session)

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await super().__aexit__(exc_type, exc, tb)
        if isinstance(exc, PyMongoError):
            raise translate_mongo_error(exc) from exc

    async def _commit(self) -> None:
        try:
            await self._session.commit_transaction()
        except PyMongoError as e:
            raise translate_mongo_error(e) from e

    async def _rollback(self) -> None:
        if self._session is not None and self._session.in_transaction:
            try:
                await self._session.abort_transaction()
            except PyMongoError as e:
                logger.warning(f"Abort transaction failed: {e}")

    async def _close(self) -> None:
        if self._session is not None:
            await self._session.end_session()
            self._session = None
