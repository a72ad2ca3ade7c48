"""
MongoDB implementation of AnnouncementRepository.
"""

from typing import List, Optional

from preopflow.core.utils.datetime_utils import ensure_utc
from preopflow.application.ports.repositories.announcement_repo import AnnouncementRepository
from preopflow.domain.entities.announcement import CallAnnouncement
from preopflow.domain.enums.circuit import CircuitStep
from ..models.circuit_m import CallAnnouncementMongo


class MongoAnnouncementRepository(AnnouncementRepository):
    def __init__(self, session=None):
        self._session = session

    async def save(self, announcement: CallAnnouncement) -> CallAnnouncement:
        existing = await CallAnnouncementMongo.find_one(
            CallAnnouncementMongo.announcement_id == announcement.announcement_id,
            session=self._session,
        )
        if existing:
            # Everything but the active flag is immutable
            existing.is_active = announcement.is_active
            doc = existing
        else:
            doc = CallAnnouncementMongo(
                announcement_id=announcement.announcement_id,
                patient_id=announcement.patient_id,
                patient_name=announcement.patient_name,
                step=announcement.step.value,
                station_number=announcement.station_number,
                station_name=announcement.station_name,
                called_at=announcement.called_at,
                is_active=announcement.is_active,
            )
        await doc.save(session=self._session)
        return announcement

    async def find_active(
        self,
        limit: Optional[int] = None,
        patient_id: Optional[str] = None,
        step: Optional[CircuitStep] = None,
    ) -> List[CallAnnouncement]:
        query = {"is_active": True}
        if patient_id is not None:
            query["patient_id"] = patient_id
        if step is not None:
            query["step"] = CircuitStep(step).value
        cursor = CallAnnouncementMongo.find(query, session=self._session).sort(
            "-called_at", "-announcement_id"
        )
        if limit is not None:
            cursor = cursor.limit(limit)
        return [self._mongo_to_domain(doc) for doc in await cursor.to_list()]

    async def delete_for_patient(self, patient_id: str) -> int:
        result = await CallAnnouncementMongo.get_motor_collection().delete_many(
            {"patient_id": patient_id}, session=self._session
        )
        return result.deleted_count

    @staticmethod
    def _mongo_to_domain(doc: CallAnnouncementMongo) -> CallAnnouncement:
        return CallAnnouncement(
            announcement_id=doc.announcement_id,
            patient_id=doc.patient_id,
            patient_name=doc.patient_name,
            step=doc.step,
            station_number=doc.station_number,
            station_name=doc.station_name,
            called_at=ensure_utc(doc.called_at),
            is_active=doc.is_active,
        )
