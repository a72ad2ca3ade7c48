"""
MongoDB implementation of PatientRepository.
"""

from datetime import datetime
from typing import Dict, Iterable, List, Optional

from preopflow.core.utils.datetime_utils import ensure_utc
from preopflow.application.ports.repositories.patient_repo import PatientRepository
from preopflow.domain.entities.patient import Patient
from ..models.circuit_m import PatientMongo


class MongoPatientRepository(PatientRepository):
    """MongoDB implementation of PatientRepository bound to one session."""

    def __init__(self, session=None):
        self._session = session

    async def save(self, patient: Patient) -> Patient:
        patient_mongo = await self._domain_to_mongo(patient)
        await patient_mongo.save(session=self._session)
        return patient

    async def find_by_id(self, patient_id: str) -> Optional[Patient]:
        patient_mongo = await PatientMongo.find_one(
            PatientMongo.patient_id == patient_id, session=self._session
        )
        if not patient_mongo:
            return None
        return self._mongo_to_domain(patient_mongo)

    async def find_many(self, patient_ids: Iterable[str]) -> Dict[str, Patient]:
        ids = list(patient_ids)
        if not ids:
            return {}
        docs = await PatientMongo.find(
            {"patient_id": {"$in": ids}}, session=self._session
        ).to_list()
        return {doc.patient_id: self._mongo_to_domain(doc) for doc in docs}

    async def find_created_between(
        self, start: Optional[datetime] = None, end: Optional[datetime] = None
    ) -> List[Patient]:
        window = {}
        if start is not None:
            window["$gte"] = start
        if end is not None:
            window["$lt"] = end
        query = {"created_at": window} if window else {}
        docs = (
            await PatientMongo.find(query, session=self._session)
            .sort("+created_at", "+patient_id")
            .to_list()
        )
        return [self._mongo_to_domain(doc) for doc in docs]

    async def find_pending_scheduling(self) -> List[Patient]:
        docs = (
            await PatientMongo.find(
                PatientMongo.pending_surgery_scheduling == True,  # noqa: E712
                session=self._session,
            )
            .sort("+scheduling_pending_at")
            .to_list()
        )
        return [self._mongo_to_domain(doc) for doc in docs]

    async def delete(self, patient_id: str) -> bool:
        result = await PatientMongo.get_motor_collection().delete_one(
            {"patient_id": patient_id}, session=self._session
        )
        return result.deleted_count > 0

    async def _domain_to_mongo(self, patient: Patient) -> PatientMongo:
        """Convert domain entity to MongoDB model, updating the stored document if any."""
        fields = dict(
            name=patient.name,
            registration_number=patient.registration_number,
            specialty=patient.specialty.value,
            flow_type=patient.flow_type.value,
            needs_cardio=patient.needs_cardio,
            needs_image_exam=patient.needs_image_exam,
            is_priority=patient.is_priority,
            is_being_served=patient.is_being_served,
            is_completed=patient.is_completed,
            has_surgery_indication=patient.has_surgery_indication,
            pending_surgery_scheduling=patient.pending_surgery_scheduling,
            scheduling_pending_at=patient.scheduling_pending_at,
            scheduling_pending_reason=patient.scheduling_pending_reason,
            discharge_outcome=(
                patient.discharge_outcome.value if patient.discharge_outcome else None
            ),
            completed_at=patient.completed_at,
            created_at=patient.created_at,
            updated_at=patient.updated_at,
        )
        existing = await PatientMongo.find_one(
            PatientMongo.patient_id == patient.patient_id, session=self._session
        )
        if existing:
            for key, value in fields.items():
                setattr(existing, key, value)
            return existing
        return PatientMongo(patient_id=patient.patient_id, **fields)

    @staticmethod
    def _mongo_to_domain(patient_mongo: PatientMongo) -> Patient:
        return Patient(
            patient_id=patient_mongo.patient_id,
            name=patient_mongo.name,
            registration_number=patient_mongo.registration_number,
            specialty=patient_mongo.specialty,
            flow_type=patient_mongo.flow_type,
            needs_cardio=patient_mongo.needs_cardio,
            needs_image_exam=patient_mongo.needs_image_exam,
            is_priority=patient_mongo.is_priority,
            is_being_served=patient_mongo.is_being_served,
            is_completed=patient_mongo.is_completed,
            has_surgery_indication=patient_mongo.has_surgery_indication,
            pending_surgery_scheduling=patient_mongo.pending_surgery_scheduling,
            scheduling_pending_at=ensure_utc(patient_mongo.scheduling_pending_at),
            scheduling_pending_reason=patient_mongo.scheduling_pending_reason,
            discharge_outcome=patient_mongo.discharge_outcome,
            completed_at=ensure_utc(patient_mongo.completed_at),
            created_at=ensure_utc(patient_mongo.created_at),
            updated_at=ensure_utc(patient_mongo.updated_at),
        )
