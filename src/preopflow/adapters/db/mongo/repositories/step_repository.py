"""
MongoDB implementation of StepRepository.
"""

from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from preopflow.core.utils.datetime_utils import ensure_utc
from preopflow.application.ports.repositories.step_repo import StepRepository
from preopflow.domain.entities.step import PatientStep
from preopflow.domain.enums.circuit import CircuitStep, StepStatus
from ..models.circuit_m import PatientStepMongo


class MongoStepRepository(StepRepository):
    def __init__(self, session=None):
        self._session = session

    async def save(self, step: PatientStep) -> PatientStep:
        fields = dict(
            patient_id=step.patient_id,
            step=step.step.value,
            status=step.status.value,
            station_number=step.station_number,
            called_at=step.called_at,
            started_at=step.started_at,
            completed_at=step.completed_at,
            created_at=step.created_at,
        )
        existing = await PatientStepMongo.find_one(
            PatientStepMongo.step_id == step.step_id, session=self._session
        )
        if existing:
            for key, value in fields.items():
                setattr(existing, key, value)
            doc = existing
        else:
            doc = PatientStepMongo(step_id=step.step_id, **fields)
        await doc.save(session=self._session)
        return step

    async def find_by_id(self, step_id: str) -> Optional[PatientStep]:
        doc = await PatientStepMongo.find_one(
            PatientStepMongo.step_id == step_id, session=self._session
        )
        return self._mongo_to_domain(doc) if doc else None

    async def find(
        self,
        patient_id: Optional[str] = None,
        step: Optional[CircuitStep] = None,
        statuses: Optional[Iterable[StepStatus]] = None,
        station_number: Optional[int] = None,
    ) -> List[PatientStep]:
        query: Dict[str, Any] = {}
        if patient_id is not None:
            query["patient_id"] = patient_id
        if step is not None:
            query["step"] = CircuitStep(step).value
        if statuses is not None:
            query["status"] = {"$in": [StepStatus(s).value for s in statuses]}
        if station_number is not None:
            query["station_number"] = station_number
        return await self._query(query)

    async def find_created_between(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        statuses: Optional[Iterable[StepStatus]] = None,
    ) -> List[PatientStep]:
        query: Dict[str, Any] = {}
        window = {}
        if start is not None:
            window["$gte"] = start
        if end is not None:
            window["$lt"] = end
        if window:
            query["created_at"] = window
        if statuses is not None:
            query["status"] = {"$in": [StepStatus(s).value for s in statuses]}
        return await self._query(query)

    async def delete_for_patient(self, patient_id: str) -> int:
        result = await PatientStepMongo.get_motor_collection().delete_many(
            {"patient_id": patient_id}, session=self._session
        )
        return result.deleted_count

    async def _query(self, query: Dict[str, Any]) -> List[PatientStep]:
        docs = (
            await PatientStepMongo.find(query, session=self._session)
            .sort("+created_at", "+step_id")
            .to_list()
        )
        return [self._mongo_to_domain(doc) for doc in docs]

    @staticmethod
    def _mongo_to_domain(doc: PatientStepMongo) -> PatientStep:
        return PatientStep(
            step_id=doc.step_id,
            patient_id=doc.patient_id,
            step=doc.step,
            status=doc.status,
            station_number=doc.station_number,
            called_at=ensure_utc(doc.called_at),
            started_at=ensure_utc(doc.started_at),
            completed_at=ensure_utc(doc.completed_at),
            created_at=ensure_utc(doc.created_at),
        )
