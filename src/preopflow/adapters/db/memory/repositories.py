"""
In-memory repository implementations.

Entities are copied on the way in and out, so unsaved changes never leak
into the store.
"""

import copy
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from preopflow.application.ports.repositories.announcement_repo import AnnouncementRepository
from preopflow.application.ports.repositories.patient_repo import PatientRepository
from preopflow.application.ports.repositories.rotation_repo import RotationRepository
from preopflow.application.ports.repositories.station_repo import StationRepository
from preopflow.application.ports.repositories.step_repo import StepRepository
from preopflow.core.utils.datetime_utils import get_current_timestamp
from preopflow.domain.catalog import STEP_ORDER
from preopflow.domain.entities.announcement import CallAnnouncement
from preopflow.domain.entities.patient import Patient
from preopflow.domain.entities.queue_rotation import QueueRotation
from preopflow.domain.entities.station import Station
from preopflow.domain.entities.step import PatientStep
from preopflow.domain.enums.circuit import CircuitStep, StepStatus
from preopflow.domain.errors import StationNotFoundError

from .store import InMemoryStore


def _in_window(value: datetime, start: Optional[datetime], end: Optional[datetime]) -> bool:
    if start is not None and value < start:
        return False
    if end is not None and value >= end:
        return False
    return True


class InMemoryPatientRepository(PatientRepository):
    def __init__(self, store: InMemoryStore):
        self._store = store

    @property
    def _rows(self) -> Dict[str, Patient]:
        return self._store.state.patients

    async def save(self, patient: Patient) -> Patient:
        self._rows[patient.patient_id] = copy.deepcopy(patient)
        return patient

    async def find_by_id(self, patient_id: str) -> Optional[Patient]:
        patient = self._rows.get(patient_id)
        return copy.deepcopy(patient) if patient else None

    async def find_many(self, patient_ids: Iterable[str]) -> Dict[str, Patient]:
        return {
            pid: copy.deepcopy(self._rows[pid]) for pid in set(patient_ids) if pid in self._rows
        }

    async def find_created_between(
        self, start: Optional[datetime] = None, end: Optional[datetime] = None
    ) -> List[Patient]:
        rows = [p for p in self._rows.values() if _in_window(p.created_at, start, end)]
        rows.sort(key=lambda p: (p.created_at, p.patient_id))
        return copy.deepcopy(rows)

    async def find_pending_scheduling(self) -> List[Patient]:
        rows = [p for p in self._rows.values() if p.pending_surgery_scheduling]
        rows.sort(key=lambda p: (p.scheduling_pending_at or p.updated_at, p.patient_id))
        return copy.deepcopy(rows)

    async def delete(self, patient_id: str) -> bool:
        return self._rows.pop(patient_id, None) is not None


class InMemoryStepRepository(StepRepository):
    def __init__(self, store: InMemoryStore):
        self._store = store

    @property
    def _rows(self) -> Dict[str, PatientStep]:
        return self._store.state.steps

    async def save(self, step: PatientStep) -> PatientStep:
        self._rows[step.step_id] = copy.deepcopy(step)
        return step

    async def find_by_id(self, step_id: str) -> Optional[PatientStep]:
        step = self._rows.get(step_id)
        return copy.deepcopy(step) if step else None

    async def find(
        self,
        patient_id: Optional[str] = None,
        step: Optional[CircuitStep] = None,
        statuses: Optional[Iterable[StepStatus]] = None,
        station_number: Optional[int] = None,
    ) -> List[PatientStep]:
        wanted = {StepStatus(s) for s in statuses} if statuses is not None else None
        rows = [
            r
            for r in self._rows.values()
            if (patient_id is None or r.patient_id == patient_id)
            and (step is None or r.step == CircuitStep(step))
            and (wanted is None or r.status in wanted)
            and (station_number is None or r.station_number == station_number)
        ]
        rows.sort(key=lambda r: (r.created_at, r.step_id))
        return copy.deepcopy(rows)

    async def find_created_between(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        statuses: Optional[Iterable[StepStatus]] = None,
    ) -> List[PatientStep]:
        rows = [r for r in await self.find(statuses=statuses) if _in_window(r.created_at, start, end)]
        return rows

    async def delete_for_patient(self, patient_id: str) -> int:
        doomed = [sid for sid, r in self._rows.items() if r.patient_id == patient_id]
        for step_id in doomed:
            del self._rows[step_id]
        return len(doomed)


class InMemoryStationRepository(StationRepository):
    def __init__(self, store: InMemoryStore):
        self._store = store

    @property
    def _rows(self) -> Dict[str, Station]:
        return self._store.state.stations

    async def save(self, station: Station) -> Station:
        self._rows[station.station_id] = copy.deepcopy(station)
        return station

    async def find_by_id(self, station_id: str) -> Optional[Station]:
        station = self._rows.get(station_id)
        return copy.deepcopy(station) if station else None

    async def find_by_step_and_number(
        self, step: CircuitStep, station_number: int
    ) -> Optional[Station]:
        step = CircuitStep(step)
        for station in self._rows.values():
            if station.step == step and station.station_number == station_number:
                return copy.deepcopy(station)
        return None

    async def find_all(
        self, step: Optional[CircuitStep] = None, active_only: bool = False
    ) -> List[Station]:
        rows = [
            s
            for s in self._rows.values()
            if (step is None or s.step == CircuitStep(step)) and (not active_only or s.is_active)
        ]
        rows.sort(key=lambda s: (STEP_ORDER.index(s.step), s.station_number))
        return copy.deepcopy(rows)

    async def find_bound_to_patient(self, patient_id: str) -> List[Station]:
        return copy.deepcopy(
            [s for s in self._rows.values() if s.current_patient_id == patient_id]
        )

    async def claim(self, station_id: str) -> None:
        # The store lock already serializes whole units of work
        if station_id not in self._rows:
            raise StationNotFoundError(station_id)

    async def count(self) -> int:
        return len(self._rows)


class InMemoryAnnouncementRepository(AnnouncementRepository):
    def __init__(self, store: InMemoryStore):
        self._store = store

    @property
    def _rows(self) -> Dict[str, CallAnnouncement]:
        return self._store.state.announcements

    async def save(self, announcement: CallAnnouncement) -> CallAnnouncement:
        self._rows[announcement.announcement_id] = copy.deepcopy(announcement)
        return announcement

    async def find_active(
        self,
        limit: Optional[int] = None,
        patient_id: Optional[str] = None,
        step: Optional[CircuitStep] = None,
    ) -> List[CallAnnouncement]:
        rows = [
            a
            for a in self._rows.values()
            if a.is_active
            and (patient_id is None or a.patient_id == patient_id)
            and (step is None or a.step == CircuitStep(step))
        ]
        rows.sort(key=lambda a: (a.called_at, a.announcement_id), reverse=True)
        if limit is not None:
            rows = rows[:limit]
        return copy.deepcopy(rows)

    async def delete_for_patient(self, patient_id: str) -> int:
        doomed = [aid for aid, a in self._rows.items() if a.patient_id == patient_id]
        for announcement_id in doomed:
            del self._rows[announcement_id]
        return len(doomed)


class InMemoryRotationRepository(RotationRepository):
    def __init__(self, store: InMemoryStore):
        self._store = store

    async def get(self, queue_key: str) -> QueueRotation:
        rotation = self._store.state.rotations.get(queue_key)
        if rotation is None:
            return QueueRotation(queue_key=queue_key, updated_at=get_current_timestamp())
        return copy.deepcopy(rotation)

    async def save(self, rotation: QueueRotation) -> QueueRotation:
        self._store.state.rotations[rotation.queue_key] = copy.deepcopy(rotation)
        return rotation
