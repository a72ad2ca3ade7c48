"""
Station scheduler: picks the next patient for a station and commits the call.

Selection runs in a fixed order:

1. capacity check on the station's active rows
2. candidate set (pending rows whose patient is neither completed nor served;
   specialist stations restrict to the bound specialty)
3. cardiology gate (completed lab/ECG required)
4. sub-queue preference (cardiology patients on ECG stations, first
   consultations on specialist stations)
5. priority rotation against the persisted per-queue counter
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional, Tuple

from ...domain.catalog import station_capacity
from ...domain.entities.announcement import CallAnnouncement
from ...domain.entities.patient import Patient
from ...domain.entities.queue_rotation import QueueRotation, queue_key_for
from ...domain.entities.station import Station
from ...domain.entities.step import PatientStep
from ...domain.enums.circuit import CircuitStep, FlowType, MedicalSpecialty, StepStatus
from ...domain.errors import (
    CardiologyPrerequisiteNotMetError,
    DataIntegrityError,
    NoCandidatesError,
    SpecialtyNotSelectedError,
    StationCapacityExceededError,
    StationInactiveError,
    StationNotFoundError,
)
from ...domain.events.circuit_events import AnnouncementCreated
from ..dto.circuit_dto import CallResult
from ..ports.unit_of_work import UnitOfWork
from .patient_registry import PatientRegistry
from .policy import CircuitPolicy
from .step_ledger import StepLedger

logger = logging.getLogger("preopflow")


@dataclass
class Candidate:
    patient: Patient
    step: PatientStep

    @property
    def age_key(self) -> Tuple:
        # Oldest first: step row creation, then patient registration, then id
        return (self.step.created_at, self.patient.created_at, self.step.step_id)


def oldest(candidates: List[Candidate]) -> Optional[Candidate]:
    return min(candidates, key=lambda c: c.age_key) if candidates else None


def prefer(candidates: List[Candidate], predicate: Callable[[Candidate], bool]) -> List[Candidate]:
    """Narrow to the preferred sub-queue when it has anyone waiting."""
    preferred = [c for c in candidates if predicate(c)]
    return preferred or candidates


def pick_with_rotation(
    candidates: List[Candidate], rotation: QueueRotation, burst_limit: int, now: datetime
) -> Tuple[Candidate, bool]:
    """Apply the priority/normal rotation. Returns the pick and whether it was priority."""
    priority = [c for c in candidates if c.patient.is_priority]
    normal = [c for c in candidates if not c.patient.is_priority]

    if rotation.burst_exhausted(burst_limit) and normal:
        rotation.reset(now)
        return oldest(normal), False
    if priority:
        rotation.record_priority_call(now)
        return oldest(priority), True
    rotation.reset(now)
    return oldest(normal), False


class StationScheduler:
    def __init__(
        self, ledger: StepLedger, registry: PatientRegistry, policy: CircuitPolicy
    ) -> None:
        self._ledger = ledger
        self._registry = registry
        self._policy = policy

    async def get_station(self, uow: UnitOfWork, station_id: str) -> Station:
        station = await uow.stations.find_by_id(station_id)
        if station is None:
            raise StationNotFoundError(station_id)
        return station

    async def _candidates(self, uow: UnitOfWork, station: Station) -> List[Candidate]:
        pending = await self._ledger.list_for_step(uow, station.step, [StepStatus.PENDING])
        patients = await uow.patients.find_many({row.patient_id for row in pending})

        candidates = []
        for row in pending:
            patient = patients.get(row.patient_id)
            if patient is None:
                raise DataIntegrityError(
                    "step row without owning patient",
                    {"step_id": row.step_id, "patient_id": row.patient_id},
                )
            if not patient.is_eligible_for_call():
                continue
            if station.is_specialist and patient.specialty != station.current_specialty:
                continue
            candidates.append(Candidate(patient=patient, step=row))
        return candidates

    async def _apply_cardiology_gate(
        self, uow: UnitOfWork, station: Station, candidates: List[Candidate]
    ) -> List[Candidate]:
        if not station.gates_on_cardiology or not candidates:
            return candidates
        completed_ecg = await self._ledger.list_for_step(
            uow, CircuitStep.EXAMES_LAB_ECG, [StepStatus.COMPLETED]
        )
        open_ecg = await self._ledger.list_for_step(
            uow,
            CircuitStep.EXAMES_LAB_ECG,
            [StepStatus.PENDING, StepStatus.CALLED, StepStatus.IN_PROGRESS],
        )
        # A re-entered patient must finish the current ECG, not an earlier one
        cleared = {row.patient_id for row in completed_ecg} - {row.patient_id for row in open_ecg}
        gated = [c for c in candidates if c.patient.patient_id in cleared]
        if not gated:
            logger.warning(
                f"Station {station.station_id}: {len(candidates)} waiting, "
                "none with completed lab/ECG"
            )
            raise CardiologyPrerequisiteNotMetError(station.station_id, len(candidates))
        return gated

    def _apply_sub_queues(self, station: Station, candidates: List[Candidate]) -> List[Candidate]:
        if station.step == CircuitStep.EXAMES_LAB_ECG:
            return prefer(
                candidates,
                lambda c: c.patient.specialty == MedicalSpecialty.CARDIOLOGIA
                or c.patient.needs_cardio,
            )
        if station.is_specialist:
            return prefer(
                candidates, lambda c: c.patient.flow_type == FlowType.CONSULTA_ESPECIALISTA
            )
        return candidates

    async def call_next(self, uow: UnitOfWork, station_id: str, now: datetime) -> CallResult:
        station = await self.get_station(uow, station_id)
        if not station.is_active:
            raise StationInactiveError(station_id)

        # Serializes concurrent calls on the same station
        await uow.stations.claim(station_id)

        capacity = station_capacity(station.step, self._policy.double_capacity_steps)
        active = await self._ledger.active_at_station(uow, station.step, station.station_number)
        if len(active) >= capacity:
            raise StationCapacityExceededError(station_id, len(active), capacity)

        if station.is_specialist and station.current_specialty is None:
            raise SpecialtyNotSelectedError(station_id)

        candidates = await self._candidates(uow, station)
        candidates = await self._apply_cardiology_gate(uow, station, candidates)
        if not candidates:
            raise NoCandidatesError(station_id, station.step.value)
        candidates = self._apply_sub_queues(station, candidates)

        queue_key = queue_key_for(
            station.step, station.current_specialty if station.is_specialist else None
        )
        rotation = await uow.rotations.get(queue_key)
        chosen, used_priority = pick_with_rotation(
            candidates, rotation, self._policy.priority_burst_limit, now
        )

        patient = chosen.patient
        await self._registry.mark_being_served(uow, patient, True, now)
        step = await self._ledger.apply(
            uow, chosen.step, StepStatus.CALLED, now, station_number=station.station_number
        )
        station.bind(patient.patient_id)
        await uow.stations.save(station)
        announcement = CallAnnouncement(
            patient_id=patient.patient_id,
            patient_name=patient.name,
            step=station.step,
            station_number=station.station_number,
            station_name=station.name,
            called_at=now,
        )
        await uow.announcements.save(announcement)
        await uow.rotations.save(rotation)

        uow.collect(
            AnnouncementCreated(
                announcement_id=announcement.announcement_id,
                patient_id=patient.patient_id,
                patient_name=patient.name,
                step=station.step.value,
                station_number=station.station_number,
                station_name=station.name,
                occurred_at=now,
            )
        )
        logger.info(
            f"Station {station.name} called patient {patient.patient_id} "
            f"(priority={used_priority}, queue={queue_key}, "
            f"streak={rotation.consecutive_priority_calls})"
        )
        return CallResult(
            patient=patient,
            step=step,
            station=station,
            announcement=announcement,
            used_priority=used_priority,
        )
