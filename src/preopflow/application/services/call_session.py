"""
Call session state machine: start, finish, cancel and expiry of station calls,
plus ad-hoc step insertion.
"""

import logging
from datetime import datetime
from typing import List, Optional

from ...domain.entities.patient import Patient
from ...domain.entities.station import Station
from ...domain.entities.step import PatientStep
from ...domain.enums.circuit import CircuitStep, StepStatus
from ...domain.errors import (
    DataIntegrityError,
    NoPatientCalledError,
    NoPatientInServiceError,
    PatientAlreadyCompletedError,
    StepAlreadyAddedError,
)
from ...domain.events.circuit_events import CallExpired
from ..dto.circuit_dto import FinishOutcome, ServiceResult
from ..ports.unit_of_work import UnitOfWork
from .patient_registry import PatientRegistry, most_recent_active
from .policy import CircuitPolicy
from .station_scheduler import StationScheduler
from .step_ledger import StepLedger

logger = logging.getLogger("preopflow")


class CallSession:
    def __init__(
        self,
        ledger: StepLedger,
        registry: PatientRegistry,
        scheduler: StationScheduler,
        policy: CircuitPolicy,
    ) -> None:
        self._ledger = ledger
        self._registry = registry
        self._scheduler = scheduler
        self._policy = policy

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _select(
        rows: List[PatientStep], station: Station, patient_id: Optional[str]
    ) -> Optional[PatientStep]:
        """Pick the row a station command applies to.

        An explicit patient wins; otherwise the patient shown on the station,
        then the most recently called one.
        """
        if patient_id is not None:
            return next((r for r in rows if r.patient_id == patient_id), None)
        bound = next((r for r in rows if r.patient_id == station.current_patient_id), None)
        return bound or most_recent_active(rows)

    async def _patient_for(self, uow: UnitOfWork, row: PatientStep) -> Patient:
        patient = await uow.patients.find_by_id(row.patient_id)
        if patient is None:
            raise DataIntegrityError(
                "step row without owning patient",
                {"step_id": row.step_id, "patient_id": row.patient_id},
            )
        return patient

    async def _deactivate_announcements(
        self, uow: UnitOfWork, patient_id: str, step: CircuitStep
    ) -> None:
        for announcement in await uow.announcements.find_active(patient_id=patient_id, step=step):
            announcement.deactivate()
            await uow.announcements.save(announcement)

    async def _release_station(
        self, uow: UnitOfWork, station: Optional[Station], patient_id: str
    ) -> None:
        if station is None:
            return
        remaining = [
            row
            for row in await self._ledger.active_at_station(
                uow, station.step, station.station_number
            )
            if row.patient_id != patient_id
        ]
        fallback = most_recent_active(remaining)
        station.release(patient_id, fallback.patient_id if fallback else None)
        await uow.stations.save(station)

    async def _return_to_queue(
        self, uow: UnitOfWork, row: PatientStep, station: Optional[Station], now: datetime
    ) -> Patient:
        """Shared cancel/expiry path: row back to pending, patient and station freed."""
        patient = await self._patient_for(uow, row)
        await self._ledger.apply(uow, row, StepStatus.PENDING, now)
        await self._registry.mark_being_served(uow, patient, False, now)
        await self._deactivate_announcements(uow, patient.patient_id, row.step)
        await self._release_station(uow, station, patient.patient_id)
        return patient

    # ------------------------------------------------------------------
    # station commands
    # ------------------------------------------------------------------

    async def start(
        self, uow: UnitOfWork, station_id: str, now: datetime, patient_id: Optional[str] = None
    ) -> ServiceResult:
        station = await self._scheduler.get_station(uow, station_id)
        rows = await self._ledger.active_at_station(uow, station.step, station.station_number)
        called = [r for r in rows if r.status == StepStatus.CALLED]
        row = self._select(called, station, patient_id)
        if row is None:
            raise NoPatientCalledError(station_id)

        patient = await self._patient_for(uow, row)
        await self._ledger.apply(uow, row, StepStatus.IN_PROGRESS, now)
        await self._deactivate_announcements(uow, patient.patient_id, row.step)
        logger.info(f"Station {station.name} started service for {patient.patient_id}")
        return ServiceResult(patient=patient, step=row, station=station)

    async def finish(
        self,
        uow: UnitOfWork,
        station_id: str,
        now: datetime,
        patient_id: Optional[str] = None,
        outcome: Optional[FinishOutcome] = None,
    ) -> ServiceResult:
        station = await self._scheduler.get_station(uow, station_id)
        rows = await self._ledger.active_at_station(uow, station.step, station.station_number)
        in_progress = [r for r in rows if r.status == StepStatus.IN_PROGRESS]
        row = self._select(in_progress, station, patient_id)
        if row is None:
            raise NoPatientInServiceError(station_id)

        outcome = outcome or FinishOutcome()
        patient = await self._patient_for(uow, row)
        await self._ledger.apply(uow, row, StepStatus.COMPLETED, now)
        await self._registry.mark_being_served(uow, patient, False, now)
        await self._release_station(uow, station, patient.patient_id)

        reentered = False
        if row.step == CircuitStep.ESPECIALISTA:
            if outcome.surgery_indicated:
                await self._registry.reenter_circuit(uow, patient, outcome.needs_cardio, now)
                reentered = True
            else:
                await self._registry.record_discharge_outcome(
                    uow, patient, outcome.discharge_outcome, now
                )
        elif row.step == CircuitStep.AGENDAMENTO and outcome.surgery_date_defined is not None:
            if outcome.surgery_date_defined:
                await self._registry.clear_pending_scheduling(uow, patient, now)
            else:
                await self._registry.mark_pending_scheduling(
                    uow, patient, self._policy.default_pending_scheduling_reason, now
                )

        completed = False
        if not reentered:
            completed = await self._registry.mark_completed(uow, patient, now)

        logger.info(
            f"Station {station.name} finished {row.step.value} for {patient.patient_id} "
            f"(completed={completed}, reentered={reentered})"
        )
        return ServiceResult(
            patient=patient,
            step=row,
            station=station,
            patient_completed=completed,
            reentered_circuit=reentered,
        )

    async def cancel(
        self, uow: UnitOfWork, station_id: str, now: datetime, patient_id: Optional[str] = None
    ) -> ServiceResult:
        station = await self._scheduler.get_station(uow, station_id)
        rows = await self._ledger.active_at_station(uow, station.step, station.station_number)
        row = self._select(rows, station, patient_id)
        if row is None:
            raise NoPatientCalledError(station_id)

        patient = await self._return_to_queue(uow, row, station, now)
        logger.info(f"Station {station.name} cancelled call for {patient.patient_id}")
        return ServiceResult(patient=patient, step=row, station=station)

    async def expire_overdue(self, uow: UnitOfWork, now: datetime) -> int:
        """Cancel every call left in `called` past the timeout."""
        expired = 0
        for row in await uow.steps.find(statuses=[StepStatus.CALLED]):
            if not row.is_call_expired(now, self._policy.call_timeout_seconds):
                continue
            station_number = row.station_number
            station = (
                await uow.stations.find_by_step_and_number(row.step, station_number)
                if station_number is not None
                else None
            )
            patient = await self._return_to_queue(uow, row, station, now)
            uow.collect(
                CallExpired(
                    patient_id=patient.patient_id,
                    step_id=row.step_id,
                    step=row.step.value,
                    station_number=station_number,
                    occurred_at=now,
                )
            )
            logger.info(
                f"Call for {patient.patient_id} at {row.step.value} "
                f"station {station_number} expired"
            )
            expired += 1
        return expired

    # ------------------------------------------------------------------
    # ad-hoc steps
    # ------------------------------------------------------------------

    async def add_step(
        self, uow: UnitOfWork, patient_id: str, step: CircuitStep, now: datetime
    ) -> List[PatientStep]:
        step = CircuitStep(step)
        if step == CircuitStep.CARDIOLOGISTA:
            return await self.add_cardio_step(uow, patient_id, now)
        if step == CircuitStep.EXAME_IMAGEM:
            return await self.add_image_exam(uow, patient_id, now)

        patient = await self._open_patient(uow, patient_id)
        return await self._ledger.add_steps(uow, patient.patient_id, [step], now)

    async def add_cardio_step(
        self, uow: UnitOfWork, patient_id: str, now: datetime
    ) -> List[PatientStep]:
        """Add cardiology, seeding lab/ECG when the patient never had it."""
        patient = await self._open_patient(uow, patient_id)
        steps = [CircuitStep.CARDIOLOGISTA]
        if not await uow.steps.find(patient_id=patient_id, step=CircuitStep.EXAMES_LAB_ECG):
            steps.append(CircuitStep.EXAMES_LAB_ECG)
        rows = await self._ledger.add_steps(
            uow, patient_id, steps, now, duplicate_error=StepAlreadyAddedError
        )
        patient.needs_cardio = True
        patient.updated_at = now
        await uow.patients.save(patient)
        logger.info(f"Added {[r.step.value for r in rows]} for {patient_id}")
        return rows

    async def add_image_exam(
        self, uow: UnitOfWork, patient_id: str, now: datetime
    ) -> List[PatientStep]:
        patient = await self._open_patient(uow, patient_id)
        rows = await self._ledger.add_steps(
            uow,
            patient_id,
            [CircuitStep.EXAME_IMAGEM],
            now,
            duplicate_error=StepAlreadyAddedError,
        )
        patient.needs_image_exam = True
        patient.updated_at = now
        await uow.patients.save(patient)
        logger.info(f"Added exame_imagem for {patient_id}")
        return rows

    async def _open_patient(self, uow: UnitOfWork, patient_id: str) -> Patient:
        patient = await self._registry.get(uow, patient_id)
        if patient.is_completed:
            raise PatientAlreadyCompletedError(patient_id)
        return patient
