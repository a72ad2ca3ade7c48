"""
Patient registry: patient rows and the flags mutated by the circuit.
"""

import logging
from datetime import datetime
from typing import List, Optional, Tuple

from ...domain.catalog import preop_steps, required_steps
from ...domain.entities.patient import Patient
from ...domain.entities.step import PatientStep
from ...domain.enums.circuit import DischargeOutcome
from ...domain.errors import PatientNotFoundError
from ...domain.events.circuit_events import PatientCompleted, PatientReenteredCircuit
from ..dto.circuit_dto import RegisterPatientRequest
from ..ports.unit_of_work import UnitOfWork
from .step_ledger import ACTIVE_STATUSES, StepLedger

logger = logging.getLogger("preopflow")


class PatientRegistry:
    def __init__(self, ledger: StepLedger) -> None:
        self._ledger = ledger

    async def get(self, uow: UnitOfWork, patient_id: str) -> Patient:
        patient = await uow.patients.find_by_id(patient_id)
        if patient is None:
            raise PatientNotFoundError(patient_id)
        return patient

    async def register(
        self, uow: UnitOfWork, request: RegisterPatientRequest, now: datetime
    ) -> Tuple[Patient, List[PatientStep]]:
        """Create the patient and seed its required steps from the catalog."""
        patient = Patient(
            name=request.name,
            specialty=request.specialty,
            flow_type=request.flow_type,
            registration_number=request.registration_number,
            needs_cardio=request.needs_cardio,
            needs_image_exam=request.needs_image_exam,
            is_priority=request.is_priority,
            created_at=now,
            updated_at=now,
        )
        steps = required_steps(
            patient.flow_type,
            needs_cardio=patient.needs_cardio,
            needs_image_exam=patient.needs_image_exam,
        )
        await uow.patients.save(patient)
        rows = await self._ledger.add_steps(uow, patient.patient_id, steps, now)
        logger.info(
            f"Registered patient {patient.patient_id} "
            f"flow={patient.flow_type.value} steps={[s.value for s in steps]}"
        )
        return patient, rows

    async def mark_being_served(
        self, uow: UnitOfWork, patient: Patient, value: bool, now: datetime
    ) -> None:
        patient.mark_being_served(value, now)
        await uow.patients.save(patient)

    async def mark_completed(self, uow: UnitOfWork, patient: Patient, now: datetime) -> bool:
        """Complete the patient when no step remains open. Returns True only on the
        transition, so completion is recorded once."""
        if patient.is_completed:
            return False
        if not await self._ledger.is_all_completed(uow, patient.patient_id):
            return False
        patient.mark_completed(now)
        await uow.patients.save(patient)
        uow.collect(PatientCompleted(patient_id=patient.patient_id, occurred_at=now))
        logger.info(f"Patient {patient.patient_id} completed the circuit")
        return True

    async def reenter_circuit(
        self, uow: UnitOfWork, patient: Patient, needs_cardio: bool, now: datetime
    ) -> List[PatientStep]:
        """Reopen the patient on the pre-op circuit after a surgical indication.

        Steps already open for the patient are left as they are.
        """
        patient.reenter_circuit(needs_cardio, now)
        await uow.patients.save(patient)

        wanted = preop_steps(
            needs_cardio=patient.needs_cardio, needs_image_exam=patient.needs_image_exam
        )
        missing = []
        for step in wanted:
            if await self._ledger.open_step(uow, patient.patient_id, step) is None:
                missing.append(step)
        rows = await self._ledger.add_steps(uow, patient.patient_id, missing, now)
        uow.collect(
            PatientReenteredCircuit(
                patient_id=patient.patient_id,
                needs_cardio=patient.needs_cardio,
                occurred_at=now,
            )
        )
        logger.info(
            f"Patient {patient.patient_id} re-entered the circuit "
            f"with steps {[r.step.value for r in rows]}"
        )
        return rows

    async def mark_pending_scheduling(
        self, uow: UnitOfWork, patient: Patient, reason: str, now: datetime
    ) -> None:
        patient.mark_pending_scheduling(reason, now)
        await uow.patients.save(patient)
        logger.info(f"Patient {patient.patient_id} pending surgery scheduling: {reason}")

    async def clear_pending_scheduling(
        self, uow: UnitOfWork, patient: Patient, now: datetime
    ) -> None:
        patient.clear_pending_scheduling(now)
        await uow.patients.save(patient)

    async def record_discharge_outcome(
        self,
        uow: UnitOfWork,
        patient: Patient,
        outcome: Optional[DischargeOutcome],
        now: datetime,
    ) -> None:
        if outcome is None:
            return
        patient.record_discharge_outcome(outcome, now)
        await uow.patients.save(patient)

    async def remove(self, uow: UnitOfWork, patient_id: str) -> None:
        """Administrative delete cascading to steps, announcements and station bindings."""
        await self.get(uow, patient_id)

        for station in await uow.stations.find_bound_to_patient(patient_id):
            others = [
                row
                for row in await self._ledger.active_at_station(
                    uow, station.step, station.station_number
                )
                if row.patient_id != patient_id
            ]
            fallback = most_recent_active(others)
            station.release(patient_id, fallback.patient_id if fallback else None)
            await uow.stations.save(station)

        removed_steps = await uow.steps.delete_for_patient(patient_id)
        removed_calls = await uow.announcements.delete_for_patient(patient_id)
        await uow.patients.delete(patient_id)
        logger.info(
            f"Removed patient {patient_id} "
            f"(steps={removed_steps}, announcements={removed_calls})"
        )


def most_recent_active(rows: List[PatientStep]) -> Optional[PatientStep]:
    """Most recently called of the active rows, used for capacity-2 bindings."""
    active = [r for r in rows if r.status in ACTIVE_STATUSES]
    if not active:
        return None
    return max(active, key=lambda r: (r.called_at, r.step_id))
