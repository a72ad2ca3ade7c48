"""
Step ledger: owns patient step rows and their status transitions.
"""

import logging
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from ...domain.catalog import STEP_LABELS, STEP_ORDER
from ...domain.entities.step import PatientStep
from ...domain.enums.circuit import CircuitStep, StepStatus
from ...domain.errors import DuplicateStepError, StepNotFoundError
from ...domain.events.circuit_events import StepTransitioned
from ..dto.circuit_dto import StepQueueStats
from ..ports.unit_of_work import UnitOfWork

logger = logging.getLogger("preopflow")

OPEN_STATUSES = (StepStatus.PENDING, StepStatus.CALLED, StepStatus.IN_PROGRESS)
ACTIVE_STATUSES = (StepStatus.CALLED, StepStatus.IN_PROGRESS)


class StepLedger:
    """Row-level operations on patient steps within a unit of work."""

    async def add_steps(
        self,
        uow: UnitOfWork,
        patient_id: str,
        steps: Iterable[CircuitStep],
        now: datetime,
        duplicate_error=DuplicateStepError,
    ) -> List[PatientStep]:
        """Insert pending rows; any step already open for the patient is a conflict."""
        steps = [CircuitStep(s) for s in steps]
        open_rows = await uow.steps.find(patient_id=patient_id, statuses=OPEN_STATUSES)
        open_steps = {row.step for row in open_rows}
        seen = set()
        for step in steps:
            if step in open_steps or step in seen:
                raise duplicate_error(patient_id, step.value)
            seen.add(step)

        created = []
        for step in steps:
            row = PatientStep(patient_id=patient_id, step=step, created_at=now)
            await uow.steps.save(row)
            created.append(row)
        return created

    async def open_step(
        self, uow: UnitOfWork, patient_id: str, step: CircuitStep
    ) -> Optional[PatientStep]:
        rows = await uow.steps.find(patient_id=patient_id, step=step, statuses=OPEN_STATUSES)
        return rows[0] if rows else None

    async def transition(
        self,
        uow: UnitOfWork,
        patient_id: str,
        step: CircuitStep,
        target: StepStatus,
        now: datetime,
        station_number: Optional[int] = None,
    ) -> PatientStep:
        """Move the patient's open row for ``step`` to ``target``.

        Raises StepNotFoundError when no open row exists and
        InvalidStepTransitionError when the move is not in the table.
        """
        row = await self.open_step(uow, patient_id, step)
        if row is None:
            raise StepNotFoundError(patient_id, CircuitStep(step).value)
        return await self.apply(uow, row, target, now, station_number)

    async def apply(
        self,
        uow: UnitOfWork,
        row: PatientStep,
        target: StepStatus,
        now: datetime,
        station_number: Optional[int] = None,
    ) -> PatientStep:
        previous = row.status
        event_station = row.station_number
        target = StepStatus(target)
        if target == StepStatus.CALLED:
            row.call(station_number, now)
            event_station = station_number
        elif target == StepStatus.IN_PROGRESS:
            row.start(now)
        elif target == StepStatus.COMPLETED:
            row.complete(now)
        else:
            row.reset()
        await uow.steps.save(row)
        uow.collect(
            StepTransitioned(
                patient_id=row.patient_id,
                step_id=row.step_id,
                step=row.step.value,
                from_status=previous.value,
                to_status=row.status.value,
                station_number=event_station,
                occurred_at=now,
            )
        )
        return row

    async def list_for_patient(self, uow: UnitOfWork, patient_id: str) -> List[PatientStep]:
        return await uow.steps.find(patient_id=patient_id)

    async def list_for_step(
        self,
        uow: UnitOfWork,
        step: CircuitStep,
        statuses: Optional[Iterable[StepStatus]] = None,
    ) -> List[PatientStep]:
        return await uow.steps.find(step=step, statuses=statuses)

    async def active_at_station(
        self, uow: UnitOfWork, step: CircuitStep, station_number: int
    ) -> List[PatientStep]:
        return await uow.steps.find(
            step=step, statuses=ACTIVE_STATUSES, station_number=station_number
        )

    async def is_all_completed(self, uow: UnitOfWork, patient_id: str) -> bool:
        rows = await uow.steps.find(patient_id=patient_id, statuses=OPEN_STATUSES)
        return not rows

    async def queue_stats(self, uow: UnitOfWork) -> List[StepQueueStats]:
        stats: Dict[CircuitStep, StepQueueStats] = {
            step: StepQueueStats(step=step, label=STEP_LABELS[step]) for step in STEP_ORDER
        }
        for row in await uow.steps.find():
            entry = stats[row.step]
            if row.status == StepStatus.PENDING:
                entry.pending += 1
            elif row.status.is_active:
                entry.in_service += 1
            else:
                entry.completed += 1
        return [stats[step] for step in STEP_ORDER]
