"""Read-side use cases."""

from datetime import datetime
from typing import Iterable, List, Optional

from ...domain.entities.announcement import CallAnnouncement
from ...domain.entities.station import Station
from ...domain.entities.step import PatientStep
from ...domain.enums.circuit import CircuitStep, StepStatus
from ...domain.errors import ValidationError
from ..dto.circuit_dto import DayReport, PatientWithSteps, StepQueueStats
from .base import CircuitUseCase


class ListPatientsUseCase(CircuitUseCase):
    async def execute(
        self, start: Optional[datetime] = None, end: Optional[datetime] = None
    ) -> List[PatientWithSteps]:
        async def operation(uow, now):
            patients = await uow.patients.find_created_between(start, end)
            result = []
            for patient in patients:
                steps = await uow.steps.find(patient_id=patient.patient_id)
                result.append(PatientWithSteps(patient=patient, steps=steps))
            return result

        return await self._run(operation)


class ListPatientStepsUseCase(CircuitUseCase):
    async def execute(self, patient_id: str) -> PatientWithSteps:
        async def operation(uow, now):
            patient = await self._services.registry.get(uow, patient_id)
            steps = await self._services.ledger.list_for_patient(uow, patient_id)
            return PatientWithSteps(patient=patient, steps=steps)

        return await self._run(operation)


class ListStepsUseCase(CircuitUseCase):
    async def execute(
        self,
        step: Optional[CircuitStep] = None,
        statuses: Optional[Iterable[StepStatus]] = None,
        station_number: Optional[int] = None,
    ) -> List[PatientStep]:
        async def operation(uow, now):
            return await uow.steps.find(
                step=step, statuses=statuses, station_number=station_number
            )

        return await self._run(operation)


class ListStationsUseCase(CircuitUseCase):
    async def execute(
        self, step: Optional[CircuitStep] = None, active_only: bool = False
    ) -> List[Station]:
        async def operation(uow, now):
            return await uow.stations.find_all(step=step, active_only=active_only)

        return await self._run(operation)


class ListActiveAnnouncementsUseCase(CircuitUseCase):
    async def execute(self, limit: Optional[int] = None) -> List[CallAnnouncement]:
        if limit is None:
            limit = self._services.policy.announcement_limit
        elif limit < 1:
            raise ValidationError(f"limit must be at least 1, got {limit}", "INVALID_LIMIT")

        async def operation(uow, now):
            return await uow.announcements.find_active(limit=limit)

        return await self._run(operation)


class GetQueueStatsUseCase(CircuitUseCase):
    async def execute(self) -> List[StepQueueStats]:
        async def operation(uow, now):
            return await self._services.ledger.queue_stats(uow)

        return await self._run(operation)


class GenerateDayReportUseCase(CircuitUseCase):
    async def execute(self, start: datetime, end: datetime) -> DayReport:
        async def operation(uow, now):
            return await self._services.reporting.day_report(uow, start, end)

        return await self._run(operation)
