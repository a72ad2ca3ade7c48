"""Start, finish and cancel the service of a called patient."""

from typing import Optional

from ..dto.circuit_dto import FinishOutcome, ServiceResult
from .base import CircuitUseCase


class StartServiceUseCase(CircuitUseCase):
    async def execute(self, station_id: str, patient_id: Optional[str] = None) -> ServiceResult:
        async def operation(uow, now):
            return await self._services.sessions.start(uow, station_id, now, patient_id)

        return await self._run(operation)


class FinishServiceUseCase(CircuitUseCase):
    async def execute(
        self,
        station_id: str,
        patient_id: Optional[str] = None,
        outcome: Optional[FinishOutcome] = None,
    ) -> ServiceResult:
        async def operation(uow, now):
            return await self._services.sessions.finish(
                uow, station_id, now, patient_id=patient_id, outcome=outcome
            )

        return await self._run(operation)


class CancelCallUseCase(CircuitUseCase):
    async def execute(self, station_id: str, patient_id: Optional[str] = None) -> ServiceResult:
        async def operation(uow, now):
            return await self._services.sessions.cancel(uow, station_id, now, patient_id)

        return await self._run(operation)
