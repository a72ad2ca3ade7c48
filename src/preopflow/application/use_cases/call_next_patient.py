"""Call Next Patient use case."""

from ..dto.circuit_dto import CallResult
from .base import CircuitUseCase


class CallNextPatientUseCase(CircuitUseCase):
    async def execute(self, station_id: str) -> CallResult:
        async def operation(uow, now):
            return await self._services.scheduler.call_next(uow, station_id, now)

        return await self._run(operation)
