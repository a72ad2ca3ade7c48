"""Add Step use case for ad-hoc circuit insertions."""

from typing import List

from ...domain.entities.step import PatientStep
from ...domain.enums.circuit import CircuitStep
from .base import CircuitUseCase


class AddStepUseCase(CircuitUseCase):
    """Cardiology and imaging go through their dedicated paths; other steps use
    the ledger duplicate rule."""

    async def execute(self, patient_id: str, step: CircuitStep) -> List[PatientStep]:
        async def operation(uow, now):
            return await self._services.sessions.add_step(uow, patient_id, step, now)

        return await self._run(operation)
