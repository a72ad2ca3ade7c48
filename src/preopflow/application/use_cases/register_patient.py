"""Register Patient use case."""

from ..dto.circuit_dto import PatientWithSteps, RegisterPatientRequest
from .base import CircuitUseCase


class RegisterPatientUseCase(CircuitUseCase):
    """Creates a patient with the step set its flow requires."""

    async def execute(self, request: RegisterPatientRequest) -> PatientWithSteps:
        async def operation(uow, now):
            patient, steps = await self._services.registry.register(uow, request, now)
            return PatientWithSteps(patient=patient, steps=steps)

        return await self._run(operation)
