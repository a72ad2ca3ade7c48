"""Patient administration: pending scheduling, circuit re-entry, removal."""

from typing import Optional

from ...domain.entities.patient import Patient
from ..dto.circuit_dto import PatientWithSteps
from .base import CircuitUseCase


class MarkPendingSchedulingUseCase(CircuitUseCase):
    async def execute(self, patient_id: str, reason: Optional[str] = None) -> Patient:
        async def operation(uow, now):
            registry = self._services.registry
            patient = await registry.get(uow, patient_id)
            await registry.mark_pending_scheduling(
                uow,
                patient,
                reason or self._services.policy.default_pending_scheduling_reason,
                now,
            )
            return patient

        return await self._run(operation)


class ReenterCircuitUseCase(CircuitUseCase):
    async def execute(self, patient_id: str, needs_cardio: bool = False) -> PatientWithSteps:
        async def operation(uow, now):
            registry = self._services.registry
            patient = await registry.get(uow, patient_id)
            await registry.reenter_circuit(uow, patient, needs_cardio, now)
            steps = await self._services.ledger.list_for_patient(uow, patient_id)
            return PatientWithSteps(patient=patient, steps=steps)

        return await self._run(operation)


class RemovePatientUseCase(CircuitUseCase):
    async def execute(self, patient_id: str) -> None:
        async def operation(uow, now):
            await self._services.registry.remove(uow, patient_id)

        await self._run(operation)
