"""
Tests for transactional behaviour: serialized calls and rollback.
"""

import asyncio

import pytest

from preopflow.adapters.db.memory.store import InMemoryStore
from preopflow.adapters.db.memory.unit_of_work import InMemoryUnitOfWork
from preopflow.application.dto.circuit_dto import CallResult
from preopflow.core.container import ServiceNames
from preopflow.domain.entities.patient import Patient
from preopflow.domain.enums.circuit import CircuitStep, FlowType, MedicalSpecialty
from preopflow.domain.errors import NoCandidatesError, StationCapacityExceededError


@pytest.mark.asyncio
async def test_concurrent_calls_respect_capacity(circuit):
    for name in ("A", "B", "C", "D"):
        await circuit.register(name)
    station = await circuit.station(CircuitStep.EXAMES_LAB_ECG)
    call_next = circuit.use_case(ServiceNames.CALL_NEXT)

    results = await asyncio.gather(
        *[call_next.execute(station.station_id) for _ in range(4)],
        return_exceptions=True,
    )

    calls = [r for r in results if isinstance(r, CallResult)]
    rejected = [r for r in results if isinstance(r, StationCapacityExceededError)]
    assert len(calls) == 2
    assert len(rejected) == 2
    assert len({c.patient.patient_id for c in calls}) == 2


@pytest.mark.asyncio
async def test_concurrent_stations_never_call_the_same_patient(circuit):
    await circuit.register("A")
    first = await circuit.station(CircuitStep.TRIAGEM_MEDICA)
    second = await circuit.station(CircuitStep.TRIAGEM_MEDICA)
    call_next = circuit.use_case(ServiceNames.CALL_NEXT)

    results = await asyncio.gather(
        call_next.execute(first.station_id),
        call_next.execute(second.station_id),
        return_exceptions=True,
    )

    assert sum(isinstance(r, CallResult) for r in results) == 1


def _patient():
    return Patient(name="Ana", specialty=MedicalSpecialty.GERAL, flow_type=FlowType.CIRCUITO_PREOP)


@pytest.mark.asyncio
async def test_error_inside_unit_of_work_discards_writes():
    store = InMemoryStore()
    patient = _patient()

    with pytest.raises(RuntimeError):
        async with InMemoryUnitOfWork(store) as uow:
            await uow.patients.save(patient)
            raise RuntimeError("boom")

    async with InMemoryUnitOfWork(store) as uow:
        assert await uow.patients.find_by_id(patient.patient_id) is None
    assert not store.lock.locked()


@pytest.mark.asyncio
async def test_leaving_without_commit_discards_writes():
    store = InMemoryStore()
    patient = _patient()

    async with InMemoryUnitOfWork(store) as uow:
        await uow.patients.save(patient)

    async with InMemoryUnitOfWork(store) as uow:
        assert await uow.patients.find_by_id(patient.patient_id) is None
        await uow.patients.save(patient)
        await uow.commit()

    async with InMemoryUnitOfWork(store) as uow:
        assert await uow.patients.find_by_id(patient.patient_id) is not None


@pytest.mark.asyncio
async def test_rejected_command_publishes_nothing(circuit, published):
    station = await circuit.station(CircuitStep.TRIAGEM_MEDICA)
    published.clear()

    with pytest.raises(NoCandidatesError):
        await circuit.call(station.station_id)

    assert published == []
