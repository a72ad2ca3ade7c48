"""
Tests for next-patient selection: queue order, priority rotation, the
cardiology gate and the sub-queue preferences.
"""

from datetime import datetime, timedelta, timezone

import pytest

from preopflow.application.services.station_scheduler import (
    Candidate,
    pick_with_rotation,
)
from preopflow.domain.entities.patient import Patient
from preopflow.domain.entities.queue_rotation import QueueRotation
from preopflow.domain.entities.step import PatientStep
from preopflow.domain.enums.circuit import CircuitStep, FlowType, MedicalSpecialty
from preopflow.domain.errors import (
    CardiologyPrerequisiteNotMetError,
    NoCandidatesError,
    SpecialtyNotSelectedError,
    StationCapacityExceededError,
    StationInactiveError,
)
from preopflow.core.container import ServiceNames

NOW = datetime(2026, 3, 2, 8, 0, tzinfo=timezone.utc)


def _candidate(name, minute, priority):
    created = NOW + timedelta(minutes=minute)
    patient = Patient(
        name=name,
        specialty=MedicalSpecialty.GERAL,
        flow_type=FlowType.CIRCUITO_PREOP,
        is_priority=priority,
        created_at=created,
    )
    step = PatientStep(
        patient_id=patient.patient_id, step=CircuitStep.TRIAGEM_MEDICA, created_at=created
    )
    return Candidate(patient=patient, step=step)


def _drain(candidates, rotation, limit=3):
    picked = []
    while candidates:
        chosen, _ = pick_with_rotation(candidates, rotation, limit, NOW)
        picked.append(chosen.patient.name)
        candidates.remove(chosen)
    return picked


def test_rotation_interleaves_normal_after_priority_burst():
    candidates = [
        _candidate("N1", 0, False),
        _candidate("P1", 1, True),
        _candidate("P2", 2, True),
        _candidate("P3", 3, True),
        _candidate("P4", 4, True),
        _candidate("N2", 5, False),
    ]
    assert _drain(candidates, QueueRotation("triagem_medica")) == [
        "P1", "P2", "P3", "N1", "P4", "N2",
    ]


def test_rotation_keeps_calling_priority_when_no_normal_waits():
    rotation = QueueRotation("triagem_medica")
    candidates = [_candidate(f"P{i}", i, True) for i in range(5)]
    assert _drain(candidates, rotation) == ["P0", "P1", "P2", "P3", "P4"]
    assert rotation.consecutive_priority_calls == 5


def test_normal_call_resets_the_streak():
    rotation = QueueRotation("triagem_medica", consecutive_priority_calls=2)
    chosen, used_priority = pick_with_rotation([_candidate("N", 0, False)], rotation, 3, NOW)
    assert not used_priority
    assert rotation.consecutive_priority_calls == 0


@pytest.mark.asyncio
async def test_oldest_patient_is_called_first(circuit):
    first = await circuit.register("Ana")
    await circuit.register("Bruno")
    station = await circuit.station(CircuitStep.TRIAGEM_MEDICA)

    called = await circuit.call(station.station_id)

    assert called.patient.patient_id == first.patient.patient_id
    assert called.step.station_number == station.station_number
    assert called.announcement.patient_name == "Ana"
    assert called.station.current_patient_id == first.patient.patient_id


@pytest.mark.asyncio
async def test_priority_rotation_is_persisted_between_calls(circuit):
    await circuit.register("N1")
    for name in ("P1", "P2", "P3", "P4"):
        await circuit.register(name, is_priority=True)
    station = await circuit.station(CircuitStep.TRIAGEM_MEDICA)

    order = []
    for _ in range(5):
        called = await circuit.call(station.station_id)
        order.append((called.patient.name, called.used_priority))
        await circuit.start(station.station_id)
        await circuit.finish(station.station_id)

    assert order == [
        ("P1", True), ("P2", True), ("P3", True), ("N1", False), ("P4", True),
    ]


@pytest.mark.asyncio
async def test_single_capacity_station_rejects_second_call(circuit):
    await circuit.register("Ana")
    await circuit.register("Bruno")
    station = await circuit.station(CircuitStep.TRIAGEM_MEDICA)
    await circuit.call(station.station_id)

    with pytest.raises(StationCapacityExceededError) as exc:
        await circuit.call(station.station_id)
    assert exc.value.details["capacity"] == 1


@pytest.mark.asyncio
async def test_empty_queue_raises_no_candidates(circuit):
    station = await circuit.station(CircuitStep.CARDIOLOGISTA)
    with pytest.raises(NoCandidatesError):
        await circuit.call(station.station_id)


@pytest.mark.asyncio
async def test_inactive_station_cannot_call(circuit):
    await circuit.register("Ana")
    station = await circuit.station(CircuitStep.TRIAGEM_MEDICA)
    await circuit.use_case(ServiceNames.SET_STATION_ACTIVE).execute(station.station_id, False)

    with pytest.raises(StationInactiveError):
        await circuit.call(station.station_id)


@pytest.mark.asyncio
async def test_patient_served_elsewhere_is_not_eligible(circuit):
    await circuit.register("Ana")
    triage = await circuit.station(CircuitStep.TRIAGEM_MEDICA)
    exams = await circuit.station(CircuitStep.EXAMES_LAB_ECG)
    await circuit.call(triage.station_id)

    with pytest.raises(NoCandidatesError):
        await circuit.call(exams.station_id)


@pytest.mark.asyncio
async def test_cardiology_requires_completed_lab_ecg(circuit):
    patient = await circuit.register("Carlos", needs_cardio=True)
    cardio = await circuit.station(CircuitStep.CARDIOLOGISTA)
    exams = await circuit.station(CircuitStep.EXAMES_LAB_ECG)

    with pytest.raises(CardiologyPrerequisiteNotMetError) as exc:
        await circuit.call(cardio.station_id)
    assert exc.value.error_code == "ECG_PREREQUISITE_NOT_MET"

    await circuit.serve(exams.station_id)
    called = await circuit.call(cardio.station_id)
    assert called.patient.patient_id == patient.patient.patient_id


@pytest.mark.asyncio
async def test_cardiology_ignores_lab_ecg_from_before_reentry(circuit):
    registered = await circuit.register("Elisa")
    patient_id = registered.patient.patient_id
    triage = await circuit.station(CircuitStep.TRIAGEM_MEDICA)
    exams = await circuit.station(CircuitStep.EXAMES_LAB_ECG)
    scheduling = await circuit.station(CircuitStep.AGENDAMENTO)
    cardio = await circuit.station(CircuitStep.CARDIOLOGISTA)
    for station in (triage, exams, scheduling):
        await circuit.serve(station.station_id)

    await circuit.use_case(ServiceNames.REENTER_CIRCUIT).execute(patient_id, True)

    with pytest.raises(CardiologyPrerequisiteNotMetError):
        await circuit.call(cardio.station_id)
    _, patient = await circuit.steps_of(patient_id)
    assert not patient.is_being_served

    await circuit.serve(exams.station_id)
    called = await circuit.call(cardio.station_id)
    assert called.patient.patient_id == patient_id


@pytest.mark.asyncio
async def test_cardiology_specialist_station_is_gated(circuit):
    await circuit.register(
        "Dora", flow_type=FlowType.CONSULTA_ESPECIALISTA, specialty=MedicalSpecialty.CARDIOLOGIA
    )
    station = await circuit.station(CircuitStep.ESPECIALISTA, MedicalSpecialty.CARDIOLOGIA)

    with pytest.raises(CardiologyPrerequisiteNotMetError):
        await circuit.call(station.station_id)


@pytest.mark.asyncio
async def test_specialist_station_needs_a_specialty(circuit):
    await circuit.register("Ana", flow_type=FlowType.CONSULTA_ESPECIALISTA)
    station = await circuit.station(CircuitStep.ESPECIALISTA)

    with pytest.raises(SpecialtyNotSelectedError):
        await circuit.call(station.station_id)


@pytest.mark.asyncio
async def test_specialist_station_prefers_first_consultations_of_its_specialty(circuit):
    await circuit.register(
        "Retorno", flow_type=FlowType.CONSULTA_RETORNO, specialty=MedicalSpecialty.ORTOPEDIA
    )
    await circuit.register(
        "Otorrino", flow_type=FlowType.CONSULTA_ESPECIALISTA, specialty=MedicalSpecialty.OTORRINO
    )
    await circuit.register(
        "Primeira", flow_type=FlowType.CONSULTA_ESPECIALISTA, specialty=MedicalSpecialty.ORTOPEDIA
    )
    station = await circuit.station(CircuitStep.ESPECIALISTA, MedicalSpecialty.ORTOPEDIA)

    first = await circuit.serve(station.station_id, discharge_outcome="ALTA")
    second = await circuit.serve(station.station_id, discharge_outcome="ALTA")

    assert first.patient.name == "Primeira"
    assert second.patient.name == "Retorno"
    with pytest.raises(NoCandidatesError):
        await circuit.call(station.station_id)


@pytest.mark.asyncio
async def test_ecg_station_prefers_cardiology_patients(circuit):
    await circuit.register("Sem cardio")
    await circuit.register("Com cardio", needs_cardio=True)
    station = await circuit.station(CircuitStep.EXAMES_LAB_ECG)

    called = await circuit.call(station.station_id)

    assert called.patient.name == "Com cardio"
