"""
Tests for station commands: start, finish, cancel, call expiry and the
patient lifecycle around them.
"""

import pytest

from preopflow.core.container import ServiceNames
from preopflow.domain.enums.circuit import (
    CircuitStep,
    DischargeOutcome,
    FlowType,
    MedicalSpecialty,
    StepStatus,
)
from preopflow.domain.errors import (
    NoCandidatesError,
    NoPatientCalledError,
    NoPatientInServiceError,
    PatientNotFoundError,
    ValidationError,
)
from preopflow.workers.call_expiry_sweeper import _sweep_once


def _events(published, event_type):
    return [e for e in published if e.event_type == event_type]


@pytest.mark.asyncio
async def test_specialist_indication_walks_patient_through_preop(circuit, published):
    maria = await circuit.register(
        "Maria Silva",
        flow_type=FlowType.CONSULTA_ESPECIALISTA,
        specialty=MedicalSpecialty.ORTOPEDIA,
    )
    patient_id = maria.patient.patient_id
    specialist = await circuit.station(CircuitStep.ESPECIALISTA, MedicalSpecialty.ORTOPEDIA)
    triage = await circuit.station(CircuitStep.TRIAGEM_MEDICA)
    exams = await circuit.station(CircuitStep.EXAMES_LAB_ECG)
    cardio = await circuit.station(CircuitStep.CARDIOLOGISTA)
    scheduling = await circuit.station(CircuitStep.AGENDAMENTO)

    consult = await circuit.serve(
        specialist.station_id, surgery_indicated=True, needs_cardio=True
    )
    assert consult.reentered_circuit
    assert not consult.patient_completed

    steps, patient = await circuit.steps_of(patient_id)
    assert steps[CircuitStep.ESPECIALISTA].status == StepStatus.COMPLETED
    for step in (
        CircuitStep.TRIAGEM_MEDICA,
        CircuitStep.EXAMES_LAB_ECG,
        CircuitStep.AGENDAMENTO,
        CircuitStep.CARDIOLOGISTA,
    ):
        assert steps[step].status == StepStatus.PENDING
    assert patient.has_surgery_indication
    assert patient.needs_cardio
    assert patient.flow_type == FlowType.CONSULTA_ESPECIALISTA

    for station in (triage, exams, cardio):
        result = await circuit.serve(station.station_id, minutes=5)
        assert not result.patient_completed

    last = await circuit.serve(scheduling.station_id, surgery_date_defined=False)
    assert last.patient_completed
    assert last.patient.is_completed
    assert last.patient.pending_surgery_scheduling
    assert last.patient.scheduling_pending_reason == "Data da cirurgia não definida"

    assert len(_events(published, "PatientReenteredCircuit")) == 1
    assert len(_events(published, "PatientCompleted")) == 1


@pytest.mark.asyncio
async def test_surgery_date_defined_clears_pending_flag(circuit):
    patient = await circuit.register("Ana")
    patient_id = patient.patient.patient_id
    await circuit.use_case(ServiceNames.MARK_PENDING_SCHEDULING).execute(patient_id, "Sem vaga")
    scheduling = await circuit.station(CircuitStep.AGENDAMENTO)

    result = await circuit.serve(scheduling.station_id, surgery_date_defined=True)

    assert not result.patient.pending_surgery_scheduling
    assert result.patient.scheduling_pending_reason is None


@pytest.mark.asyncio
async def test_consultation_without_indication_records_outcome(circuit):
    await circuit.register(
        "João", flow_type=FlowType.CONSULTA_RETORNO, specialty=MedicalSpecialty.UROLOGIA
    )
    station = await circuit.station(CircuitStep.ESPECIALISTA, MedicalSpecialty.UROLOGIA)

    result = await circuit.serve(
        station.station_id, discharge_outcome=DischargeOutcome.ACOMPANHAMENTO_AMBULATORIAL
    )

    assert result.patient_completed
    assert result.patient.discharge_outcome == DischargeOutcome.ACOMPANHAMENTO_AMBULATORIAL
    assert not result.patient.has_surgery_indication


@pytest.mark.asyncio
async def test_completion_is_recorded_once(circuit, container, published):
    await circuit.register(
        "Lia", flow_type=FlowType.CONSULTA_ESPECIALISTA, specialty=MedicalSpecialty.GERAL
    )
    station = await circuit.station(CircuitStep.ESPECIALISTA, MedicalSpecialty.GERAL)
    result = await circuit.serve(station.station_id)
    completed_at = result.patient.completed_at

    services = container.get(ServiceNames.CIRCUIT_SERVICES)
    async with container.get(ServiceNames.UNIT_OF_WORK_FACTORY)() as uow:
        patient = await services.registry.get(uow, result.patient.patient_id)
        assert not await services.registry.mark_completed(uow, patient, circuit.clock.advance(minutes=1))
        await uow.commit()

    _, patient = await circuit.steps_of(result.patient.patient_id)
    assert patient.completed_at == completed_at
    assert len(_events(published, "PatientCompleted")) == 1
    with pytest.raises(NoPatientInServiceError):
        await circuit.finish(station.station_id)
    with pytest.raises(NoCandidatesError):
        await circuit.call(station.station_id)


@pytest.mark.asyncio
async def test_start_requires_a_called_patient(circuit):
    station = await circuit.station(CircuitStep.TRIAGEM_MEDICA)
    with pytest.raises(NoPatientCalledError):
        await circuit.start(station.station_id)


@pytest.mark.asyncio
async def test_finish_requires_service_in_progress(circuit):
    await circuit.register("Ana")
    station = await circuit.station(CircuitStep.TRIAGEM_MEDICA)
    await circuit.call(station.station_id)

    with pytest.raises(NoPatientInServiceError):
        await circuit.finish(station.station_id)


@pytest.mark.asyncio
async def test_cancel_returns_patient_to_queue(circuit):
    patient = await circuit.register("Ana")
    patient_id = patient.patient.patient_id
    station = await circuit.station(CircuitStep.TRIAGEM_MEDICA)
    await circuit.call(station.station_id)
    await circuit.start(station.station_id)

    result = await circuit.cancel(station.station_id)

    assert result.step.status == StepStatus.PENDING
    assert result.step.started_at is None
    assert not result.patient.is_being_served
    assert result.station.current_patient_id is None
    announcements = await circuit.use_case(ServiceNames.ACTIVE_ANNOUNCEMENTS).execute()
    assert announcements == []
    with pytest.raises(NoPatientCalledError):
        await circuit.cancel(station.station_id)

    again = await circuit.call(station.station_id)
    assert again.patient.patient_id == patient_id


@pytest.mark.asyncio
async def test_double_capacity_station_falls_back_to_other_patient(circuit):
    first = await circuit.register("Ana")
    second = await circuit.register("Bruno")
    station = await circuit.station(CircuitStep.EXAMES_LAB_ECG)

    await circuit.call(station.station_id)
    called = await circuit.call(station.station_id)
    assert called.station.current_patient_id == second.patient.patient_id

    await circuit.start(station.station_id, second.patient.patient_id)
    result = await circuit.finish(station.station_id, second.patient.patient_id)

    assert result.station.current_patient_id == first.patient.patient_id


@pytest.mark.asyncio
async def test_overdue_call_expires_on_next_command(circuit, published):
    patient = await circuit.register("Ana")
    patient_id = patient.patient.patient_id
    station = await circuit.station(CircuitStep.TRIAGEM_MEDICA)
    await circuit.call(station.station_id)

    circuit.clock.advance(seconds=180)
    stats = await circuit.use_case(ServiceNames.QUEUE_STATS).execute()
    triage = next(s for s in stats if s.step == CircuitStep.TRIAGEM_MEDICA)
    assert triage.in_service == 1

    circuit.clock.advance(seconds=1)
    stats = await circuit.use_case(ServiceNames.QUEUE_STATS).execute()
    triage = next(s for s in stats if s.step == CircuitStep.TRIAGEM_MEDICA)
    assert (triage.pending, triage.in_service) == (1, 0)

    steps, current = await circuit.steps_of(patient_id)
    assert steps[CircuitStep.TRIAGEM_MEDICA].station_number is None
    assert not current.is_being_served
    stations = await circuit.use_case(ServiceNames.LIST_STATIONS).execute()
    assert stations[0].current_patient_id is None
    assert await circuit.use_case(ServiceNames.ACTIVE_ANNOUNCEMENTS).execute() == []
    assert len(_events(published, "CallExpired")) == 1

    assert await circuit.use_case(ServiceNames.EXPIRE_STALE_CALLS).execute() == 0


@pytest.mark.asyncio
async def test_sweeper_expires_idle_station_calls(circuit):
    await circuit.register("Ana")
    station = await circuit.station(CircuitStep.TRIAGEM_MEDICA)
    await circuit.call(station.station_id)
    circuit.clock.advance(minutes=4)

    use_case = circuit.use_case(ServiceNames.EXPIRE_STALE_CALLS)
    assert await _sweep_once(use_case) == 1
    assert await _sweep_once(use_case) == 0


@pytest.mark.asyncio
async def test_reentry_keeps_flow_and_skips_open_steps(circuit):
    patient = await circuit.register("Ana")
    patient_id = patient.patient.patient_id

    result = await circuit.use_case(ServiceNames.REENTER_CIRCUIT).execute(
        patient_id, needs_cardio=True
    )

    assert result.patient.flow_type == FlowType.CIRCUITO_PREOP
    assert sorted(r.step.value for r in result.steps) == sorted(
        ["triagem_medica", "exames_lab_ecg", "agendamento", "cardiologista"]
    )


@pytest.mark.asyncio
async def test_remove_patient_cascades(circuit):
    patient = await circuit.register("Ana")
    patient_id = patient.patient.patient_id
    station = await circuit.station(CircuitStep.TRIAGEM_MEDICA)
    await circuit.call(station.station_id)

    await circuit.use_case(ServiceNames.REMOVE_PATIENT).execute(patient_id)

    with pytest.raises(PatientNotFoundError):
        await circuit.use_case(ServiceNames.LIST_PATIENT_STEPS).execute(patient_id)
    assert await circuit.use_case(ServiceNames.LIST_STEPS).execute() == []
    assert await circuit.use_case(ServiceNames.ACTIVE_ANNOUNCEMENTS).execute() == []
    stations = await circuit.use_case(ServiceNames.LIST_STATIONS).execute()
    assert stations[0].current_patient_id is None


@pytest.mark.asyncio
async def test_announcement_limit_is_honoured_and_zero_rejected(circuit):
    for name in ("Ana", "Bruno"):
        await circuit.register(name)
    for _ in range(2):
        station = await circuit.station(CircuitStep.TRIAGEM_MEDICA)
        circuit.clock.advance(seconds=10)
        await circuit.call(station.station_id)
    feed = circuit.use_case(ServiceNames.ACTIVE_ANNOUNCEMENTS)

    assert len(await feed.execute()) == 2
    assert [a.patient_name for a in await feed.execute(1)] == ["Bruno"]
    with pytest.raises(ValidationError):
        await feed.execute(0)
