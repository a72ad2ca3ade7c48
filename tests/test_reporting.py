"""
Tests for the day report: step times, bottlenecks, specialty conversion
and flow type counts.
"""

from datetime import date

import pytest
import pytest_asyncio

from preopflow.core.container import ServiceNames
from preopflow.core.utils.datetime_utils import day_window
from preopflow.domain.enums.circuit import (
    CircuitStep,
    DischargeOutcome,
    FlowType,
    MedicalSpecialty,
)


async def _report(circuit, day):
    return await circuit.use_case(ServiceNames.DAY_REPORT).execute(*day_window(day))


@pytest_asyncio.fixture
async def busy_day(circuit):
    """Two pre-op patients, two orthopedic consultations, one indication."""
    await circuit.register("Ana")
    await circuit.register("Bruno")
    await circuit.register(
        "Clara", flow_type=FlowType.CONSULTA_ESPECIALISTA, specialty=MedicalSpecialty.ORTOPEDIA
    )
    await circuit.register(
        "Davi", flow_type=FlowType.CONSULTA_ESPECIALISTA, specialty=MedicalSpecialty.ORTOPEDIA
    )
    triage = await circuit.station(CircuitStep.TRIAGEM_MEDICA)
    exams = await circuit.station(CircuitStep.EXAMES_LAB_ECG)
    specialist = await circuit.station(CircuitStep.ESPECIALISTA, MedicalSpecialty.ORTOPEDIA)

    await circuit.serve(triage.station_id, minutes=10)
    await circuit.serve(triage.station_id, minutes=50)
    await circuit.serve(exams.station_id, minutes=45)
    await circuit.serve(specialist.station_id, minutes=20, surgery_indicated=True)
    await circuit.serve(
        specialist.station_id, minutes=20, discharge_outcome=DischargeOutcome.ALTA
    )
    return circuit


def _by_step(report):
    return {r.step: r for r in report.step_reports}


@pytest.mark.asyncio
async def test_step_times_and_bottlenecks(busy_day):
    report = await _report(busy_day, date(2026, 3, 2))
    steps = _by_step(report)

    triage = steps[CircuitStep.TRIAGEM_MEDICA]
    assert (triage.total, triage.avg_time_minutes) == (2, 30)
    assert (triage.min_time_minutes, triage.max_time_minutes) == (10, 50)
    assert not triage.is_bottleneck

    exams = steps[CircuitStep.EXAMES_LAB_ECG]
    assert (exams.total, exams.avg_time_minutes) == (1, 45)
    assert exams.is_bottleneck

    assert steps[CircuitStep.AGENDAMENTO].total == 0
    assert not steps[CircuitStep.AGENDAMENTO].is_bottleneck


@pytest.mark.asyncio
async def test_average_rounds_half_minutes_up(circuit):
    await circuit.register("Ana")
    await circuit.register("Bruno")
    triage = await circuit.station(CircuitStep.TRIAGEM_MEDICA)
    await circuit.serve(triage.station_id, minutes=2)
    await circuit.serve(triage.station_id, minutes=3)

    report = await _report(circuit, date(2026, 3, 2))

    assert _by_step(report)[CircuitStep.TRIAGEM_MEDICA].avg_time_minutes == 3


@pytest.mark.asyncio
async def test_specialty_conversion(busy_day):
    report = await _report(busy_day, date(2026, 3, 2))

    assert len(report.specialty_reports) == 1
    orthopedics = report.specialty_reports[0]
    assert orthopedics.specialty == MedicalSpecialty.ORTOPEDIA
    assert (orthopedics.consultations, orthopedics.surgery_indications) == (2, 1)
    assert orthopedics.conversion_rate == 0.5


@pytest.mark.asyncio
async def test_flow_type_counts(busy_day):
    report = await _report(busy_day, date(2026, 3, 2))
    flows = {r.flow_type: r for r in report.flow_type_reports}

    assert report.total_patients == 4
    assert report.completed_patients == 1
    assert (flows[FlowType.CIRCUITO_PREOP].registered, flows[FlowType.CIRCUITO_PREOP].completed) == (2, 0)
    assert flows[FlowType.CONSULTA_ESPECIALISTA].registered == 2
    assert flows[FlowType.CONSULTA_ESPECIALISTA].completed == 1
    assert flows[FlowType.CONSULTA_RETORNO].registered == 0


@pytest.mark.asyncio
async def test_other_day_is_empty(busy_day):
    report = await _report(busy_day, date(2026, 3, 3))

    assert report.total_patients == 0
    assert all(r.total == 0 for r in report.step_reports)
    assert report.specialty_reports == []


@pytest.mark.asyncio
async def test_pending_scheduling_listed(circuit):
    patient = await circuit.register("Ana")
    await circuit.use_case(ServiceNames.MARK_PENDING_SCHEDULING).execute(
        patient.patient.patient_id, "Aguardando vaga no centro cirúrgico"
    )

    report = await _report(circuit, date(2026, 3, 2))

    assert [p.patient_id for p in report.pending_scheduling] == [patient.patient.patient_id]
    assert report.pending_scheduling[0].scheduling_pending_reason == (
        "Aguardando vaga no centro cirúrgico"
    )
