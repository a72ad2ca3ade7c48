"""
Tests for adding steps to a patient after registration.
"""

import pytest

from preopflow.core.container import ServiceNames
from preopflow.domain.enums.circuit import CircuitStep, FlowType, MedicalSpecialty
from preopflow.domain.errors import (
    DuplicateStepError,
    PatientAlreadyCompletedError,
    PatientNotFoundError,
    StepAlreadyAddedError,
)


async def _add(circuit, patient_id, step):
    return await circuit.use_case(ServiceNames.ADD_STEP).execute(patient_id, step)


@pytest.mark.asyncio
async def test_cardiology_added_alone_when_lab_ecg_exists(circuit):
    patient = await circuit.register("Ana")
    patient_id = patient.patient.patient_id

    rows = await _add(circuit, patient_id, CircuitStep.CARDIOLOGISTA)

    assert [r.step for r in rows] == [CircuitStep.CARDIOLOGISTA]
    _, current = await circuit.steps_of(patient_id)
    assert current.needs_cardio


@pytest.mark.asyncio
async def test_cardiology_seeds_lab_ecg_for_patients_without_it(circuit):
    patient = await circuit.register(
        "Bia", flow_type=FlowType.CONSULTA_ESPECIALISTA, specialty=MedicalSpecialty.GERAL
    )

    rows = await _add(circuit, patient.patient.patient_id, CircuitStep.CARDIOLOGISTA)

    assert {r.step for r in rows} == {CircuitStep.CARDIOLOGISTA, CircuitStep.EXAMES_LAB_ECG}


@pytest.mark.asyncio
async def test_cardiology_cannot_be_added_twice(circuit):
    patient = await circuit.register("Ana", needs_cardio=True)

    with pytest.raises(StepAlreadyAddedError) as exc:
        await _add(circuit, patient.patient.patient_id, CircuitStep.CARDIOLOGISTA)
    assert exc.value.error_code == "STEP_ALREADY_ADDED"


@pytest.mark.asyncio
async def test_image_exam_added_once(circuit):
    patient = await circuit.register("Ana")
    patient_id = patient.patient.patient_id

    rows = await _add(circuit, patient_id, CircuitStep.EXAME_IMAGEM)
    assert [r.step for r in rows] == [CircuitStep.EXAME_IMAGEM]
    _, current = await circuit.steps_of(patient_id)
    assert current.needs_image_exam

    with pytest.raises(StepAlreadyAddedError):
        await _add(circuit, patient_id, CircuitStep.EXAME_IMAGEM)


@pytest.mark.asyncio
async def test_open_step_cannot_be_duplicated(circuit):
    patient = await circuit.register("Ana")

    with pytest.raises(DuplicateStepError) as exc:
        await _add(circuit, patient.patient.patient_id, CircuitStep.TRIAGEM_MEDICA)
    assert exc.value.error_code == "DUPLICATE_STEP"


@pytest.mark.asyncio
async def test_completed_step_can_be_added_again(circuit):
    patient = await circuit.register("Ana")
    patient_id = patient.patient.patient_id
    station = await circuit.station(CircuitStep.TRIAGEM_MEDICA)
    await circuit.serve(station.station_id)

    rows = await _add(circuit, patient_id, CircuitStep.TRIAGEM_MEDICA)

    assert rows[0].step == CircuitStep.TRIAGEM_MEDICA
    steps = await circuit.use_case(ServiceNames.LIST_STEPS).execute(
        step=CircuitStep.TRIAGEM_MEDICA
    )
    assert len(steps) == 2


@pytest.mark.asyncio
async def test_completed_patient_rejects_new_steps(circuit):
    patient = await circuit.register(
        "Rui", flow_type=FlowType.CONSULTA_RETORNO, specialty=MedicalSpecialty.TRAUMA
    )
    station = await circuit.station(CircuitStep.ESPECIALISTA, MedicalSpecialty.TRAUMA)
    await circuit.serve(station.station_id)

    with pytest.raises(PatientAlreadyCompletedError):
        await _add(circuit, patient.patient.patient_id, CircuitStep.EXAME_IMAGEM)


@pytest.mark.asyncio
async def test_unknown_patient(circuit):
    with pytest.raises(PatientNotFoundError):
        await _add(circuit, "PAT-missing", CircuitStep.EXAME_IMAGEM)
