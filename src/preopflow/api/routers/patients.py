"""Patient registration, circuit membership and per-patient step endpoints."""

import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Query, Request, status

from ...application.dto.circuit_dto import RegisterPatientRequest
from ...core.utils.datetime_utils import day_window
from ..deps import (
    AddStepDep,
    ListPatientStepsDep,
    ListPatientsDep,
    MarkPendingSchedulingDep,
    ReenterCircuitDep,
    RegisterPatientDep,
    RemovePatientDep,
)
from ..schemas import (
    AddStepRequest,
    ApiResponse,
    ErrorResponse,
    PatientSchema,
    PatientWithStepsSchema,
    PendingSchedulingRequest,
    ReenterCircuitRequest,
    RegisterPatientRequest as RegisterPatientRequestSchema,
    StepSchema,
)
from ..utils.responses import ok

router = APIRouter(prefix="/patients", tags=["Patients"])
logger = logging.getLogger("preopflow")

NOT_FOUND = {404: {"model": ErrorResponse, "description": "Patient not found"}}


@router.post(
    "",
    response_model=ApiResponse[PatientWithStepsSchema],
    status_code=status.HTTP_201_CREATED,
    summary="Register a patient and create the steps of its flow",
    responses={422: {"model": ErrorResponse, "description": "Invalid input"}},
)
async def register_patient(
    request: Request, body: RegisterPatientRequestSchema, use_case: RegisterPatientDep
):
    """
    Register a new patient.

    Specialist flows start with the consultation only. The pre-op flow gets
    triage, lab/ECG and scheduling, plus cardiology and imaging when flagged.
    """
    result = await use_case.execute(
        RegisterPatientRequest(
            name=body.name,
            registration_number=body.registration_number,
            specialty=body.specialty,
            flow_type=body.flow_type,
            needs_cardio=body.needs_cardio,
            needs_image_exam=body.needs_image_exam,
            is_priority=body.is_priority,
        )
    )
    return ok(request, data=PatientWithStepsSchema.from_result(result), message="Created")


@router.get(
    "",
    response_model=ApiResponse[List[PatientWithStepsSchema]],
    summary="List patients registered on a day",
)
async def list_patients(
    request: Request,
    use_case: ListPatientsDep,
    day: Optional[date] = Query(None, alias="date", description="Registration day (UTC)"),
):
    start, end = day_window(day) if day is not None else (None, None)
    results = await use_case.execute(start, end)
    return ok(request, data=[PatientWithStepsSchema.from_result(r) for r in results])


@router.delete(
    "/{patient_id}",
    response_model=ApiResponse[dict],
    summary="Remove a patient and everything attached to it",
    responses=NOT_FOUND,
)
async def remove_patient(request: Request, patient_id: str, use_case: RemovePatientDep):
    await use_case.execute(patient_id)
    return ok(request, data={"patient_id": patient_id}, message="Deleted")


@router.get(
    "/{patient_id}/steps",
    response_model=ApiResponse[PatientWithStepsSchema],
    summary="Get a patient with its steps",
    responses=NOT_FOUND,
)
async def list_patient_steps(request: Request, patient_id: str, use_case: ListPatientStepsDep):
    result = await use_case.execute(patient_id)
    return ok(request, data=PatientWithStepsSchema.from_result(result))


@router.post(
    "/{patient_id}/steps",
    response_model=ApiResponse[List[StepSchema]],
    status_code=status.HTTP_201_CREATED,
    summary="Add a step to an open patient",
    responses={
        **NOT_FOUND,
        409: {"model": ErrorResponse, "description": "Step already open or patient completed"},
    },
)
async def add_step(request: Request, patient_id: str, body: AddStepRequest, use_case: AddStepDep):
    rows = await use_case.execute(patient_id, body.step)
    return ok(request, data=[StepSchema.from_domain(r) for r in rows], message="Created")


@router.post(
    "/{patient_id}/pending-scheduling",
    response_model=ApiResponse[PatientSchema],
    summary="Flag a patient whose surgery date is still undefined",
    responses=NOT_FOUND,
)
async def mark_pending_scheduling(
    request: Request,
    patient_id: str,
    use_case: MarkPendingSchedulingDep,
    body: Optional[PendingSchedulingRequest] = None,
):
    patient = await use_case.execute(patient_id, body.reason if body else None)
    return ok(request, data=PatientSchema.from_domain(patient))


@router.post(
    "/{patient_id}/reenter",
    response_model=ApiResponse[PatientWithStepsSchema],
    summary="Send a patient back into the pre-op circuit",
    responses=NOT_FOUND,
)
async def reenter_circuit(
    request: Request,
    patient_id: str,
    use_case: ReenterCircuitDep,
    body: Optional[ReenterCircuitRequest] = None,
):
    result = await use_case.execute(patient_id, body.needs_cardio if body else False)
    logger.info(f"Patient {patient_id} re-entered the circuit via API")
    return ok(request, data=PatientWithStepsSchema.from_result(result))
