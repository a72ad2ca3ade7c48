"""Station administration and the station commands: call, start, finish, cancel."""

from typing import List, Optional

from fastapi import APIRouter, Query, Request, status

from ...domain.enums.circuit import CircuitStep
from ..deps import (
    CallNextDep,
    CancelCallDep,
    CircuitServicesDep,
    CreateStationDep,
    FinishServiceDep,
    ListStationsDep,
    SetStationActiveDep,
    SetStationSpecialtyDep,
    StartServiceDep,
)
from ..schemas import (
    ApiResponse,
    CallResultSchema,
    CreateStationRequest,
    ErrorResponse,
    FinishServiceRequest,
    ServiceResultSchema,
    SetActiveRequest,
    SetSpecialtyRequest,
    StationCommandRequest,
    StationSchema,
)
from ..utils.responses import ok

router = APIRouter(prefix="/stations", tags=["Stations"])

COMMAND_ERRORS = {
    404: {"model": ErrorResponse, "description": "Station not found"},
    409: {"model": ErrorResponse, "description": "Station state does not allow the command"},
}


@router.get("", response_model=ApiResponse[List[StationSchema]], summary="List stations")
async def list_stations(
    request: Request,
    use_case: ListStationsDep,
    services: CircuitServicesDep,
    step: Optional[CircuitStep] = Query(None, description="Only stations of this step"),
    active_only: bool = Query(False, description="Skip deactivated stations"),
):
    stations = await use_case.execute(step=step, active_only=active_only)
    capacity_steps = services.policy.double_capacity_steps
    return ok(request, data=[StationSchema.from_domain(s, capacity_steps) for s in stations])


@router.post(
    "",
    response_model=ApiResponse[StationSchema],
    status_code=status.HTTP_201_CREATED,
    summary="Create a station",
    responses={409: {"model": ErrorResponse, "description": "Station number taken"}},
)
async def create_station(
    request: Request,
    body: CreateStationRequest,
    use_case: CreateStationDep,
    services: CircuitServicesDep,
):
    station = await use_case.execute(body.step, body.station_number, body.name)
    return ok(
        request,
        data=StationSchema.from_domain(station, services.policy.double_capacity_steps),
        message="Created",
    )


@router.put(
    "/{station_id}/specialty",
    response_model=ApiResponse[StationSchema],
    summary="Bind a specialist station to a specialty",
    responses=COMMAND_ERRORS,
)
async def set_station_specialty(
    request: Request,
    station_id: str,
    body: SetSpecialtyRequest,
    use_case: SetStationSpecialtyDep,
    services: CircuitServicesDep,
):
    station = await use_case.execute(station_id, body.specialty)
    return ok(request, data=StationSchema.from_domain(station, services.policy.double_capacity_steps))


@router.put(
    "/{station_id}/active",
    response_model=ApiResponse[StationSchema],
    summary="Activate or deactivate a station",
    responses=COMMAND_ERRORS,
)
async def set_station_active(
    request: Request,
    station_id: str,
    body: SetActiveRequest,
    use_case: SetStationActiveDep,
    services: CircuitServicesDep,
):
    station = await use_case.execute(station_id, body.is_active)
    return ok(request, data=StationSchema.from_domain(station, services.policy.double_capacity_steps))


@router.post(
    "/{station_id}/call-next",
    response_model=ApiResponse[CallResultSchema],
    summary="Call the next patient to this station",
    responses=COMMAND_ERRORS,
)
async def call_next(
    request: Request, station_id: str, use_case: CallNextDep, services: CircuitServicesDep
):
    """
    Pick the next waiting patient for the station's step and announce the call.

    Priority patients are interleaved with the regular queue; a station may
    call at most its capacity of patients at once.
    """
    result = await use_case.execute(station_id)
    return ok(
        request,
        data=CallResultSchema.from_dto(result, services.policy.double_capacity_steps),
        message="Called",
    )


@router.post(
    "/{station_id}/start",
    response_model=ApiResponse[ServiceResultSchema],
    summary="Start serving a called patient",
    responses=COMMAND_ERRORS,
)
async def start_service(
    request: Request,
    station_id: str,
    use_case: StartServiceDep,
    services: CircuitServicesDep,
    body: Optional[StationCommandRequest] = None,
):
    result = await use_case.execute(station_id, body.patient_id if body else None)
    return ok(request, data=ServiceResultSchema.from_dto(result, services.policy.double_capacity_steps))


@router.post(
    "/{station_id}/finish",
    response_model=ApiResponse[ServiceResultSchema],
    summary="Finish the service in progress",
    responses=COMMAND_ERRORS,
)
async def finish_service(
    request: Request,
    station_id: str,
    use_case: FinishServiceDep,
    services: CircuitServicesDep,
    body: Optional[FinishServiceRequest] = None,
):
    """
    Complete the step. Specialist stations report the surgical indication;
    the scheduling station reports whether a surgery date was defined.
    """
    body = body or FinishServiceRequest()
    result = await use_case.execute(station_id, body.patient_id, body.to_outcome())
    return ok(request, data=ServiceResultSchema.from_dto(result, services.policy.double_capacity_steps))


@router.post(
    "/{station_id}/cancel",
    response_model=ApiResponse[ServiceResultSchema],
    summary="Send a called or in-service patient back to the queue",
    responses=COMMAND_ERRORS,
)
async def cancel_call(
    request: Request,
    station_id: str,
    use_case: CancelCallDep,
    services: CircuitServicesDep,
    body: Optional[StationCommandRequest] = None,
):
    result = await use_case.execute(station_id, body.patient_id if body else None)
    return ok(request, data=ServiceResultSchema.from_dto(result, services.policy.double_capacity_steps))
