"""FastAPI dependency providers.

Use cases come from the container attached to ``app.state`` at startup.
"""

from typing import Annotated

from fastapi import Depends, Request

from ..application.services.circuit import CircuitServices
from ..application.use_cases.add_step import AddStepUseCase
from ..application.use_cases.call_next_patient import CallNextPatientUseCase
from ..application.use_cases.manage_patient import (
    MarkPendingSchedulingUseCase,
    ReenterCircuitUseCase,
    RemovePatientUseCase,
)
from ..application.use_cases.manage_station import (
    CreateStationUseCase,
    SetStationActiveUseCase,
    SetStationSpecialtyUseCase,
)
from ..application.use_cases.queries import (
    GenerateDayReportUseCase,
    GetQueueStatsUseCase,
    ListActiveAnnouncementsUseCase,
    ListPatientStepsUseCase,
    ListPatientsUseCase,
    ListStationsUseCase,
    ListStepsUseCase,
)
from ..application.use_cases.register_patient import RegisterPatientUseCase
from ..application.use_cases.station_service import (
    CancelCallUseCase,
    FinishServiceUseCase,
    StartServiceUseCase,
)
from ..core.container import Container, ServiceNames


def get_container(request: Request) -> Container:
    """Get the container built at application startup."""
    return request.app.state.container


def _provider(name: str):
    def provide(request: Request):
        return get_container(request).get(name)

    provide.__name__ = f"get_{name}"
    return provide


get_circuit_services = _provider(ServiceNames.CIRCUIT_SERVICES)
get_register_patient = _provider(ServiceNames.REGISTER_PATIENT)
get_list_patients = _provider(ServiceNames.LIST_PATIENTS)
get_list_patient_steps = _provider(ServiceNames.LIST_PATIENT_STEPS)
get_add_step = _provider(ServiceNames.ADD_STEP)
get_mark_pending_scheduling = _provider(ServiceNames.MARK_PENDING_SCHEDULING)
get_reenter_circuit = _provider(ServiceNames.REENTER_CIRCUIT)
get_remove_patient = _provider(ServiceNames.REMOVE_PATIENT)
get_call_next = _provider(ServiceNames.CALL_NEXT)
get_start_service = _provider(ServiceNames.START_SERVICE)
get_finish_service = _provider(ServiceNames.FINISH_SERVICE)
get_cancel_call = _provider(ServiceNames.CANCEL_CALL)
get_create_station = _provider(ServiceNames.CREATE_STATION)
get_set_station_specialty = _provider(ServiceNames.SET_STATION_SPECIALTY)
get_set_station_active = _provider(ServiceNames.SET_STATION_ACTIVE)
get_list_stations = _provider(ServiceNames.LIST_STATIONS)
get_list_steps = _provider(ServiceNames.LIST_STEPS)
get_queue_stats = _provider(ServiceNames.QUEUE_STATS)
get_active_announcements = _provider(ServiceNames.ACTIVE_ANNOUNCEMENTS)
get_day_report = _provider(ServiceNames.DAY_REPORT)


# Dependency annotations for FastAPI
ContainerDep = Annotated[Container, Depends(get_container)]
CircuitServicesDep = Annotated[CircuitServices, Depends(get_circuit_services)]
RegisterPatientDep = Annotated[RegisterPatientUseCase, Depends(get_register_patient)]
ListPatientsDep = Annotated[ListPatientsUseCase, Depends(get_list_patients)]
ListPatientStepsDep = Annotated[ListPatientStepsUseCase, Depends(get_list_patient_steps)]
AddStepDep = Annotated[AddStepUseCase, Depends(get_add_step)]
MarkPendingSchedulingDep = Annotated[
    MarkPendingSchedulingUseCase, Depends(get_mark_pending_scheduling)
]
ReenterCircuitDep = Annotated[ReenterCircuitUseCase, Depends(get_reenter_circuit)]
RemovePatientDep = Annotated[RemovePatientUseCase, Depends(get_remove_patient)]
CallNextDep = Annotated[CallNextPatientUseCase, Depends(get_call_next)]
StartServiceDep = Annotated[StartServiceUseCase, Depends(get_start_service)]
FinishServiceDep = Annotated[FinishServiceUseCase, Depends(get_finish_service)]
CancelCallDep = Annotated[CancelCallUseCase, Depends(get_cancel_call)]
CreateStationDep = Annotated[CreateStationUseCase, Depends(get_create_station)]
SetStationSpecialtyDep = Annotated[SetStationSpecialtyUseCase, Depends(get_set_station_specialty)]
SetStationActiveDep = Annotated[SetStationActiveUseCase, Depends(get_set_station_active)]
ListStationsDep = Annotated[ListStationsUseCase, Depends(get_list_stations)]
ListStepsDep = Annotated[ListStepsUseCase, Depends(get_list_steps)]
QueueStatsDep = Annotated[GetQueueStatsUseCase, Depends(get_queue_stats)]
ActiveAnnouncementsDep = Annotated[
    ListActiveAnnouncementsUseCase, Depends(get_active_announcements)
]
DayReportDep = Annotated[GenerateDayReportUseCase, Depends(get_day_report)]
