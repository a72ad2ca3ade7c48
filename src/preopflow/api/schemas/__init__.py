"""
API schemas package.
"""

from .common import ApiResponse, ErrorResponse
from .circuit import (
    AnnouncementSchema,
    DayReportSchema,
    QueueStatsSchema,
    StepSchema,
)
from .patient import (
    AddStepRequest,
    PatientSchema,
    PatientWithStepsSchema,
    PendingSchedulingRequest,
    ReenterCircuitRequest,
    RegisterPatientRequest,
)
from .station import (
    CallResultSchema,
    CreateStationRequest,
    FinishServiceRequest,
    ServiceResultSchema,
    SetActiveRequest,
    SetSpecialtyRequest,
    StationCommandRequest,
    StationSchema,
)

__all__ = [
    "ApiResponse",
    "ErrorResponse",
    "AnnouncementSchema",
    "DayReportSchema",
    "QueueStatsSchema",
    "StepSchema",
    "AddStepRequest",
    "PatientSchema",
    "PatientWithStepsSchema",
    "PendingSchedulingRequest",
    "ReenterCircuitRequest",
    "RegisterPatientRequest",
    "CallResultSchema",
    "CreateStationRequest",
    "FinishServiceRequest",
    "ServiceResultSchema",
    "SetActiveRequest",
    "SetSpecialtyRequest",
    "StationCommandRequest",
    "StationSchema",
]
