"""Request and result DTOs passed between the API layer and use cases."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from ...domain.entities.announcement import CallAnnouncement
from ...domain.entities.patient import Patient
from ...domain.entities.station import Station
from ...domain.entities.step import PatientStep
from ...domain.enums.circuit import (
    CircuitStep,
    DischargeOutcome,
    FlowType,
    MedicalSpecialty,
)


@dataclass
class RegisterPatientRequest:
    """Request DTO for patient registration."""

    name: str
    specialty: MedicalSpecialty
    flow_type: FlowType
    registration_number: Optional[str] = None
    needs_cardio: bool = False
    needs_image_exam: bool = False
    is_priority: bool = False


@dataclass
class FinishOutcome:
    """What the station reports when it finishes a service.

    ``surgery_indicated``/``needs_cardio``/``discharge_outcome`` apply to
    specialist consultations, ``surgery_date_defined`` to scheduling.
    """

    surgery_indicated: bool = False
    needs_cardio: bool = False
    discharge_outcome: Optional[DischargeOutcome] = None
    surgery_date_defined: Optional[bool] = None


@dataclass
class PatientWithSteps:
    patient: Patient
    steps: List[PatientStep] = field(default_factory=list)


@dataclass
class CallResult:
    """Outcome of a successful call-next."""

    patient: Patient
    step: PatientStep
    station: Station
    announcement: CallAnnouncement
    used_priority: bool


@dataclass
class ServiceResult:
    """Outcome of start/finish/cancel on a station."""

    patient: Patient
    step: PatientStep
    station: Station
    patient_completed: bool = False
    reentered_circuit: bool = False


@dataclass
class StepQueueStats:
    step: CircuitStep
    label: str
    pending: int = 0
    in_service: int = 0
    completed: int = 0


@dataclass
class StepReport:
    step: CircuitStep
    label: str
    total: int
    avg_time_minutes: int
    min_time_minutes: int
    max_time_minutes: int
    is_bottleneck: bool


@dataclass
class SpecialtyReport:
    specialty: MedicalSpecialty
    label: str
    consultations: int
    surgery_indications: int
    conversion_rate: float


@dataclass
class FlowTypeReport:
    flow_type: FlowType
    label: str
    registered: int
    completed: int


@dataclass
class DayReport:
    start: datetime
    end: datetime
    total_patients: int
    completed_patients: int
    step_reports: List[StepReport] = field(default_factory=list)
    specialty_reports: List[SpecialtyReport] = field(default_factory=list)
    flow_type_reports: List[FlowTypeReport] = field(default_factory=list)
    pending_scheduling: List[Patient] = field(default_factory=list)
