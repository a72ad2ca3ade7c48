"""
Schemas for station administration and station commands.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from ...application.dto.circuit_dto import CallResult, FinishOutcome, ServiceResult
from ...domain.catalog import DEFAULT_DOUBLE_CAPACITY_STEPS, STEP_LABELS, station_capacity
from ...domain.entities.station import Station
from ...domain.enums.circuit import CircuitStep, DischargeOutcome, MedicalSpecialty
from .circuit import AnnouncementSchema, StepSchema
from .patient import PatientSchema


class CreateStationRequest(BaseModel):
    step: CircuitStep
    station_number: int = Field(..., ge=1, description="Number shown on the display")
    name: str = Field(..., min_length=1, max_length=80)


class SetSpecialtyRequest(BaseModel):
    specialty: Optional[MedicalSpecialty] = Field(
        None, description="Specialty served; null unbinds the station"
    )


class SetActiveRequest(BaseModel):
    is_active: bool


class StationCommandRequest(BaseModel):
    patient_id: Optional[str] = Field(
        None, description="Target patient when the station serves more than one"
    )


class FinishServiceRequest(StationCommandRequest):
    surgery_indicated: bool = Field(False, description="Specialist: surgery indicated")
    needs_cardio: bool = Field(False, description="Specialist: cardiology required for surgery")
    discharge_outcome: Optional[DischargeOutcome] = Field(
        None, description="Specialist: outcome when no surgery is indicated"
    )
    surgery_date_defined: Optional[bool] = Field(
        None, description="Scheduling: whether a surgery date was defined"
    )

    def to_outcome(self) -> FinishOutcome:
        return FinishOutcome(
            surgery_indicated=self.surgery_indicated,
            needs_cardio=self.needs_cardio,
            discharge_outcome=self.discharge_outcome,
            surgery_date_defined=self.surgery_date_defined,
        )


class StationSchema(BaseModel):
    station_id: str
    step: CircuitStep
    step_label: str
    station_number: int
    name: str
    is_active: bool
    capacity: int
    current_patient_id: Optional[str] = None
    current_specialty: Optional[MedicalSpecialty] = None
    created_at: datetime

    @classmethod
    def from_domain(
        cls, station: Station, double_capacity_steps=DEFAULT_DOUBLE_CAPACITY_STEPS
    ) -> "StationSchema":
        return cls(
            station_id=station.station_id,
            step=station.step,
            step_label=STEP_LABELS[station.step],
            station_number=station.station_number,
            name=station.name,
            is_active=station.is_active,
            capacity=station_capacity(station.step, double_capacity_steps),
            current_patient_id=station.current_patient_id,
            current_specialty=station.current_specialty,
            created_at=station.created_at,
        )


class CallResultSchema(BaseModel):
    patient: PatientSchema
    step: StepSchema
    station: StationSchema
    announcement: AnnouncementSchema
    used_priority: bool

    @classmethod
    def from_dto(cls, result: CallResult, double_capacity_steps=DEFAULT_DOUBLE_CAPACITY_STEPS) -> "CallResultSchema":
        return cls(
            patient=PatientSchema.from_domain(result.patient),
            step=StepSchema.from_domain(result.step),
            station=StationSchema.from_domain(result.station, double_capacity_steps),
            announcement=AnnouncementSchema.from_domain(result.announcement),
            used_priority=result.used_priority,
        )


class ServiceResultSchema(BaseModel):
    patient: PatientSchema
    step: StepSchema
    station: StationSchema
    patient_completed: bool
    reentered_circuit: bool

    @classmethod
    def from_dto(cls, result: ServiceResult, double_capacity_steps=DEFAULT_DOUBLE_CAPACITY_STEPS) -> "ServiceResultSchema":
        return cls(
            patient=PatientSchema.from_domain(result.patient),
            step=StepSchema.from_domain(result.step),
            station=StationSchema.from_domain(result.station, double_capacity_steps),
            patient_completed=result.patient_completed,
            reentered_circuit=result.reentered_circuit,
        )
