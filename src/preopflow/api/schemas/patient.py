"""
Pydantic schemas for patient-related API endpoints.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from ...application.dto.circuit_dto import PatientWithSteps
from ...domain.catalog import FLOW_TYPE_LABELS, SPECIALTY_LABELS
from ...domain.entities.patient import Patient
from ...domain.enums.circuit import (
    CircuitStep,
    DischargeOutcome,
    FlowType,
    MedicalSpecialty,
)
from .circuit import StepSchema


class RegisterPatientRequest(BaseModel):
    """Request schema for patient registration."""

    name: str = Field(..., min_length=1, max_length=120, description="Patient display name")
    registration_number: Optional[str] = Field(
        None, max_length=40, description="External registration number"
    )
    specialty: MedicalSpecialty = Field(..., description="Referral specialty")
    flow_type: FlowType = Field(..., description="How the patient enters the circuit")
    needs_cardio: bool = Field(False, description="Cardiology evaluation required")
    needs_image_exam: bool = Field(False, description="Imaging exam required")
    is_priority: bool = Field(False, description="Legal priority (elderly, pregnant, ...)")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Name cannot be empty")
        return v.strip()


class AddStepRequest(BaseModel):
    step: CircuitStep = Field(..., description="Step to add")


class PendingSchedulingRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=200, description="Why scheduling is pending")


class ReenterCircuitRequest(BaseModel):
    needs_cardio: bool = Field(False, description="Add the cardiology step")


class PatientSchema(BaseModel):
    patient_id: str
    name: str
    registration_number: Optional[str] = None
    specialty: MedicalSpecialty
    specialty_label: str
    flow_type: FlowType
    flow_type_label: str
    needs_cardio: bool
    needs_image_exam: bool
    is_priority: bool
    is_being_served: bool
    is_completed: bool
    has_surgery_indication: bool
    pending_surgery_scheduling: bool
    scheduling_pending_at: Optional[datetime] = None
    scheduling_pending_reason: Optional[str] = None
    discharge_outcome: Optional[DischargeOutcome] = None
    completed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, patient: Patient) -> "PatientSchema":
        return cls(
            patient_id=patient.patient_id,
            name=patient.name,
            registration_number=patient.registration_number,
            specialty=patient.specialty,
            specialty_label=SPECIALTY_LABELS[patient.specialty],
            flow_type=patient.flow_type,
            flow_type_label=FLOW_TYPE_LABELS[patient.flow_type],
            needs_cardio=patient.needs_cardio,
            needs_image_exam=patient.needs_image_exam,
            is_priority=patient.is_priority,
            is_being_served=patient.is_being_served,
            is_completed=patient.is_completed,
            has_surgery_indication=patient.has_surgery_indication,
            pending_surgery_scheduling=patient.pending_surgery_scheduling,
            scheduling_pending_at=patient.scheduling_pending_at,
            scheduling_pending_reason=patient.scheduling_pending_reason,
            discharge_outcome=patient.discharge_outcome,
            completed_at=patient.completed_at,
            created_at=patient.created_at,
            updated_at=patient.updated_at,
        )


class PatientWithStepsSchema(PatientSchema):
    steps: List[StepSchema] = Field(default_factory=list)

    @classmethod
    def from_result(cls, result: PatientWithSteps) -> "PatientWithStepsSchema":
        base = PatientSchema.from_domain(result.patient).model_dump()
        return cls(**base, steps=[StepSchema.from_domain(s) for s in result.steps])
