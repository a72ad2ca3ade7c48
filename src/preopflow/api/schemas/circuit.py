"""
Schemas for steps, announcements, queue stats and reports.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from ...application.dto.circuit_dto import DayReport, StepQueueStats
from ...domain.catalog import STATUS_LABELS, STEP_LABELS
from ...domain.entities.announcement import CallAnnouncement
from ...domain.entities.step import PatientStep
from ...domain.enums.circuit import CircuitStep, FlowType, MedicalSpecialty, StepStatus


class StepSchema(BaseModel):
    step_id: str
    patient_id: str
    step: CircuitStep
    step_label: str
    status: StepStatus
    status_label: str
    station_number: Optional[int] = None
    called_at: Optional[datetime] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    created_at: datetime

    @classmethod
    def from_domain(cls, step: PatientStep) -> "StepSchema":
        return cls(
            step_id=step.step_id,
            patient_id=step.patient_id,
            step=step.step,
            step_label=STEP_LABELS[step.step],
            status=step.status,
            status_label=STATUS_LABELS[step.status],
            station_number=step.station_number,
            called_at=step.called_at,
            started_at=step.started_at,
            completed_at=step.completed_at,
            created_at=step.created_at,
        )


class AnnouncementSchema(BaseModel):
    announcement_id: str
    patient_id: str
    patient_name: str
    step: CircuitStep
    step_label: str
    station_number: int
    station_name: str
    called_at: datetime
    is_active: bool

    @classmethod
    def from_domain(cls, announcement: CallAnnouncement) -> "AnnouncementSchema":
        return cls(
            announcement_id=announcement.announcement_id,
            patient_id=announcement.patient_id,
            patient_name=announcement.patient_name,
            step=announcement.step,
            step_label=STEP_LABELS[announcement.step],
            station_number=announcement.station_number,
            station_name=announcement.station_name,
            called_at=announcement.called_at,
            is_active=announcement.is_active,
        )


class QueueStatsSchema(BaseModel):
    step: CircuitStep
    label: str
    pending: int
    in_service: int
    completed: int

    @classmethod
    def from_dto(cls, stats: StepQueueStats) -> "QueueStatsSchema":
        return cls(
            step=stats.step,
            label=stats.label,
            pending=stats.pending,
            in_service=stats.in_service,
            completed=stats.completed,
        )


class StepReportSchema(BaseModel):
    step: CircuitStep
    label: str
    total: int
    avg_time_minutes: int
    min_time_minutes: int
    max_time_minutes: int
    is_bottleneck: bool


class SpecialtyReportSchema(BaseModel):
    specialty: MedicalSpecialty
    label: str
    consultations: int
    surgery_indications: int
    conversion_rate: float


class FlowTypeReportSchema(BaseModel):
    flow_type: FlowType
    label: str
    registered: int
    completed: int


class PendingSchedulingSchema(BaseModel):
    patient_id: str
    name: str
    specialty: MedicalSpecialty
    scheduling_pending_at: Optional[datetime] = None
    scheduling_pending_reason: Optional[str] = None


class DayReportSchema(BaseModel):
    start: datetime
    end: datetime
    total_patients: int
    completed_patients: int
    step_reports: List[StepReportSchema]
    specialty_reports: List[SpecialtyReportSchema]
    flow_type_reports: List[FlowTypeReportSchema]
    pending_scheduling: List[PendingSchedulingSchema]

    @classmethod
    def from_dto(cls, report: DayReport) -> "DayReportSchema":
        return cls(
            start=report.start,
            end=report.end,
            total_patients=report.total_patients,
            completed_patients=report.completed_patients,
            step_reports=[StepReportSchema(**vars(r)) for r in report.step_reports],
            specialty_reports=[SpecialtyReportSchema(**vars(r)) for r in report.specialty_reports],
            flow_type_reports=[FlowTypeReportSchema(**vars(r)) for r in report.flow_type_reports],
            pending_scheduling=[
                PendingSchedulingSchema(
                    patient_id=p.patient_id,
                    name=p.name,
                    specialty=p.specialty,
                    scheduling_pending_at=p.scheduling_pending_at,
                    scheduling_pending_reason=p.scheduling_pending_reason,
                )
                for p in report.pending_scheduling
            ],
        )
