"""
MongoDB Beanie models used by the persistence layer.
"""

from datetime import datetime
from typing import Optional

from beanie import Document
from pydantic import Field


class PatientMongo(Document):
    """MongoDB model for Patient entity."""

    patient_id: str = Field(..., description="Patient ID", unique=True)
    name: str = Field(..., description="Display name")
    registration_number: Optional[str] = Field(None, description="External registration number")
    specialty: str = Field(..., description="MedicalSpecialty value")
    flow_type: str = Field(..., description="FlowType value")
    needs_cardio: bool = False
    needs_image_exam: bool = False
    is_priority: bool = False
    is_being_served: bool = False
    is_completed: bool = False
    has_surgery_indication: bool = False
    pending_surgery_scheduling: bool = False
    scheduling_pending_at: Optional[datetime] = None
    scheduling_pending_reason: Optional[str] = None
    discharge_outcome: Optional[str] = None
    completed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    class Settings:
        name = "patients"
        indexes = [
            "patient_id",
            "created_at",
            "pending_surgery_scheduling",
        ]


class PatientStepMongo(Document):
    """MongoDB model for one patient step row."""

    step_id: str = Field(..., description="Step row ID", unique=True)
    patient_id: str = Field(..., description="Patient ID reference")
    step: str = Field(..., description="CircuitStep value")
    status: str = Field(default="pending", description="pending, called, in_progress, completed")
    station_number: Optional[int] = None
    called_at: Optional[datetime] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    created_at: datetime

    class Settings:
        name = "patient_steps"
        indexes = [
            "step_id",
            [("patient_id", 1), ("step", 1), ("status", 1)],
            [("step", 1), ("status", 1), ("station_number", 1)],
            "created_at",
        ]


class StationMongo(Document):
    """MongoDB model for a station. ``revision`` is bumped by every call-next claim."""

    station_id: str = Field(..., description="Station ID", unique=True)
    step: str = Field(..., description="CircuitStep value")
    station_number: int
    name: str
    is_active: bool = True
    current_patient_id: Optional[str] = None
    current_specialty: Optional[str] = None
    revision: int = 0
    created_at: datetime

    class Settings:
        name = "stations"
        indexes = [
            "station_id",
            [("step", 1), ("station_number", 1)],
            "current_patient_id",
        ]


class CallAnnouncementMongo(Document):
    """MongoDB model for waiting-room call announcements."""

    announcement_id: str = Field(..., description="Announcement ID", unique=True)
    patient_id: str
    patient_name: str
    step: str
    station_number: int
    station_name: str
    called_at: datetime
    is_active: bool = True

    class Settings:
        name = "call_announcements"
        indexes = [
            "announcement_id",
            [("is_active", 1), ("called_at", -1)],
            [("patient_id", 1), ("step", 1)],
        ]


class QueueRotationMongo(Document):
    """MongoDB model for the per-queue priority rotation counter."""

    queue_key: str = Field(..., description="<step> or <step>:<specialty>", unique=True)
    consecutive_priority_calls: int = 0
    updated_at: datetime

    class Settings:
        name = "queue_rotations"
        indexes = ["queue_key"]


DOCUMENT_MODELS = [
    PatientMongo,
    PatientStepMongo,
    StationMongo,
    CallAnnouncementMongo,
    QueueRotationMongo,
]
