"""
Domain events raised by circuit commands.

Events are collected by the unit of work and published only after a
successful commit.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional
from uuid import uuid4

from ...core.utils.datetime_utils import get_current_timestamp


@dataclass(frozen=True)
class DomainEvent:
    """Base class for immutable records of something that happened."""

    @property
    def event_type(self) -> str:
        return self.__class__.__name__

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"event_type": self.event_type}
        for key, value in self.__dict__.items():
            if isinstance(value, datetime):
                result[key] = value.isoformat()
            elif hasattr(value, "value"):
                result[key] = value.value
            else:
                result[key] = value
        return result


@dataclass(frozen=True)
class AnnouncementCreated(DomainEvent):
    announcement_id: str
    patient_id: str
    patient_name: str
    step: str
    station_number: int
    station_name: str
    event_id: str = field(default_factory=lambda: uuid4().hex)
    occurred_at: datetime = field(default_factory=get_current_timestamp)


@dataclass(frozen=True)
class StepTransitioned(DomainEvent):
    patient_id: str
    step_id: str
    step: str
    from_status: str
    to_status: str
    station_number: Optional[int] = None
    event_id: str = field(default_factory=lambda: uuid4().hex)
    occurred_at: datetime = field(default_factory=get_current_timestamp)


@dataclass(frozen=True)
class PatientCompleted(DomainEvent):
    patient_id: str
    event_id: str = field(default_factory=lambda: uuid4().hex)
    occurred_at: datetime = field(default_factory=get_current_timestamp)


@dataclass(frozen=True)
class PatientReenteredCircuit(DomainEvent):
    patient_id: str
    needs_cardio: bool
    event_id: str = field(default_factory=lambda: uuid4().hex)
    occurred_at: datetime = field(default_factory=get_current_timestamp)


@dataclass(frozen=True)
class CallExpired(DomainEvent):
    patient_id: str
    step_id: str
    step: str
    station_number: Optional[int]
    event_id: str = field(default_factory=lambda: uuid4().hex)
    occurred_at: datetime = field(default_factory=get_current_timestamp)
