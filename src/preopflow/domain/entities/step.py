"""PatientStep entity: one required circuit step for one patient."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, FrozenSet, Optional

from ...core.utils.datetime_utils import get_current_timestamp
from ..enums.circuit import CircuitStep, StepStatus
from ..errors import InvalidStepTransitionError
from ..value_objects.entity_id import STEP_PREFIX, generate_id

# Legal status moves; anything else is rejected
ALLOWED_TRANSITIONS: Dict[StepStatus, FrozenSet[StepStatus]] = {
    StepStatus.PENDING: frozenset({StepStatus.CALLED}),
    StepStatus.CALLED: frozenset({StepStatus.IN_PROGRESS, StepStatus.PENDING}),
    StepStatus.IN_PROGRESS: frozenset({StepStatus.COMPLETED, StepStatus.PENDING}),
    StepStatus.COMPLETED: frozenset(),
}


def can_transition(current: StepStatus, target: StepStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


@dataclass
class PatientStep:
    """Step row. Timestamps are only written by the transition methods."""

    patient_id: str
    step: CircuitStep
    step_id: str = field(default_factory=lambda: generate_id(STEP_PREFIX))
    status: StepStatus = StepStatus.PENDING
    station_number: Optional[int] = None
    called_at: Optional[datetime] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    created_at: datetime = field(default_factory=get_current_timestamp)

    def __post_init__(self) -> None:
        self.step = CircuitStep(self.step)
        self.status = StepStatus(self.status)

    @property
    def is_active(self) -> bool:
        return self.status.is_active

    @property
    def is_completed(self) -> bool:
        return self.status == StepStatus.COMPLETED

    def _move(self, target: StepStatus) -> None:
        if not can_transition(self.status, target):
            raise InvalidStepTransitionError(self.step_id, self.status.value, target.value)
        self.status = target

    def call(self, station_number: int, now: datetime) -> None:
        self._move(StepStatus.CALLED)
        self.called_at = now
        self.station_number = station_number

    def start(self, now: datetime) -> None:
        self._move(StepStatus.IN_PROGRESS)
        self.started_at = now

    def complete(self, now: datetime) -> None:
        self._move(StepStatus.COMPLETED)
        self.completed_at = now

    def reset(self) -> None:
        """Back to the queue after a cancel or expiry."""
        self._move(StepStatus.PENDING)
        self.called_at = None
        self.started_at = None
        self.station_number = None

    def is_call_expired(self, now: datetime, timeout_seconds: int) -> bool:
        if self.status != StepStatus.CALLED or self.called_at is None:
            return False
        return (now - self.called_at).total_seconds() > timeout_seconds

    def duration_minutes(self) -> Optional[int]:
        """Whole minutes of service, or None when timestamps are missing."""
        if self.started_at is None or self.completed_at is None:
            return None
        return int((self.completed_at - self.started_at).total_seconds() / 60)
