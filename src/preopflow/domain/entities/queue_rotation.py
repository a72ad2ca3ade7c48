"""Persisted priority rotation counter, one row per step queue."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ...core.utils.datetime_utils import get_current_timestamp
from ..enums.circuit import CircuitStep, MedicalSpecialty


def queue_key_for(step: CircuitStep, specialty: Optional[MedicalSpecialty] = None) -> str:
    """`<step>` or `<step>:<specialty>` for specialist sub-queues."""
    step = CircuitStep(step)
    if specialty is not None:
        return f"{step.value}:{MedicalSpecialty(specialty).value}"
    return step.value


@dataclass
class QueueRotation:
    queue_key: str
    consecutive_priority_calls: int = 0
    updated_at: datetime = field(default_factory=get_current_timestamp)

    def record_priority_call(self, now: datetime) -> None:
        self.consecutive_priority_calls += 1
        self.updated_at = now

    def reset(self, now: datetime) -> None:
        self.consecutive_priority_calls = 0
        self.updated_at = now

    def burst_exhausted(self, limit: int) -> bool:
        return self.consecutive_priority_calls >= limit
