"""Tunable circuit rules shared by the scheduler, call sessions and reports."""

from dataclasses import dataclass
from typing import FrozenSet

from ...domain.catalog import DEFAULT_DOUBLE_CAPACITY_STEPS
from ...domain.enums.circuit import CircuitStep


@dataclass(frozen=True)
class CircuitPolicy:
    call_timeout_seconds: int = 180
    priority_burst_limit: int = 3
    double_capacity_steps: FrozenSet[CircuitStep] = DEFAULT_DOUBLE_CAPACITY_STEPS
    announcement_limit: int = 5
    bottleneck_threshold_minutes: int = 30
    default_pending_scheduling_reason: str = "Data da cirurgia não definida"

    @classmethod
    def from_settings(cls, circuit_settings) -> "CircuitPolicy":
        return cls(
            call_timeout_seconds=circuit_settings.call_timeout_seconds,
            priority_burst_limit=circuit_settings.priority_burst_limit,
            double_capacity_steps=frozenset(
                CircuitStep(step) for step in circuit_settings.double_capacity_steps
            ),
            announcement_limit=circuit_settings.announcement_limit,
            bottleneck_threshold_minutes=circuit_settings.bottleneck_threshold_minutes,
            default_pending_scheduling_reason=circuit_settings.default_pending_scheduling_reason,
        )
