"""
Domain events package.
"""

from .circuit_events import (
    AnnouncementCreated,
    CallExpired,
    DomainEvent,
    PatientCompleted,
    PatientReenteredCircuit,
    StepTransitioned,
)

__all__ = [
    "DomainEvent",
    "AnnouncementCreated",
    "StepTransitioned",
    "PatientCompleted",
    "PatientReenteredCircuit",
    "CallExpired",
]
