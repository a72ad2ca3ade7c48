"""
Domain entities package.
"""

from .announcement import CallAnnouncement
from .patient import Patient
from .queue_rotation import QueueRotation, queue_key_for
from .station import Station
from .step import ALLOWED_TRANSITIONS, PatientStep, can_transition

__all__ = [
    "Patient",
    "PatientStep",
    "Station",
    "CallAnnouncement",
    "QueueRotation",
    "queue_key_for",
    "ALLOWED_TRANSITIONS",
    "can_transition",
]
