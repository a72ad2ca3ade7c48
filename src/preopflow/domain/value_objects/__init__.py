"""
Value objects package for domain layer.
"""

from .entity_id import (
    ANNOUNCEMENT_PREFIX,
    PATIENT_PREFIX,
    STATION_PREFIX,
    STEP_PREFIX,
    generate_id,
    is_valid_id,
)

__all__ = [
    "generate_id",
    "is_valid_id",
    "PATIENT_PREFIX",
    "STEP_PREFIX",
    "STATION_PREFIX",
    "ANNOUNCEMENT_PREFIX",
]
