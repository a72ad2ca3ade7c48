"""
Identifier helpers for circuit aggregates.
Format: {PREFIX}-{32 hex chars}
"""

import re
import uuid

_ID_PATTERN = re.compile(r"^[A-Z]{2,4}-[0-9a-f]{32}$")

PATIENT_PREFIX = "PAT"
STEP_PREFIX = "STEP"
STATION_PREFIX = "STN"
ANNOUNCEMENT_PREFIX = "ANN"


def generate_id(prefix: str) -> str:
    """Generate a new opaque identifier with a readable prefix."""
    if not prefix or not prefix.isalpha():
        raise ValueError("ID prefix must be alphabetic")
    return f"{prefix.upper()}-{uuid.uuid4().hex}"


def is_valid_id(value: str) -> bool:
    return bool(value) and bool(_ID_PATTERN.match(value))
