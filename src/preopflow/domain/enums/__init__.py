"""
Circuit enums package.
"""

from .circuit import (
    CircuitStep,
    DischargeOutcome,
    ErrorCategory,
    FlowType,
    MedicalSpecialty,
    StepStatus,
)

__all__ = [
    "CircuitStep",
    "StepStatus",
    "FlowType",
    "MedicalSpecialty",
    "DischargeOutcome",
    "ErrorCategory",
]
