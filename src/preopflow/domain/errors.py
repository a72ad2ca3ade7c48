"""
Domain-specific error types for business rule violations.

Every error carries an ``ErrorCategory`` so callers can tell validation,
precondition, conflict and fatal failures apart without parsing messages.
"""

from typing import Any, Dict, Optional

from .enums.circuit import ErrorCategory


class DomainError(Exception):
    """Base domain error."""

    category: ErrorCategory = ErrorCategory.PRECONDITION

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(DomainError):
    """Bad input shape, rejected before touching state."""

    category = ErrorCategory.VALIDATION


class NotFoundError(DomainError):
    """Referenced aggregate does not exist."""

    category = ErrorCategory.NOT_FOUND


class PreconditionError(DomainError):
    """Operation not allowed in the current state; state is unchanged."""

    category = ErrorCategory.PRECONDITION


class ConflictError(DomainError):
    """Already exists or lost a race; safe to retry after re-reading state."""

    category = ErrorCategory.CONFLICT


class FatalError(DomainError):
    """Should not happen in correct operation."""

    category = ErrorCategory.FATAL


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


class InvalidPatientDataError(ValidationError):
    """Invalid patient data."""

    def __init__(self, field: str, value: Any, reason: str = "") -> None:
        message = f"Invalid patient data. Field: {field}, Value: {value}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(
            message, "INVALID_PATIENT_DATA", {"field": field, "value": value}
        )


class InvalidStationConfigurationError(ValidationError):
    """Invalid station data or operation on the wrong kind of station."""

    def __init__(self, station_id: str, reason: str) -> None:
        message = f"Invalid station configuration for '{station_id}': {reason}"
        super().__init__(
            message, "INVALID_STATION_CONFIGURATION", {"station_id": station_id}
        )


# ---------------------------------------------------------------------------
# Not found
# ---------------------------------------------------------------------------


class PatientNotFoundError(NotFoundError):
    """Patient not found."""

    def __init__(self, patient_id: str) -> None:
        message = f"Patient with ID '{patient_id}' not found"
        super().__init__(message, "PATIENT_NOT_FOUND", {"patient_id": patient_id})


class StationNotFoundError(NotFoundError):
    """Station not found."""

    def __init__(self, station_id: str) -> None:
        message = f"Station with ID '{station_id}' not found"
        super().__init__(message, "STATION_NOT_FOUND", {"station_id": station_id})


class StepNotFoundError(NotFoundError):
    """No step row matches the patient and step."""

    def __init__(self, patient_id: str, step: str) -> None:
        message = f"Step '{step}' not found for patient '{patient_id}'"
        super().__init__(
            message, "STEP_NOT_FOUND", {"patient_id": patient_id, "step": step}
        )


# ---------------------------------------------------------------------------
# Preconditions
# ---------------------------------------------------------------------------


class StationCapacityExceededError(PreconditionError):
    """Station already serves as many patients as it can."""

    def __init__(self, station_id: str, current_count: int, capacity: int) -> None:
        message = (
            f"Station already has {current_count} patient(s) in service "
            f"(capacity {capacity})"
        )
        super().__init__(
            message,
            "STATION_CAPACITY_EXCEEDED",
            {
                "station_id": station_id,
                "current_count": current_count,
                "capacity": capacity,
            },
        )


class NoCandidatesError(PreconditionError):
    """Nobody is waiting for this station."""

    def __init__(self, station_id: str, step: str) -> None:
        message = f"No patients waiting for step '{step}'"
        super().__init__(
            message, "NO_CANDIDATES", {"station_id": station_id, "step": step}
        )


class CardiologyPrerequisiteNotMetError(PreconditionError):
    """Patients are waiting but none has a completed lab/ECG step."""

    def __init__(self, station_id: str, waiting: int) -> None:
        message = (
            f"{waiting} patient(s) waiting for cardiology, "
            "none with completed lab/ECG exams"
        )
        super().__init__(
            message,
            "ECG_PREREQUISITE_NOT_MET",
            {"station_id": station_id, "waiting": waiting},
        )


class SpecialtyNotSelectedError(PreconditionError):
    """Specialist station has no bound specialty."""

    def __init__(self, station_id: str) -> None:
        message = "No specialty selected for this specialist station"
        super().__init__(
            message, "SPECIALTY_NOT_SELECTED", {"station_id": station_id}
        )


class InvalidStepTransitionError(PreconditionError):
    """Step status change not allowed by the transition table."""

    def __init__(self, step_id: str, current: str, target: str) -> None:
        message = f"Cannot move step '{step_id}' from '{current}' to '{target}'"
        super().__init__(
            message,
            "INVALID_STEP_TRANSITION",
            {"step_id": step_id, "current": current, "target": target},
        )


class NoPatientCalledError(PreconditionError):
    """Station has no patient in called state."""

    def __init__(self, station_id: str) -> None:
        message = "No patient called at this station"
        super().__init__(message, "NO_PATIENT_CALLED", {"station_id": station_id})


class NoPatientInServiceError(PreconditionError):
    """Station has no patient in progress."""

    def __init__(self, station_id: str) -> None:
        message = "No patient in service at this station"
        super().__init__(
            message, "NO_PATIENT_IN_SERVICE", {"station_id": station_id}
        )


class PatientAlreadyCompletedError(PreconditionError):
    """Completed patients only take new steps through circuit re-entry."""

    def __init__(self, patient_id: str) -> None:
        message = f"Patient '{patient_id}' already completed the circuit"
        super().__init__(
            message, "PATIENT_ALREADY_COMPLETED", {"patient_id": patient_id}
        )


class StationBusyError(PreconditionError):
    """Station still has active calls."""

    def __init__(self, station_id: str, active_calls: int) -> None:
        message = f"Station has {active_calls} active call(s)"
        super().__init__(
            message,
            "STATION_BUSY",
            {"station_id": station_id, "active_calls": active_calls},
        )


class StationInactiveError(PreconditionError):
    """Station is switched off."""

    def __init__(self, station_id: str) -> None:
        message = f"Station '{station_id}' is not active"
        super().__init__(message, "STATION_INACTIVE", {"station_id": station_id})


# ---------------------------------------------------------------------------
# Conflicts
# ---------------------------------------------------------------------------


class DuplicateStepError(ConflictError):
    """Patient already has a non-completed row for this step."""

    error_code_value = "DUPLICATE_STEP"

    def __init__(self, patient_id: str, step: str) -> None:
        message = f"Step '{step}' already exists for patient '{patient_id}'"
        super().__init__(
            message,
            self.error_code_value,
            {"patient_id": patient_id, "step": step},
        )


class StepAlreadyAddedError(DuplicateStepError):
    """Ad-hoc cardiology/imaging step was already added."""

    error_code_value = "STEP_ALREADY_ADDED"


class DuplicateStationError(ConflictError):
    """A station with this step and number already exists."""

    def __init__(self, step: str, station_number: int) -> None:
        message = f"Station {station_number} for step '{step}' already exists"
        super().__init__(
            message,
            "DUPLICATE_STATION",
            {"step": step, "station_number": station_number},
        )


class ConcurrentUpdateError(ConflictError):
    """Another transaction touched the same rows first."""

    def __init__(self, resource: str) -> None:
        message = f"Concurrent update lost the race on {resource}"
        super().__init__(message, "CONCURRENT_UPDATE", {"resource": resource})


# ---------------------------------------------------------------------------
# Fatal
# ---------------------------------------------------------------------------


class UnknownFlowTypeError(FatalError):
    """Flow type outside the catalog."""

    def __init__(self, flow_type: Any) -> None:
        message = f"Unknown flow type: {flow_type}"
        super().__init__(message, "UNKNOWN_FLOW_TYPE", {"flow_type": str(flow_type)})


class DataIntegrityError(FatalError):
    """Stored data violates an invariant (e.g. step with no owning patient)."""

    def __init__(self, reason: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(f"Data integrity violation: {reason}", "DATA_INTEGRITY", details)
