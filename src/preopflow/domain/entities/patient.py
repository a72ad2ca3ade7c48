"""Patient domain entity representing a patient going through the circuit."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ...core.utils.datetime_utils import get_current_timestamp
from ..enums.circuit import DischargeOutcome, FlowType, MedicalSpecialty
from ..errors import InvalidPatientDataError
from ..value_objects.entity_id import PATIENT_PREFIX, generate_id


@dataclass
class Patient:
    """Patient domain entity."""

    name: str
    specialty: MedicalSpecialty
    flow_type: FlowType
    patient_id: str = field(default_factory=lambda: generate_id(PATIENT_PREFIX))
    registration_number: Optional[str] = None
    needs_cardio: bool = False
    needs_image_exam: bool = False
    is_priority: bool = False
    is_being_served: bool = False
    is_completed: bool = False
    has_surgery_indication: bool = False
    pending_surgery_scheduling: bool = False
    scheduling_pending_at: Optional[datetime] = None
    scheduling_pending_reason: Optional[str] = None
    discharge_outcome: Optional[DischargeOutcome] = None
    completed_at: Optional[datetime] = None
    created_at: datetime = field(default_factory=get_current_timestamp)
    updated_at: datetime = field(default_factory=get_current_timestamp)

    def __post_init__(self) -> None:
        """Validate patient data."""
        self._validate_patient_data()

    def _validate_patient_data(self) -> None:
        if not self.name or not self.name.strip():
            raise InvalidPatientDataError("name", self.name, "name is required")
        self.name = self.name.strip()
        if len(self.name) > 120:
            raise InvalidPatientDataError(
                "name", self.name[:50], "name too long (max 120 characters)"
            )

        if self.registration_number is not None:
            self.registration_number = self.registration_number.strip() or None

        try:
            self.specialty = MedicalSpecialty(self.specialty)
        except ValueError:
            raise InvalidPatientDataError("specialty", self.specialty, "unknown specialty")

        try:
            self.flow_type = FlowType(self.flow_type)
        except ValueError:
            raise InvalidPatientDataError("flow_type", self.flow_type, "unknown flow type")

    def _touch(self, now: Optional[datetime]) -> None:
        self.updated_at = now or get_current_timestamp()

    def mark_being_served(self, value: bool, now: Optional[datetime] = None) -> None:
        self.is_being_served = value
        self._touch(now)

    def mark_completed(self, now: Optional[datetime] = None) -> None:
        """Close the patient's circuit. Caller checks that no steps remain open."""
        now = now or get_current_timestamp()
        self.is_completed = True
        self.is_being_served = False
        self.completed_at = now
        self._touch(now)

    def reenter_circuit(self, needs_cardio: bool, now: Optional[datetime] = None) -> None:
        """Reopen a patient after a surgical indication.

        The registration flow type is kept for reporting; the caller adds the steps.
        """
        self.is_completed = False
        self.completed_at = None
        self.has_surgery_indication = True
        self.needs_cardio = self.needs_cardio or needs_cardio
        self._touch(now)

    def mark_pending_scheduling(self, reason: str, now: Optional[datetime] = None) -> None:
        now = now or get_current_timestamp()
        self.pending_surgery_scheduling = True
        self.scheduling_pending_at = now
        self.scheduling_pending_reason = reason
        self._touch(now)

    def clear_pending_scheduling(self, now: Optional[datetime] = None) -> None:
        self.pending_surgery_scheduling = False
        self.scheduling_pending_at = None
        self.scheduling_pending_reason = None
        self._touch(now)

    def record_discharge_outcome(
        self, outcome: DischargeOutcome, now: Optional[datetime] = None
    ) -> None:
        self.discharge_outcome = DischargeOutcome(outcome)
        self._touch(now)

    def is_eligible_for_call(self) -> bool:
        """Whether a station may call this patient at all."""
        return not self.is_completed and not self.is_being_served
