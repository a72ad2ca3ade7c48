"""Station entity: a physical service point for one circuit step."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ...core.utils.datetime_utils import get_current_timestamp
from ..enums.circuit import CircuitStep, MedicalSpecialty
from ..errors import InvalidStationConfigurationError
from ..value_objects.entity_id import STATION_PREFIX, generate_id


@dataclass
class Station:
    """Station with an optional bound patient and specialist specialty."""

    step: CircuitStep
    station_number: int
    name: str
    station_id: str = field(default_factory=lambda: generate_id(STATION_PREFIX))
    is_active: bool = True
    current_patient_id: Optional[str] = None
    current_specialty: Optional[MedicalSpecialty] = None
    created_at: datetime = field(default_factory=get_current_timestamp)

    def __post_init__(self) -> None:
        try:
            self.step = CircuitStep(self.step)
        except ValueError:
            raise InvalidStationConfigurationError(self.station_id, f"unknown step {self.step}")
        if not isinstance(self.station_number, int) or self.station_number < 1:
            raise InvalidStationConfigurationError(
                self.station_id, "station number must be a positive integer"
            )
        if not self.name or not self.name.strip():
            raise InvalidStationConfigurationError(self.station_id, "name is required")
        if self.current_specialty is not None:
            self.current_specialty = MedicalSpecialty(self.current_specialty)

    @property
    def is_specialist(self) -> bool:
        return self.step == CircuitStep.ESPECIALISTA

    @property
    def gates_on_cardiology(self) -> bool:
        """Cardiology calls require completed lab/ECG exams."""
        return self.step == CircuitStep.CARDIOLOGISTA or (
            self.is_specialist and self.current_specialty == MedicalSpecialty.CARDIOLOGIA
        )

    def bind(self, patient_id: str) -> None:
        """Show the most recently called patient."""
        self.current_patient_id = patient_id

    def release(self, patient_id: str, fallback_patient_id: Optional[str] = None) -> None:
        """Drop the binding for a patient leaving service.

        Capacity-2 stations fall back to the other active patient.
        """
        if self.current_patient_id == patient_id or self.current_patient_id is None:
            self.current_patient_id = fallback_patient_id

    def set_specialty(self, specialty: Optional[MedicalSpecialty]) -> None:
        if not self.is_specialist:
            raise InvalidStationConfigurationError(
                self.station_id, "specialty can only be set on specialist stations"
            )
        self.current_specialty = MedicalSpecialty(specialty) if specialty else None
