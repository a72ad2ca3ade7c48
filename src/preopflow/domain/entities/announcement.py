"""Call announcement shown on the waiting-room display."""

from dataclasses import dataclass, field
from datetime import datetime

from ..enums.circuit import CircuitStep
from ..value_objects.entity_id import ANNOUNCEMENT_PREFIX, generate_id


@dataclass
class CallAnnouncement:
    patient_id: str
    patient_name: str
    step: CircuitStep
    station_number: int
    station_name: str
    called_at: datetime
    announcement_id: str = field(default_factory=lambda: generate_id(ANNOUNCEMENT_PREFIX))
    is_active: bool = True

    def __post_init__(self) -> None:
        self.step = CircuitStep(self.step)

    def deactivate(self) -> None:
        self.is_active = False
