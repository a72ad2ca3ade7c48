"""
In-process store backing the memory unit of work.
"""

import asyncio
import copy
from dataclasses import dataclass, field
from typing import Dict

from preopflow.domain.entities.announcement import CallAnnouncement
from preopflow.domain.entities.patient import Patient
from preopflow.domain.entities.queue_rotation import QueueRotation
from preopflow.domain.entities.station import Station
from preopflow.domain.entities.step import PatientStep


@dataclass
class StoreState:
    patients: Dict[str, Patient] = field(default_factory=dict)
    steps: Dict[str, PatientStep] = field(default_factory=dict)
    stations: Dict[str, Station] = field(default_factory=dict)
    announcements: Dict[str, CallAnnouncement] = field(default_factory=dict)
    rotations: Dict[str, QueueRotation] = field(default_factory=dict)


class InMemoryStore:
    """Shared state plus the lock that serializes units of work on it."""

    def __init__(self) -> None:
        self.state = StoreState()
        self.lock = asyncio.Lock()

    def snapshot(self) -> StoreState:
        return copy.deepcopy(self.state)

    def restore(self, snapshot: StoreState) -> None:
        self.state = snapshot

    def clear(self) -> None:
        self.state = StoreState()
