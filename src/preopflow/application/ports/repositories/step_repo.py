"""
Step repository interface.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Iterable, List, Optional

from ....domain.entities.step import PatientStep
from ....domain.enums.circuit import CircuitStep, StepStatus


class StepRepository(ABC):
    """Abstract repository for patient step rows."""

    @abstractmethod
    async def save(self, step: PatientStep) -> PatientStep:
        """Insert or replace a step row."""
        pass

    @abstractmethod
    async def find_by_id(self, step_id: str) -> Optional[PatientStep]:
        pass

    @abstractmethod
    async def find(
        self,
        patient_id: Optional[str] = None,
        step: Optional[CircuitStep] = None,
        statuses: Optional[Iterable[StepStatus]] = None,
        station_number: Optional[int] = None,
    ) -> List[PatientStep]:
        """Filter rows; every argument left as None matches anything.

        Results are ordered by created_at, then step_id.
        """
        pass

    @abstractmethod
    async def find_created_between(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        statuses: Optional[Iterable[StepStatus]] = None,
    ) -> List[PatientStep]:
        pass

    @abstractmethod
    async def delete_for_patient(self, patient_id: str) -> int:
        """Delete every row of a patient, returning how many were removed."""
        pass
