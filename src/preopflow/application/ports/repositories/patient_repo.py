"""
Patient repository interface for data access abstraction.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from ....domain.entities.patient import Patient


class PatientRepository(ABC):
    """Abstract repository for patient data access."""

    @abstractmethod
    async def save(self, patient: Patient) -> Patient:
        """Insert or replace a patient."""
        pass

    @abstractmethod
    async def find_by_id(self, patient_id: str) -> Optional[Patient]:
        """Find a patient by ID."""
        pass

    @abstractmethod
    async def find_many(self, patient_ids: Iterable[str]) -> Dict[str, Patient]:
        """Load several patients at once, keyed by ID. Missing IDs are omitted."""
        pass

    @abstractmethod
    async def find_created_between(
        self, start: Optional[datetime] = None, end: Optional[datetime] = None
    ) -> List[Patient]:
        """Patients with start <= created_at < end, oldest first."""
        pass

    @abstractmethod
    async def find_pending_scheduling(self) -> List[Patient]:
        """Patients flagged as pending surgery scheduling."""
        pass

    @abstractmethod
    async def delete(self, patient_id: str) -> bool:
        """Delete a patient by ID."""
        pass
