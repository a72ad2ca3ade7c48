"""Wiring of the circuit services around one policy."""

from .call_session import CallSession
from .patient_registry import PatientRegistry
from .policy import CircuitPolicy
from .reporting import ReportingAggregator
from .station_scheduler import StationScheduler
from .step_ledger import StepLedger


class CircuitServices:
    def __init__(self, policy: CircuitPolicy = None) -> None:
        self.policy = policy or CircuitPolicy()
        self.ledger = StepLedger()
        self.registry = PatientRegistry(self.ledger)
        self.scheduler = StationScheduler(self.ledger, self.registry, self.policy)
        self.sessions = CallSession(self.ledger, self.registry, self.scheduler, self.policy)
        self.reporting = ReportingAggregator(self.policy)
