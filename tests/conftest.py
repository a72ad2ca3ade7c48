"""
Shared fixtures: a frozen clock, an in-memory container and a small driver
that walks patients through stations via the use cases.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest

from preopflow.application.dto.circuit_dto import FinishOutcome, RegisterPatientRequest
from preopflow.core.config import CircuitSettings, DatabaseSettings, Settings
from preopflow.core.container import ServiceNames, build_container
from preopflow.domain.enums.circuit import CircuitStep, FlowType, MedicalSpecialty

START = datetime(2026, 3, 2, 8, 0, tzinfo=timezone.utc)


class FrozenClock:
    def __init__(self, start: datetime = START):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


class Circuit:
    """Test driver over the container's use cases."""

    def __init__(self, container, clock: FrozenClock):
        self.container = container
        self.clock = clock
        self._station_numbers = {}

    def use_case(self, name: str):
        return self.container.get(name)

    async def register(
        self,
        name: str,
        flow_type: FlowType = FlowType.CIRCUITO_PREOP,
        specialty: MedicalSpecialty = MedicalSpecialty.ORTOPEDIA,
        **flags,
    ):
        # Distinct registration times keep queue order deterministic
        self.clock.advance(seconds=1)
        return await self.use_case(ServiceNames.REGISTER_PATIENT).execute(
            RegisterPatientRequest(name=name, specialty=specialty, flow_type=flow_type, **flags)
        )

    async def station(
        self, step: CircuitStep, specialty: Optional[MedicalSpecialty] = None
    ):
        number = self._station_numbers.get(step, 0) + 1
        self._station_numbers[step] = number
        station = await self.use_case(ServiceNames.CREATE_STATION).execute(
            step, number, f"{step.value} {number}"
        )
        if specialty is not None:
            station = await self.use_case(ServiceNames.SET_STATION_SPECIALTY).execute(
                station.station_id, specialty
            )
        return station

    async def call(self, station_id: str):
        return await self.use_case(ServiceNames.CALL_NEXT).execute(station_id)

    async def start(self, station_id: str, patient_id: Optional[str] = None):
        return await self.use_case(ServiceNames.START_SERVICE).execute(station_id, patient_id)

    async def finish(self, station_id: str, patient_id: Optional[str] = None, **outcome):
        return await self.use_case(ServiceNames.FINISH_SERVICE).execute(
            station_id, patient_id, FinishOutcome(**outcome)
        )

    async def cancel(self, station_id: str, patient_id: Optional[str] = None):
        return await self.use_case(ServiceNames.CANCEL_CALL).execute(station_id, patient_id)

    async def serve(self, station_id: str, minutes: int = 0, **outcome):
        """Call, start and finish the next patient at a station."""
        called = await self.call(station_id)
        await self.start(station_id, called.patient.patient_id)
        if minutes:
            self.clock.advance(minutes=minutes)
        return await self.finish(station_id, called.patient.patient_id, **outcome)

    async def steps_of(self, patient_id: str):
        result = await self.use_case(ServiceNames.LIST_PATIENT_STEPS).execute(patient_id)
        return {row.step: row for row in result.steps}, result.patient


@pytest.fixture
def clock():
    return FrozenClock()


@pytest.fixture
def settings():
    return Settings(
        app_env="testing",
        database=DatabaseSettings(backend="memory"),
        circuit=CircuitSettings(expiry_sweeper_enabled=False, seed_default_stations=False),
    )


@pytest.fixture
def container(settings, clock):
    return build_container(settings, clock=clock)


@pytest.fixture
def circuit(container, clock):
    return Circuit(container, clock)


@pytest.fixture
def published(container):
    """Every event the bus publishes, in order."""
    events = []

    async def record(event):
        events.append(event)

    container.get(ServiceNames.EVENT_BUS).subscribe(record)
    return events
