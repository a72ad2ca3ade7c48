"""Station administration use cases."""

import logging
from typing import Iterable, List, Optional, Tuple

from ...domain.entities.station import Station
from ...domain.enums.circuit import CircuitStep, MedicalSpecialty
from ...domain.errors import DuplicateStationError, StationBusyError
from .base import CircuitUseCase

logger = logging.getLogger("preopflow")


class CreateStationUseCase(CircuitUseCase):
    async def execute(self, step: CircuitStep, station_number: int, name: str) -> Station:
        async def operation(uow, now):
            station = Station(step=step, station_number=station_number, name=name, created_at=now)
            if await uow.stations.find_by_step_and_number(station.step, station_number):
                raise DuplicateStationError(station.step.value, station_number)
            await uow.stations.save(station)
            logger.info(f"Created station {station.name} ({station.step.value} #{station_number})")
            return station

        return await self._run(operation)


class SetStationSpecialtyUseCase(CircuitUseCase):
    async def execute(
        self, station_id: str, specialty: Optional[MedicalSpecialty]
    ) -> Station:
        async def operation(uow, now):
            station = await self._services.scheduler.get_station(uow, station_id)
            station.set_specialty(specialty)
            await uow.stations.save(station)
            logger.info(f"Station {station.name} bound to specialty {specialty}")
            return station

        return await self._run(operation)


class SetStationActiveUseCase(CircuitUseCase):
    async def execute(self, station_id: str, is_active: bool) -> Station:
        async def operation(uow, now):
            station = await self._services.scheduler.get_station(uow, station_id)
            if not is_active:
                active = await self._services.ledger.active_at_station(
                    uow, station.step, station.station_number
                )
                if active:
                    raise StationBusyError(station_id, len(active))
            station.is_active = is_active
            await uow.stations.save(station)
            return station

        return await self._run(operation)


class SeedDefaultStationsUseCase(CircuitUseCase):
    """Creates the configured stations when the store has none."""

    async def execute(self, layout: Iterable[Tuple[CircuitStep, int, str]]) -> List[Station]:
        async def operation(uow, now):
            if await uow.stations.count() > 0:
                return []
            created = []
            for step, number, name in layout:
                station = Station(step=step, station_number=number, name=name, created_at=now)
                await uow.stations.save(station)
                created.append(station)
            logger.info(f"Seeded {len(created)} default stations")
            return created

        return await self._run(operation)
