"""
MongoDB implementation of StationRepository.
"""

from typing import List, Optional

from preopflow.core.utils.datetime_utils import ensure_utc
from preopflow.application.ports.repositories.station_repo import StationRepository
from preopflow.domain.catalog import STEP_ORDER
from preopflow.domain.entities.station import Station
from preopflow.domain.enums.circuit import CircuitStep
from preopflow.domain.errors import StationNotFoundError
from ..models.circuit_m import StationMongo


class MongoStationRepository(StationRepository):
    def __init__(self, session=None):
        self._session = session

    async def save(self, station: Station) -> Station:
        fields = dict(
            step=station.step.value,
            station_number=station.station_number,
            name=station.name,
            is_active=station.is_active,
            current_patient_id=station.current_patient_id,
            current_specialty=(
                station.current_specialty.value if station.current_specialty else None
            ),
            created_at=station.created_at,
        )
        # The stored revision is left untouched; only claim() bumps it
        existing = await StationMongo.find_one(
            StationMongo.station_id == station.station_id, session=self._session
        )
        if existing:
            for key, value in fields.items():
                setattr(existing, key, value)
            doc = existing
        else:
            doc = StationMongo(station_id=station.station_id, **fields)
        await doc.save(session=self._session)
        return station

    async def find_by_id(self, station_id: str) -> Optional[Station]:
        doc = await StationMongo.find_one(
            StationMongo.station_id == station_id, session=self._session
        )
        return self._mongo_to_domain(doc) if doc else None

    async def find_by_step_and_number(
        self, step: CircuitStep, station_number: int
    ) -> Optional[Station]:
        doc = await StationMongo.find_one(
            {"step": CircuitStep(step).value, "station_number": station_number},
            session=self._session,
        )
        return self._mongo_to_domain(doc) if doc else None

    async def find_all(
        self, step: Optional[CircuitStep] = None, active_only: bool = False
    ) -> List[Station]:
        query = {}
        if step is not None:
            query["step"] = CircuitStep(step).value
        if active_only:
            query["is_active"] = True
        docs = await StationMongo.find(query, session=self._session).to_list()
        stations = [self._mongo_to_domain(doc) for doc in docs]
        return sorted(stations, key=lambda s: (STEP_ORDER.index(s.step), s.station_number))

    async def find_bound_to_patient(self, patient_id: str) -> List[Station]:
        docs = await StationMongo.find(
            StationMongo.current_patient_id == patient_id, session=self._session
        ).to_list()
        return [self._mongo_to_domain(doc) for doc in docs]

    async def claim(self, station_id: str) -> None:
        # A write inside the transaction; a second transaction writing the
        # same document fails with a write conflict
        result = await StationMongo.get_motor_collection().update_one(
            {"station_id": station_id}, {"$inc": {"revision": 1}}, session=self._session
        )
        if result.matched_count == 0:
            raise StationNotFoundError(station_id)

    async def count(self) -> int:
        return await StationMongo.find({}, session=self._session).count()

    @staticmethod
    def _mongo_to_domain(doc: StationMongo) -> Station:
        return Station(
            station_id=doc.station_id,
            step=doc.step,
            station_number=doc.station_number,
            name=doc.name,
            is_active=doc.is_active,
            current_patient_id=doc.current_patient_id,
            current_specialty=doc.current_specialty,
            created_at=ensure_utc(doc.created_at),
        )
