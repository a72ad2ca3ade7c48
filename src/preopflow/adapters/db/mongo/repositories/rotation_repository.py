"""
MongoDB implementation of RotationRepository.
"""

from preopflow.core.utils.datetime_utils import ensure_utc, get_current_timestamp
from preopflow.application.ports.repositories.rotation_repo import RotationRepository
from preopflow.domain.entities.queue_rotation import QueueRotation
from ..models.circuit_m import QueueRotationMongo


class MongoRotationRepository(RotationRepository):
    def __init__(self, session=None):
        self._session = session

    async def get(self, queue_key: str) -> QueueRotation:
        doc = await QueueRotationMongo.find_one(
            QueueRotationMongo.queue_key == queue_key, session=self._session
        )
        if doc is None:
            return QueueRotation(queue_key=queue_key, updated_at=get_current_timestamp())
        return QueueRotation(
            queue_key=doc.queue_key,
            consecutive_priority_calls=doc.consecutive_priority_calls,
            updated_at=ensure_utc(doc.updated_at),
        )

    async def save(self, rotation: QueueRotation) -> QueueRotation:
        await QueueRotationMongo.get_motor_collection().update_one(
            {"queue_key": rotation.queue_key},
            {
                "$set": {
                    "consecutive_priority_calls": rotation.consecutive_priority_calls,
                    "updated_at": rotation.updated_at,
                }
            },
            upsert=True,
            session=self._session,
        )
        return rotation
