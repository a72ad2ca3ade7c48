"""Shared transaction handling for circuit use cases."""

import logging
from datetime import datetime
from typing import Awaitable, Callable, TypeVar

from ...core.utils.datetime_utils import get_current_timestamp
from ...domain.errors import DomainError, FatalError
from ..ports.services.event_publisher import EventPublisher
from ..ports.unit_of_work import UnitOfWork
from ..services.circuit import CircuitServices

logger = logging.getLogger("preopflow")

T = TypeVar("T")

UnitOfWorkFactory = Callable[[], UnitOfWork]
Clock = Callable[[], datetime]


class CircuitUseCase:
    """Runs an operation in its own unit of work.

    Overdue calls are expired first, inside the same transaction, so every
    command and query sees a state without stale calls. Events are published
    only after commit.
    """

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        publisher: EventPublisher,
        services: CircuitServices,
        clock: Clock = get_current_timestamp,
    ) -> None:
        self._uow_factory = uow_factory
        self._publisher = publisher
        self._services = services
        self._clock = clock

    async def _run(self, operation: Callable[[UnitOfWork, datetime], Awaitable[T]]) -> T:
        now = self._clock()
        try:
            async with self._uow_factory() as uow:
                await self._services.sessions.expire_overdue(uow, now)
                result = await operation(uow, now)
                await uow.commit()
                events = list(uow.events)
        except FatalError as e:
            logger.error(f"{self.__class__.__name__} failed: {e.message}", exc_info=True)
            raise
        except DomainError as e:
            logger.warning(f"{self.__class__.__name__} rejected: {e.message}")
            raise

        if events:
            await self._publisher.publish(events)
        return result
