"""Expire Stale Calls use case, driven by the background sweeper."""

from .base import CircuitUseCase


class ExpireStaleCallsUseCase(CircuitUseCase):
    async def execute(self) -> int:
        """Returns how many calls were returned to the queue."""
        now = self._clock()
        async with self._uow_factory() as uow:
            expired = await self._services.sessions.expire_overdue(uow, now)
            await uow.commit()
            events = list(uow.events)
        if events:
            await self._publisher.publish(events)
        return expired
