import asyncio
import logging

from preopflow.application.use_cases.expire_calls import ExpireStaleCallsUseCase
from preopflow.core.config import CircuitSettings

logger = logging.getLogger("preopflow")

MIN_INTERVAL_SECONDS = 5


async def _sweep_once(use_case: ExpireStaleCallsUseCase) -> int:
    """
    Return overdue calls to their queues. Commands already expire lazily; this
    keeps idle stations and the announcement board current.
    """
    expired = await use_case.execute()
    if expired:
        logger.info("[ExpirySweeper] Returned %d overdue call(s) to the queue", expired)
    return expired


async def run_call_expiry_sweeper_forever(
    use_case: ExpireStaleCallsUseCase, settings: CircuitSettings
) -> None:
    """
    Run the expiry sweeper in a loop, controlled by the circuit settings.
    """
    if not settings.expiry_sweeper_enabled:
        logger.info("[ExpirySweeper] Disabled via CIRCUIT_EXPIRY_SWEEPER_ENABLED")
        return

    interval = max(MIN_INTERVAL_SECONDS, settings.expiry_sweeper_interval_seconds)
    logger.info(
        "[ExpirySweeper] Starting (interval=%ss, timeout=%ss)",
        interval,
        settings.call_timeout_seconds,
    )

    while True:
        try:
            await _sweep_once(use_case)
        except asyncio.CancelledError:
            raise
        except Exception as e:  # noqa: PERF203
            logger.error("[ExpirySweeper] Sweep iteration failed: %s", e, exc_info=True)
        await asyncio.sleep(interval)
