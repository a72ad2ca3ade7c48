import asyncio
import logging
import signal

from beanie import init_beanie

from preopflow.adapters.db.mongo.models.circuit_m import DOCUMENT_MODELS
from preopflow.core.config import get_settings
from preopflow.core.container import ServiceNames, build_container
from preopflow.core.structured_logger import configure_logging
from preopflow.workers.call_expiry_sweeper import run_call_expiry_sweeper_forever

logger = logging.getLogger("preopflow")


async def main() -> None:
    """
    Entry point for a standalone call expiry sweeper.

    Only meaningful with the MongoDB backend; set CIRCUIT_EXPIRY_SWEEPER_ENABLED=false
    on the API processes when running this one:
        PYTHONPATH=./src python3 sweeper_startup.py
    """
    settings = get_settings()
    configure_logging(settings.logging.level, settings.logging.format)
    if settings.database.backend != "mongo":
        logger.info("Standalone sweeper requires DATABASE_BACKEND=mongo; exiting.")
        return

    container = build_container(settings)
    client = container.get(ServiceNames.MONGO_CLIENT)
    await init_beanie(
        database=client[settings.database.db_name], document_models=DOCUMENT_MODELS
    )

    logger.info(
        "Sweeper config: interval=%ss, timeout=%ss",
        settings.circuit.expiry_sweeper_interval_seconds,
        settings.circuit.call_timeout_seconds,
    )

    # Graceful shutdown via signals
    stop_event = asyncio.Event()

    def _signal_handler() -> None:
        logger.info("Shutdown signal received for sweeper, stopping gracefully")
        stop_event.set()

    loop = asyncio.get_running_loop()
    if hasattr(signal, "SIGTERM"):
        loop.add_signal_handler(signal.SIGTERM, _signal_handler)
    if hasattr(signal, "SIGINT"):
        loop.add_signal_handler(signal.SIGINT, _signal_handler)

    try:
        sweeper_task = asyncio.create_task(
            run_call_expiry_sweeper_forever(
                container.get(ServiceNames.EXPIRE_STALE_CALLS), settings.circuit
            )
        )
        await stop_event.wait()
        sweeper_task.cancel()
        try:
            await sweeper_task
        except asyncio.CancelledError:
            logger.info("Sweeper task cancelled.")
    finally:
        client.close()
        logger.info("Sweeper MongoDB client closed.")


if __name__ == "__main__":
    asyncio.run(main())
