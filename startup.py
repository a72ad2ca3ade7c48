import logging
import os
import sys
import traceback

import uvicorn

# Configure logging to stdout until the app installs its own handler
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)

# Add the src directory to Python path
current_dir = os.path.dirname(os.path.abspath(__file__))
src_path = os.path.join(current_dir, "src")
sys.path.insert(0, src_path)

logger.info("=" * 60)
logger.info("PreopFlow Startup")
logger.info("=" * 60)
logger.info(f"Python version: {sys.version.split()[0]}")
logger.info(f"Source path: {src_path}")
logger.info(f"  PORT: {os.environ.get('PORT', '8000')}")
logger.info(f"  APP_ENV: {os.environ.get('APP_ENV', 'not set')}")
logger.info(f"  DATABASE_BACKEND: {os.environ.get('DATABASE_BACKEND', 'memory')}")
logger.info(f"  DATABASE_URI: {'set' if os.environ.get('DATABASE_URI') else 'not set'}")


if __name__ == "__main__":
    try:
        from preopflow.core.config import get_settings

        try:
            settings = get_settings()
        except ValueError as ve:
            logger.error(f"Configuration validation failed: {ve}")
            logger.error("Common configuration issues:")
            logger.error("  1. DATABASE_URI must be set when DATABASE_BACKEND=mongo")
            logger.error("  2. CIRCUIT_DOUBLE_CAPACITY_STEPS must name known steps")
            sys.exit(1)

        port = int(os.environ.get("PORT", settings.port))
        host = os.environ.get("HOST", settings.host)
        logger.info(f"Starting {settings.app_name} v{settings.app_version} on {host}:{port}")

        # Single worker: the memory backend and the in-process sweeper are per process
        uvicorn.run(
            "preopflow.app:app",
            host=host,
            port=port,
            workers=1,
            log_level=settings.logging.level.lower(),
            access_log=True,
            timeout_keep_alive=75,
            timeout_graceful_shutdown=30,
        )
    except KeyboardInterrupt:
        logger.info("Shutting down due to keyboard interrupt")
        sys.exit(0)
    except Exception as e:
        logger.error(f"CRITICAL: Failed to start application: {type(e).__name__}: {e}")
        logger.error(traceback.format_exc())
        sys.exit(1)
