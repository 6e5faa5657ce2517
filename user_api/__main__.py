"""Entry point: ``python -m user_api``."""
from __future__ import annotations

import logging
import sys

import uvicorn

from user_api.app import SERVICE_NAME, create_app
from user_api.core.config import get_settings
from user_api.core.logging import configure_logging
from user_api.core.telemetry import configure_telemetry
from user_api.repositories.json_storage import PersistenceError

logger = logging.getLogger(SERVICE_NAME)


def main() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)
    shutdown_telemetry = configure_telemetry(settings)
    try:
        logger.info("Starting User API server")
        try:
            app = create_app(settings)
        except PersistenceError as exc:
            logger.error("Failed to initialize storage error=%s", exc)
            sys.exit(1)
        logger.info("Server starting port=%d", settings.port)
        uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)
    finally:
        shutdown_telemetry()


if __name__ == "__main__":
    main()
