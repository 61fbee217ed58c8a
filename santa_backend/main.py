"""Process entry point: ``python -m santa_backend.main`` or ``santa-backend``."""
import logging

import uvicorn

from .settings import settings


def run() -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger(__name__).info("Santa server starting on %s:%d", settings.HOST, settings.PORT)
    # A failed bind ends the process; nothing else here is fatal.
    uvicorn.run("santa_backend.app:app", host=settings.HOST, port=settings.PORT, log_level=settings.LOG_LEVEL.lower())


if __name__ == "__main__":
    run()
