"""Run the auth service with uvicorn."""
import logging

import uvicorn

from .main import app
from .utils.event_logger import configure_logging

logger = logging.getLogger(__name__)


def main() -> None:
    settings = app.state.settings
    configure_logging(settings.LOG_LEVEL, settings.LOG_DIR)
    logger.info("API ready on http://localhost:%s", settings.PORT)
    logger.info("Swagger documentation is available at http://localhost:%s/swagger", settings.PORT)
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_level=settings.LOG_LEVEL.lower())


if __name__ == "__main__":
    main()
