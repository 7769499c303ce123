"""Main entry point for the reader."""
import logging

from tonganreader.app import create_app
from tonganreader.config import ensure_directories, settings
from tonganreader.logging_config import setup_logging
from tonganreader.models.base import init_db
from tonganreader.monitoring import start_monitoring

logger = logging.getLogger(__name__)


def main() -> None:
    """Run the web server."""
    ensure_directories()
    setup_logging("Starting TonganReader ...")

    if settings.monitoring.enabled:
        start_monitoring(settings.monitoring.port)
        logger.info(f"Metrics exported on port {settings.monitoring.port}")

    init_db()
    logger.info("Database initialized")

    app = create_app()
    try:
        app.run(host=settings.web.host, port=settings.web.port)
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt, shutting down...")


if __name__ == "__main__":
    main()
