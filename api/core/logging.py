import logging
from typing import Dict

from config import AppSettings
from utils.logging import setup_logging as configure_logging

LOG_LEVELS: Dict[str, int] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def setup_logging(settings: AppSettings) -> None:
    """
    Configures the application's logging system based on settings.

    This function sets the log level, format (standard or JSON), and handlers
    (console and optional file).

    Args:
        settings: The application settings object.
    """
    log_level = LOG_LEVELS.get(settings.LOG_LEVEL.upper(), logging.INFO)

    configure_logging(
        level=log_level,
        json_output=settings.JSON_LOGS,
        log_file=settings.LOG_FILE,
        module_levels={module: log_level for module in ["api", "media", "transcription", "analytics", "utils"]},
    )

    logging.getLogger(__name__).info(
        f"Logging configured with level: {settings.LOG_LEVEL}, JSON: {settings.JSON_LOGS}"
    )
