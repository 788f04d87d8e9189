"""
Structured logging configuration for the transcription service.

This module provides centralized logging configuration with consistent formatting,
log levels, and handlers for all components of the application.
"""

import logging
import sys
import os
import json
import functools
from datetime import datetime
from typing import Optional, Dict


class JsonFormatter(logging.Formatter):
    """
    Formatter that outputs JSON strings for each log record.
    Useful for structured logging to be ingested by log analysis tools.
    """

    # Attributes every LogRecord carries; anything else came in through `extra`
    _RESERVED = set(vars(logging.makeLogRecord({}))) | {"message", "asctime"}

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info and record.exc_info[0] is not None:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
            }

        extra = {k: v for k, v in vars(record).items() if k not in self._RESERVED}
        if extra:
            log_data["extra"] = extra

        return json.dumps(log_data, default=str)


def setup_logging(
    level: int = logging.INFO,
    json_output: bool = False,
    log_file: Optional[str] = None,
    module_levels: Optional[Dict[str, int]] = None
) -> None:
    """
    Configure application-wide logging settings.

    Args:
        level: Base log level (default: INFO)
        json_output: Whether to output logs as JSON (default: False)
        log_file: Optional file to write logs to
        module_levels: Dictionary mapping module names to specific log levels
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if json_output:
        formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(
            "[%(asctime)s] %(levelname)s [%(name)s:%(funcName)s:%(lineno)d] - %(message)s"
        )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    if module_levels:
        for module, module_level in module_levels.items():
            logging.getLogger(module).setLevel(module_level)

    # Quiet noisy third-party libraries
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)

    logging.info("Logging system initialized")


def log_execution_time(logger: logging.Logger, level: int = logging.INFO):
    """
    Decorator to log execution time of a function.

    Args:
        logger: Logger to use
        level: Log level to use

    Returns:
        Decorator function
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            start_time = datetime.now()
            try:
                result = func(*args, **kwargs)
                elapsed = datetime.now() - start_time
                logger.log(
                    level,
                    f"Function {func.__name__} executed in {elapsed.total_seconds():.3f} seconds",
                    extra={"execution_time": elapsed.total_seconds()}
                )
                return result
            except Exception as e:
                elapsed = datetime.now() - start_time
                logger.warning(
                    f"Function {func.__name__} failed after {elapsed.total_seconds():.3f} seconds: {str(e)}",
                    extra={"execution_time": elapsed.total_seconds()}
                )
                raise
        return wrapper
    return decorator
