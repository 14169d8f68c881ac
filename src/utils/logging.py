"""
County Compass - Logging Configuration
Console and dated-file logging shared by the API and the explorer CLI

Rules:
- JSON lines in production, tagged with the service and environment
- Human-readable lines everywhere else
- Module loggers (get_logger(__name__)) reach the handlers of the most
  recent setup_logging call through the root logger
"""

import logging
import os
import sys
from datetime import date
from typing import List, Optional

from pythonjsonlogger import jsonlogger

from config.settings import get_settings

settings = get_settings()

SERVICE_NAME = "county_compass"

JSON_LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"
TEXT_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def build_formatter() -> logging.Formatter:
    """
    Formatter for the configured environment.

    Returns:
        JsonFormatter in production, plain Formatter otherwise
    """
    if settings.ENVIRONMENT == "production":
        return jsonlogger.JsonFormatter(
            fmt=JSON_LOG_FORMAT,
            datefmt="%Y-%m-%dT%H:%M:%S",
            static_fields={"service": SERVICE_NAME, "environment": settings.ENVIRONMENT},
        )

    return logging.Formatter(fmt=TEXT_LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")


def log_file_path(name: str, day: Optional[date] = None) -> Optional[str]:
    """Dated log file for a logger name, None when LOG_DIR is unset."""
    if not settings.LOG_DIR:
        return None

    day = day or date.today()
    return os.path.join(settings.LOG_DIR, f"{name}_{day:%Y%m%d}.log")


def _log_level() -> int:
    return getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)


def setup_logging(name: str = SERVICE_NAME) -> logging.Logger:
    """
    Configure logging for an entry point (API process or CLI run).

    Args:
        name: Logger name, also the log file prefix

    Returns:
        Configured logger instance
    """
    formatter = build_formatter()

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]

    log_file = log_file_path(name)
    if log_file:
        os.makedirs(settings.LOG_DIR, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    for handler in handlers:
        handler.setFormatter(formatter)

    level = _log_level()

    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.handlers = list(handlers)
    logger.propagate = False

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = list(handlers)

    return logger


def get_logger(module_name: str) -> logging.Logger:
    """
    Get a logger for a specific module.

    Args:
        module_name: Name of the module (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(module_name)
