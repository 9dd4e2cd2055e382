"""
Logging setup for the DrugBot data service.

The API calls ``setup_logging()`` once at startup; level and optional log
file come from settings (``LOG_LEVEL`` / ``LOG_FILE``) unless given.
"""
import logging
import sys
from typing import Optional

from drugbot.utils.config import get_settings

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Chatty libraries kept at WARNING regardless of the configured level
QUIET_LOGGERS = ("httpx", "httpcore", "uvicorn.access")


def _attach(root: logging.Logger, handler: logging.Handler, level: int) -> None:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    root.addHandler(handler)


def setup_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> logging.Logger:
    """
    Configure the root logger: stdout always, plus a file when configured.

    Calling it again replaces the handlers rather than adding more.

    Args:
        level: DEBUG, INFO, WARNING, ERROR or CRITICAL (default: settings)
        log_file: Optional file path for log output (default: settings)

    Returns:
        The root logger
    """
    settings = get_settings()
    level_name = (level or settings.log_level or "INFO").upper()
    numeric_level = getattr(logging, level_name, logging.INFO)
    log_file = log_file or settings.log_file

    root = logging.getLogger()
    root.setLevel(numeric_level)
    root.handlers.clear()

    _attach(root, logging.StreamHandler(sys.stdout), numeric_level)
    if log_file:
        _attach(root, logging.FileHandler(log_file), numeric_level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    root.debug(f"Logging configured at {level_name}" + (f", writing to {log_file}" if log_file else ""))
    return root
