"""Structured logging for the YTM remote.

Records go to a rotating JSON file (logs/ytm_remote.log, 10MB x 5) and to a
plain console stream. Context travels as ``extra`` fields, see
``log_with_context``.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

from pythonjsonlogger import jsonlogger

LOG_FILE_NAME = "ytm_remote.log"
DEFAULT_LOG_DIR = Path(__file__).parent.parent / "logs"

# Third-party loggers that are only interesting when something breaks
QUIET_LOGGERS = ("httpx", "websockets", "uvicorn.access")


def _json_file_handler(log_dir: Path) -> logging.Handler:
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        log_dir / LOG_FILE_NAME,
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
    )
    handler.setFormatter(
        jsonlogger.JsonFormatter(
            "%(asctime)s %(name)s %(levelname)s %(message)s %(filename)s %(lineno)d",
            timestamp=True,
        )
    )
    # The file keeps everything; the root level filters what reaches it
    handler.setLevel(logging.DEBUG)
    return handler


def _console_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s", datefmt="%H:%M:%S"))
    handler.setLevel(level)
    return handler


def setup_logging(log_level: str = "INFO", log_dir: Path | None = None) -> logging.Logger:
    """Install the JSON file and console handlers on the root logger.

    Args:
        log_level: Level name, case-insensitive
        log_dir: Directory for the JSON log (defaults to <repo>/logs)

    Returns:
        The root logger
    """
    level = logging.getLevelName(log_level.upper())

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.addHandler(_json_file_handler(log_dir or DEFAULT_LOG_DIR))
    root_logger.addHandler(_console_handler(level))

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return root_logger


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def log_with_context(
    logger: logging.Logger,
    level: str,
    message: str,
    **extra_fields: Any,
) -> None:
    """Log ``message`` with structured fields.

    Args:
        logger: Target logger
        level: Method name on the logger ("debug", "info", ...)
        message: Log message
        **extra_fields: Context such as event_type, uri or track_id
    """
    getattr(logger, level.lower())(message, extra=extra_fields)
