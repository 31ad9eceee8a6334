"""
Logging for the Image Caption service.

Every record carries the id of the HTTP request being served (``-`` outside a
request), so caption, retry and upstream-error lines can be tied together.
"""

import logging
import logging.handlers
import sys
from contextvars import ContextVar
from pathlib import Path
from typing import Optional
from .config import get_settings

request_id_var: ContextVar[str] = ContextVar("request_id", default="-")

# Libraries that log every HTTP call or retry at INFO
QUIET_LOGGERS = ("uvicorn.access", "httpx", "httpcore", "openai", "openai._base_client")


class RequestIdFilter(logging.Filter):
    """Stamps records with the current request id."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get()
        return True


class LevelColorFormatter(logging.Formatter):
    """Colours the level name when writing to a terminal."""

    COLORS = {
        logging.DEBUG: '\033[36m',
        logging.INFO: '\033[32m',
        logging.WARNING: '\033[33m',
        logging.ERROR: '\033[31m',
        logging.CRITICAL: '\033[35m',
    }
    RESET = '\033[0m'

    def __init__(self, fmt: str, use_color: bool = True):
        super().__init__(fmt)
        self.use_color = use_color

    def formatMessage(self, record: logging.LogRecord) -> str:
        if not self.use_color:
            return super().formatMessage(record)
        plain = record.levelname
        record.levelname = f"{self.COLORS.get(record.levelno, '')}{plain}{self.RESET}"
        try:
            return super().formatMessage(record)
        finally:
            record.levelname = plain


def _build_handler(handler: logging.Handler, formatter: logging.Formatter, level: int) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(formatter)
    handler.addFilter(RequestIdFilter())
    return handler


def setup_logging(log_level: Optional[str] = None, log_file: Optional[str] = None) -> None:
    """
    Configure the root logger: stdout, plus a rotating file when LOG_FILE is set.

    Args:
        log_level: Overrides LOG_LEVEL
        log_file: Overrides LOG_FILE; an empty string disables the file
    """
    settings = get_settings()

    level_name = (log_level or settings.log_level).upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level_name, level = "INFO", logging.INFO
    file_path = settings.log_file if log_file is None else log_file

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        if any(isinstance(f, RequestIdFilter) for f in handler.filters):
            handler.close()
    root_logger.setLevel(level)

    root_logger.addHandler(_build_handler(
        logging.StreamHandler(sys.stdout),
        LevelColorFormatter(settings.log_format, use_color=sys.stdout.isatty()),
        level,
    ))

    if file_path:
        Path(file_path).parent.mkdir(parents=True, exist_ok=True)
        root_logger.addHandler(_build_handler(
            logging.handlers.RotatingFileHandler(file_path, maxBytes=10 * 1024 * 1024, backupCount=5),
            logging.Formatter(settings.log_format),
            level,
        ))

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).info(f"Logging at {level_name} to {file_path or 'stdout only'}")


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


class LoggerMixin:
    """Gives a class a logger named after its module and class."""

    @property
    def logger(self) -> logging.Logger:
        return get_logger(f"{self.__class__.__module__}.{self.__class__.__name__}")
