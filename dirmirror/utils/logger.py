"""
Logging Configuration and Utilities

Console and rotating-file logging for dirmirror, with optional JSON output
for structured log collection. Mirror operations attach ``operation``,
``source`` and ``destination`` to their records; the text formatters show
them as a trailing context block and the JSON formatter as fields.

Author: dirmirror Project
License: MIT
"""

import logging
import sys
from pathlib import Path
from logging.handlers import RotatingFileHandler
from typing import Optional, Union
from pythonjsonlogger.json import JsonFormatter

ROOT_LOGGER_NAME = "dirmirror"

CONTEXT_FIELDS = ("operation", "source", "destination")

CONSOLE_FORMAT = '[%(asctime)s] %(levelname)s - %(name)s - %(message)s'
FILE_FORMAT = '[%(asctime)s] %(levelname)s - %(name)s - %(module)s:%(funcName)s:%(lineno)d - %(message)s'
JSON_FORMAT = '%(asctime)s %(name)s %(levelname)s %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def resolve_level(log_level: Union[str, int]) -> int:
    """
    Translate a level name such as ``"debug"`` into its numeric value.

    Raises:
        ValueError: If the name is not a standard logging level
    """
    if isinstance(log_level, int):
        return log_level
    level = logging.getLevelName(str(log_level).strip().upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {log_level}")
    return level


class ContextFormatter(logging.Formatter):
    """Plain-text formatter appending mirror context fields when present."""

    def format(self, record):
        message = super().format(record)
        context = [
            f"{name}={getattr(record, name)}"
            for name in CONTEXT_FIELDS
            if getattr(record, name, None) is not None
        ]
        if context:
            message = f"{message} [{' '.join(context)}]"
        return message


class ColoredFormatter(ContextFormatter):
    """
    Context formatter that colours the level name for terminal output.
    """

    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
        'RESET': '\033[0m'
    }

    def format(self, record):
        # Copy so other handlers do not receive escape codes
        record = logging.makeLogRecord(record.__dict__)
        log_color = self.COLORS.get(record.levelname, self.COLORS['RESET'])
        record.levelname = f"{log_color}{record.levelname}{self.COLORS['RESET']}"
        return super().format(record)


def _console_handler(level: int, json_format: bool) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    if json_format:
        handler.setFormatter(JsonFormatter(JSON_FORMAT))
    else:
        handler.setFormatter(ColoredFormatter(CONSOLE_FORMAT, datefmt=DATE_FORMAT))
    return handler


def _file_handler(
    level: int,
    json_format: bool,
    log_file_path: str,
    log_rotation_size: int,
    log_retention_count: int
) -> logging.Handler:
    Path(log_file_path).parent.mkdir(parents=True, exist_ok=True)

    handler = RotatingFileHandler(
        log_file_path,
        maxBytes=log_rotation_size,
        backupCount=log_retention_count,
        encoding='utf-8'
    )
    handler.setLevel(level)
    if json_format:
        handler.setFormatter(JsonFormatter(
            '%(asctime)s %(name)s %(levelname)s %(module)s %(funcName)s %(lineno)d %(message)s'
        ))
    else:
        handler.setFormatter(ContextFormatter(FILE_FORMAT, datefmt=DATE_FORMAT))
    return handler


def setup_logging(
    log_level: Union[str, int] = "INFO",
    log_to_file: bool = False,
    log_file_path: str = "logs/dirmirror.log",
    log_rotation_size: int = 10485760,  # 10MB
    log_retention_count: int = 5,
    json_format: bool = False
) -> logging.Logger:
    """
    Configure the ``dirmirror`` logger.

    Calling it again replaces the handlers installed by the previous call.

    Args:
        log_level: Level name (DEBUG, INFO, WARNING, ERROR, CRITICAL) or number
        log_to_file: Also write to a rotating log file
        log_file_path: Path to log file
        log_rotation_size: Max log file size before rotation (bytes)
        log_retention_count: Number of backup log files to keep
        json_format: Emit JSON records instead of text

    Returns:
        The package logger

    Raises:
        ValueError: If ``log_level`` is not a known level
    """
    level = resolve_level(log_level)

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    logger.addHandler(_console_handler(level, json_format))
    if log_to_file:
        logger.addHandler(_file_handler(
            level, json_format, log_file_path, log_rotation_size, log_retention_count
        ))

    logger.propagate = False

    logger.info(f"Logging initialized at {logging.getLevelName(level)} level")
    if log_to_file:
        logger.info(f"File logging enabled: {log_file_path}")

    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a logger below the ``dirmirror`` logger.

    Module names already inside the package are used as they are.
    """
    if not name or name == ROOT_LOGGER_NAME:
        return logging.getLogger(ROOT_LOGGER_NAME)
    if name.startswith(f"{ROOT_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
