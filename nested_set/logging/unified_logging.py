"""
Unified log format with importance (0-10) for nested set tooling.

Author: Vasiliy Zdanovskiy
email: vasilyvz@gmail.com
"""

from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path
from typing import Any, Optional, Union

# Default importance (0-10) per standard level when not set explicitly
LEVEL_TO_IMPORTANCE = {
    "DEBUG": 2,
    "INFO": 4,
    "WARNING": 6,
    "ERROR": 8,
    "CRITICAL": 10,
}

UNIFIED_DATE_FMT = "%Y-%m-%d %H:%M:%S"
UNIFIED_FORMAT_STR = (
    "%(asctime)s | %(levelname)-8s | %(importance)s | %(name)s | %(message)s"
)

DEFAULT_LOG_MAX_BYTES = 10485760
DEFAULT_LOG_BACKUP_COUNT = 5

_factory_installed = False


def importance_from_level(level_name: str) -> int:
    """Return importance 0-10 for a standard log level name. Returns 4 for unknown."""
    return LEVEL_TO_IMPORTANCE.get((level_name or "").strip().upper(), 4)


def _set_importance_if_missing(record: logging.LogRecord) -> None:
    if getattr(record, "importance", None) is None:
        record.importance = importance_from_level(record.levelname)


def install_unified_record_factory() -> None:
    """
    Install a LogRecord factory that sets 'importance' on every record.

    Importance is derived from the record level. Installing twice is a no-op.
    """
    global _factory_installed
    if _factory_installed:
        return
    old_factory = logging.getLogRecordFactory()

    def _factory(*args: Any, **kwargs: Any) -> logging.LogRecord:
        record = old_factory(*args, **kwargs)
        _set_importance_if_missing(record)
        return record

    logging.setLogRecordFactory(_factory)
    _factory_installed = True


class UnifiedFormatter(logging.Formatter):
    """
    Formatter that outputs: timestamp | level | importance | logger | message.

    Falls back to level-derived importance when the record factory was not
    installed.
    """

    def format(self, record: logging.LogRecord) -> str:
        _set_importance_if_missing(record)
        return super().format(record)


def create_unified_formatter(
    fmt: str = UNIFIED_FORMAT_STR,
    datefmt: str = UNIFIED_DATE_FMT,
) -> UnifiedFormatter:
    """Create a UnifiedFormatter with project default format and date format."""
    return UnifiedFormatter(fmt=fmt, datefmt=datefmt)


def setup_logging(
    level: Union[str, int] = "INFO",
    log_file: Optional[Union[str, Path]] = None,
    max_bytes: int = DEFAULT_LOG_MAX_BYTES,
    backup_count: int = DEFAULT_LOG_BACKUP_COUNT,
) -> logging.Logger:
    """
    Configure root logging for CLI use.

    Args:
        level: Level for the console handler (name or number)
        log_file: Optional path of a rotating log file (always at DEBUG)
        max_bytes: Max log file size before rotation (default 10 MB)
        backup_count: Number of rotated logs to keep (default 5)

    Returns:
        The configured root logger
    """
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()
    root_logger.setLevel(logging.DEBUG)

    install_unified_record_factory()
    formatter = create_unified_formatter()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level if isinstance(level, int) else level.upper())
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            str(log_path),
            mode="a",
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
        root_logger.debug("File logging configured: %s", log_path)

    return root_logger
