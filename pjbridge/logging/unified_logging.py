"""
Unified log format for bridge output: timestamp | level | endpoint | message.

Author: Vasiliy Zdanovskiy
email: vasilyvz@gmail.com
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union

from pjbridge.core.constants import DEFAULT_LOG_BACKUP_COUNT, DEFAULT_LOG_MAX_BYTES

UNIFIED_DATE_FMT = "%Y-%m-%d %H:%M:%S"
UNIFIED_FORMAT_STR = "%(asctime)s | %(levelname)-8s | %(endpoint)s | %(message)s"
NO_ENDPOINT = "-"


def _set_endpoint_if_missing(record: logging.LogRecord) -> None:
    """Set record.endpoint to a placeholder if not passed via extra."""
    if getattr(record, "endpoint", None) is None:
        record.endpoint = NO_ENDPOINT


class EndpointFilter(logging.Filter):
    """Stamps every record with a fixed server endpoint ("host:port")."""

    def __init__(self, endpoint: str) -> None:
        super().__init__()
        self.endpoint = endpoint

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "endpoint", None) is None:
            record.endpoint = self.endpoint
        return True


class UnifiedFormatter(logging.Formatter):
    """
    Formatter that outputs: timestamp | level | endpoint | message.
    Records without an endpoint (set by extra or EndpointFilter) show "-".
    """

    def format(self, record: logging.LogRecord) -> str:
        _set_endpoint_if_missing(record)
        return super().format(record)


def create_unified_formatter(
    fmt: str = UNIFIED_FORMAT_STR,
    datefmt: str = UNIFIED_DATE_FMT,
) -> UnifiedFormatter:
    """Create a UnifiedFormatter with project default format and date format."""
    return UnifiedFormatter(fmt=fmt, datefmt=datefmt)


def setup_logging(
    level: int = logging.WARNING,
    log_path: Optional[Union[str, Path]] = None,
    max_bytes: int = DEFAULT_LOG_MAX_BYTES,
    backup_count: int = DEFAULT_LOG_BACKUP_COUNT,
    endpoint: Optional[str] = None,
    logger_name: str = "pjbridge",
) -> logging.Logger:
    """Setup logging for the bridge: console to stderr + optional rotating file.

    Handlers previously installed by this function are replaced, so calling
    it twice does not duplicate output.

    Args:
        level: Console log level
        log_path: Optional log file; file handler always logs DEBUG
        max_bytes: Rotation size of the log file
        backup_count: Number of rotated files to keep
        endpoint: Optional "host:port" stamped on every record
        logger_name: Logger to configure (default: package logger)

    Returns:
        Configured logger
    """
    bridge_logger = logging.getLogger(logger_name)
    bridge_logger.setLevel(logging.DEBUG)
    bridge_logger.propagate = False
    for handler in bridge_logger.handlers[:]:
        bridge_logger.removeHandler(handler)
        handler.close()

    formatter = create_unified_formatter()
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    bridge_logger.addHandler(console_handler)

    if log_path:
        log_file = Path(log_path)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file,
            encoding="utf-8",
            mode="a",
            maxBytes=max_bytes,
            backupCount=backup_count,
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        bridge_logger.addHandler(file_handler)

    if endpoint:
        endpoint_filter = EndpointFilter(endpoint)
        for handler in bridge_logger.handlers:
            handler.addFilter(endpoint_filter)

    bridge_logger.debug("Bridge logging configured (file=%s)", log_path)
    return bridge_logger
