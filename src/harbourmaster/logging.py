"""Opt-in logging setup for test harnesses and scripts.

The library itself only emits records through module loggers; nothing is
configured on import. Call setup_logging() from a conftest or a script to
get one of two formats:
- text: Human-readable for local runs
- json: Structured logging for CI (one object per line)
"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any

from pythonjsonlogger import json as jsonlogger

from harbourmaster.config import LoggingConfig

TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class HarbourmasterJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter with standard fields for log aggregation.

    Adds:
    - timestamp: ISO 8601 format with timezone
    - level: Log level name
    - logger: Logger name
    - service: Service identifier
    - pid: Process ID
    """

    def __init__(self, config: LoggingConfig, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._service = config.service_name

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = datetime.fromtimestamp(
            record.created, tz=timezone.utc
        ).isoformat()
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["service"] = self._service
        log_record["pid"] = record.process

        # Source location
        log_record["filename"] = record.filename
        log_record["lineno"] = record.lineno

        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)


def build_formatter(config: LoggingConfig) -> logging.Formatter:
    """Return the formatter selected by config.format."""
    if config.format == "json":
        return HarbourmasterJsonFormatter(config)
    return logging.Formatter(TEXT_FORMAT)


def setup_logging(config: LoggingConfig) -> logging.Handler:
    """Configure the harbourmaster logger hierarchy.

    Only the "harbourmaster" logger is touched, so host applications keep
    their own root configuration.

    Args:
        config: Logging configuration settings.

    Returns:
        The installed handler.
    """
    level = getattr(logging, config.level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(build_formatter(config))

    package_logger = logging.getLogger("harbourmaster")
    package_logger.handlers.clear()
    package_logger.addHandler(handler)
    package_logger.setLevel(level)
    package_logger.propagate = False

    # Suppress verbose HTTP client logs
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    return handler
