"""Logging setup for the backend service.

Standard error belongs to the message sink: one received message, one line.
Operational logs therefore go to stdout and, when a log file is configured,
to a rotating file. Every record is tagged with the service name so that
output from several instances can be told apart.
"""

import json
import logging
import logging.handlers
import sys
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field

TEXT_FORMAT = "%(asctime)s %(levelname)-8s [%(service)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Every attribute a bare LogRecord carries; the rest arrived through `extra`.
_STANDARD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


class LogLevel(str, Enum):
    """Valid log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LoggingConfig(BaseModel):
    """Where and how operational logs are written."""

    level: LogLevel = Field(default=LogLevel.INFO, description="Root log level")
    json_format: bool = Field(default=False, description="One JSON object per record")
    service_name: str = Field(default="backend", description="Tag added to every record")
    file_path: Path | None = Field(
        default=None, description="Rotating log file, in addition to stdout"
    )
    max_bytes: int = Field(default=10_485_760, gt=0, description="Rotate after this size")
    backup_count: int = Field(default=5, ge=0, description="Rotated files to keep")


class ServiceNameFilter(logging.Filter):
    """Stamp records with the service name."""

    def __init__(self, service_name: str) -> None:
        super().__init__()
        self.service_name = service_name

    def filter(self, record: logging.LogRecord) -> bool:
        record.service = self.service_name
        return True


class StructuredFormatter(logging.Formatter):
    """Formatter emitting one JSON object per record, extras included."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}:{record.funcName}:{record.lineno}",
        }
        log_data.update(
            (key, value)
            for key, value in vars(record).items()
            if key not in _STANDARD_ATTRS
        )
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def _build_handlers(config: LoggingConfig) -> list[logging.Handler]:
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]

    if config.file_path is not None:
        config.file_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            logging.handlers.RotatingFileHandler(
                filename=config.file_path,
                maxBytes=config.max_bytes,
                backupCount=config.backup_count,
                encoding="utf-8",
            )
        )

    return handlers


def setup_logging(config: LoggingConfig | None = None) -> None:
    """
    Route operational logs to stdout and the optional log file.

    Existing root handlers are replaced, so calling this again reconfigures
    logging rather than duplicating output.

    Args:
        config: Logging configuration. If None, uses defaults.
    """
    if config is None:
        config = LoggingConfig()

    formatter = (
        StructuredFormatter()
        if config.json_format
        else logging.Formatter(TEXT_FORMAT, datefmt=DATE_FORMAT)
    )
    service_filter = ServiceNameFilter(config.service_name)

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    root_logger.setLevel(config.level.value)

    for handler in _build_handlers(config):
        handler.setFormatter(formatter)
        handler.addFilter(service_filter)
        root_logger.addHandler(handler)

    logging.getLogger(__name__).debug(
        "Logging configured",
        extra={"log_file": config.file_path, "json_format": config.json_format},
    )


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)
