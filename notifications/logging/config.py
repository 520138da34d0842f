"""structlog setup: JSON lines to a rotating file plus a colored console."""

import logging
import logging.handlers
import os
from pathlib import Path

import colorama
import structlog

from notifications.logging.processors import (
    add_job_context,
    add_process_info,
    add_request_context,
    add_service_context,
    console_renderer,
)

MAX_LOG_FILE_BYTES = 100 * 1024 * 1024

# Shared by structlog loggers and by records from Django, rq and other
# stdlib loggers
_TIMESTAMPER = structlog.processors.TimeStamper(fmt="iso", utc=True)
_CONTEXT_PROCESSORS = [add_request_context, add_job_context]


def _formatter(renderer, *extra_processors) -> structlog.stdlib.ProcessorFormatter:
    return structlog.stdlib.ProcessorFormatter(
        processor=renderer,
        foreign_pre_chain=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            _TIMESTAMPER,
            *_CONTEXT_PROCESSORS,
            *extra_processors,
        ],
    )


def setup_logging() -> None:
    """Route structlog and stdlib logging to a JSON file and the console.

    The JSON file carries service and process metadata for aggregation;
    the console shows a compact colored line per event.

    Environment Variables:
    - LOG_FILE_PATH: Path to log file (default: ./logs/notification-hub.log)
    - LOG_LEVEL: Logging level (default: INFO)
    - LOG_BACKUP_COUNT: Rotated files to keep (default: 240)
    - SERVICE_NAME: Service name for metadata (default: notification-hub)
    - ENVIRONMENT: Deployment environment (default: development)
    """
    log_file_path = Path(os.getenv("LOG_FILE_PATH", "./logs/notification-hub.log"))
    log_level = os.getenv("LOG_LEVEL", "INFO").upper()
    level = getattr(logging, log_level, logging.INFO)

    log_file_path.parent.mkdir(parents=True, exist_ok=True)
    colorama.init(autoreset=True)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            _TIMESTAMPER,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            *_CONTEXT_PROCESSORS,
            add_service_context,
            add_process_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    file_handler = logging.handlers.RotatingFileHandler(
        filename=log_file_path,
        maxBytes=MAX_LOG_FILE_BYTES,
        backupCount=int(os.getenv("LOG_BACKUP_COUNT", "240")),
        encoding="utf-8",
    )
    file_handler.setFormatter(
        _formatter(
            structlog.processors.JSONRenderer(), add_service_context, add_process_info
        )
    )

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(_formatter(console_renderer))

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    for handler in (file_handler, console_handler):
        handler.setLevel(level)
        root_logger.addHandler(handler)
    root_logger.setLevel(level)

    structlog.get_logger(__name__).info(
        "logging_configured",
        log_file=str(log_file_path),
        log_level=log_level,
    )
