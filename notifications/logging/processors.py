"""structlog processors adding correlation ids and service metadata."""

import os
import threading

from colorama import Fore, Style
from rq import get_current_job
from structlog.typing import EventDict, WrappedLogger

from notifications.logging.context import get_request_id

LEVEL_COLORS = {
    "DEBUG": Fore.CYAN,
    "INFO": Fore.GREEN,
    "WARNING": Fore.YELLOW,
    "ERROR": Fore.RED,
    "CRITICAL": Fore.RED + Style.BRIGHT,
}

# Printed first among the key/value pairs, in this order
CORRELATION_KEYS = ("caller_id", "notification_id", "delivery_id", "batch_id", "job_id")

# Rendered in the console prefix or kept for the JSON file only
CONSOLE_HIDDEN_KEYS = frozenset(
    {
        "level",
        "timestamp",
        "request_id",
        "logger",
        "event",
        "process_id",
        "thread_id",
        "service_name",
        "environment",
        "job",
    }
)


def add_request_context(
    _logger: WrappedLogger, _method_name: str, event_dict: EventDict
) -> EventDict:
    """Attach the correlation id and the authenticated caller, when known."""
    from notifications.auth.context import get_current_user  # noqa: PLC0415

    request_id = get_request_id()
    if request_id:
        event_dict["request_id"] = request_id

    user = get_current_user()
    if user is not None:
        event_dict.setdefault("caller_id", user.user_id)
    return event_dict


def add_job_context(
    _logger: WrappedLogger, _method_name: str, event_dict: EventDict
) -> EventDict:
    """Attach the RQ job id and function when logging from a worker."""
    job = get_current_job()
    if job is not None:
        event_dict.setdefault("job_id", job.id)
        event_dict.setdefault("job", job.func_name)
    return event_dict


def add_service_context(
    _logger: WrappedLogger, _method_name: str, event_dict: EventDict
) -> EventDict:
    """Attach service name and deployment environment."""
    event_dict["service_name"] = os.getenv("SERVICE_NAME", "notification-hub")
    event_dict["environment"] = os.getenv("ENVIRONMENT", "development")
    return event_dict


def add_process_info(
    _logger: WrappedLogger, _method_name: str, event_dict: EventDict
) -> EventDict:
    """Attach process and thread ids."""
    event_dict["process_id"] = os.getpid()
    event_dict["thread_id"] = threading.get_ident()
    return event_dict


def console_renderer(
    _logger: WrappedLogger, _method_name: str, event_dict: EventDict
) -> str:
    """Render one colored console line.

    Format: ``[LEVEL] timestamp | request_id | logger | event key=value ...``
    with correlation keys listed before any other context.
    """
    level = str(event_dict.get("level", "info")).upper()
    color = LEVEL_COLORS.get(level, Fore.WHITE)

    prefix = " | ".join(
        (
            f"{color}[{level:<8}]{Style.RESET_ALL} {event_dict.get('timestamp', '')}",
            f"{Fore.MAGENTA}{event_dict.get('request_id', '-')}{Style.RESET_ALL}",
            f"{Fore.BLUE}{event_dict.get('logger', 'root')}{Style.RESET_ALL}",
            str(event_dict.get("event", "")),
        )
    )

    ordered = [key for key in CORRELATION_KEYS if key in event_dict]
    ordered += [
        key
        for key in event_dict
        if key not in CONSOLE_HIDDEN_KEYS and key not in CORRELATION_KEYS
    ]
    if not ordered:
        return prefix

    pairs = " ".join(f"{key}={event_dict[key]}" for key in ordered)
    return f"{prefix} {Fore.YELLOW}{pairs}{Style.RESET_ALL}"
