"""Per-thread correlation id shared by request handling, jobs and log events."""

import re
import threading
import uuid
from collections.abc import Iterator
from contextlib import contextmanager

_log_context = threading.local()

# Incoming ids are echoed into response headers and log files
_SAFE_REQUEST_ID = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")


def new_request_id() -> str:
    """Generate a fresh correlation id."""
    return str(uuid.uuid4())


def normalize_request_id(candidate: str | None) -> str:
    """Return ``candidate`` when it is safe to echo, otherwise a fresh id."""
    if candidate and _SAFE_REQUEST_ID.match(candidate):
        return candidate
    return new_request_id()


def set_request_id(request_id: str) -> None:
    """Bind ``request_id`` to the current thread."""
    _log_context.request_id = request_id


def get_request_id() -> str | None:
    """Return the id bound to the current thread, if any."""
    return getattr(_log_context, "request_id", None)


def clear_request_id() -> None:
    """Unbind the current thread's id."""
    if hasattr(_log_context, "request_id"):
        delattr(_log_context, "request_id")


@contextmanager
def request_scope(request_id: str | None = None) -> Iterator[str]:
    """Bind a correlation id for the duration of a request or a job.

    The id that was bound before entering, if any, is restored on exit.

    Args:
        request_id: Id to bind; a fresh one is generated when omitted.

    Yields:
        The bound id.
    """
    previous = get_request_id()
    request_id = request_id or new_request_id()
    set_request_id(request_id)
    try:
        yield request_id
    finally:
        if previous is None:
            clear_request_id()
        else:
            set_request_id(previous)
