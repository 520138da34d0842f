"""Logging utilities for the notification hub."""

from notifications.logging.config import setup_logging
from notifications.logging.context import (
    clear_request_id,
    get_request_id,
    normalize_request_id,
    request_scope,
    set_request_id,
)

__all__ = [
    "clear_request_id",
    "get_request_id",
    "normalize_request_id",
    "request_scope",
    "set_request_id",
    "setup_logging",
]
