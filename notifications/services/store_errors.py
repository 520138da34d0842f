"""Translation of database failures into retryable store errors."""

import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import TypeVar

from django.conf import settings
from django.db import InterfaceError, OperationalError

import structlog

from notifications.exceptions import TransientStoreError

logger = structlog.get_logger(__name__)

T = TypeVar("T")


@contextmanager
def translate_store_errors(operation: str) -> Iterator[None]:
    """Re-raise connection failures and statement timeouts as TransientStoreError.

    PostgreSQL cancels statements that exceed ``statement_timeout`` with an
    error Django surfaces as OperationalError; a dropped connection surfaces
    as InterfaceError. Both are worth retrying.

    Args:
        operation: Name of the operation, for logging.

    Raises:
        TransientStoreError: If the store failed transiently.
    """
    try:
        yield
    except (OperationalError, InterfaceError) as e:
        logger.warning("store_operation_failed", operation=operation, error=str(e))
        raise TransientStoreError() from e


def call_with_retry(operation: str, func: Callable[[], T]) -> T:
    """Run an idempotent store operation, retrying transient failures.

    Waits ``base * 2**(attempt - 1)`` seconds between attempts, where base
    is NOTIFICATION_STORE_RETRY_BASE_DELAY, and gives up after
    NOTIFICATION_STORE_RETRY_ATTEMPTS attempts.

    Args:
        operation: Name of the operation, for logging.
        func: Zero argument callable performing the operation.

    Returns:
        Whatever ``func`` returns.

    Raises:
        TransientStoreError: If every attempt failed transiently.
    """
    attempts = max(1, settings.NOTIFICATION_STORE_RETRY_ATTEMPTS)
    base_delay = settings.NOTIFICATION_STORE_RETRY_BASE_DELAY

    for attempt in range(1, attempts + 1):
        try:
            with translate_store_errors(operation):
                return func()
        except TransientStoreError:
            if attempt == attempts:
                logger.error(
                    "store_operation_gave_up", operation=operation, attempts=attempts
                )
                raise
            delay = base_delay * (2 ** (attempt - 1))
            logger.warning(
                "store_operation_retry",
                operation=operation,
                attempt=attempt,
                delay_seconds=delay,
            )
            if delay > 0:
                time.sleep(delay)

    raise AssertionError("unreachable")
