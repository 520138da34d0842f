"""Global exception handler for the notification hub.

Every failure leaves the API in the same envelope as successful calls:
``{"success": false, "error": {"code", "message", "requestId"}}``.
"""

import logging
import traceback
from typing import Any

from django.conf import settings

from pydantic import ValidationError
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler

from notifications.constants import REQUEST_ID_HEADER, TRANSIENT_RETRY_AFTER_SECONDS
from notifications.exceptions.notification_exceptions import (
    NotificationError,
    TransientStoreError,
)
from notifications.logging.context import get_request_id

logger = logging.getLogger(__name__)

# Envelope codes for errors raised by Django REST Framework itself
DRF_ERROR_CODES = {
    status.HTTP_400_BAD_REQUEST: "validation_error",
    status.HTTP_401_UNAUTHORIZED: "unauthorized",
    status.HTTP_403_FORBIDDEN: "forbidden",
    status.HTTP_404_NOT_FOUND: "not_found",
    status.HTTP_405_METHOD_NOT_ALLOWED: "method_not_allowed",
    status.HTTP_415_UNSUPPORTED_MEDIA_TYPE: "unsupported_media_type",
    status.HTTP_429_TOO_MANY_REQUESTS: "throttled",
}


def custom_exception_handler(
    exc: Exception, context: dict[str, Any]
) -> Response | None:
    """Custom exception handler for Django REST Framework.

    Handles notification errors, pydantic validation errors, DRF's own
    exceptions (authentication, permissions, parsing) and anything else,
    which becomes a 500.

    Args:
        exc: The exception that was raised.
        context: Context dictionary containing request and view information.

    Returns:
        A Response carrying the error envelope.
    """
    view = context.get("view")
    request = view.request if view else None
    request_id = get_request_id()

    if isinstance(exc, NotificationError):
        response = Response(
            _create_error_response(exc.code, exc.message, request_id, exc.detail),
            status=exc.status_code,
        )
        if isinstance(exc, TransientStoreError):
            response["Retry-After"] = str(TRANSIENT_RETRY_AFTER_SECONDS)
    elif isinstance(exc, ValidationError):
        response = Response(
            _create_error_response(
                "validation_error",
                "Invalid request parameters",
                request_id,
                exc.errors(include_url=False, include_context=False, include_input=False),
            ),
            status=status.HTTP_400_BAD_REQUEST,
        )
    else:
        # Let DRF translate its own exceptions, then re-wrap the body
        response = exception_handler(exc, context)
        if response is not None:
            response.data = _create_error_response(
                DRF_ERROR_CODES.get(response.status_code, "error"),
                _drf_message(exc),
                request_id,
            )
        else:
            response = Response(
                _create_error_response(
                    "internal_error",
                    "An internal server error occurred.",
                    request_id,
                ),
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )

    if request_id:
        response[REQUEST_ID_HEADER] = request_id

    _log_exception(exc, request, response)

    return response


def _create_error_response(
    code: str, message: str, request_id: str | None, details: Any = None
) -> dict[str, Any]:
    """Create the standard error envelope.

    Args:
        code: Stable machine readable error code.
        message: The error message to return to the client.
        request_id: The request ID for tracing.
        details: Optional structured detail.

    Returns:
        Dictionary with the error envelope.
    """
    error: dict[str, Any] = {
        "code": code,
        "message": message,
        "requestId": request_id,
    }
    if details is not None:
        error["details"] = details
    return {"success": False, "error": error}


def _drf_message(exc: Exception) -> str:
    """Flatten a DRF exception detail into one message."""
    detail = getattr(exc, "detail", None)
    if isinstance(detail, (list, dict)):
        return str(exc)
    if detail is not None:
        return str(detail)
    return str(exc)


def _log_exception(
    exc: Exception,
    request: Any,
    response: Response,
) -> None:
    """Log detailed exception information for troubleshooting.

    Client errors (4xx) log at warning level, everything else at error
    level. In DEBUG mode the stack trace is appended.

    Args:
        exc: The exception that was raised.
        request: The HTTP request object.
        response: The response that will be returned.
    """
    if 400 <= response.status_code < 500:
        log_level = logging.WARNING
    else:
        log_level = logging.ERROR

    error_type = type(exc).__name__
    request_path = request.path if request else "unknown"
    request_method = request.method if request else "unknown"

    log_message = (
        f"Exception occurred: {error_type}: {exc} | "
        f"Path: {request_method} {request_path} | "
        f"Status: {response.status_code}"
    )

    if settings.DEBUG or (
        log_level == logging.ERROR and not isinstance(exc, APIException)
    ):
        stack_trace = "".join(
            traceback.format_exception(type(exc), exc, exc.__traceback__)
        )
        log_message += f"\nStack trace:\n{stack_trace}"

    logger.log(log_level, log_message)
