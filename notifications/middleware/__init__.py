"""Middleware components for the notification hub."""

from notifications.middleware.request_id import RequestIDMiddleware
from notifications.middleware.security_context import SecurityContextMiddleware

__all__ = [
    "RequestIDMiddleware",
    "SecurityContextMiddleware",
]
