"""Security context middleware for authenticated user access."""

from collections.abc import Callable

from django.http import HttpRequest, HttpResponse

import structlog

from notifications.auth.context import clear_current_user, get_current_user

logger = structlog.get_logger(__name__)


class SecurityContextMiddleware:
    """Scope the thread-local authenticated caller to a single request.

    OAuth2Authentication publishes the caller when DRF authenticates the
    request inside the view. This middleware guarantees the context starts
    empty and is cleared afterwards, so a worker thread never serves one
    request with the identity of a previous one.
    """

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        """Initialize the middleware.

        Args:
            get_response: The next middleware or view in the chain.
        """
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        """Process the request and manage security context.

        Args:
            request: The incoming HTTP request.

        Returns:
            The HTTP response.
        """
        if get_current_user() is not None:
            logger.warning("stale_security_context_cleared")
            clear_current_user()

        try:
            return self.get_response(request)
        finally:
            clear_current_user()
