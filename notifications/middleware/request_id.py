"""Correlation id middleware."""

from collections.abc import Callable

from django.http import HttpRequest, HttpResponse

from notifications.constants import REQUEST_ID_HEADER
from notifications.logging.context import normalize_request_id, request_scope


class RequestIDMiddleware:
    """Bind an X-Request-ID to every request.

    A well-formed incoming header is reused so calls can be traced across
    services; anything else is replaced by a fresh UUID. The id is bound
    for logging and error envelopes and echoed on the response.
    """

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        """Initialize the middleware.

        Args:
            get_response: The next middleware or view in the chain.
        """
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        """Run the rest of the chain inside a request scope."""
        request_id = normalize_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.request_id = request_id  # type: ignore[attr-defined]

        with request_scope(request_id):
            response = self.get_response(request)

        response[REQUEST_ID_HEADER] = request_id
        return response
