"""Exceptions raised by delivery transports."""


class DeliveryError(Exception):
    """Base exception for channel delivery failures.

    Attributes:
        permanent: Whether retrying cannot succeed.
    """

    def __init__(self, message: str, permanent: bool = False):
        """Initialize delivery error.

        Args:
            message: Error message
            permanent: True when retrying cannot succeed
        """
        self.permanent = permanent
        super().__init__(message)


class PushDeliveryError(DeliveryError):
    """Push gateway rejected or failed to accept a message."""

    def __init__(
        self, message: str, status_code: int | None = None, permanent: bool = False
    ):
        """Initialize push delivery error.

        Args:
            message: Error message
            status_code: HTTP status returned by the gateway, if any
            permanent: True when retrying cannot succeed
        """
        self.status_code = status_code
        super().__init__(message, permanent=permanent)
