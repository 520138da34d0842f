"""Client for the HTTP push gateway."""

from typing import Any

from django.conf import settings

import requests
import structlog

from notifications.exceptions.delivery_exceptions import PushDeliveryError

logger = structlog.get_logger(__name__)


class PushService:
    """Send push messages through an HTTP gateway.

    The gateway owns device registration; this client only posts the
    message for a user, optionally with a device token supplied by the
    producer.
    """

    def __init__(self) -> None:
        """Initialize push service with gateway configuration."""
        self.gateway_url = settings.PUSH_GATEWAY_URL
        self.timeout = settings.PUSH_GATEWAY_TIMEOUT

    @property
    def is_configured(self) -> bool:
        """Whether a gateway URL has been set."""
        return bool(self.gateway_url)

    def send_push(
        self,
        user_id: str,
        title: str,
        body: str,
        device_token: str | None = None,
        data: dict[str, Any] | None = None,
    ) -> None:
        """Post one push message to the gateway.

        Args:
            user_id: Recipient user id.
            title: Notification title.
            body: Notification body text.
            device_token: Explicit device token, if the producer supplied one.
            data: Extra payload delivered to the client app.

        Raises:
            PushDeliveryError: If the gateway is unreachable or rejects the
                message. 4xx responses are permanent, everything else is not.
        """
        if not self.is_configured:
            raise PushDeliveryError("Push gateway not configured", permanent=True)

        payload: dict[str, Any] = {
            "userId": user_id,
            "title": title,
            "body": body,
            "data": data or {},
        }
        if device_token:
            payload["deviceToken"] = device_token

        try:
            response = requests.post(
                self.gateway_url,
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error("push_gateway_unreachable", user_id=user_id, error=str(e))
            raise PushDeliveryError(f"Push gateway request failed: {e}") from e

        if response.status_code >= 400:
            logger.error(
                "push_gateway_error",
                user_id=user_id,
                status_code=response.status_code,
                response_text=response.text,
            )
            raise PushDeliveryError(
                f"Push gateway returned {response.status_code}: {response.text}",
                status_code=response.status_code,
                permanent=response.status_code < 500,
            )

        logger.info("push_sent", user_id=user_id)
