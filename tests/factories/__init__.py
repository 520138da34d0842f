"""Test data builders shared by unit and component tests."""

from datetime import timedelta
from uuid import UUID, uuid4

from django.conf import settings
from django.utils import timezone

import jwt
from faker import Faker

from notifications.constants import USER_SCOPE
from notifications.models import Notification
from notifications.services.notification_store import notification_store

fake = Faker()


def make_notification(
    recipient_id: UUID,
    notification_type: str = "like",
    minutes_ago: float = 0,
    **kwargs,
) -> Notification:
    """Create a notification through the store, backdated by ``minutes_ago``.

    Going through the store keeps the recipient's unread counter in step.
    """
    kwargs.setdefault("content", fake.sentence())
    notification = notification_store.create(
        recipient_id=recipient_id,
        notification_type=notification_type,
        **kwargs,
    )
    created_at = timezone.now() - timedelta(minutes=minutes_ago)
    Notification.objects.filter(pk=notification.pk).update(created_at=created_at)
    notification.created_at = created_at
    return notification


def make_token(user_id: UUID | str | None = None, scopes: list[str] | None = None) -> str:
    """Build a signed access token accepted by OAuth2Authentication."""
    now = timezone.now()
    payload = {
        "sub": str(user_id or uuid4()),
        "client_id": "test-client",
        "type": "access_token",
        "scopes": scopes if scopes is not None else [USER_SCOPE],
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=15)).timestamp()),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm="HS256")


def auth_headers(user_id: UUID | str | None = None, scopes: list[str] | None = None):
    """Return Django test client kwargs carrying a bearer token."""
    return {"HTTP_AUTHORIZATION": f"Bearer {make_token(user_id, scopes)}"}
