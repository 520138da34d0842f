"""Notification model for user-facing notification data.

This module defines the in-app notification record. Per-channel delivery
tracking for EMAIL and PUSH lives in the NotificationDelivery model, and
the recipient's unread total lives in UnreadCounter.
"""

import uuid
from typing import ClassVar

from django.db import models
from django.utils import timezone

from notifications.enums import NotificationType


class Notification(models.Model):
    """A single notification shown to one recipient.

    Everything except ``is_read`` and ``read_at`` is immutable after
    creation. ``is_read`` only ever moves from False to True, and only
    through the mutation engine so the unread counter stays in step.

    Attributes:
        id: Unique identifier for the notification.
        recipient_id: User who owns and sees the notification.
        actor_id: User whose action produced the notification, if any.
        type: One of the NotificationType values.
        content: Rendered human readable text.
        related_id: Opaque reference to the entity the notification concerns.
        group_id: Optional producer supplied grouping key.
        is_read: Whether the recipient has read the notification.
        read_at: When the notification was marked read.
        created_at: Creation time; with ``id`` it forms the listing order.
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique identifier for the notification",
    )
    recipient_id = models.UUIDField(
        help_text="User receiving the notification",
    )
    actor_id = models.UUIDField(
        null=True,
        blank=True,
        help_text="User whose action produced the notification",
    )
    type = models.CharField(
        max_length=20,
        choices=NotificationType.choices(),
        help_text="Notification type (follow, like, comment, reply, mention, system)",
    )
    content = models.TextField(
        help_text="Rendered notification text",
    )
    related_id = models.CharField(
        max_length=255,
        null=True,
        blank=True,
        help_text="Opaque reference to the entity this notification concerns",
    )
    group_id = models.CharField(
        max_length=255,
        null=True,
        blank=True,
        help_text="Producer supplied key used to group related notifications",
    )
    is_read = models.BooleanField(
        default=False,
        help_text="Whether the notification has been read by the recipient",
    )
    read_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the notification was marked read",
    )
    created_at = models.DateTimeField(
        default=timezone.now,
        editable=False,
        help_text="When the notification was created",
    )

    class Meta:
        """Django model metadata."""

        db_table = "notifications"
        managed = False
        ordering: ClassVar[list[str]] = ["-created_at", "-id"]
        indexes: ClassVar[list] = [
            models.Index(
                fields=["recipient_id", "-created_at", "-id"],
                name="notif_recipient_order_idx",
            ),
            models.Index(
                fields=["recipient_id", "is_read", "-created_at"],
                name="notif_recipient_unread_idx",
            ),
        ]

    def __str__(self) -> str:
        """Return string representation of notification."""
        return f"{self.type} for recipient {self.recipient_id}"

    def __repr__(self) -> str:
        """Return detailed representation of notification."""
        return (
            f"<Notification(id={self.id}, "
            f"type={self.type}, "
            f"recipient={self.recipient_id}, "
            f"is_read={self.is_read})>"
        )

