"""Per-user notification delivery preferences."""

from typing import ClassVar

from django.db import models

from notifications.enums import DigestFrequency, NotificationType

# Values a preference row takes when the user has never written one.
DEFAULT_PREFERENCES: dict[str, bool | str] = {
    "follow_notifications": True,
    "like_notifications": True,
    "comment_notifications": True,
    "reply_notifications": True,
    "mention_notifications": True,
    "system_notifications": True,
    "email_notifications": False,
    "push_notifications": False,
    "digest_notifications": False,
    "digest_frequency": DigestFrequency.DAILY.value,
}


class NotificationPreference(models.Model):
    """Delivery preferences for one user.

    There is exactly one row per user. It is materialized lazily with
    DEFAULT_PREFERENCES on first read and updated in place afterwards.

    Attributes:
        user_id: Owning user, also the primary key.
        follow_notifications .. system_notifications: Per-type gates.
        email_notifications: Deliver immediately by email.
        push_notifications: Deliver immediately by push.
        digest_notifications: Add to the periodic digest.
        digest_frequency: Digest period, daily or weekly.
    """

    user_id = models.UUIDField(
        primary_key=True,
        help_text="User these preferences belong to",
    )
    follow_notifications = models.BooleanField(default=True)
    like_notifications = models.BooleanField(default=True)
    comment_notifications = models.BooleanField(default=True)
    reply_notifications = models.BooleanField(default=True)
    mention_notifications = models.BooleanField(default=True)
    system_notifications = models.BooleanField(default=True)
    email_notifications = models.BooleanField(default=False)
    push_notifications = models.BooleanField(default=False)
    digest_notifications = models.BooleanField(default=False)
    digest_frequency = models.CharField(
        max_length=10,
        choices=[(frequency.value, frequency.value) for frequency in DigestFrequency],
        default=DigestFrequency.DAILY.value,
        help_text="Digest flush period (daily or weekly)",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        """Django model metadata."""

        db_table = "notification_preferences"
        managed = False
        ordering: ClassVar[list[str]] = ["user_id"]

    def __str__(self) -> str:
        """Return string representation of the preference record."""
        return f"Notification preferences for {self.user_id}"

    def allows_type(self, notification_type: str) -> bool:
        """Check whether notifications of the given type are wanted.

        Args:
            notification_type: A NotificationType value.

        Returns:
            The value of the type's gating flag.
        """
        return bool(getattr(self, NotificationType(notification_type).preference_field))
