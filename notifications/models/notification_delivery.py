"""NotificationDelivery model for per-channel delivery tracking.

This module defines the delivery record which tracks EMAIL and PUSH
attempts for each notification. IN_APP delivery is the notification row
itself and DIGEST delivery is tracked by DigestBatch.
"""

from typing import ClassVar

from django.db import models
from django.utils import timezone

from notifications.enums import DeliveryStatus


class NotificationDelivery(models.Model):
    """Delivery status of one notification on one immediate channel.

    A notification has at most one delivery per channel. Background jobs
    read the row, skip it when it is already SENT, and record the outcome.

    Attributes:
        notification: The notification being delivered.
        channel: Delivery channel (EMAIL or PUSH).
        status: Current delivery status (PENDING, QUEUED, SENT, FAILED).
        retry_count: Number of failed attempts so far.
        error_message: Error details if delivery failed.
        recipient_address: Email address or push token, when supplied.
        created_at: When the delivery record was created.
        updated_at: When the delivery record was last updated.
        queued_at: When queued for delivery.
        sent_at: When successfully sent.
        failed_at: When permanently failed.
    """

    notification = models.ForeignKey(
        "notifications.Notification",
        on_delete=models.CASCADE,
        related_name="deliveries",
        db_column="notification_id",
        help_text="Notification being delivered",
    )
    channel = models.CharField(
        max_length=20,
        help_text="Delivery channel (EMAIL, PUSH)",
    )
    status = models.CharField(
        max_length=20,
        default=DeliveryStatus.PENDING.value,
        help_text="Delivery status (PENDING, QUEUED, SENT, FAILED)",
    )
    retry_count = models.IntegerField(
        default=0,
        help_text="Number of failed delivery attempts",
    )
    error_message = models.TextField(
        null=True,
        blank=True,
        help_text="Error details if delivery failed",
    )
    recipient_address = models.CharField(
        max_length=255,
        null=True,
        blank=True,
        help_text="Email address or device token for the channel",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    queued_at = models.DateTimeField(null=True, blank=True)
    sent_at = models.DateTimeField(null=True, blank=True)
    failed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        """Django model metadata."""

        db_table = "notification_deliveries"
        managed = False
        ordering: ClassVar[list[str]] = ["-created_at"]
        unique_together: ClassVar[list[list[str]]] = [["notification", "channel"]]
        indexes: ClassVar[list] = [
            models.Index(fields=["status", "-created_at"], name="delivery_status_idx"),
        ]

    def __str__(self) -> str:
        """Return string representation of the delivery."""
        return f"{self.channel} - {self.status}"

    def __repr__(self) -> str:
        """Return detailed representation of the delivery."""
        return (
            f"<NotificationDelivery(notification={self.notification_id}, "
            f"channel={self.channel}, "
            f"status={self.status})>"
        )

    def mark_queued(self) -> None:
        """Mark delivery as queued for processing."""
        self.status = DeliveryStatus.QUEUED.value
        self.queued_at = timezone.now()
        self.save(update_fields=["status", "queued_at", "updated_at"])

    def mark_sent(self) -> None:
        """Mark delivery as successfully sent."""
        self.status = DeliveryStatus.SENT.value
        self.sent_at = timezone.now()
        self.save(update_fields=["status", "sent_at", "updated_at"])

    def mark_failed(self, error_msg: str) -> None:
        """Mark delivery as permanently failed.

        Args:
            error_msg: Description of the failure.
        """
        self.status = DeliveryStatus.FAILED.value
        self.failed_at = timezone.now()
        self.error_message = error_msg
        self.save(update_fields=["status", "failed_at", "error_message", "updated_at"])

    def increment_retry(self) -> None:
        """Record one more failed attempt."""
        self.retry_count += 1
        self.save(update_fields=["retry_count", "updated_at"])

    def can_retry(self, max_retries: int) -> bool:
        """Check whether another attempt is allowed.

        Args:
            max_retries: Maximum number of attempts allowed.

        Returns:
            True if the delivery is unsent and under the retry limit.
        """
        return (
            self.retry_count < max_retries
            and self.status != DeliveryStatus.SENT.value
        )
