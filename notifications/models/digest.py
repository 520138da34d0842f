"""Digest batch models.

A DigestBatch collects the notifications a recipient asked to receive as a
periodic summary. Entries copy the notification's fields so a batch stays
intact when the recipient deletes the underlying notification.
"""

from typing import ClassVar

from django.db import models

from notifications.enums import DigestBatchStatus


class DigestBatch(models.Model):
    """Pending or sent digest for one recipient and period.

    Attributes:
        recipient_id: User the digest is for.
        frequency: daily or weekly.
        period_key: ``YYYY-MM-DD`` for daily, ISO ``YYYY-Www`` for weekly.
        status: PENDING until flushed, then SENT, or FAILED when undeliverable.
        recipient_address: Email address the digest is delivered to.
        created_at: When the first entry was queued.
        sent_at: When the aggregated message was sent.
    """

    recipient_id = models.UUIDField(
        help_text="User the digest is for",
    )
    frequency = models.CharField(
        max_length=10,
        help_text="Digest frequency (daily or weekly)",
    )
    period_key = models.CharField(
        max_length=10,
        help_text="Calendar day or ISO week the batch covers",
    )
    status = models.CharField(
        max_length=10,
        default=DigestBatchStatus.PENDING.value,
        help_text="Batch status (PENDING, SENT, FAILED)",
    )
    recipient_address = models.CharField(
        max_length=255,
        null=True,
        blank=True,
        help_text="Email address the digest is delivered to",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    sent_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        """Django model metadata."""

        db_table = "digest_batches"
        managed = False
        ordering: ClassVar[list[str]] = ["created_at"]
        unique_together: ClassVar[list[list[str]]] = [
            ["recipient_id", "frequency", "period_key"]
        ]
        indexes: ClassVar[list] = [
            models.Index(fields=["status", "period_key"], name="digest_status_idx"),
        ]

    def __str__(self) -> str:
        """Return string representation of the batch."""
        return f"{self.frequency} digest {self.period_key} for {self.recipient_id}"


class DigestEntry(models.Model):
    """One notification queued into a digest batch."""

    batch = models.ForeignKey(
        DigestBatch,
        on_delete=models.CASCADE,
        related_name="entries",
        db_column="batch_id",
    )
    notification = models.ForeignKey(
        "notifications.Notification",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="digest_entries",
        db_column="notification_id",
    )
    notification_type = models.CharField(max_length=20)
    content = models.TextField()
    actor_id = models.UUIDField(null=True, blank=True)
    related_id = models.CharField(max_length=255, null=True, blank=True)
    created_at = models.DateTimeField(
        help_text="Creation time of the underlying notification",
    )

    class Meta:
        """Django model metadata."""

        db_table = "digest_entries"
        managed = False
        ordering: ClassVar[list[str]] = ["-created_at"]

    def __str__(self) -> str:
        """Return string representation of the entry."""
        return f"{self.notification_type} entry in batch {self.batch_id}"
