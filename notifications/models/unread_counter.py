"""Materialized unread notification count per recipient."""

from django.db import models


class UnreadCounter(models.Model):
    """Number of unread notifications for one recipient.

    Every writer that changes a recipient's unread set locks this row with
    ``select_for_update`` in the same transaction as the notification write.
    Reads are a single primary key lookup.
    """

    recipient_id = models.UUIDField(
        primary_key=True,
        help_text="Recipient whose unread notifications are counted",
    )
    count = models.IntegerField(
        default=0,
        help_text="Number of unread notifications, never negative",
    )
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        """Django model metadata."""

        db_table = "unread_counters"
        managed = False

    def __str__(self) -> str:
        """Return string representation of the counter."""
        return f"{self.count} unread for {self.recipient_id}"
