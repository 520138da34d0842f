"""Unread notification counter maintained alongside every notification write.

Each recipient has one UnreadCounter row. Writers lock that row with
``select_for_update`` before touching the recipient's notifications, so
every writer for a recipient is serialized on the same lock and always
acquires it first.
"""

from uuid import UUID

from django.db import transaction
from django.db.models import Count

import structlog

from notifications.models import Notification, UnreadCounter

logger = structlog.get_logger(__name__)


class UnreadCounterService:
    """Read, adjust and reconcile per-recipient unread counters."""

    def get(self, recipient_id: UUID) -> int:
        """Return the recipient's unread count with a single primary key read.

        Args:
            recipient_id: Recipient to look up.

        Returns:
            Number of unread notifications, 0 when no counter exists yet.
        """
        count = (
            UnreadCounter.objects.filter(recipient_id=recipient_id)
            .values_list("count", flat=True)
            .first()
        )
        return count or 0

    def lock(self, recipient_id: UUID) -> UnreadCounter:
        """Create the recipient's counter if needed and lock it.

        Must be called inside ``transaction.atomic``.

        Args:
            recipient_id: Recipient whose counter to lock.

        Returns:
            The locked counter row.
        """
        UnreadCounter.objects.get_or_create(recipient_id=recipient_id)
        return UnreadCounter.objects.select_for_update().get(recipient_id=recipient_id)

    def increment(self, counter: UnreadCounter, amount: int = 1) -> int:
        """Add to a locked counter.

        Args:
            counter: Counter row returned by ``lock``.
            amount: Number of new unread notifications.

        Returns:
            The new count.
        """
        return self._save(counter, counter.count + amount)

    def decrement(self, counter: UnreadCounter, amount: int = 1) -> int:
        """Subtract from a locked counter, clamping at zero.

        A decrement past zero means the counter had drifted from the real
        unread set; it is clamped and logged as an invariant violation.

        Args:
            counter: Counter row returned by ``lock``.
            amount: Number of notifications that stopped being unread.

        Returns:
            The new count.
        """
        new_count = counter.count - amount
        if new_count < 0:
            logger.error(
                "unread_counter_underflow",
                recipient_id=str(counter.recipient_id),
                count=counter.count,
                decrement=amount,
            )
            new_count = 0
        return self._save(counter, new_count)

    def set(self, counter: UnreadCounter, value: int) -> int:
        """Overwrite a locked counter with a recomputed value."""
        if value != counter.count:
            logger.warning(
                "unread_counter_corrected",
                recipient_id=str(counter.recipient_id),
                previous=counter.count,
                actual=value,
            )
        return self._save(counter, value)

    def reconcile(self, recipient_id: UUID | None = None) -> int:
        """Recompute counters from the notifications table and fix drift.

        Args:
            recipient_id: Only reconcile this recipient; all when omitted.

        Returns:
            Number of counters that were corrected.
        """
        unread = Notification.objects.filter(is_read=False)
        counters = UnreadCounter.objects.all()
        if recipient_id is not None:
            unread = unread.filter(recipient_id=recipient_id)
            counters = counters.filter(recipient_id=recipient_id)

        recipients = set(counters.values_list("recipient_id", flat=True))
        recipients.update(
            row["recipient_id"]
            for row in unread.values("recipient_id").annotate(total=Count("id"))
        )
        if recipient_id is not None:
            recipients.add(recipient_id)

        corrected = 0
        for recipient in sorted(recipients, key=str):
            with transaction.atomic():
                counter = self.lock(recipient)
                actual = Notification.objects.filter(
                    recipient_id=recipient, is_read=False
                ).count()
                if actual != counter.count:
                    self.set(counter, actual)
                    corrected += 1

        logger.info(
            "unread_counters_reconciled",
            checked=len(recipients),
            corrected=corrected,
        )
        return corrected

    def _save(self, counter: UnreadCounter, value: int) -> int:
        counter.count = value
        counter.save(update_fields=["count", "updated_at"])
        return value


unread_counter_service = UnreadCounterService()
