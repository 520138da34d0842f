"""Time-bucketed digest batches and their periodic flush.

Notifications routed to the DIGEST channel are copied into the batch for
the recipient's digest frequency and the current period. Once a period has
ended, ``flush_due`` sends each pending batch as one aggregated email.
"""

import smtplib
from datetime import datetime
from uuid import UUID

from django.db import transaction
from django.db.models import Q
from django.utils import timezone

import structlog

from notifications.enums import DigestBatchStatus, DigestFrequency, NotificationType
from notifications.models import DigestBatch, DigestEntry, Notification
from notifications.services.email_service import EmailService

logger = structlog.get_logger(__name__)

DIGEST_TEMPLATE = "notifications/email/digest.html"


def period_key(frequency: str, moment: datetime) -> str:
    """Return the digest period containing ``moment`` in the local time zone.

    Args:
        frequency: daily or weekly.
        moment: Aware datetime.

    Returns:
        ``YYYY-MM-DD`` for daily digests, ISO week ``YYYY-Www`` for weekly.
    """
    local_date = timezone.localtime(moment).date()
    if DigestFrequency(frequency) == DigestFrequency.DAILY:
        return local_date.isoformat()
    year, week, _ = local_date.isocalendar()
    return f"{year}-W{week:02d}"


class DigestScheduler:
    """Queue notifications into digest batches and flush ended periods."""

    def __init__(self, email_service: EmailService | None = None) -> None:
        """Initialize the scheduler.

        Args:
            email_service: Transport for aggregated digests.
        """
        self.email_service = email_service or EmailService()

    def enqueue(
        self,
        notification: Notification,
        frequency: str,
        recipient_address: str | None = None,
    ) -> DigestEntry | None:
        """Add a notification to the recipient's batch for the current period.

        Args:
            notification: Stored notification to summarize.
            frequency: Recipient's digest frequency.
            recipient_address: Email address to deliver the digest to.

        Returns:
            The new entry, or None if the current batch was already flushed.
        """
        key = period_key(frequency, timezone.now())

        with transaction.atomic():
            DigestBatch.objects.get_or_create(
                recipient_id=notification.recipient_id,
                frequency=frequency,
                period_key=key,
                defaults={"recipient_address": recipient_address},
            )
            batch = DigestBatch.objects.select_for_update().get(
                recipient_id=notification.recipient_id,
                frequency=frequency,
                period_key=key,
            )
            if batch.status != DigestBatchStatus.PENDING.value:
                logger.warning(
                    "digest_batch_closed",
                    batch_id=batch.id,
                    notification_id=str(notification.id),
                    status=batch.status,
                )
                return None

            if recipient_address and batch.recipient_address != recipient_address:
                batch.recipient_address = recipient_address
                batch.save(update_fields=["recipient_address"])

            entry = DigestEntry.objects.create(
                batch=batch,
                notification=notification,
                notification_type=notification.type,
                content=notification.content,
                actor_id=notification.actor_id,
                related_id=notification.related_id,
                created_at=notification.created_at,
            )

        logger.info(
            "digest_entry_queued",
            batch_id=batch.id,
            notification_id=str(notification.id),
            frequency=frequency,
            period_key=key,
        )
        return entry

    def due_batch_ids(self, now: datetime | None = None) -> list[int]:
        """Return pending batches whose period has ended."""
        now = now or timezone.now()
        current_period = Q(
            frequency=DigestFrequency.DAILY.value,
            period_key=period_key(DigestFrequency.DAILY.value, now),
        ) | Q(
            frequency=DigestFrequency.WEEKLY.value,
            period_key=period_key(DigestFrequency.WEEKLY.value, now),
        )
        return list(
            DigestBatch.objects.filter(status=DigestBatchStatus.PENDING.value)
            .exclude(current_period)
            .order_by("created_at")
            .values_list("id", flat=True)
        )

    def flush_due(self, now: datetime | None = None) -> int:
        """Flush every pending batch whose period has ended.

        Safe to run concurrently and to retry: each batch is flushed under
        its row lock and skipped once it is no longer pending.

        Args:
            now: Reference time, defaults to the current time.

        Returns:
            Number of digests sent.
        """
        batch_ids = self.due_batch_ids(now)
        sent = sum(1 for batch_id in batch_ids if self.flush_batch(batch_id))
        logger.info("digests_flushed", due=len(batch_ids), sent=sent)
        return sent

    def flush_batch(self, batch_id: int) -> bool:
        """Send one batch as a single aggregated email and clear it.

        Args:
            batch_id: Batch to flush.

        Returns:
            True if a digest email was sent by this call.
        """
        with transaction.atomic():
            batch = DigestBatch.objects.select_for_update().filter(pk=batch_id).first()
            if batch is None or batch.status != DigestBatchStatus.PENDING.value:
                logger.info("digest_batch_already_flushed", batch_id=batch_id)
                return False

            entries = list(batch.entries.order_by("-created_at"))
            if not entries:
                self._close(batch, DigestBatchStatus.SENT)
                return False

            if not batch.recipient_address:
                logger.warning(
                    "digest_recipient_address_missing",
                    batch_id=batch.id,
                    recipient_id=str(batch.recipient_id),
                    dropped_entries=len(entries),
                )
                self._close(batch, DigestBatchStatus.FAILED)
                return False

            try:
                self.email_service.send_template_email(
                    to_email=batch.recipient_address,
                    subject=self._subject(batch.frequency, len(entries)),
                    template_name=DIGEST_TEMPLATE,
                    context={
                        "frequency": batch.frequency,
                        "period_key": batch.period_key,
                        "entries": [
                            {
                                "label": NotificationType(entry.notification_type).label,
                                "content": entry.content,
                                "created_at": entry.created_at,
                            }
                            for entry in entries
                        ],
                    },
                )
            except ValueError as e:
                logger.error("digest_flush_failed", batch_id=batch.id, error=str(e))
                self._close(batch, DigestBatchStatus.FAILED)
                return False
            except (smtplib.SMTPException, OSError) as e:
                # Stays PENDING and is picked up by the next flush
                logger.error(
                    "digest_flush_deferred", batch_id=batch.id, error=str(e)
                )
                return False

            self._close(batch, DigestBatchStatus.SENT)

        logger.info(
            "digest_flushed",
            batch_id=batch_id,
            recipient_id=str(batch.recipient_id),
            frequency=batch.frequency,
            period_key=batch.period_key,
            entries=len(entries),
        )
        return True

    def pending_entries(self, recipient_id: UUID) -> list[DigestEntry]:
        """Return the recipient's queued, not yet flushed digest entries."""
        return list(
            DigestEntry.objects.filter(
                batch__recipient_id=recipient_id,
                batch__status=DigestBatchStatus.PENDING.value,
            ).order_by("-created_at")
        )

    def _close(self, batch: DigestBatch, status: DigestBatchStatus) -> None:
        batch.status = status.value
        batch.sent_at = timezone.now() if status == DigestBatchStatus.SENT else None
        batch.save(update_fields=["status", "sent_at"])
        batch.entries.all().delete()

    @staticmethod
    def _subject(frequency: str, count: int) -> str:
        noun = "notification" if count == 1 else "notifications"
        return f"Your {frequency} digest: {count} new {noun}"


digest_scheduler = DigestScheduler()
