"""Flush digest batches whose period has ended."""

from django.core.management.base import BaseCommand

from notifications.services.digest_scheduler import digest_scheduler


class Command(BaseCommand):
    """Send every due digest batch as one aggregated email."""

    help = "Flush pending digest batches whose daily or weekly period has ended"

    def handle(self, *_args, **_options):
        """Run the flush and report how many digests were sent."""
        due = digest_scheduler.due_batch_ids()
        sent = digest_scheduler.flush_due()
        self.stdout.write(
            self.style.SUCCESS(f"Flushed {sent} digest(s) out of {len(due)} due batch(es)")
        )
