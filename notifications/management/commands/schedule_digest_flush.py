"""Register the periodic digest flush with rq-scheduler."""

from django.conf import settings
from django.core.management.base import BaseCommand
from django.utils import timezone

import django_rq

from notifications.jobs.delivery_jobs import flush_digests_job

FLUSH_JOB_ID = "notification-hub:flush-digests"


class Command(BaseCommand):
    """Schedule flush_digests_job to repeat every digest flush interval.

    Re-running the command replaces the existing schedule instead of adding
    a second one.
    """

    help = "Schedule the recurring digest flush job"

    def handle(self, *_args, **_options):
        """Cancel any previous schedule and register a fresh one."""
        scheduler = django_rq.get_scheduler("default")
        if FLUSH_JOB_ID in scheduler:
            scheduler.cancel(FLUSH_JOB_ID)

        interval = settings.NOTIFICATION_DIGEST_FLUSH_INTERVAL
        scheduler.schedule(
            scheduled_time=timezone.now(),
            func=flush_digests_job,
            interval=interval,
            repeat=None,
            id=FLUSH_JOB_ID,
        )
        self.stdout.write(
            self.style.SUCCESS(f"Digest flush scheduled every {interval} seconds")
        )
