"""Recompute unread counters from the notifications table."""

from uuid import UUID

from django.core.management.base import BaseCommand, CommandError

from notifications.services.unread_counter import unread_counter_service


class Command(BaseCommand):
    """Repair unread counter drift by recounting unread notifications."""

    help = "Recompute unread counters for every recipient, or for one"

    def add_arguments(self, parser):
        """Add the optional recipient filter."""
        parser.add_argument(
            "--recipient",
            help="Only reconcile this recipient id",
        )

    def handle(self, *_args, **options):
        """Reconcile counters and report how many were corrected."""
        recipient_id = None
        if options.get("recipient"):
            try:
                recipient_id = UUID(options["recipient"])
            except ValueError as e:
                raise CommandError(f"Invalid recipient id: {options['recipient']}") from e

        corrected = unread_counter_service.reconcile(recipient_id)
        self.stdout.write(self.style.SUCCESS(f"Corrected {corrected} unread counter(s)"))
