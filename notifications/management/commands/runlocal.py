"""Development server that skips migration checks.

The notification tables are created from db/schema.sql, not by Django
migrations, so the runserver migration check would only report noise.
"""

from django.core.management.commands.runserver import Command as RunServer


class Command(RunServer):
    """Runserver without migration checks."""

    help = "Start development server without migration checks"

    def check_migrations(self, *_args, **_kwargs):
        """Skip migration checks; the schema is managed by db/schema.sql."""
        self.stdout.write(
            self.style.WARNING(
                "Skipping migration checks (schema is managed by db/schema.sql)"
            )
        )
