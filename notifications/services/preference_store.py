"""Per-user notification preferences with lazy defaults."""

from typing import Any
from uuid import UUID

from django.db import transaction

import structlog

from notifications.enums import DigestFrequency
from notifications.exceptions import NotificationValidationError
from notifications.models import NotificationPreference
from notifications.models.notification_preference import DEFAULT_PREFERENCES

logger = structlog.get_logger(__name__)


class PreferenceStore:
    """Read and partially update NotificationPreference rows.

    There is no delete: a preference row lives as long as the account.
    """

    def get(self, user_id: UUID) -> NotificationPreference:
        """Return the user's preferences, creating the default row if absent.

        Args:
            user_id: Owner of the preferences.

        Returns:
            A fully populated preference record.
        """
        preference, created = NotificationPreference.objects.get_or_create(
            user_id=user_id, defaults=DEFAULT_PREFERENCES
        )
        if created:
            logger.info("notification_preferences_materialized", user_id=str(user_id))
        return preference

    def update(self, user_id: UUID, changes: dict[str, Any]) -> NotificationPreference:
        """Merge the supplied fields into the user's preferences.

        Fields not present in ``changes`` keep their current (or default)
        value. Full replacement is not supported.

        Args:
            user_id: Owner of the preferences.
            changes: Field name to new value.

        Returns:
            The updated preference record.

        Raises:
            NotificationValidationError: On unknown fields or values.
        """
        self._validate(changes)

        with transaction.atomic():
            self.get(user_id)
            preference = NotificationPreference.objects.select_for_update().get(
                user_id=user_id
            )
            changed_fields = [
                field
                for field, value in changes.items()
                if getattr(preference, field) != value
            ]
            for field in changed_fields:
                setattr(preference, field, changes[field])
            if changed_fields:
                preference.save(update_fields=[*changed_fields, "updated_at"])

        logger.info(
            "notification_preferences_updated",
            user_id=str(user_id),
            changed_fields=changed_fields,
        )
        return preference

    def _validate(self, changes: dict[str, Any]) -> None:
        unknown = sorted(set(changes) - set(DEFAULT_PREFERENCES))
        if unknown:
            raise NotificationValidationError(
                f"Unknown preference fields: {', '.join(unknown)}"
            )

        for field, value in changes.items():
            if field == "digest_frequency":
                if value not in {frequency.value for frequency in DigestFrequency}:
                    raise NotificationValidationError(
                        f"Invalid digest_frequency: {value}"
                    )
            elif not isinstance(value, bool):
                raise NotificationValidationError(f"{field} must be a boolean")


preference_store = PreferenceStore()
