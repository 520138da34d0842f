"""Notification preference schemas."""

from notifications.schemas.preference.request.preference_update_request import (
    PreferenceUpdateRequest,
)
from notifications.schemas.preference.response.preference_response import (
    PreferenceResponse,
)

__all__ = ["PreferenceResponse", "PreferenceUpdateRequest"]
