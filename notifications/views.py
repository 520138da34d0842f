"""API views for the notifications application.

Every view delegates to the notification façade and wraps the result in
the ``{success, data}`` envelope. Failures raise and are turned into
``{success: false, error}`` envelopes by the DRF exception handler.
"""

import structlog
from rest_framework import status
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from notifications.auth.oauth2 import OAuth2Authentication
from notifications.constants import ADMIN_SCOPE, IDEMPOTENCY_KEY_HEADER, USER_SCOPE
from notifications.schemas.envelope import SuccessEnvelope
from notifications.services.notification_facade import notification_facade

logger = structlog.get_logger(__name__)


def _require_user_scope(request) -> None:
    """Allow callers acting on their own notifications."""
    if not request.user.can_read_own:
        logger.warning(
            "missing_required_scope",
            user_id=request.user.user_id,
            scopes=request.user.scopes,
        )
        raise PermissionDenied(f"Requires {USER_SCOPE} or {ADMIN_SCOPE} scope")


def _require_admin_scope(request) -> None:
    """Allow notification producers only."""
    if not request.user.is_admin:
        logger.warning(
            "missing_required_scope",
            user_id=request.user.user_id,
            scopes=request.user.scopes,
        )
        raise PermissionDenied(f"Requires {ADMIN_SCOPE} scope")


def _idempotency_key(request) -> str | None:
    return request.headers.get(IDEMPOTENCY_KEY_HEADER) or None


class NotificationListView(APIView):
    """API endpoint for the caller's notifications.

    GET: Paginated, optionally grouped listing of the caller's notifications
    POST: Create a notification for a recipient (producer, admin scope)
    """

    authentication_classes = (OAuth2Authentication,)
    permission_classes = (IsAuthenticated,)

    def get(self, request):
        """List the caller's notifications, newest first.

        Query parameters:
        - page: Page number (default: 1)
        - pageSize: Items per page (default: 20, max: 100)
        - unreadOnly: Only unread notifications (default: false)
        - grouped: Return groups instead of a flat list (default: false)
        - before: Snapshot bound returned as ``snapshotAt`` by earlier pages

        Args:
            request: HTTP request

        Returns:
            200 with the page, 400 on malformed parameters
        """
        _require_user_scope(request)
        page = notification_facade.get_notifications(request.query_params.dict())
        return Response(SuccessEnvelope.wrap(page), status=status.HTTP_200_OK)

    def post(self, request):
        """Create and route one notification.

        Returns:
            201 with the notification and its channels, or ``created: false``
            when the recipient disabled the notification type
        """
        _require_admin_scope(request)
        logger.info("notification_create_request", user_id=request.user.user_id)
        result = notification_facade.create_notification(request.data)
        return Response(SuccessEnvelope.wrap(result), status=status.HTTP_201_CREATED)


class NotificationBulkCreateView(APIView):
    """API endpoint fanning one notification out to many recipients."""

    authentication_classes = (OAuth2Authentication,)
    permission_classes = (IsAuthenticated,)

    def post(self, request):
        """Create one grouped notification per distinct recipient."""
        _require_admin_scope(request)
        logger.info("notification_bulk_create_request", user_id=request.user.user_id)
        result = notification_facade.create_bulk_notifications(request.data)
        return Response(SuccessEnvelope.wrap(result), status=status.HTTP_201_CREATED)


class UnreadCountView(APIView):
    """API endpoint for the caller's unread count."""

    authentication_classes = (OAuth2Authentication,)
    permission_classes = (IsAuthenticated,)

    def get(self, request):
        """Return ``{count}`` for the caller."""
        _require_user_scope(request)
        result = notification_facade.get_unread_count()
        return Response(SuccessEnvelope.wrap(result), status=status.HTTP_200_OK)


class MarkReadView(APIView):
    """API endpoint marking notifications as read."""

    authentication_classes = (OAuth2Authentication,)
    permission_classes = (IsAuthenticated,)

    def post(self, request):
        """Mark one notification read, or all of them when no id is given.

        Headers:
        - Idempotency-Key: Optional; repeated keys replay the first result

        Returns:
            200 on success, 403 for someone else's notification, 404 for an
            unknown notification
        """
        _require_user_scope(request)
        result = notification_facade.mark_read(
            request.data, idempotency_key=_idempotency_key(request)
        )
        return Response(SuccessEnvelope.wrap(result), status=status.HTTP_200_OK)


class NotificationDetailView(APIView):
    """API endpoint for deleting one of the caller's notifications."""

    authentication_classes = (OAuth2Authentication,)
    permission_classes = (IsAuthenticated,)

    def delete(self, request, notification_id):
        """Delete notification by ID.

        Args:
            request: HTTP request
            notification_id: UUID of the notification

        Returns:
            200 with ``{deleted}``; deleting an unknown notification returns
            ``deleted: false``
        """
        _require_user_scope(request)
        logger.info(
            "notification_delete_request",
            notification_id=notification_id,
            user_id=request.user.user_id,
        )
        result = notification_facade.delete_notification(
            notification_id, idempotency_key=_idempotency_key(request)
        )
        return Response(SuccessEnvelope.wrap(result), status=status.HTTP_200_OK)


class PreferenceView(APIView):
    """API endpoint for the caller's notification preferences.

    GET: Current preferences, defaults materialized on first read
    PUT/PATCH: Merge the supplied fields; omitted fields are unchanged
    """

    authentication_classes = (OAuth2Authentication,)
    permission_classes = (IsAuthenticated,)

    def get(self, request):
        """Return the caller's preferences."""
        _require_user_scope(request)
        result = notification_facade.get_preferences()
        return Response(SuccessEnvelope.wrap(result), status=status.HTTP_200_OK)

    def put(self, request):
        """Partially update the caller's preferences."""
        _require_user_scope(request)
        result = notification_facade.update_preferences(request.data)
        return Response(SuccessEnvelope.wrap(result), status=status.HTTP_200_OK)

    def patch(self, request):
        """Same as PUT; both merge rather than replace."""
        return self.put(request)
