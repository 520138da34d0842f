"""URL routing configuration for the notifications application."""

from django.urls import path

from .views import (
    MarkReadView,
    NotificationBulkCreateView,
    NotificationDetailView,
    NotificationListView,
    PreferenceView,
    UnreadCountView,
)

urlpatterns = [
    path("notifications", NotificationListView.as_view(), name="notification-list"),
    # Specific routes before notifications/<notification_id>
    path(
        "notifications/bulk",
        NotificationBulkCreateView.as_view(),
        name="notification-bulk-create",
    ),
    path(
        "notifications/unread-count",
        UnreadCountView.as_view(),
        name="notification-unread-count",
    ),
    path(
        "notifications/mark-read",
        MarkReadView.as_view(),
        name="notification-mark-read",
    ),
    path(
        "notifications/preferences",
        PreferenceView.as_view(),
        name="notification-preferences",
    ),
    path(
        "notifications/<str:notification_id>",
        NotificationDetailView.as_view(),
        name="notification-detail",
    ),
]
