"""Notification-related enumerations.

This module contains the closed set of notification types, the delivery
channels a notification can be routed to, and the lifecycle states of
per-channel deliveries and digest batches.
"""

from enum import Enum


class NotificationType(str, Enum):
    """Kinds of notification a producer can emit.

    Every type is gated by exactly one boolean on the recipient's
    NotificationPreference; see ``preference_field``.
    """

    FOLLOW = "follow"
    LIKE = "like"
    COMMENT = "comment"
    REPLY = "reply"
    MENTION = "mention"
    SYSTEM = "system"

    @property
    def preference_field(self) -> str:
        """Name of the NotificationPreference flag that gates this type."""
        return PREFERENCE_FIELD_BY_TYPE[self]

    @property
    def label(self) -> str:
        """Human readable label used in emails and digests."""
        return LABEL_BY_TYPE[self]

    @classmethod
    def choices(cls) -> list[tuple[str, str]]:
        """Return Django model field choices."""
        return [(member.value, member.label) for member in cls]


PREFERENCE_FIELD_BY_TYPE: dict[NotificationType, str] = {
    NotificationType.FOLLOW: "follow_notifications",
    NotificationType.LIKE: "like_notifications",
    NotificationType.COMMENT: "comment_notifications",
    NotificationType.REPLY: "reply_notifications",
    NotificationType.MENTION: "mention_notifications",
    NotificationType.SYSTEM: "system_notifications",
}

LABEL_BY_TYPE: dict[NotificationType, str] = {
    NotificationType.FOLLOW: "New follower",
    NotificationType.LIKE: "New like",
    NotificationType.COMMENT: "New comment",
    NotificationType.REPLY: "New reply",
    NotificationType.MENTION: "You were mentioned",
    NotificationType.SYSTEM: "System notice",
}


class DeliveryChannel(str, Enum):
    """Channels a notification can be delivered through.

    IN_APP is the notification row itself. EMAIL and PUSH are delivered
    immediately by background jobs. DIGEST is deferred to the digest
    scheduler.
    """

    IN_APP = "IN_APP"
    EMAIL = "EMAIL"
    PUSH = "PUSH"
    DIGEST = "DIGEST"


class DeliveryStatus(str, Enum):
    """Lifecycle of a single EMAIL or PUSH delivery attempt."""

    PENDING = "PENDING"
    QUEUED = "QUEUED"
    SENT = "SENT"
    FAILED = "FAILED"


class DigestFrequency(str, Enum):
    """How often a recipient's digest batch is flushed."""

    DAILY = "daily"
    WEEKLY = "weekly"


class DigestBatchStatus(str, Enum):
    """Lifecycle of a digest batch."""

    PENDING = "PENDING"
    SENT = "SENT"
    FAILED = "FAILED"
