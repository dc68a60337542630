"""Domain entities exposed by the client."""

from .notice import Notice, NoticeLevel
from .notification import Notification, NotificationCategory, NotificationId
from .notification_set import NotificationSet, merge_notifications, notification_key
from .session import SessionIdentity, SessionToken, UserId
from .snapshot import CommandKind, NotificationPage, NotificationState, UnreadSnapshot

__all__ = [
    "CommandKind",
    "Notice",
    "NoticeLevel",
    "Notification",
    "NotificationCategory",
    "NotificationId",
    "NotificationPage",
    "NotificationSet",
    "NotificationState",
    "SessionIdentity",
    "SessionToken",
    "UnreadSnapshot",
    "UserId",
    "merge_notifications",
    "notification_key",
]
