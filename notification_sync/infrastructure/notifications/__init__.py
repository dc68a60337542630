"""Notification adapters for the infrastructure layer."""

from .api import NO_CACHE_HEADERS, NotificationsAPI
from .notices import NoticeBoard, NoticeListener
from .schemas import (
    NotificationPayload,
    parse_notification,
    parse_notification_list,
    parse_notification_page,
    parse_unread_snapshot,
)
from .transport import (
    ConnectivityEvent,
    NotificationEvent,
    TransportAdapter,
    TransportEvent,
    WebSocketTransport,
    parse_frame,
)

__all__ = [
    "NO_CACHE_HEADERS",
    "NotificationsAPI",
    "NoticeBoard",
    "NoticeListener",
    "NotificationPayload",
    "parse_notification",
    "parse_notification_list",
    "parse_notification_page",
    "parse_unread_snapshot",
    "ConnectivityEvent",
    "NotificationEvent",
    "TransportAdapter",
    "TransportEvent",
    "WebSocketTransport",
    "parse_frame",
]
