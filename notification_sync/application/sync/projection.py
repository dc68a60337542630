"""Read-only projection of the reconciled notification state."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from notification_sync.domain.entities import Notification, SessionIdentity

ReadFilter = Literal["all", "unread", "read"]

BADGE_LIMIT = 99


@dataclass(frozen=True)
class NotificationView:
    """Snapshot handed to consumers; mutating it never affects the reconciler."""

    identity: SessionIdentity | None
    notifications: tuple[Notification, ...]
    unread_count: int
    connected: bool
    complete: bool

    @property
    def has_unread(self) -> bool:
        return self.unread_count > 0 or any(not item.is_read for item in self.notifications)


EMPTY_VIEW = NotificationView(
    identity=None, notifications=(), unread_count=0, connected=False, complete=False
)


def filter_notifications(view: NotificationView, which: ReadFilter = "all") -> tuple[Notification, ...]:
    """Return the notifications of ``view`` matching the read filter."""

    if which == "all":
        return view.notifications
    if which == "unread":
        return tuple(item for item in view.notifications if not item.is_read)
    if which == "read":
        return tuple(item for item in view.notifications if item.is_read)
    raise ValueError(f"Unknown notification filter: {which!r}")


def badge_label(unread_count: int) -> str:
    """Text for the unread badge: empty when nothing is unread."""

    if unread_count <= 0:
        return ""
    if unread_count > BADGE_LIMIT:
        return f"{BADGE_LIMIT}+"
    return str(unread_count)


__all__ = [
    "BADGE_LIMIT",
    "EMPTY_VIEW",
    "NotificationView",
    "ReadFilter",
    "badge_label",
    "filter_notifications",
]
