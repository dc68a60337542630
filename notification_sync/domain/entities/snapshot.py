"""Typed results produced by the pull channel."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .notification import Notification


@dataclass(frozen=True)
class NotificationPage:
    """Result of ``GET /notifications?limit=N``, newest first."""

    items: tuple[Notification, ...]
    limit: int | None = None

    @property
    def complete(self) -> bool:
        """Whether the page holds every notification the store has."""

        return self.limit is None or len(self.items) < self.limit


@dataclass(frozen=True)
class UnreadSnapshot:
    """Unread counter as reported by the store, with the unread items if sent."""

    count: int
    items: tuple[Notification, ...] | None = field(default=None)


class NotificationState(str, Enum):
    """Lifecycle of a single notification as seen by the client."""

    UNSEEN = "unseen"
    UNREAD = "unread"
    READ = "read"
    DELETED = "deleted"


class CommandKind(str, Enum):
    """Mutating commands that expect the unread counter to change."""

    MARK_READ = "mark_read"
    MARK_ALL_READ = "mark_all_read"
    DELETE = "delete"
    CREATE_TEST = "create_test"


__all__ = ["CommandKind", "NotificationPage", "NotificationState", "UnreadSnapshot"]
