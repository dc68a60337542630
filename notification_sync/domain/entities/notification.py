"""Domain entity representing a notification cached on the client."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Union

NotificationId = Union[int, str]


class NotificationCategory(str, Enum):
    """Coarse grouping used by the client to present notifications."""

    REMINDER = "reminder"
    PROGRESS = "progress"
    MESSAGE = "message"
    OTHER = "other"

    @classmethod
    def from_raw(cls, value: object) -> "NotificationCategory":
        """Map the store's free-form ``type`` strings onto a category."""

        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return cls.OTHER
        normalized = value.strip().lower().replace("-", "_").replace(".", "_")
        if normalized in _CATEGORY_ALIASES:
            return _CATEGORY_ALIASES[normalized]
        for prefix, category in _CATEGORY_PREFIXES:
            if normalized.startswith(prefix):
                return category
        return cls.OTHER


_CATEGORY_ALIASES: dict[str, NotificationCategory] = {
    "reminder": NotificationCategory.REMINDER,
    "emotion_reminder": NotificationCategory.REMINDER,
    "progress": NotificationCategory.PROGRESS,
    "progress_update": NotificationCategory.PROGRESS,
    "weekly_digest": NotificationCategory.PROGRESS,
    "message": NotificationCategory.MESSAGE,
    "new_message": NotificationCategory.MESSAGE,
    "therapist_message": NotificationCategory.MESSAGE,
    "journal_comment": NotificationCategory.MESSAGE,
}

_CATEGORY_PREFIXES: tuple[tuple[str, NotificationCategory], ...] = (
    ("reminder_", NotificationCategory.REMINDER),
    ("goal_", NotificationCategory.PROGRESS),
    ("progress_", NotificationCategory.PROGRESS),
    ("message_", NotificationCategory.MESSAGE),
)


@dataclass(frozen=True)
class Notification:
    """Cached, possibly stale copy of a notification owned by the store."""

    id: NotificationId
    title: str
    body: str = ""
    category: NotificationCategory = NotificationCategory.OTHER
    is_read: bool = False
    created_at: datetime | None = None
    link: str | None = None


__all__ = ["Notification", "NotificationCategory", "NotificationId"]
