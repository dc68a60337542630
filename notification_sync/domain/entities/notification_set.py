"""Ordered, id-keyed collection of cached notifications."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from itertools import count
from typing import Iterable, Iterator

from .notification import Notification, NotificationCategory, NotificationId

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def notification_key(notification_id: NotificationId) -> str:
    """Return the lookup key for ``notification_id``.

    Push frames and REST payloads do not always agree on the id's JSON type,
    so ``5`` and ``"5"`` address the same entry.
    """

    return str(notification_id)


def merge_notifications(current: Notification, incoming: Notification) -> Notification:
    """Return the union of ``current`` and ``incoming``.

    Incoming values win for fields they carry, known values are kept for the
    ones they omit, and ``is_read`` never goes back from ``True`` to ``False``.
    """

    return replace(
        current,
        title=incoming.title or current.title,
        body=incoming.body or current.body,
        category=(
            incoming.category
            if incoming.category is not NotificationCategory.OTHER
            else current.category
        ),
        is_read=current.is_read or incoming.is_read,
        created_at=incoming.created_at or current.created_at,
        link=incoming.link or current.link,
    )


class NotificationSet:
    """Most-recent-first notifications without duplicate ids."""

    def __init__(self, notifications: Iterable[Notification] = ()) -> None:
        self._items: dict[str, Notification] = {}
        self._arrival: dict[str, int] = {}
        self._counter = count()
        for notification in notifications:
            self.upsert(notification)

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, notification_id: object) -> bool:
        return notification_key(notification_id) in self._items  # type: ignore[arg-type]

    def __iter__(self) -> Iterator[Notification]:
        return iter(self.ordered())

    def get(self, notification_id: NotificationId) -> Notification | None:
        return self._items.get(notification_key(notification_id))

    def ids(self) -> set[str]:
        """Return the lookup keys of every cached notification."""

        return set(self._items)

    def ordered(self) -> list[Notification]:
        """Return the notifications newest first."""

        keys = sorted(
            self._items,
            key=lambda key: (self._items[key].created_at or _OLDEST, self._arrival[key]),
            reverse=True,
        )
        return [self._items[key] for key in keys]

    def upsert(self, notification: Notification) -> bool:
        """Insert ``notification`` or merge it into the known entry.

        Returns ``True`` when the id was not present before.
        """

        key = notification_key(notification.id)
        current = self._items.get(key)
        if current is None:
            self._items[key] = notification
            self._arrival[key] = next(self._counter)
            return True
        self._items[key] = merge_notifications(current, notification)
        return False

    def remove(self, notification_id: NotificationId) -> Notification | None:
        key = notification_key(notification_id)
        self._arrival.pop(key, None)
        return self._items.pop(key, None)

    def mark_read(self, notification_id: NotificationId) -> bool:
        """Flag a notification as read, returning ``True`` if it was unread."""

        key = notification_key(notification_id)
        current = self._items.get(key)
        if current is None or current.is_read:
            return False
        self._items[key] = replace(current, is_read=True)
        return True

    def mark_all_read(self) -> int:
        """Flag every notification as read and return how many changed."""

        changed = 0
        for key, current in self._items.items():
            if not current.is_read:
                self._items[key] = replace(current, is_read=True)
                changed += 1
        return changed

    def unread_count(self) -> int:
        return sum(1 for notification in self._items.values() if not notification.is_read)

    def clear(self) -> None:
        self._items.clear()
        self._arrival.clear()


__all__ = ["NotificationSet", "merge_notifications", "notification_key"]
