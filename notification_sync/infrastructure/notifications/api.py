"""Typed adapter over the store's ``/notifications`` REST surface."""

from __future__ import annotations

import logging
import time
from functools import partial
from typing import Any

from pydantic import ValidationError

from notification_sync.domain.entities import (
    Notification,
    NotificationId,
    NotificationPage,
    UnreadSnapshot,
)
from notification_sync.infrastructure.http import FetchLayer

from .schemas import parse_notification, parse_notification_page, parse_unread_snapshot

logger = logging.getLogger(__name__)

NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


class NotificationsAPI:
    """Issue notification requests and return domain objects.

    Every response shape is normalized here so nothing downstream branches on
    whether the store answered with a list, a count or an envelope.
    """

    def __init__(self, fetch: FetchLayer) -> None:
        self._fetch = fetch

    async def list_notifications(self, limit: int) -> NotificationPage:
        """Return up to ``limit`` notifications, most recent first."""

        return await self._fetch.read(
            "/notifications",
            params={"limit": limit},
            decode=partial(parse_notification_page, limit=limit),
        )

    async def fetch_unread(self) -> UnreadSnapshot:
        """Return the unread counter, bypassing every HTTP cache."""

        timestamp = str(int(time.time() * 1000))
        return await self._fetch.read(
            "/notifications/unread",
            params={"_t": timestamp},
            headers={**NO_CACHE_HEADERS, "X-Timestamp": timestamp},
            decode=parse_unread_snapshot,
        )

    async def mark_read(self, notification_id: NotificationId) -> None:
        await self._fetch.command("POST", f"/notifications/read/{notification_id}")

    async def mark_all_read(self) -> None:
        await self._fetch.command(
            "POST", "/notifications/read-all", headers=NO_CACHE_HEADERS
        )

    async def delete(self, notification_id: NotificationId) -> None:
        """Delete a notification; a repeat that finds nothing is still success."""

        await self._fetch.command(
            "DELETE", f"/notifications/{notification_id}", ok_statuses=(404,)
        )

    async def create_test(self) -> Notification | None:
        """Ask the store to synthesize one notification for the current user."""

        payload = await self._fetch.command("POST", "/notifications/test")
        return _maybe_notification(payload)


def _maybe_notification(payload: Any) -> Notification | None:
    if not isinstance(payload, dict):
        return None
    candidate = payload.get("notification", payload)
    try:
        return parse_notification(candidate)
    except (ValidationError, ValueError):
        logger.debug("Test notification response carried no notification: %r", payload)
        return None


__all__ = ["NO_CACHE_HEADERS", "NotificationsAPI"]
