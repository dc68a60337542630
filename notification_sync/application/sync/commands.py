"""Mutating notification commands with optimistic local updates."""

from __future__ import annotations

import logging

from notification_sync.domain.entities import (
    CommandKind,
    NotificationId,
    NotificationState,
    SessionToken,
)
from notification_sync.infrastructure.http import FetchError, HTTPError
from notification_sync.infrastructure.notifications import NoticeBoard, NotificationsAPI

from .poller import UnreadPoller
from .reconciler import Reconciler

logger = logging.getLogger(__name__)


class CommandExecutor:
    """Apply a command locally, then send it to the store.

    Optimistic changes are not rolled back when the request ultimately
    fails; the failure is reported as a notice and the next refresh brings
    the counter back in line with the store. Nothing is raised to callers.
    """

    def __init__(
        self,
        api: NotificationsAPI,
        reconciler: Reconciler,
        poller: UnreadPoller,
        notices: NoticeBoard,
    ) -> None:
        self._api = api
        self._reconciler = reconciler
        self._poller = poller
        self._notices = notices

    async def mark_read(self, notification_id: NotificationId) -> bool:
        """Mark one notification as read; returns ``True`` on confirmed success."""

        token = self._session_token(CommandKind.MARK_READ)
        if token is None:
            return False
        state = self._reconciler.state_of(notification_id)
        if state in (NotificationState.READ, NotificationState.DELETED):
            return True

        self._reconciler.optimistic_mark_read(notification_id)
        try:
            await self._api.mark_read(notification_id)
        except FetchError as exc:
            if self._reconciler.is_current(token):
                self._report_failure("mark notification %s as read" % notification_id, exc)
                self._notices.warning(
                    "Couldn't mark as read", "Please try again in a moment."
                )
            return False

        if self._reconciler.is_current(token):
            self._poller.schedule_confirmation(CommandKind.MARK_READ)
        return True

    async def mark_all_read(self) -> bool:
        """Zero the badge immediately, then ask the store to mark everything."""

        token = self._session_token(CommandKind.MARK_ALL_READ)
        if token is None:
            return False
        self._reconciler.optimistic_mark_all_read()
        try:
            await self._api.mark_all_read()
        except FetchError as exc:
            succeeded = False
            if self._reconciler.is_current(token):
                self._report_failure("mark all notifications as read", exc)
                self._notices.warning(
                    "Couldn't mark notifications as read", "Please try again in a moment."
                )
        else:
            succeeded = True
            if self._reconciler.is_current(token):
                self._notices.success("All notifications marked as read")

        # A push arriving meanwhile can make the optimistic zero wrong at once,
        # so the cascade runs whatever the outcome.
        if self._reconciler.is_current(token):
            self._poller.schedule_confirmation(CommandKind.MARK_ALL_READ)
        return succeeded

    async def delete(self, notification_id: NotificationId) -> bool:
        """Remove a notification locally and in the store.

        A second delete of the same id is a silent no-op.
        """

        token = self._session_token(CommandKind.DELETE)
        if token is None:
            return False
        if self._reconciler.state_of(notification_id) is NotificationState.DELETED:
            return True

        self._reconciler.optimistic_delete(notification_id)
        try:
            await self._api.delete(notification_id)
        except FetchError as exc:
            if self._reconciler.is_current(token):
                self._report_failure("delete notification %s" % notification_id, exc)
                self._notices.warning("Couldn't delete notification", "Please try again later.")
            return False

        if self._reconciler.is_current(token):
            self._notices.success("Notification deleted")
            self._poller.schedule_confirmation(CommandKind.DELETE)
        return True

    async def create_test(self) -> bool:
        """Ask the store for a test notification, then refetch everything.

        The store assigns the id and content, so nothing is inserted locally.
        """

        token = self._session_token(CommandKind.CREATE_TEST)
        if token is None:
            return False
        try:
            await self._api.create_test()
        except FetchError as exc:
            if self._reconciler.is_current(token):
                self._report_failure("create a test notification", exc)
                self._notices.warning("Couldn't create test notification")
            return False

        if not self._reconciler.is_current(token):
            return True
        await self._poller.refresh_list(resync=True)
        await self._poller.refresh_unread()
        self._notices.success("Test notification created")
        return True

    def _session_token(self, kind: CommandKind) -> SessionToken | None:
        token = self._reconciler.token
        if token.identity is None:
            logger.debug("Ignoring %s without a signed-in identity", kind.value)
            return None
        return token

    @staticmethod
    def _report_failure(action: str, exc: FetchError) -> None:
        if isinstance(exc, HTTPError):
            logger.warning("Store rejected request to %s: %s", action, exc)
        else:
            logger.warning("Could not reach the store to %s: %s", action, exc)


__all__ = ["CommandExecutor"]
