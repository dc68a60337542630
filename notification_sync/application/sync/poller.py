"""Timer-driven refresh of the unread counter and, when visible, the list."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Coroutine

from notification_sync.domain.entities import CommandKind, SessionToken
from notification_sync.infrastructure.http import FetchError, SleepFunc
from notification_sync.infrastructure.notifications import NotificationsAPI

from .reconciler import Reconciler
from .schedule import ConfirmationPolicy, RefreshSchedule

logger = logging.getLogger(__name__)


class UnreadPoller:
    """Feed the reconciler from the pull channel.

    Every refresh is best effort: a failure is logged and the reconciler keeps
    its last known good values, so the badge never flashes to zero.
    """

    def __init__(
        self,
        api: NotificationsAPI,
        reconciler: Reconciler,
        *,
        interval: float = 60.0,
        list_limit: int = 10,
        confirmation: ConfirmationPolicy | None = None,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        if interval <= 0:
            raise ValueError("Poll interval must be positive")
        self._api = api
        self._reconciler = reconciler
        self._interval = interval
        self._list_limit = list_limit
        self._confirmation = confirmation or ConfirmationPolicy()
        self._sleep = sleep
        self._loop_task: asyncio.Task[None] | None = None
        self._background: set[asyncio.Task[Any]] = set()
        self._list_open = False

    @property
    def running(self) -> bool:
        return self._loop_task is not None and not self._loop_task.done()

    @property
    def list_open(self) -> bool:
        return self._list_open

    @property
    def confirmation(self) -> ConfirmationPolicy:
        return self._confirmation

    def start(self) -> None:
        """Begin periodic refreshes; the first one runs immediately."""

        if self.running:
            return
        loop = asyncio.get_running_loop()
        self._loop_task = loop.create_task(self._run(), name="notification-poller")

    def stop(self) -> list[asyncio.Task[Any]]:
        """Cancel the periodic loop and pending cascades; returns the cancelled tasks."""

        tasks = list(self._background)
        if self._loop_task is not None:
            tasks.append(self._loop_task)
        for task in tasks:
            task.cancel()
        self._loop_task = None
        self._background.clear()
        self._list_open = False
        return tasks

    def open_list(self) -> asyncio.Task[bool]:
        """Mark the list surface visible and refetch it right away."""

        self._list_open = True
        return self._spawn(self.refresh_list(resync=True))

    def close_list(self) -> None:
        self._list_open = False

    async def refresh_unread(self) -> bool:
        """Refresh the unread counter; returns ``True`` when it was applied."""

        token = self._reconciler.token
        if token.identity is None:
            return False
        try:
            snapshot = await self._api.fetch_unread()
        except FetchError as exc:
            logger.warning("Unread count refresh failed, keeping last known value: %s", exc)
            return False
        return self._reconciler.apply_unread_snapshot(token, snapshot)

    def request_unread_refresh(self) -> asyncio.Task[bool] | None:
        """Refresh the unread counter in the background, outside the timer."""

        if self._reconciler.identity is None:
            return None
        return self._spawn(self.refresh_unread())

    async def refresh_list(self, *, resync: bool = False) -> bool:
        """Refresh the notification list.

        With ``resync`` the result replaces the cached list (explicit
        refetch); otherwise it is merged.
        """

        token = self._reconciler.token
        if token.identity is None:
            return False
        try:
            page = await self._api.list_notifications(self._list_limit)
        except FetchError as exc:
            logger.warning("Notification list refresh failed, keeping cached list: %s", exc)
            return False
        if resync:
            return self._reconciler.resync(token, page)
        return self._reconciler.apply_list(token, page)

    def schedule_confirmation(self, kind: CommandKind) -> asyncio.Task[None] | None:
        """Start the confirmatory refresh cascade that follows ``kind``."""

        schedule = self._confirmation.for_command(kind)
        if not len(schedule):
            return None
        return self._spawn(self._confirm(kind, schedule, self._reconciler.token))

    async def wait_idle(self) -> None:
        """Wait for pending confirmations and list refetches to finish."""

        while self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    async def _confirm(
        self, kind: CommandKind, schedule: RefreshSchedule, token: SessionToken
    ) -> None:
        for delay in schedule.delays():
            await self._sleep(delay)
            if not self._reconciler.is_current(token):
                logger.debug("Dropping %s confirmation issued for %s", kind.value, token.identity)
                return
            await self.refresh_unread()

    async def _run(self) -> None:
        while True:
            if self._reconciler.identity is not None:
                try:
                    await self.refresh_unread()
                    if self._list_open:
                        await self.refresh_list()
                except Exception:
                    logger.exception("Unexpected error while polling notifications")
            await self._sleep(self._interval)

    def _spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task[Any]:
        task = asyncio.get_running_loop().create_task(coro)
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task


__all__ = ["UnreadPoller"]
