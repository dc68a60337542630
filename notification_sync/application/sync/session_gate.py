"""Bind the notification read model to the signed-in identity."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, AsyncIterator

from notification_sync.domain.entities import (
    NotificationState,
    SessionIdentity,
    SessionToken,
    UserId,
)
from notification_sync.infrastructure.notifications import (
    ConnectivityEvent,
    NoticeBoard,
    NotificationEvent,
    TransportAdapter,
    TransportEvent,
)

from .poller import UnreadPoller
from .reconciler import Reconciler

logger = logging.getLogger(__name__)


class SessionGate:
    """Reset, subscribe and start polling on every identity change.

    ``establish`` and ``clear`` never await, so no callback can run between
    tearing down the old session and minting the new token. Requests still in
    flight are not cancelled; their results carry the old token and the
    reconciler discards them.
    """

    def __init__(
        self,
        reconciler: Reconciler,
        poller: UnreadPoller,
        transport: TransportAdapter | None = None,
        notices: NoticeBoard | None = None,
    ) -> None:
        self._reconciler = reconciler
        self._poller = poller
        self._transport = transport
        self._notices = notices
        self._pump_task: asyncio.Task[None] | None = None
        self._cancelled: list[asyncio.Task[Any]] = []

    @property
    def identity(self) -> SessionIdentity | None:
        return self._reconciler.identity

    @property
    def subscribed(self) -> bool:
        return self._pump_task is not None and not self._pump_task.done()

    def establish(self, user_id: UserId) -> SessionToken:
        """Start synchronizing notifications for ``user_id``."""

        identity = SessionIdentity(user_id=user_id)
        if identity == self.identity:
            return self._reconciler.token

        self._teardown()
        token = self._reconciler.reset(identity)
        if self._transport is not None:
            self._pump_task = asyncio.get_running_loop().create_task(
                self._pump(token, self._transport.subscribe()),
                name=f"notification-push-{user_id}",
            )
        self._poller.start()
        logger.info("Notification session established for user %s", user_id)
        return token

    def clear(self) -> None:
        """Stop synchronizing and drop every cached notification."""

        previous = self.identity
        self._teardown()
        self._reconciler.reset(None)
        if previous is not None:
            logger.info("Notification session cleared for user %s", previous.user_id)

    async def aclose(self) -> None:
        """Clear the session and wait until its background tasks have exited."""

        self.clear()
        cancelled, self._cancelled = self._cancelled, []
        if cancelled:
            await asyncio.gather(*cancelled, return_exceptions=True)

    def _teardown(self) -> None:
        self._cancelled.extend(self._poller.stop())
        if self._pump_task is not None:
            self._pump_task.cancel()
            self._cancelled.append(self._pump_task)
            self._pump_task = None
        self._cancelled = [task for task in self._cancelled if not task.done()]

    async def _pump(self, token: SessionToken, events: AsyncIterator[TransportEvent]) -> None:
        try:
            async for event in events:
                if not self._reconciler.is_current(token):
                    break
                if isinstance(event, NotificationEvent):
                    self._on_notification(token, event)
                elif isinstance(event, ConnectivityEvent):
                    self._reconciler.set_connectivity(token, event.connected)
        except Exception:
            logger.exception("Push subscription for %s failed", token.identity)
        finally:
            aclose = getattr(events, "aclose", None)
            if aclose is not None:
                await aclose()

    def _on_notification(self, token: SessionToken, event: NotificationEvent) -> None:
        notification = event.notification
        inserted = self._reconciler.apply_push(token, notification)
        if not inserted:
            return
        if self._reconciler.state_of(notification.id) is not NotificationState.UNREAD:
            return
        if not self._reconciler.complete:
            # The counter only follows pushes through the unread poll here.
            self._poller.request_unread_refresh()
        if self._notices is not None:
            self._notices.info(notification.title or "New notification", notification.body)


__all__ = ["SessionGate"]
