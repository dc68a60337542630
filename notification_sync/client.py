"""Composition root wiring the synchronization services from settings."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

import httpx

from notification_sync.application.sync import (
    CommandExecutor,
    ConfirmationPolicy,
    NotificationView,
    Reconciler,
    SessionGate,
    UnreadPoller,
    ViewListener,
)
from notification_sync.config import Settings, get_settings
from notification_sync.domain.entities import SessionToken, UserId
from notification_sync.infrastructure.http import (
    FetchLayer,
    SleepFunc,
    command_policy_from_settings,
    read_policy_from_settings,
)
from notification_sync.infrastructure.notifications import (
    NoticeBoard,
    NotificationsAPI,
    TransportAdapter,
    WebSocketTransport,
)

logger = logging.getLogger(__name__)


class NotificationSyncClient:
    """Keep one signed-in user's notifications in sync with the store.

    Use as an async context manager::

        async with NotificationSyncClient() as client:
            client.login(42)
            client.subscribe(print)

    ``http_client`` and ``transport`` may be supplied to talk to something
    other than the configured endpoints; a supplied ``http_client`` is not
    closed on exit.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
        transport: TransportAdapter | None = None,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        self.settings = settings or get_settings()
        self._owns_http = http_client is None
        self._http = http_client or httpx.AsyncClient(
            base_url=self.settings.api_base_url,
            headers=self._auth_headers(),
        )
        if transport is None and self.settings.websocket_url:
            transport = WebSocketTransport(
                self.settings.websocket_url,
                token_provider=lambda: self.settings.access_token,
                sleep=sleep,
            )

        fetch = FetchLayer(
            self._http,
            timeout=self.settings.request_timeout_seconds,
            read_policy=read_policy_from_settings(self.settings),
            command_policy=command_policy_from_settings(self.settings),
            sleep=sleep,
        )
        self.api = NotificationsAPI(fetch)
        self.notices = NoticeBoard(history_size=self.settings.notice_history_size)
        self.reconciler = Reconciler()
        self.poller = UnreadPoller(
            self.api,
            self.reconciler,
            interval=self.settings.poll_interval_seconds,
            list_limit=self.settings.list_limit,
            confirmation=ConfirmationPolicy.from_settings(self.settings),
            sleep=sleep,
        )
        self.commands = CommandExecutor(self.api, self.reconciler, self.poller, self.notices)
        self.gate = SessionGate(self.reconciler, self.poller, transport, self.notices)

    async def __aenter__(self) -> "NotificationSyncClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    def login(self, user_id: UserId) -> SessionToken:
        """Start synchronizing for ``user_id``; repeated calls are no-ops."""

        return self.gate.establish(user_id)

    def logout(self) -> None:
        self.gate.clear()

    @property
    def view(self) -> NotificationView:
        return self.reconciler.view()

    def subscribe(self, listener: ViewListener) -> Callable[[], None]:
        return self.reconciler.subscribe(listener)

    def open_list(self) -> asyncio.Task[bool]:
        return self.poller.open_list()

    def close_list(self) -> None:
        self.poller.close_list()

    async def refresh(self) -> None:
        """Refresh the unread counter now, and the list when it is open."""

        await self.poller.refresh_unread()
        if self.poller.list_open:
            await self.poller.refresh_list()

    async def aclose(self) -> None:
        await self.gate.aclose()
        if self._owns_http:
            await self._http.aclose()
        logger.debug("Notification client closed")

    def _auth_headers(self) -> dict[str, str]:
        if not self.settings.access_token:
            return {}
        return {"Authorization": f"Bearer {self.settings.access_token}"}


__all__ = ["NotificationSyncClient"]
