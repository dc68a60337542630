"""Push channel adapter turning websocket frames into transport events."""

from __future__ import annotations

import asyncio
import json
import logging
import urllib.parse
from dataclasses import dataclass
from typing import Any, AsyncIterator, Callable, Protocol, Union

import websockets
from websockets.exceptions import WebSocketException

from notification_sync.domain.entities import Notification
from notification_sync.infrastructure.http import SleepFunc

from .schemas import parse_notification

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NotificationEvent:
    """A notification created (or re-sent) by the store."""

    notification: Notification


@dataclass(frozen=True)
class ConnectivityEvent:
    """The push channel went live (``True``) or dropped (``False``)."""

    connected: bool


TransportEvent = Union[NotificationEvent, ConnectivityEvent]


class TransportAdapter(Protocol):
    """Source of push events for the current session.

    ``subscribe`` returns a lazy, infinite sequence; calling it again starts a
    fresh one. The adapter does not scope itself to an identity, so callers
    resubscribe whenever the identity changes.
    """

    def subscribe(self) -> AsyncIterator[TransportEvent]: ...


def parse_frame(raw: str | bytes) -> list[TransportEvent]:
    """Decode one websocket frame into zero or more events.

    Raises ``ValueError`` for frames that are not valid JSON or that carry an
    invalid notification. Control frames such as ``pong`` yield nothing.
    """

    message = json.loads(raw)
    if not isinstance(message, dict):
        return []

    frame_type = message.get("type")
    if frame_type == "notification":
        return [NotificationEvent(parse_notification(message.get("data")))]
    if frame_type == "new_notification":
        return [NotificationEvent(parse_notification(message.get("notification")))]
    if frame_type == "init":
        pending = message.get("data") or []
        if not isinstance(pending, list):
            raise ValueError("init frame must carry a list of notifications")
        return [NotificationEvent(parse_notification(item)) for item in pending]
    return []


class WebSocketTransport:
    """Stream notification frames from the store's websocket endpoint.

    Reconnects with capped exponential backoff; every connect and drop is
    reported as a :class:`ConnectivityEvent`.
    """

    def __init__(
        self,
        url: str,
        *,
        token_provider: Callable[[], str | None] | None = None,
        base_backoff: float = 1.0,
        max_backoff: float = 30.0,
        sleep: SleepFunc = asyncio.sleep,
        connect: Callable[[str], Any] = websockets.connect,
    ) -> None:
        self._url = url
        self._token_provider = token_provider
        self._base_backoff = base_backoff
        self._max_backoff = max_backoff
        self._sleep = sleep
        self._connect = connect

    def build_url(self) -> str:
        token = self._token_provider() if self._token_provider else None
        if not token:
            return self._url
        parts = urllib.parse.urlsplit(self._url)
        query = urllib.parse.parse_qsl(parts.query, keep_blank_values=True)
        query = [(key, value) for key, value in query if key != "token"]
        query.append(("token", token))
        return urllib.parse.urlunsplit(parts._replace(query=urllib.parse.urlencode(query)))

    def backoff_for(self, failures: int) -> float:
        return min(self._base_backoff * 2 ** min(failures, 5), self._max_backoff)

    async def subscribe(self) -> AsyncIterator[TransportEvent]:
        failures = 0
        while True:
            connected = False
            try:
                async with self._connect(self.build_url()) as websocket:
                    connected = True
                    failures = 0
                    logger.info("Push channel connected")
                    yield ConnectivityEvent(True)
                    async for raw in websocket:
                        try:
                            events = parse_frame(raw)
                        except ValueError as exc:
                            logger.warning("Skipping malformed push frame: %s", exc)
                            continue
                        for event in events:
                            yield event
            except (OSError, WebSocketException, asyncio.TimeoutError) as exc:
                logger.info("Push channel unavailable: %s", exc)

            if connected:
                yield ConnectivityEvent(False)
            else:
                failures += 1
            delay = self.backoff_for(failures)
            logger.debug("Reconnecting push channel in %.1fs", delay)
            await self._sleep(delay)


__all__ = [
    "ConnectivityEvent",
    "NotificationEvent",
    "TransportAdapter",
    "TransportEvent",
    "WebSocketTransport",
    "parse_frame",
]
