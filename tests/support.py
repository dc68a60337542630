"""In-memory stand-ins for the notification store and the push channel."""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Any, AsyncIterator, Callable

from fastapi import FastAPI, HTTPException, Request

from notification_sync.infrastructure.notifications import TransportEvent


class FakeStore:
    """Notification store serving the REST surface through a FastAPI app.

    ``fail(operation, *statuses)`` queues HTTP errors for the next calls of
    ``operation``; ``calls`` records every operation in arrival order. Each
    event in ``unread_holds`` holds back one unread response until it is set.
    """

    def __init__(self) -> None:
        self.notifications: dict[int, dict[str, Any]] = {}
        self.calls: list[str] = []
        self.unread_shape = "count"
        self.unread_requests: list[Request] = []
        self.unread_holds: list[asyncio.Event] = []
        self._failures: dict[str, list[int]] = {}
        self._next_id = 1
        self._clock = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)
        self.app = self._build_app()

    def add(self, title: str = "Reminder", *, read: bool = False, event_type: str = "reminder") -> dict[str, Any]:
        self._clock += timedelta(minutes=1)
        notification = {
            "id": self._next_id,
            "title": title,
            "message": f"{title} body",
            "event_type": event_type,
            "created_at": self._clock.isoformat(),
            "read_at": self._clock.isoformat() if read else None,
        }
        self.notifications[self._next_id] = notification
        self._next_id += 1
        return notification

    def fail(self, operation: str, *statuses: int) -> None:
        self._failures.setdefault(operation, []).extend(statuses)

    def ordered(self) -> list[dict[str, Any]]:
        return sorted(self.notifications.values(), key=lambda item: item["created_at"], reverse=True)

    def unread(self) -> list[dict[str, Any]]:
        return [item for item in self.ordered() if item["read_at"] is None]

    def count(self, operation: str) -> int:
        return self.calls.count(operation)

    def _check(self, operation: str) -> None:
        self.calls.append(operation)
        queued = self._failures.get(operation)
        if queued:
            raise HTTPException(status_code=queued.pop(0), detail=f"{operation} unavailable")

    def _build_app(self) -> FastAPI:
        app = FastAPI()

        @app.get("/notifications")
        async def list_notifications(limit: int = 10) -> list[dict[str, Any]]:
            self._check("list")
            return self.ordered()[:limit]

        @app.get("/notifications/unread")
        async def unread(request: Request) -> Any:
            self._check("unread")
            self.unread_requests.append(request)
            if self.unread_holds:
                await self.unread_holds.pop(0).wait()
            items = self.unread()
            if self.unread_shape == "list":
                return items
            if self.unread_shape == "int":
                return len(items)
            if self.unread_shape == "garbage":
                return {"status": "ok"}
            return {"count": len(items)}

        @app.post("/notifications/read-all")
        async def mark_all_read() -> dict[str, Any]:
            self._check("mark_all_read")
            for item in self.unread():
                item["read_at"] = self._clock.isoformat()
            return {"success": True}

        @app.post("/notifications/read/{notification_id}")
        async def mark_read(notification_id: int) -> dict[str, Any]:
            self._check("mark_read")
            item = self.notifications.get(notification_id)
            if item is None:
                raise HTTPException(status_code=404, detail="Notification not found")
            item["read_at"] = item["read_at"] or self._clock.isoformat()
            return {"success": True}

        @app.delete("/notifications/{notification_id}", status_code=204)
        async def delete(notification_id: int) -> None:
            self._check("delete")
            if self.notifications.pop(notification_id, None) is None:
                raise HTTPException(status_code=404, detail="Notification not found")

        @app.post("/notifications/test")
        async def create_test() -> dict[str, Any]:
            self._check("create_test")
            return {"notification": self.add("Test notification", event_type="system")}

        return app


class QueueTransport:
    """Push channel fed by the test through :meth:`publish`."""

    def __init__(self) -> None:
        self.subscriptions: list[asyncio.Queue[TransportEvent]] = []
        self.closed = 0

    async def subscribe(self) -> AsyncIterator[TransportEvent]:
        queue: asyncio.Queue[TransportEvent] = asyncio.Queue()
        self.subscriptions.append(queue)
        try:
            while True:
                yield await queue.get()
        finally:
            self.closed += 1

    def publish(self, event: TransportEvent) -> None:
        self.subscriptions[-1].put_nowait(event)


class RecordingSleep:
    """Awaitable sleep replacement that records delays and returns at once."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
        await asyncio.sleep(0)


async def wait_until(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    """Yield to the event loop until ``predicate`` holds."""

    async def _poll() -> None:
        while not predicate():
            await asyncio.sleep(0.01)

    await asyncio.wait_for(_poll(), timeout)


__all__ = ["FakeStore", "QueueTransport", "RecordingSleep", "wait_until"]
