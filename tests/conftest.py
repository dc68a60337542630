"""Shared fixtures wiring the client against the in-memory store."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
TESTS_DIR = Path(__file__).resolve().parent
for path in (PROJECT_ROOT, TESTS_DIR):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

import httpx

from notification_sync.application.sync import CommandExecutor, Reconciler, UnreadPoller
from notification_sync.domain.entities import SessionIdentity, SessionToken
from notification_sync.infrastructure.http import FetchLayer
from notification_sync.infrastructure.notifications import NoticeBoard, NotificationsAPI
from support import FakeStore, RecordingSleep


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
async def http_client(store: FakeStore):
    transport = httpx.ASGITransport(app=store.app)
    async with httpx.AsyncClient(transport=transport, base_url="http://store") as client:
        yield client


@pytest.fixture
def api(http_client: httpx.AsyncClient, recording_sleep: RecordingSleep) -> NotificationsAPI:
    return NotificationsAPI(FetchLayer(http_client, sleep=recording_sleep))


@pytest.fixture
def reconciler() -> Reconciler:
    return Reconciler()


@pytest.fixture
def session(reconciler: Reconciler) -> SessionToken:
    return reconciler.reset(SessionIdentity(user_id=1))


@pytest.fixture
def notices() -> NoticeBoard:
    return NoticeBoard()


@pytest.fixture
def poller(api: NotificationsAPI, reconciler: Reconciler, recording_sleep: RecordingSleep) -> UnreadPoller:
    return UnreadPoller(api, reconciler, interval=3600, list_limit=10, sleep=recording_sleep)


@pytest.fixture
def executor(
    api: NotificationsAPI,
    reconciler: Reconciler,
    poller: UnreadPoller,
    notices: NoticeBoard,
    session: SessionToken,
) -> CommandExecutor:
    return CommandExecutor(api, reconciler, poller, notices)
