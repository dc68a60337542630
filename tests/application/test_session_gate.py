"""Tests binding push and poll channels to the signed-in identity."""

from __future__ import annotations

import asyncio

import pytest

from notification_sync.application.sync import SessionGate, UnreadPoller
from notification_sync.domain.entities import Notification, NotificationState, SessionIdentity
from notification_sync.infrastructure.notifications import (
    ConnectivityEvent,
    NotificationEvent,
    parse_notification,
)
from support import QueueTransport, wait_until

pytestmark = pytest.mark.anyio


@pytest.fixture
def transport() -> QueueTransport:
    return QueueTransport()


@pytest.fixture
def live_poller(api, reconciler) -> UnreadPoller:
    return UnreadPoller(api, reconciler, interval=3600)


@pytest.fixture
async def gate(reconciler, live_poller, transport, notices):
    session_gate = SessionGate(reconciler, live_poller, transport, notices)
    yield session_gate
    await session_gate.aclose()


async def test_establish_subscribes_and_polls(gate, reconciler, live_poller, transport, store):
    store.add()

    token = gate.establish(10)
    await wait_until(lambda: reconciler.unread_count == 1)

    assert token.identity == SessionIdentity(user_id=10)
    assert gate.identity == SessionIdentity(user_id=10)
    assert live_poller.running is True
    assert gate.subscribed is True
    await wait_until(lambda: len(transport.subscriptions) == 1)


async def test_establishing_the_same_identity_is_a_no_op(gate, transport, store):
    first = gate.establish(10)
    await wait_until(lambda: store.count("unread") == 1)

    assert gate.establish(10) == first
    await asyncio.sleep(0.05)

    assert store.count("unread") == 1
    assert len(transport.subscriptions) == 1


async def test_push_events_reach_the_reconciler(gate, reconciler, transport, notices):
    gate.establish(10)
    await wait_until(lambda: len(transport.subscriptions) == 1)

    transport.publish(ConnectivityEvent(True))
    transport.publish(NotificationEvent(Notification(id=7, title="Time to check in")))
    transport.publish(NotificationEvent(Notification(id=8, title="Older", is_read=True)))
    transport.publish(NotificationEvent(Notification(id=7, title="Time to check in")))
    await wait_until(lambda: reconciler.get(8) is not None)

    assert reconciler.connected is True
    assert [notice.title for notice in notices.history] == ["Time to check in"]


async def test_push_for_locally_read_notification_stays_read(gate, reconciler, transport, notices):
    gate.establish(10)
    await wait_until(lambda: len(transport.subscriptions) == 1)
    reconciler.optimistic_mark_read(7)

    transport.publish(NotificationEvent(Notification(id=7, title="Reminder", is_read=False)))
    await wait_until(lambda: reconciler.get(7) is not None)

    assert reconciler.get(7).is_read is True
    assert notices.history == ()


async def test_late_poll_for_previous_identity_is_discarded(gate, reconciler, live_poller, store):
    """A poll issued for user 10 that resolves after the switch to 11 changes nothing."""

    store.add()
    store.add()
    holds = [asyncio.Event() for _ in range(3)]
    store.unread_holds.extend(holds)

    gate.establish(10)
    await wait_until(lambda: store.count("unread") == 1)
    late = asyncio.get_running_loop().create_task(live_poller.refresh_unread())
    await wait_until(lambda: store.count("unread") == 2)

    gate.establish(11)
    await wait_until(lambda: store.count("unread") == 3)
    assert reconciler.identity == SessionIdentity(user_id=11)
    assert reconciler.unread_count == 0

    holds[1].set()
    assert await late is False
    assert reconciler.unread_count == 0

    holds[2].set()
    await wait_until(lambda: reconciler.unread_count == 2)


async def test_switching_identity_closes_the_previous_subscription(gate, reconciler, transport):
    gate.establish(10)
    await wait_until(lambda: len(transport.subscriptions) == 1)
    reconciler.optimistic_delete(1)

    gate.establish(11)
    await wait_until(lambda: transport.closed == 1 and len(transport.subscriptions) == 2)

    assert reconciler.notifications == ()
    assert reconciler.state_of(1) is NotificationState.UNSEEN


async def test_clear_stops_everything(gate, reconciler, live_poller, transport):
    gate.establish(10)
    await wait_until(lambda: len(transport.subscriptions) == 1)

    await gate.aclose()

    assert gate.identity is None
    assert gate.subscribed is False
    assert live_poller.running is False
    assert transport.closed == 1
    assert reconciler.view().identity is None


async def test_gate_without_transport_only_polls(api, reconciler, store):
    poller = UnreadPoller(api, reconciler, interval=3600)
    gate = SessionGate(reconciler, poller)
    store.add()

    gate.establish("user-5")
    await wait_until(lambda: reconciler.unread_count == 1)

    assert gate.subscribed is False
    await gate.aclose()
    assert poller.running is False


async def test_replayed_pushes_do_not_double_the_polled_badge(gate, reconciler, live_poller, transport, store):
    pending = [store.add("Reminder"), store.add("Goal reached")]
    gate.establish(10)
    await wait_until(lambda: reconciler.unread_count == 2)
    await wait_until(lambda: len(transport.subscriptions) == 1)

    for item in pending:
        transport.publish(NotificationEvent(parse_notification(item)))
    await wait_until(lambda: len(reconciler.notifications) == 2)
    await live_poller.wait_idle()
    assert reconciler.unread_count == 2

    fresh = store.add("New message")
    transport.publish(NotificationEvent(parse_notification(fresh)))
    await wait_until(lambda: reconciler.unread_count == 3)
    assert store.count("unread") >= 2
