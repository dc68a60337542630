"""Tests for the unread poller and its confirmation cascades."""

from __future__ import annotations

import asyncio

import pytest

from notification_sync.application.sync import ConfirmationPolicy, RefreshSchedule, UnreadPoller
from notification_sync.domain.entities import CommandKind, NotificationState, SessionIdentity
from support import wait_until

pytestmark = pytest.mark.anyio


async def test_refresh_unread_applies_the_store_count(poller, reconciler, store, session):
    store.add()
    store.add()

    assert await poller.refresh_unread() is True
    assert reconciler.unread_count == 2


async def test_failed_refresh_keeps_last_known_count(poller, reconciler, store, session, recording_sleep):
    store.add()
    store.add()
    await poller.refresh_unread()
    store.fail("unread", 503, 503, 503)

    assert await poller.refresh_unread() is False

    assert reconciler.unread_count == 2
    assert recording_sleep.delays == [1.0, 2.0]


async def test_unrecognised_unread_payload_keeps_last_known_count(poller, reconciler, store, session):
    store.add()
    await poller.refresh_unread()
    store.unread_shape = "garbage"

    assert await poller.refresh_unread() is False
    assert reconciler.unread_count == 1


async def test_refresh_without_identity_issues_no_request(poller, store):
    assert await poller.refresh_unread() is False
    assert await poller.refresh_list() is False
    assert poller.request_unread_refresh() is None
    assert store.calls == []


async def test_requested_unread_refresh_runs_in_the_background(poller, reconciler, store, session):
    store.add()

    task = poller.request_unread_refresh()

    assert task is not None
    await poller.wait_idle()
    assert task.result() is True
    assert reconciler.unread_count == 1


async def test_periodic_list_refresh_merges_but_open_list_resyncs(poller, reconciler, store, session):
    first = store.add()
    store.add()
    await poller.refresh_list()
    reconciler.optimistic_mark_read(first["id"])

    await poller.refresh_list()
    assert reconciler.state_of(first["id"]) is NotificationState.READ

    await poller.open_list()
    assert poller.list_open is True
    assert reconciler.state_of(first["id"]) is NotificationState.UNREAD

    poller.close_list()
    assert poller.list_open is False


async def test_confirmation_is_dropped_after_identity_change(poller, reconciler, store, session, recording_sleep):
    task = poller.schedule_confirmation(CommandKind.MARK_ALL_READ)
    reconciler.reset(SessionIdentity(user_id=2))

    await task

    assert recording_sleep.delays == pytest.approx([0.1])
    assert store.count("unread") == 0


async def test_commands_without_a_schedule_spawn_nothing(api, reconciler, session):
    policy = ConfirmationPolicy().with_schedule(CommandKind.DELETE, RefreshSchedule())
    poller = UnreadPoller(api, reconciler, interval=3600, confirmation=policy)

    assert poller.schedule_confirmation(CommandKind.DELETE) is None
    assert poller.schedule_confirmation(CommandKind.CREATE_TEST) is None


async def test_start_refreshes_immediately_and_stop_cancels(api, reconciler, store, session):
    store.add()
    poller = UnreadPoller(api, reconciler, interval=3600)

    poller.start()
    poller.start()
    await wait_until(lambda: store.count("unread") == 1)

    assert poller.running is True
    assert reconciler.unread_count == 1
    assert store.count("list") == 0

    cancelled = poller.stop()
    await asyncio.gather(*cancelled, return_exceptions=True)
    assert poller.running is False


async def test_loop_refreshes_list_while_open(api, reconciler, store, session):
    store.add()
    poller = UnreadPoller(api, reconciler, interval=3600)
    await poller.open_list()

    poller.start()
    await wait_until(lambda: store.count("list") == 2)

    assert len(reconciler.notifications) == 1
    await asyncio.gather(*poller.stop(), return_exceptions=True)


async def test_loop_is_idle_while_signed_out(api, reconciler, store):
    poller = UnreadPoller(api, reconciler, interval=3600)

    poller.start()
    await asyncio.sleep(0.05)

    assert store.calls == []
    await asyncio.gather(*poller.stop(), return_exceptions=True)


async def test_interval_must_be_positive(api, reconciler):
    with pytest.raises(ValueError):
        UnreadPoller(api, reconciler, interval=0)
