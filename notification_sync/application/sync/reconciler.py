"""Single owner of the notification list and the unread counter.

Push events, poll results and optimistic commands all reach the cached
state through the entry points below; nothing else mutates it. The merge
rules are commutative and idempotent so push and poll results may arrive in
any order:

* an id is inserted at most once, later observations are merged into it;
* ``is_read`` never goes from ``True`` back to ``False`` outside a resync;
* a deleted id stays deleted until a resync;
* results tagged with a session token other than the current one are
  discarded without touching state.

The unread counter equals the unread tally while the cached list is known to
be complete and fresh. Otherwise it is an independent cache that only the
dedicated unread poll and optimistic deltas move.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable

from notification_sync.domain.entities import (
    Notification,
    NotificationId,
    NotificationPage,
    NotificationSet,
    NotificationState,
    SessionIdentity,
    SessionToken,
    UnreadSnapshot,
    notification_key,
)

from .projection import NotificationView

logger = logging.getLogger(__name__)

ViewListener = Callable[[NotificationView], None]


class Reconciler:
    """Merge every source of notification truth into one read model."""

    def __init__(self) -> None:
        self._generation = 0
        self._token = SessionToken(identity=None, generation=0)
        self._notifications = NotificationSet()
        self._unread = 0
        self._complete = False
        self._connected = False
        self._deleted: set[str] = set()
        self._read_ids: set[str] = set()
        self._listeners: list[ViewListener] = []

    # -- read side -----------------------------------------------------

    @property
    def identity(self) -> SessionIdentity | None:
        return self._token.identity

    @property
    def token(self) -> SessionToken:
        """Tag to attach to a request issued now."""

        return self._token

    @property
    def unread_count(self) -> int:
        return self._unread

    @property
    def notifications(self) -> tuple[Notification, ...]:
        return tuple(self._notifications.ordered())

    @property
    def complete(self) -> bool:
        return self._complete

    @property
    def connected(self) -> bool:
        return self._connected

    def is_current(self, token: SessionToken) -> bool:
        return token == self._token and token.identity is not None

    def get(self, notification_id: NotificationId) -> Notification | None:
        return self._notifications.get(notification_id)

    def state_of(self, notification_id: NotificationId) -> NotificationState:
        if notification_key(notification_id) in self._deleted:
            return NotificationState.DELETED
        notification = self._notifications.get(notification_id)
        if notification is None:
            if notification_key(notification_id) in self._read_ids:
                return NotificationState.READ
            return NotificationState.UNSEEN
        return NotificationState.READ if notification.is_read else NotificationState.UNREAD

    def view(self) -> NotificationView:
        return NotificationView(
            identity=self.identity,
            notifications=self.notifications,
            unread_count=self._unread,
            connected=self._connected,
            complete=self._complete,
        )

    def subscribe(self, listener: ViewListener) -> Callable[[], None]:
        """Call ``listener`` with a fresh view after every mutation."""

        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # -- lifecycle -----------------------------------------------------

    def reset(self, identity: SessionIdentity | None) -> SessionToken:
        """Drop all cached state and start a new session for ``identity``."""

        self._generation += 1
        self._token = SessionToken(identity=identity, generation=self._generation)
        self._notifications.clear()
        self._deleted.clear()
        self._read_ids.clear()
        self._unread = 0
        self._complete = False
        self._connected = False
        logger.debug("Notification state reset for %s", identity)
        self._notify()
        return self._token

    # -- producers -----------------------------------------------------

    def apply_push(self, token: SessionToken, notification: Notification) -> bool:
        """Merge a pushed notification; returns ``True`` when it was new."""

        if not self._accept(token, "push event"):
            return False
        incoming = self._admit(notification)
        if incoming is None:
            return False

        inserted = self._notifications.upsert(incoming)
        # A partial list cannot tell whether the unread poll already counted
        # this item, so only a complete list moves the counter here.
        self._settle()
        self._notify()
        return inserted

    def apply_unread_snapshot(self, token: SessionToken, snapshot: UnreadSnapshot) -> bool:
        """Adopt the store's unread counter, merging any items it carried."""

        if not self._accept(token, "unread poll"):
            return False
        for notification in snapshot.items or ():
            incoming = self._admit(notification)
            if incoming is not None:
                self._notifications.upsert(incoming)

        count = max(0, snapshot.count)
        if self._complete and count != self._notifications.unread_count():
            # The store disagrees with the cached list; it is no longer fresh.
            self._complete = False
        self._unread = count
        self._notify()
        return True

    def apply_list(self, token: SessionToken, page: NotificationPage) -> bool:
        """Merge a refreshed list without discarding local optimistic state."""

        if not self._accept(token, "list refresh"):
            return False
        for notification in page.items:
            incoming = self._admit(notification)
            if incoming is not None:
                self._notifications.upsert(incoming)
        self._complete = page.complete
        self._settle()
        self._notify()
        return True

    def resync(self, token: SessionToken, page: NotificationPage) -> bool:
        """Replace the cached list with ``page`` (explicit refetch).

        Tombstones and locally-read ids are discarded, so the store's view
        wins over any optimistic state that was never confirmed.
        """

        if not self._accept(token, "resync"):
            return False
        self._notifications.clear()
        self._deleted.clear()
        self._read_ids.clear()
        for notification in page.items:
            self._notifications.upsert(notification)
        self._complete = page.complete
        self._settle()
        self._notify()
        return True

    def set_connectivity(self, token: SessionToken, connected: bool) -> bool:
        if not self._accept(token, "connectivity change"):
            return False
        if self._connected != connected:
            self._connected = connected
            self._notify()
        return True

    # -- optimistic commands -------------------------------------------

    def optimistic_mark_read(self, notification_id: NotificationId) -> bool:
        """Mark ``notification_id`` read before the store confirms it.

        Returns ``True`` when a cached notification changed. An id missing
        from a partial list still decrements the counter, which is then the
        only cache that knows about it, once per id.
        """

        key = notification_key(notification_id)
        if key in self._deleted or key in self._read_ids:
            return False
        self._read_ids.add(key)

        if notification_id in self._notifications:
            changed = self._notifications.mark_read(notification_id)
            if changed:
                self._adjust_unread(-1)
        else:
            changed = False
            if not self._complete:
                self._adjust_unread(-1)
        self._settle()
        self._notify()
        return changed

    def optimistic_mark_all_read(self) -> int:
        """Mark every cached notification read and zero the counter."""

        changed = self._notifications.mark_all_read()
        self._read_ids.update(self._notifications.ids())
        self._unread = 0
        self._notify()
        return changed

    def optimistic_delete(self, notification_id: NotificationId) -> Notification | None:
        """Remove ``notification_id`` and tombstone it until the next resync."""

        key = notification_key(notification_id)
        if key in self._deleted:
            return None
        self._deleted.add(key)
        removed = self._notifications.remove(notification_id)
        if removed is not None and not removed.is_read:
            self._adjust_unread(-1)
        self._settle()
        self._notify()
        return removed

    # -- internals -----------------------------------------------------

    def _accept(self, token: SessionToken, source: str) -> bool:
        if self.is_current(token):
            return True
        logger.debug(
            "Discarding stale %s issued for %s (current: %s)",
            source,
            token.identity,
            self.identity,
        )
        return False

    def _admit(self, notification: Notification) -> Notification | None:
        """Apply tombstones and locally-read ids to an incoming record."""

        key = notification_key(notification.id)
        if key in self._deleted:
            return None
        if key in self._read_ids and not notification.is_read:
            return replace(notification, is_read=True)
        return notification

    def _adjust_unread(self, delta: int) -> None:
        self._unread = max(0, self._unread + delta)

    def _settle(self) -> None:
        if self._complete:
            self._unread = self._notifications.unread_count()

    def _notify(self) -> None:
        if not self._listeners:
            return
        view = self.view()
        for listener in list(self._listeners):
            try:
                listener(view)
            except Exception:
                logger.exception("Notification view listener %r failed", listener)


__all__ = ["Reconciler", "ViewListener"]
