"""Collect user-facing notices and forward them to listeners."""

from __future__ import annotations

import logging
from collections import deque
from typing import Callable

from notification_sync.domain.entities import Notice, NoticeLevel

logger = logging.getLogger(__name__)

NoticeListener = Callable[[Notice], None]


class NoticeBoard:
    """Bounded history of notices plus subscribers (toasts, status bars)."""

    def __init__(self, history_size: int = 50) -> None:
        self._history: deque[Notice] = deque(maxlen=history_size)
        self._listeners: list[NoticeListener] = []

    @property
    def history(self) -> tuple[Notice, ...]:
        return tuple(self._history)

    def subscribe(self, listener: NoticeListener) -> Callable[[], None]:
        """Register ``listener`` and return a callable that removes it."""

        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def post(self, notice: Notice) -> None:
        log = logger.warning if notice.level is NoticeLevel.WARNING else logger.info
        log("Notice: %s - %s", notice.title, notice.description)
        self._history.append(notice)
        for listener in list(self._listeners):
            try:
                listener(notice)
            except Exception:
                logger.exception("Notice listener %r failed", listener)

    def info(self, title: str, description: str = "") -> None:
        self.post(Notice(title=title, description=description, level=NoticeLevel.INFO))

    def success(self, title: str, description: str = "") -> None:
        self.post(Notice(title=title, description=description, level=NoticeLevel.SUCCESS))

    def warning(self, title: str, description: str = "") -> None:
        self.post(Notice(title=title, description=description, level=NoticeLevel.WARNING))

    def clear(self) -> None:
        self._history.clear()


__all__ = ["NoticeBoard", "NoticeListener"]
