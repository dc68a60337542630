"""Short user-facing messages raised by the synchronization layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from notification_sync.utils import now_utc


class NoticeLevel(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"


@dataclass(frozen=True)
class Notice:
    """Toast-style message. Kept short and non-alarming; logs hold the detail."""

    title: str
    description: str = ""
    level: NoticeLevel = NoticeLevel.INFO
    created_at: datetime = field(default_factory=now_utc)


__all__ = ["Notice", "NoticeLevel"]
