"""Notification synchronization services."""

from .commands import CommandExecutor
from .poller import UnreadPoller
from .projection import (
    BADGE_LIMIT,
    EMPTY_VIEW,
    NotificationView,
    ReadFilter,
    badge_label,
    filter_notifications,
)
from .reconciler import Reconciler, ViewListener
from .schedule import ConfirmationPolicy, RefreshSchedule
from .session_gate import SessionGate

__all__ = [
    "BADGE_LIMIT",
    "EMPTY_VIEW",
    "CommandExecutor",
    "ConfirmationPolicy",
    "NotificationView",
    "ReadFilter",
    "Reconciler",
    "RefreshSchedule",
    "SessionGate",
    "UnreadPoller",
    "ViewListener",
    "badge_label",
    "filter_notifications",
]
