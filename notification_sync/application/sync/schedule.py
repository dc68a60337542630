"""Declarative schedules for the refreshes that confirm a mutation."""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from notification_sync.config import Settings
from notification_sync.domain.entities import CommandKind


@dataclass(frozen=True)
class RefreshSchedule:
    """Refresh offsets, in seconds, measured from the moment of the mutation."""

    offsets: tuple[float, ...] = ()

    def __post_init__(self) -> None:
        if any(offset < 0 for offset in self.offsets):
            raise ValueError("Refresh offsets must not be negative")
        if list(self.offsets) != sorted(self.offsets):
            raise ValueError("Refresh offsets must be in increasing order")

    @classmethod
    def at(cls, *offsets: float) -> "RefreshSchedule":
        return cls(offsets=tuple(float(offset) for offset in offsets))

    def delays(self) -> list[float]:
        """Return the waits between consecutive refreshes."""

        waits: list[float] = []
        previous = 0.0
        for offset in self.offsets:
            waits.append(offset - previous)
            previous = offset
        return waits

    def __len__(self) -> int:
        return len(self.offsets)


@dataclass(frozen=True)
class ConfirmationPolicy:
    """Which schedule follows each command.

    The store may apply a mutation asynchronously, so an optimistic local
    change is confirmed by re-reading the unread counter a few times.
    """

    mark_all_read: RefreshSchedule = field(
        default_factory=lambda: RefreshSchedule.at(0.1, 0.5, 1.5, 3.0)
    )
    mark_read: RefreshSchedule = field(default_factory=lambda: RefreshSchedule.at(0.5))
    delete: RefreshSchedule = field(default_factory=lambda: RefreshSchedule.at(0.5))
    create_test: RefreshSchedule = field(default_factory=RefreshSchedule)

    def for_command(self, kind: CommandKind) -> RefreshSchedule:
        return getattr(self, kind.value)

    def with_schedule(self, kind: CommandKind, schedule: RefreshSchedule) -> "ConfirmationPolicy":
        """Return a copy using ``schedule`` after ``kind``."""

        return replace(self, **{kind.value: schedule})

    @classmethod
    def from_settings(cls, settings: Settings) -> "ConfirmationPolicy":
        return cls(
            mark_all_read=RefreshSchedule.at(*settings.mark_all_read_confirmations),
            mark_read=RefreshSchedule.at(*settings.mark_read_confirmations),
            delete=RefreshSchedule.at(*settings.delete_confirmations),
        )


__all__ = ["ConfirmationPolicy", "RefreshSchedule"]
