"""Helpers for working with timezone-aware notification timestamps."""

from __future__ import annotations

from datetime import datetime, timezone


def now_utc() -> datetime:
    """Return the current time as an aware UTC datetime."""

    return datetime.now(tz=timezone.utc)


def ensure_aware(value: datetime | None) -> datetime | None:
    """Attach UTC to naive values so timestamps from any source compare safely.

    The store serializes ``created_at`` either with an offset or as a naive
    ISO string (SQL ``DATETIME`` columns drop the zone); naive values are
    interpreted as UTC.
    """

    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def parse_timestamp(value: object) -> datetime | None:
    """Parse ``value`` into an aware datetime, returning ``None`` when absent."""

    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return ensure_aware(value)
    if isinstance(value, (int, float)):
        # Epoch milliseconds, as produced by JavaScript ``Date.now()``.
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = f"{text[:-1]}+00:00"
        return ensure_aware(datetime.fromisoformat(text))
    raise ValueError(f"Unsupported timestamp value: {value!r}")


def format_relative_age(value: datetime | None, *, now: datetime | None = None) -> str:
    """Return a short label describing how long ago ``value`` happened."""

    if value is None:
        return ""

    reference = ensure_aware(now) or now_utc()
    elapsed_minutes = int((reference - ensure_aware(value)).total_seconds() // 60)
    if elapsed_minutes < 1:
        return "Just now"
    if elapsed_minutes < 60:
        return f"{elapsed_minutes}m ago"
    if elapsed_minutes < 1440:
        return f"{elapsed_minutes // 60}h ago"
    return f"{elapsed_minutes // 1440}d ago"


__all__ = ["ensure_aware", "format_relative_age", "now_utc", "parse_timestamp"]
