"""Utility helpers for reusable functionality."""

from .datetime import ensure_aware, format_relative_age, now_utc, parse_timestamp

__all__ = [
    "ensure_aware",
    "format_relative_age",
    "now_utc",
    "parse_timestamp",
]
