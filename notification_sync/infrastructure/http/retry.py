"""Exponential backoff policies for reads and commands."""

from __future__ import annotations

from dataclasses import dataclass

from notification_sync.config import Settings

from .errors import FetchError, HTTPError


@dataclass(frozen=True)
class RetryPolicy:
    """How many times, and how far apart, a failed request is retried.

    ``max_retries`` counts retries after the first attempt, so reads make at
    most three attempts and commands two.
    """

    max_retries: int
    base_delay: float = 1.0
    max_delay: float = 30.0
    retry_http_errors: bool = True

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError("max_retries must not be negative")
        if self.base_delay <= 0 or self.max_delay <= 0:
            raise ValueError("Retry delays must be positive")

    def delay_for(self, attempt_index: int) -> float:
        """Return the wait before retry number ``attempt_index`` (0-based)."""

        return min(self.base_delay * 2**attempt_index, self.max_delay)

    def should_retry(self, error: FetchError, attempt_index: int) -> bool:
        if attempt_index >= self.max_retries:
            return False
        if isinstance(error, HTTPError):
            return self.retry_http_errors
        return error.retryable


READ_POLICY = RetryPolicy(max_retries=2, base_delay=1.0, max_delay=30.0, retry_http_errors=True)
# Commands are not retried on HTTP errors: not every store guarantees they
# are idempotent across automatic retries.
COMMAND_POLICY = RetryPolicy(
    max_retries=1, base_delay=1.0, max_delay=10.0, retry_http_errors=False
)


def read_policy_from_settings(settings: Settings) -> RetryPolicy:
    return RetryPolicy(
        max_retries=settings.read_max_retries,
        base_delay=settings.retry_base_delay_seconds,
        max_delay=settings.read_max_delay_seconds,
        retry_http_errors=True,
    )


def command_policy_from_settings(settings: Settings) -> RetryPolicy:
    return RetryPolicy(
        max_retries=settings.command_max_retries,
        base_delay=settings.retry_base_delay_seconds,
        max_delay=settings.command_max_delay_seconds,
        retry_http_errors=False,
    )


__all__ = [
    "COMMAND_POLICY",
    "READ_POLICY",
    "RetryPolicy",
    "command_policy_from_settings",
    "read_policy_from_settings",
]
