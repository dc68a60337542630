"""Failure taxonomy produced by the fetch layer."""

from __future__ import annotations


class FetchError(Exception):
    """Base class for every failure surfaced by :class:`FetchLayer`."""

    retryable = True


class NetworkFailure(FetchError):
    """No response was received (connection error or timeout)."""


class ParseFailure(NetworkFailure):
    """The response body could not be decoded.

    Subclasses :class:`NetworkFailure` because it is retried the same way.
    """


class HTTPError(FetchError):
    """The store answered with a non-2xx status."""

    def __init__(self, status_code: int, detail: str = "") -> None:
        self.status_code = status_code
        self.detail = detail
        message = f"Request failed with status {status_code}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)

    @property
    def not_found(self) -> bool:
        return self.status_code == 404


__all__ = ["FetchError", "HTTPError", "NetworkFailure", "ParseFailure"]
