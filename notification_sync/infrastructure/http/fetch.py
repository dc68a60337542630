"""Generic request executor with timeout, retry and error classification."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Awaitable, Callable, Collection, Mapping, TypeVar

import httpx

from .errors import FetchError, HTTPError, NetworkFailure, ParseFailure
from .retry import COMMAND_POLICY, READ_POLICY, RetryPolicy

logger = logging.getLogger(__name__)

SleepFunc = Callable[[float], Awaitable[None]]
T = TypeVar("T")


def extract_error_detail(response: httpx.Response) -> str:
    """Return a human readable description for an unsuccessful response."""

    text = response.text.strip() if response.content else ""
    if text:
        try:
            parsed = json.loads(text)
        except json.JSONDecodeError:
            return text
        if isinstance(parsed, dict):
            for key in ("message", "detail", "error"):
                value = parsed.get(key)
                if value:
                    return value if isinstance(value, str) else json.dumps(value)
        return text
    return response.reason_phrase or ""


class FetchLayer:
    """Execute requests against the store, retrying per :class:`RetryPolicy`."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        timeout: float = 10.0,
        read_policy: RetryPolicy = READ_POLICY,
        command_policy: RetryPolicy = COMMAND_POLICY,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        self._client = client
        self._timeout = timeout
        self._read_policy = read_policy
        self._command_policy = command_policy
        self._sleep = sleep

    async def read(
        self,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        decode: Callable[[Any], T] | None = None,
    ) -> Any:
        """Issue a ``GET`` and return the decoded JSON body.

        ``decode`` normalizes the JSON inside the retry loop, so a payload
        it rejects with ``ValueError`` is retried like any other
        :class:`ParseFailure`.
        """

        return await self._execute(
            "GET",
            path,
            self._read_policy,
            strict_decode=True,
            decode=decode,
            params=params,
            headers=headers,
        )

    async def command(
        self,
        method: str,
        path: str,
        *,
        ok_statuses: Collection[int] = (),
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        """Issue a mutating request.

        Statuses listed in ``ok_statuses`` are treated as success with no body.
        A body that cannot be decoded is ignored: the mutation already
        happened and retrying it would not be safe.
        """

        return await self._execute(
            method,
            path,
            self._command_policy,
            strict_decode=False,
            ok_statuses=ok_statuses,
            headers=headers,
        )

    async def _execute(
        self,
        method: str,
        path: str,
        policy: RetryPolicy,
        *,
        strict_decode: bool,
        decode: Callable[[Any], Any] | None = None,
        ok_statuses: Collection[int] = (),
        **request_kwargs: Any,
    ) -> Any:
        attempt = 0
        while True:
            try:
                payload = await self._attempt(
                    method,
                    path,
                    strict_decode=strict_decode,
                    ok_statuses=ok_statuses,
                    **request_kwargs,
                )
                if decode is None:
                    return payload
                try:
                    return decode(payload)
                except ValueError as exc:
                    logger.error("Unexpected payload shape from %s %s: %s", method, path, exc)
                    raise ParseFailure(f"Unexpected payload from {method} {path}") from exc
            except FetchError as exc:
                if not policy.should_retry(exc, attempt):
                    logger.warning(
                        "%s %s failed after %s attempt(s): %s",
                        method,
                        path,
                        attempt + 1,
                        exc,
                    )
                    raise
                delay = policy.delay_for(attempt)
                logger.info(
                    "%s %s failed (%s); retrying in %.1fs", method, path, exc, delay
                )
                attempt += 1
                await self._sleep(delay)

    async def _attempt(
        self,
        method: str,
        path: str,
        *,
        strict_decode: bool,
        ok_statuses: Collection[int],
        **request_kwargs: Any,
    ) -> Any:
        try:
            response = await self._client.request(
                method, path, timeout=self._timeout, **request_kwargs
            )
        except httpx.TransportError as exc:
            raise NetworkFailure(str(exc) or exc.__class__.__name__) from exc

        if response.status_code in ok_statuses:
            return None
        if not response.is_success:
            raise HTTPError(response.status_code, extract_error_detail(response))
        if not response.content:
            return None

        try:
            return response.json()
        except ValueError as exc:
            if strict_decode:
                logger.error("Malformed payload from %s %s: %r", method, path, response.text[:200])
                raise ParseFailure(f"Malformed payload from {method} {path}") from exc
            logger.debug("Ignoring undecodable body from %s %s", method, path)
            return None


__all__ = ["FetchLayer", "SleepFunc", "extract_error_detail"]
