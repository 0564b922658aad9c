"""Retry, rate limit and header settings for the HTTP snapshot reader."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import httpx

if TYPE_CHECKING:
    from collections.abc import Mapping

log = logging.getLogger(__name__)

ResponseHook = Callable[[httpx.Response], Awaitable[None] | None]

# Snapshot lookups are read-only, so only idempotent verbs are replayed.
READ_ONLY_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})
TRANSIENT_STATUSES = frozenset({429, 500, 502, 503, 504})


@dataclass(slots=True, frozen=True)
class RetryPolicy:
    total: int = 4
    backoff_factor: float = 0.5
    max_backoff_wait: float = 60.0
    backoff_jitter: float = 1.0
    respect_retry_after_header: bool = True
    allowed_methods: frozenset[str] = READ_ONLY_METHODS
    status_forcelist: frozenset[int] = TRANSIENT_STATUSES
    retry_on_exceptions: tuple[type[httpx.HTTPError], ...] = (
        httpx.TimeoutException,
        httpx.NetworkError,
        httpx.RemoteProtocolError,
    )


@dataclass(slots=True, frozen=True)
class RateLimit:
    max_calls: int
    per_seconds: float


@dataclass(slots=True, frozen=True)
class ResilienceConfig:
    """Everything ``ResilientClient`` needs to talk to one upstream service."""

    name: str
    base_url: str | None = None
    timeout_seconds: float = 30.0
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    ratelimit: RateLimit | None = None
    response_hooks: tuple[ResponseHook, ...] = ()
    default_headers: Mapping[str, str] | None = None


def error_logging_hook(name: str) -> ResponseHook:
    """Build a response hook that logs the status and body of failed responses."""

    async def hook(response: httpx.Response) -> None:
        if response.status_code < httpx.codes.BAD_REQUEST:
            return
        await response.aread()
        log.warning(
            "%s: %s %s returned %s: %s",
            name,
            response.request.method,
            response.request.url.path,
            response.status_code,
            response.text[:500],
        )

    return hook
