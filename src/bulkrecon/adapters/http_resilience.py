"""Rate-limited, retrying async HTTP client used by the snapshot REST reader."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, TypedDict, Unpack

import httpx
from aiolimiter import AsyncLimiter
from httpx_retries import Retry, RetryTransport

if TYPE_CHECKING:
    from types import TracebackType

    from httpx._client import UseClientDefault
    from httpx._types import (
        HeaderTypes,
        QueryParamTypes,
        RequestExtensions,
        TimeoutTypes,
        URLTypes,
    )

    from bulkrecon.config.http_resilience import ResilienceConfig, ResponseHook, RetryPolicy


log = logging.getLogger(__name__)


class RequestOptions(TypedDict, total=False):
    params: QueryParamTypes | None
    headers: HeaderTypes | None
    follow_redirects: bool | UseClientDefault
    timeout: TimeoutTypes | UseClientDefault
    extensions: RequestExtensions | None


def build_retry(policy: RetryPolicy) -> Retry:
    """Translate a ``RetryPolicy`` into the httpx-retries transport policy."""
    return Retry(
        total=policy.total,
        backoff_factor=policy.backoff_factor,
        backoff_jitter=policy.backoff_jitter,
        max_backoff_wait=policy.max_backoff_wait,
        respect_retry_after_header=policy.respect_retry_after_header,
        allowed_methods=sorted(policy.allowed_methods),
        status_forcelist=sorted(policy.status_forcelist),
        retry_on_exceptions=policy.retry_on_exceptions,
    )


def build_async_client(config: ResilienceConfig) -> httpx.AsyncClient:
    """Create the retrying ``httpx.AsyncClient`` described by ``config``."""
    hooks: dict[str, list[ResponseHook]] = {"response": list(config.response_hooks)}
    return httpx.AsyncClient(
        base_url=config.base_url or "",
        headers=dict(config.default_headers or {}),
        timeout=config.timeout_seconds,
        event_hooks=hooks,
        transport=RetryTransport(retry=build_retry(config.retry)),
    )


class ResilientClient:
    """Async HTTP client that retries transient failures and throttles request rate.

    Use it as an async context manager so the underlying connection pool is closed.
    """

    def __init__(self, config: ResilienceConfig) -> None:
        self.config = config
        limit = config.ratelimit
        self._limiter = AsyncLimiter(limit.max_calls, limit.per_seconds) if limit else None
        self._client = build_async_client(config)

    async def __aenter__(self) -> ResilientClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request(
        self,
        method: str,
        url: URLTypes,
        **kwargs: Unpack[RequestOptions],
    ) -> httpx.Response:
        async def send() -> httpx.Response:
            return await self._client.request(method, url, **kwargs)

        log.debug("%s: %s %s", self.config.name, method, url)
        return await self._throttled(send)

    async def get(
        self,
        url: URLTypes,
        **kwargs: Unpack[RequestOptions],
    ) -> httpx.Response:
        return await self.request("GET", url, **kwargs)

    async def get_json(
        self,
        url: URLTypes,
        **kwargs: Unpack[RequestOptions],
    ) -> object:
        """GET ``url`` and decode the body.

        Raises ``httpx.HTTPStatusError`` for error statuses and ``ValueError`` when the
        body is not JSON.
        """
        response = await self.get(url, **kwargs)
        response.raise_for_status()
        return response.json()

    async def _throttled(self, send: Callable[[], Awaitable[httpx.Response]]) -> httpx.Response:
        if self._limiter is None:
            return await send()
        async with self._limiter:
            return await send()
