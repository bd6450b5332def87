"""Throttled, retrying and cached async HTTP access for the venue source agents."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, TypedDict, Unpack

import httpx
from aiolimiter import AsyncLimiter
from hishel import AsyncSqliteStorage, FilterPolicy
from hishel import Response as CachedResponse
from hishel._policies import BaseFilter
from hishel.httpx import AsyncCacheTransport
from httpx_retries import Retry, RetryTransport

from venuegraph.config.storage import get_http_cache_path

if TYPE_CHECKING:
    from types import TracebackType

    from httpx._types import HeaderTypes, QueryParamTypes, RequestData, URLTypes

    from venuegraph.config.http_resilience import CacheConfig, ResilienceConfig, RetryPolicy

log = getLogger(__name__)


class RequestOptions(TypedDict, total=False):
    params: QueryParamTypes | None
    headers: HeaderTypes | None
    data: RequestData | None
    json: object


def build_retry(policy: RetryPolicy) -> Retry:
    return Retry(
        total=policy.total,
        backoff_factor=policy.backoff_factor,
        max_backoff_wait=policy.max_backoff_wait,
        backoff_jitter=policy.backoff_jitter,
        respect_retry_after_header=policy.respect_retry_after_header,
        allowed_methods=tuple(policy.allowed_methods),
        status_forcelist=tuple(policy.status_forcelist),
        retry_on_exceptions=policy.retry_on_exceptions,
    )


class ResilientClient:
    """One source's HTTP session.

    Transient failures are retried by the transport, every request waits on
    the source's rate limiter, and successful responses may be served from
    a hishel cache so reruns within the TTL do not hit the provider again.
    """

    def __init__(self, config: ResilienceConfig) -> None:
        self.config = config
        self._limiter = (
            AsyncLimiter(config.ratelimit.max_calls, config.ratelimit.per_seconds)
            if config.ratelimit is not None
            else None
        )
        transport: httpx.AsyncBaseTransport = RetryTransport(retry=build_retry(config.retry))
        if config.cache is not None:
            # cache hits never reach the retry transport
            transport = AsyncCacheTransport(
                next_transport=transport,
                storage=_cache_storage(config.cache),
                policy=_cache_policy(config.cache),
            )
        self._client = httpx.AsyncClient(
            base_url=config.base_url or "",
            timeout=config.timeout_seconds,
            headers=dict(config.default_headers),
            transport=transport,
        )

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
        self, method: str, url: URLTypes, **kwargs: Unpack[RequestOptions]
    ) -> httpx.Response:
        if self._limiter is None:
            response = await self._client.request(method, url, **kwargs)
        else:
            async with self._limiter:
                response = await self._client.request(method, url, **kwargs)
        if response.is_error:
            log.warning(
                f"{self.config.name}: {method} {response.url} answered {response.status_code}"
            )
        return response

    async def get(self, url: URLTypes, **kwargs: Unpack[RequestOptions]) -> httpx.Response:
        return await self.request("GET", url, **kwargs)

    async def post(self, url: URLTypes, **kwargs: Unpack[RequestOptions]) -> httpx.Response:
        return await self.request("POST", url, **kwargs)


def default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


class _OkResponsesOnly(BaseFilter[CachedResponse]):
    """Keep rate-limit and error pages out of the cache."""

    def needs_body(self) -> bool:
        return False

    def apply(self, item: CachedResponse, body: bytes | None) -> bool:  # noqa: ARG002
        return item.status_code == httpx.codes.OK


def _cache_storage(config: CacheConfig) -> AsyncSqliteStorage:
    database_path = str(get_http_cache_path()) if config.backend == "sqlite" else ":memory:"
    return AsyncSqliteStorage(database_path=database_path, default_ttl=config.ttl_seconds)


def _cache_policy(config: CacheConfig) -> FilterPolicy:
    policy = FilterPolicy(response_filters=[_OkResponsesOnly()])
    # POSTed queries (Overpass) share one URL, so the body has to be part of the key
    policy.use_body_key = config.key_on_body
    return policy
