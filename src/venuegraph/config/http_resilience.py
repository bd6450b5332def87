"""Transport settings shared by the venue source clients."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Literal

import httpx

DEFAULT_USER_AGENT = "venuegraph/1.0 (+venue ingestion)"

TRANSIENT_STATUSES = frozenset({429, 500, 502, 503, 504})


@dataclass(slots=True, frozen=True)
class RetryPolicy:
    total: int = 3
    backoff_factor: float = 0.5
    max_backoff_wait: float = 30.0
    backoff_jitter: float = 1.0
    respect_retry_after_header: bool = True
    # Overpass queries are POSTed but are read-only, so POST is retried as well
    allowed_methods: frozenset[str] = frozenset({"GET", "POST"})
    status_forcelist: frozenset[int] = TRANSIENT_STATUSES
    retry_on_exceptions: tuple[type[httpx.HTTPError], ...] = (
        httpx.TimeoutException,
        httpx.NetworkError,
        httpx.RemoteProtocolError,
    )


@dataclass(slots=True, frozen=True)
class RateLimit:
    """At most ``max_calls`` requests per ``per_seconds`` window for one source."""

    max_calls: int
    per_seconds: float


@dataclass(slots=True, frozen=True)
class CacheConfig:
    backend: Literal["sqlite", "memory"] = "memory"
    ttl_seconds: float | None = None
    key_on_body: bool = False


@dataclass(slots=True, frozen=True)
class ResilienceConfig:
    """How one venue source talks HTTP: timeout, retries, throttle and cache."""

    name: str
    base_url: str | None = None
    timeout_seconds: float = 30.0
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    ratelimit: RateLimit | None = None
    cache: CacheConfig | None = field(default_factory=CacheConfig)
    default_headers: Mapping[str, str] = field(
        default_factory=lambda: {"User-Agent": DEFAULT_USER_AGENT}
    )
