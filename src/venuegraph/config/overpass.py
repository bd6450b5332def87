"""OpenStreetMap Overpass configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig

OVERPASS_DEFAULT_URL = "https://overpass-api.de/api/interpreter"
OVERPASS_TIMEOUT_SECONDS = 120.0
OVERPASS_QUERY_TIMEOUT_SECONDS = 90


@dataclass(frozen=True, slots=True)
class OverpassConfig:
    url: str
    query_timeout_seconds: int
    resilience: ResilienceConfig


def get_overpass_config(*, resilience: ResilienceConfig | None = None) -> OverpassConfig:
    url = optional_env_var("OVERPASS_URL") or OVERPASS_DEFAULT_URL
    return OverpassConfig(
        url=url,
        query_timeout_seconds=OVERPASS_QUERY_TIMEOUT_SECONDS,
        resilience=resilience
        or ResilienceConfig(
            name="overpass",
            timeout_seconds=OVERPASS_TIMEOUT_SECONDS,
            ratelimit=RateLimit(max_calls=1, per_seconds=2.0),
            cache=CacheConfig(backend="sqlite", ttl_seconds=6 * 3600, key_on_body=True),
        ),
    )
