"""Yelp Fusion configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var
from .http_resilience import RateLimit, ResilienceConfig

YELP_BASE_URL = "https://api.yelp.com/v3/businesses/search"
YELP_TIMEOUT_SECONDS = 15.0


@dataclass(frozen=True, slots=True)
class YelpConfig:
    api_key: str | None
    base_url: str
    resilience: ResilienceConfig

    @property
    def is_configured(self) -> bool:
        return self.api_key is not None


def get_yelp_config(*, resilience: ResilienceConfig | None = None) -> YelpConfig:
    return YelpConfig(
        api_key=optional_env_var("YELP_API_KEY"),
        base_url=YELP_BASE_URL,
        resilience=resilience
        or ResilienceConfig(
            name="yelp",
            timeout_seconds=YELP_TIMEOUT_SECONDS,
            ratelimit=RateLimit(max_calls=5, per_seconds=1.0),
            cache=None,
        ),
    )
