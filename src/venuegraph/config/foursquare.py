"""Foursquare Places configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var
from .http_resilience import RateLimit, ResilienceConfig

FOURSQUARE_BASE_URL = "https://api.foursquare.com/v3/places/search"
FOURSQUARE_TIMEOUT_SECONDS = 15.0


@dataclass(frozen=True, slots=True)
class FoursquareConfig:
    """Holds Foursquare API configuration values.

    ``api_key`` is optional: without it the source runs in degraded mode.
    """

    api_key: str | None
    base_url: str
    resilience: ResilienceConfig

    @property
    def is_configured(self) -> bool:
        return self.api_key is not None


def get_foursquare_config(*, resilience: ResilienceConfig | None = None) -> FoursquareConfig:
    return FoursquareConfig(
        api_key=optional_env_var("FOURSQUARE_API_KEY"),
        base_url=FOURSQUARE_BASE_URL,
        resilience=resilience
        or ResilienceConfig(
            name="foursquare",
            timeout_seconds=FOURSQUARE_TIMEOUT_SECONDS,
            ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
            cache=None,
        ),
    )
