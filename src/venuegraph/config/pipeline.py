"""Ingestion pipeline defaults."""

from __future__ import annotations

from dataclasses import dataclass

from .env import float_env_var, optional_env_var
from .errors import ConfigurationError

DEFAULT_MATCH_THRESHOLD = 0.85
DEFAULT_PAGE_DELAY_SECONDS = 0.1
DEFAULT_CITY_DELAY_SECONDS = 5.0
DEFAULT_RUN_LOCK_TTL_SECONDS = 6 * 3600.0
DEFAULT_CITIES: tuple[str, ...] = ("New York",)


@dataclass(frozen=True, slots=True)
class PipelineConfig:
    match_threshold: float = DEFAULT_MATCH_THRESHOLD
    page_delay_seconds: float = DEFAULT_PAGE_DELAY_SECONDS
    city_delay_seconds: float = DEFAULT_CITY_DELAY_SECONDS
    run_lock_ttl_seconds: float = DEFAULT_RUN_LOCK_TTL_SECONDS
    cities: tuple[str, ...] = DEFAULT_CITIES


def _parse_cities(raw: str | None) -> tuple[str, ...]:
    if raw is None:
        return DEFAULT_CITIES
    cities = tuple(part.strip() for part in raw.split(",") if part.strip())
    return cities or DEFAULT_CITIES


def get_pipeline_config() -> PipelineConfig:
    threshold = float_env_var("VENUE_MATCH_THRESHOLD", DEFAULT_MATCH_THRESHOLD)
    if not 0.0 < threshold <= 1.0:
        raise ConfigurationError(f"VENUE_MATCH_THRESHOLD must be in (0, 1], got {threshold}")
    page_delay = float_env_var("VENUE_PAGE_DELAY_SECONDS", DEFAULT_PAGE_DELAY_SECONDS)
    city_delay = float_env_var("VENUE_CITY_DELAY_SECONDS", DEFAULT_CITY_DELAY_SECONDS)
    if page_delay < 0 or city_delay < 0:
        raise ConfigurationError("Ingestion delays must be non-negative")
    return PipelineConfig(
        match_threshold=threshold,
        page_delay_seconds=page_delay,
        city_delay_seconds=city_delay,
        cities=_parse_cities(optional_env_var("VENUE_INGESTION_CITIES")),
    )
