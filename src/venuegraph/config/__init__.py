"""Application configuration helpers."""

from __future__ import annotations

from .cities import CITY_CONFIGS, get_city_config, list_city_names
from .env import float_env_var, optional_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError, UnknownCityError
from .foursquare import FoursquareConfig, get_foursquare_config
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .neo4j import Neo4jConfig, get_neo4j_config
from .overpass import OverpassConfig, get_overpass_config
from .pipeline import PipelineConfig, get_pipeline_config
from .storage import (
    DatabaseConfig,
    StorageConfig,
    get_database_config,
    get_http_cache_path,
    get_storage_config,
)
from .yelp import YelpConfig, get_yelp_config

__all__ = [
    "CITY_CONFIGS",
    "CacheConfig",
    "ConfigurationError",
    "DatabaseConfig",
    "FoursquareConfig",
    "MissingConfigurationError",
    "Neo4jConfig",
    "OverpassConfig",
    "PipelineConfig",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "UnknownCityError",
    "YelpConfig",
    "configure_logging",
    "float_env_var",
    "get_city_config",
    "get_database_config",
    "get_foursquare_config",
    "get_http_cache_path",
    "get_neo4j_config",
    "get_overpass_config",
    "get_pipeline_config",
    "get_storage_config",
    "get_yelp_config",
    "list_city_names",
    "optional_env_var",
    "require_env_vars",
]
