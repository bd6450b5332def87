"""Neo4j graph store configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var

DEFAULT_NEO4J_USERNAME = "neo4j"
DEFAULT_NEO4J_DATABASE = "neo4j"


@dataclass(frozen=True, slots=True)
class Neo4jConfig:
    uri: str
    username: str
    password: str
    database: str = DEFAULT_NEO4J_DATABASE


def get_neo4j_config() -> Neo4jConfig | None:
    """Return the graph store settings, or ``None`` when the mirror is not configured."""

    uri = optional_env_var("NEO4J_URI")
    password = optional_env_var("NEO4J_PASSWORD")
    if uri is None or password is None:
        return None
    return Neo4jConfig(
        uri=uri,
        username=optional_env_var("NEO4J_USERNAME") or DEFAULT_NEO4J_USERNAME,
        password=password,
        database=optional_env_var("NEO4J_DATABASE") or DEFAULT_NEO4J_DATABASE,
    )
