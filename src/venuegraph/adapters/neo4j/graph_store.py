"""Neo4j mirror of canonical venues, their neighborhoods and categories."""

from __future__ import annotations

from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING, Final, LiteralString

from neo4j import GraphDatabase
from neo4j.exceptions import DriverError, Neo4jError

from venuegraph.config.neo4j import Neo4jConfig, get_neo4j_config
from venuegraph.domain.ports.graph_store import GraphStore

if TYPE_CHECKING:
    from neo4j import Driver, ManagedTransaction

    from venuegraph.domain.ports.graph_store import VenueGraphRecord

log = getLogger(__name__)

MERGE_VENUE: Final[LiteralString] = """
MERGE (v:Venue {id: $id})
SET v.name = $name,
    v.lat = $lat,
    v.lon = $lon,
    v.category = $category,
    v.city = $city,
    v.updatedAt = datetime()
"""

MERGE_NEIGHBORHOOD: Final[LiteralString] = """
MERGE (n:Neighborhood {name: $neighborhood, city: $city})
WITH n
MATCH (v:Venue {id: $venue_id})
MERGE (v)-[:IN_NEIGHBORHOOD]->(n)
"""

MERGE_CATEGORY: Final[LiteralString] = """
MERGE (c:Category {name: $category})
WITH c
MATCH (v:Venue {id: $venue_id})
MERGE (v)-[:HAS_CATEGORY]->(c)
"""

type DriverFactory = Callable[[Neo4jConfig], Driver]


def _default_driver_factory(config: Neo4jConfig) -> Driver:
    return GraphDatabase.driver(config.uri, auth=(config.username, config.password))


def _write_venue(tx: ManagedTransaction, record: VenueGraphRecord) -> None:
    venue_id = str(record.venue_id)
    tx.run(
        MERGE_VENUE,
        id=venue_id,
        name=record.name,
        lat=record.lat,
        lon=record.lon,
        category=record.category,
        city=record.city,
    )
    if record.neighborhood:
        tx.run(
            MERGE_NEIGHBORHOOD,
            neighborhood=record.neighborhood,
            city=record.city,
            venue_id=venue_id,
        )
    tx.run(MERGE_CATEGORY, category=record.category, venue_id=venue_id)


class Neo4jGraphStore:
    """Graph mirror backed by one driver, opened and closed by the pipeline driver.

    ``open`` never raises: an unreachable server leaves the store unavailable
    and the run continues without a mirror.
    """

    def __init__(
        self,
        config: Neo4jConfig,
        *,
        driver_factory: DriverFactory = _default_driver_factory,
    ) -> None:
        self.config = config
        self._driver_factory = driver_factory
        self._driver: Driver | None = None

    @property
    def available(self) -> bool:
        return self._driver is not None

    def open(self) -> None:
        if self._driver is not None:
            return
        driver: Driver | None = None
        try:
            driver = self._driver_factory(self.config)
            driver.verify_connectivity()
        except (DriverError, Neo4jError) as exc:
            log.warning(f"Neo4j at {self.config.uri} unavailable, skipping graph writes: {exc}")
            if driver is not None:
                driver.close()
            return
        self._driver = driver
        log.info(f"Connected to Neo4j at {self.config.uri}")

    def close(self) -> None:
        if self._driver is None:
            return
        driver, self._driver = self._driver, None
        driver.close()

    def upsert_venue(self, record: VenueGraphRecord) -> None:
        if self._driver is None:
            raise RuntimeError("Neo4j graph store is not open")
        with self._driver.session(database=self.config.database) as session:
            session.execute_write(_write_venue, record)


class DisabledGraphStore:
    """Stand-in used when no graph store is configured."""

    @property
    def available(self) -> bool:
        return False

    def open(self) -> None:
        log.info("Neo4j not configured, skipping graph writes")

    def close(self) -> None:
        return None

    def upsert_venue(self, record: VenueGraphRecord) -> None:  # noqa: ARG002
        return None


def build_graph_store(config: Neo4jConfig | None = None) -> GraphStore:
    effective = config or get_neo4j_config()
    if effective is None:
        return DisabledGraphStore()
    return Neo4jGraphStore(effective)


if TYPE_CHECKING:
    _graph_store_check: GraphStore = Neo4jGraphStore(
        Neo4jConfig(uri="bolt://localhost:7687", username="neo4j", password="")
    )
    _disabled_check: GraphStore = DisabledGraphStore()
