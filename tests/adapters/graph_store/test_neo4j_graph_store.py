from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any
from uuid import uuid4

import pytest
from neo4j.exceptions import ServiceUnavailable

from venuegraph.adapters.neo4j import DisabledGraphStore, Neo4jGraphStore, build_graph_store
from venuegraph.config import Neo4jConfig
from venuegraph.domain.ports.graph_store import VenueGraphRecord

CONFIG = Neo4jConfig(uri="bolt://graph.test:7687", username="neo4j", password="secret")


@dataclass(slots=True)
class _FakeTransaction:
    statements: list[tuple[str, dict[str, Any]]]

    def run(self, query: str, **parameters: Any) -> None:
        self.statements.append((query, parameters))


@dataclass(slots=True)
class _FakeSession:
    driver: _FakeDriver
    database: str | None

    def __enter__(self) -> _FakeSession:
        return self

    def __exit__(self, *exc_info: object) -> None:
        return None

    def execute_write(self, work: Any, *args: Any) -> Any:
        return work(_FakeTransaction(self.driver.statements), *args)


@dataclass(slots=True)
class _FakeDriver:
    reachable: bool = True
    closed: bool = False
    databases: list[str | None] = field(default_factory=list)
    statements: list[tuple[str, dict[str, Any]]] = field(default_factory=list)

    def verify_connectivity(self) -> None:
        if not self.reachable:
            raise ServiceUnavailable("connection refused")

    def session(self, *, database: str | None = None) -> _FakeSession:
        self.databases.append(database)
        return _FakeSession(self, database)

    def close(self) -> None:
        self.closed = True


def _store(driver: _FakeDriver) -> Neo4jGraphStore:
    return Neo4jGraphStore(CONFIG, driver_factory=lambda config: driver)  # type: ignore[arg-type,return-value]


def _record(**changes: Any) -> VenueGraphRecord:
    values: dict[str, Any] = {
        "venue_id": uuid4(),
        "name": "Blue Note",
        "city": "New York",
        "category": "MUSIC",
        "lat": 40.7309,
        "lon": -74.0006,
        "neighborhood": "Greenwich Village",
    }
    values.update(changes)
    return VenueGraphRecord(**values)


def test_upsert_merges_venue_neighborhood_and_category() -> None:
    driver = _FakeDriver()
    store = _store(driver)
    record = _record()

    store.open()
    store.upsert_venue(record)
    store.close()

    assert driver.databases == ["neo4j"]
    venue, neighborhood, category = driver.statements
    assert "MERGE (v:Venue {id: $id})" in venue[0]
    assert venue[1]["id"] == str(record.venue_id)
    assert venue[1]["name"] == "Blue Note"
    assert neighborhood[1] == {
        "neighborhood": "Greenwich Village",
        "city": "New York",
        "venue_id": str(record.venue_id),
    }
    assert category[1] == {"category": "MUSIC", "venue_id": str(record.venue_id)}
    assert driver.closed
    assert not store.available


def test_venue_without_neighborhood_skips_that_edge() -> None:
    driver = _FakeDriver()
    store = _store(driver)
    store.open()

    store.upsert_venue(_record(neighborhood=None))

    assert len(driver.statements) == 2


def test_unreachable_server_leaves_the_store_unavailable() -> None:
    driver = _FakeDriver(reachable=False)
    store = _store(driver)

    store.open()

    assert not store.available
    assert driver.closed
    with pytest.raises(RuntimeError, match="not open"):
        store.upsert_venue(_record())


def test_build_graph_store_without_configuration(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("NEO4J_URI", raising=False)
    monkeypatch.delenv("NEO4J_PASSWORD", raising=False)

    store = build_graph_store()

    assert isinstance(store, DisabledGraphStore)
    assert not store.available
    store.open()
    store.upsert_venue(_record())
    store.close()


def test_build_graph_store_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("NEO4J_URI", "bolt://graph.test:7687")
    monkeypatch.setenv("NEO4J_PASSWORD", "secret")
    monkeypatch.setenv("NEO4J_DATABASE", "venues")
    monkeypatch.delenv("NEO4J_USERNAME", raising=False)

    store = build_graph_store()

    assert isinstance(store, Neo4jGraphStore)
    assert store.config.database == "venues"
    assert store.config.username == "neo4j"
