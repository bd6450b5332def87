from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING
from uuid import uuid4

from venuegraph.domain.ingest_pipeline.context import ErrorKind, IngestionContext
from venuegraph.domain.ingest_pipeline.graph_write import GraphWritePhase
from venuegraph.domain.model import (
    MatchCandidate,
    RunType,
    SignalType,
    SignalWindow,
    SourceType,
)
from tests.helpers.venues import (
    FIXED_NOW,
    RecordingGraphStore,
    make_candidate,
    make_raw_venue,
)

if TYPE_CHECKING:
    from datetime import datetime

    from venuegraph.domain.ingest_pipeline.run_log import UnitOfWorkFactory
    from venuegraph.domain.model import CityConfig, NormalizedVenueCandidate

OSM_BLUE_NOTE = make_raw_venue("Blue Note", external_id="node/42")


def _blue_note(**extra: object) -> NormalizedVenueCandidate:
    return make_candidate("Blue Note", sources=(OSM_BLUE_NOTE,), **extra)


def _write(
    uow_factory: UnitOfWorkFactory,
    city: CityConfig,
    *matches: MatchCandidate,
    store: RecordingGraphStore | None = None,
    now: datetime = FIXED_NOW,
) -> IngestionContext:
    phase = GraphWritePhase(uow_factory, store or RecordingGraphStore(), clock=lambda: now)
    return phase.run(IngestionContext(city=city, run_type=RunType.FULL, matches=matches))


def test_new_venue_is_created_with_provenance_alias_and_rating(
    sqlite_unit_of_work: UnitOfWorkFactory, new_york: CityConfig
) -> None:
    store = RecordingGraphStore()
    candidate = _blue_note(aliases=("The Blue Note",), rating=4.5)

    result = _write(sqlite_unit_of_work, new_york, MatchCandidate.new(candidate), store=store)

    assert result.errors == ()
    assert result.stats.updated_venues == 0
    with sqlite_unit_of_work() as uow:
        (venue,) = uow.repositories.venues.list_active("New York")
        source = uow.repositories.venue_sources.get(SourceType.OSM, "node/42")
        ratings = uow.repositories.signals.latest_values(
            [venue.id], window=SignalWindow.WEEKLY, since=FIXED_NOW - timedelta(days=1)
        )
        assert [alias.alias for alias in venue.aliases] == ["The Blue Note"]
        assert [s.source_external_id for s in venue.sources] == ["node/42"]
    assert source is not None
    assert source.venue_id == venue.id
    assert ratings == {venue.id: {SignalType.RATING: 4.5}}
    (record,) = store.records
    assert record.venue_id == venue.id
    assert record.category == "MUSIC"


def test_matched_venue_is_gap_filled_and_provenance_touched(
    sqlite_unit_of_work: UnitOfWorkFactory, new_york: CityConfig
) -> None:
    _write(sqlite_unit_of_work, new_york, MatchCandidate.new(_blue_note()))
    with sqlite_unit_of_work() as uow:
        (venue,) = uow.repositories.venues.list_active("New York")
    later = FIXED_NOW + timedelta(days=1)

    result = _write(
        sqlite_unit_of_work,
        new_york,
        MatchCandidate.matched(_blue_note(phone="+12124758592"), venue.id, 0.97),
        now=later,
    )

    assert result.stats.updated_venues == 1
    with sqlite_unit_of_work() as uow:
        stored = uow.repositories.venues.get(venue.id)
        assert stored is not None
        assert stored.phone == "+12124758592"
        assert stored.updated_at == later
        (source,) = stored.sources
        assert source.first_seen_at == FIXED_NOW
        assert source.last_seen_at == later


def test_unchanged_match_is_not_counted_as_updated(
    sqlite_unit_of_work: UnitOfWorkFactory, new_york: CityConfig
) -> None:
    _write(sqlite_unit_of_work, new_york, MatchCandidate.new(_blue_note()))
    with sqlite_unit_of_work() as uow:
        (venue,) = uow.repositories.venues.list_active("New York")

    result = _write(
        sqlite_unit_of_work,
        new_york,
        MatchCandidate.matched(_blue_note(), venue.id, 1.0),
        now=FIXED_NOW + timedelta(days=1),
    )

    assert result.stats.updated_venues == 0
    with sqlite_unit_of_work() as uow:
        stored = uow.repositories.venues.get(venue.id)
        assert stored is not None
        assert stored.updated_at == FIXED_NOW


def test_failed_write_is_recorded_and_others_continue(
    sqlite_unit_of_work: UnitOfWorkFactory, new_york: CityConfig
) -> None:
    missing = MatchCandidate.matched(make_candidate("Ghost Bar"), uuid4(), 0.9)
    comedy = MatchCandidate.new(
        make_candidate("Comedy Cellar", sources=(make_raw_venue("Comedy Cellar"),))
    )

    result = _write(sqlite_unit_of_work, new_york, missing, comedy)

    assert result.stats.write_failures == 1
    (error,) = result.errors
    assert error.kind is ErrorKind.PERSISTENCE
    assert error.agent_name == "GraphWriter"
    assert "Ghost Bar" in error.message
    with sqlite_unit_of_work() as uow:
        names = [venue.canonical_name for venue in uow.repositories.venues.list_active("New York")]
    assert names == ["Comedy Cellar"]


def test_graph_mirror_failure_is_counted_but_not_an_error(
    sqlite_unit_of_work: UnitOfWorkFactory, new_york: CityConfig
) -> None:
    store = RecordingGraphStore(fail_on=frozenset({"Blue Note"}))

    result = _write(sqlite_unit_of_work, new_york, MatchCandidate.new(_blue_note()), store=store)

    assert result.errors == ()
    assert result.stats.graph_mirror_failures == 1
    with sqlite_unit_of_work() as uow:
        assert len(uow.repositories.venues.list_active("New York")) == 1


def test_unavailable_graph_store_is_skipped(
    sqlite_unit_of_work: UnitOfWorkFactory, new_york: CityConfig
) -> None:
    store = RecordingGraphStore(available=False)

    result = _write(sqlite_unit_of_work, new_york, MatchCandidate.new(_blue_note()), store=store)

    assert store.records == []
    assert result.stats.graph_mirror_failures == 0
