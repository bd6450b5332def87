from __future__ import annotations

from datetime import timedelta

import pytest

from venuegraph.domain.model import (
    IngestionRun,
    MatchCandidate,
    PriceBand,
    RawVenue,
    RunStatus,
    RunType,
    SourceType,
    VenueCategory,
    VenueSource,
)
from tests.helpers.venues import FIXED_NOW, make_candidate, make_raw_venue, make_venue


def test_raw_venue_validates_confidence_name_and_coordinates() -> None:
    with pytest.raises(ValueError, match="confidence"):
        make_raw_venue(confidence=1.5)
    with pytest.raises(ValueError, match="raw_name"):
        make_raw_venue("   ")
    with pytest.raises(ValueError, match="together"):
        RawVenue(
            source=SourceType.OSM,
            source_external_id="node/1",
            raw_name="Blue Note",
            city="New York",
            confidence=0.9,
            lat=40.7,
        )


def test_match_candidate_outcomes_are_exclusive() -> None:
    candidate = make_candidate()
    venue = make_venue()

    assert MatchCandidate.new(candidate).is_new
    matched = MatchCandidate.matched(candidate, venue.id, 0.93)
    assert not matched.is_new
    with pytest.raises(ValueError, match="set together"):
        MatchCandidate(candidate=candidate, matched_venue_id=venue.id)
    with pytest.raises(ValueError, match="ambiguous"):
        MatchCandidate(candidate=candidate, ambiguous=True)


def test_venue_defaults_to_unclassified() -> None:
    venue = make_venue(category=VenueCategory.UNCLASSIFIED)

    assert venue.primary_category is VenueCategory.UNCLASSIFIED
    assert venue.is_active


def test_fill_from_never_blanks_existing_fields() -> None:
    venue = make_venue(address="131 West 3rd Street", website="https://bluenotejazz.com")
    later = FIXED_NOW + timedelta(days=1)

    changed = venue.fill_from(
        make_candidate(address=None, website=None, phone="+12124758592"), now=later
    )

    assert changed == ["phone"]
    assert venue.address == "131 West 3rd Street"
    assert venue.website == "https://bluenotejazz.com"
    assert venue.phone == "+12124758592"
    assert venue.updated_at == later


def test_fill_from_upgrades_category_and_merges_subcategories() -> None:
    venue = make_venue(category=VenueCategory.UNCLASSIFIED, subcategories=("event_venue",))

    changed = venue.fill_from(
        make_candidate(subcategories=("jazz_club", "event_venue"), price_band=PriceBand.HIGH),
        now=FIXED_NOW,
    )

    assert set(changed) == {"price_band", "primary_category", "subcategories"}
    assert venue.primary_category is VenueCategory.MUSIC
    assert venue.subcategories == ["event_venue", "jazz_club"]


def test_fill_from_without_changes_keeps_updated_at() -> None:
    venue = make_venue()
    original = venue.updated_at

    assert venue.fill_from(make_candidate(), now=FIXED_NOW + timedelta(hours=1)) == []
    assert venue.updated_at == original


def test_add_alias_deduplicates_on_normalized_text() -> None:
    venue = make_venue()

    first = venue.add_alias("The Blue Note", "the blue note")
    duplicate = venue.add_alias("THE BLUE NOTE", "the blue note")

    assert first is not None
    assert duplicate is None
    assert [alias.alias for alias in venue.aliases] == ["The Blue Note"]


def test_venue_source_touch_only_moves_last_seen() -> None:
    raw = make_raw_venue()
    source = VenueSource.from_raw(raw, seen_at=FIXED_NOW)
    later = FIXED_NOW + timedelta(days=7)

    source.touch(later)

    assert source.first_seen_at == FIXED_NOW
    assert source.last_seen_at == later
    assert source.source_external_id == raw.source_external_id


def test_ingestion_run_finishes_exactly_once() -> None:
    run = IngestionRun(run_type=RunType.FULL, city="New York", started_at=FIXED_NOW)
    assert run.is_open

    run.finish(status=RunStatus.PARTIAL, stats={"raw_total": 3}, finished_at=FIXED_NOW)

    assert run.status is RunStatus.PARTIAL
    assert run.stats_json == {"raw_total": 3}
    with pytest.raises(ValueError, match="already finalized"):
        run.finish(status=RunStatus.SUCCESS, stats={}, finished_at=FIXED_NOW)


def test_ingestion_run_cannot_finish_as_running() -> None:
    run = IngestionRun(run_type=RunType.INCREMENTAL, city="Austin")

    with pytest.raises(ValueError, match="RUNNING"):
        run.finish(status=RunStatus.RUNNING, stats={}, finished_at=FIXED_NOW)
