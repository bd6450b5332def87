from __future__ import annotations

from typing import TYPE_CHECKING

from venuegraph.adapters.social import SocialSignalFetcher, social_heat_for_venue
from venuegraph.domain.ingest_pipeline.context import IngestionContext, SourceCounter
from venuegraph.domain.ingest_pipeline.sources import SourceFetchPhase
from venuegraph.domain.model import RunType

if TYPE_CHECKING:
    from venuegraph.domain.model import CityConfig


def test_social_heat_is_a_zero_stub() -> None:
    heat = social_heat_for_venue("Blue Note", lat=40.7309, lon=-74.0006, city="New York")

    assert heat.heat_score == 0.0
    assert heat.sources == ()
    assert heat.meta["reason"] == "stub_implementation"


def test_social_stage_emits_nothing_and_records_no_error(new_york: CityConfig) -> None:
    phase = SourceFetchPhase(SocialSignalFetcher(), SourceCounter.SOCIAL)

    result = phase.run(IngestionContext(city=new_york, run_type=RunType.FULL))

    assert phase.name == "SocialSignalsAgent"
    assert result.raw_venues == ()
    assert result.errors == ()
    assert result.stats.social_signals == 0
