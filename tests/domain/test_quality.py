from __future__ import annotations

from venuegraph.domain.ingest_pipeline.context import RunStats
from venuegraph.domain.quality import evaluate_run_quality


def _stats(**overrides: int) -> RunStats:
    values = {
        "osm_venues": 10,
        "raw_total": 10,
        "normalized_total": 10,
        "venues_with_coords": 10,
        "venues_with_category": 8,
        "venues_with_website": 5,
    }
    values.update(overrides)
    return RunStats(**values)


def test_healthy_first_run_passes() -> None:
    result = evaluate_run_quality(_stats(), None)

    assert result.passed
    assert result.warnings == ()
    assert result.coverage_score == 100
    assert result.quality_score == 80
    assert result.completeness_score == 25


def test_empty_osm_is_always_an_anomaly() -> None:
    result = evaluate_run_quality(_stats(osm_venues=0), None)

    assert result.anomalies == ("OSM returned 0 venues (expected >0)",)
    assert result.completeness_score == 0


def test_source_that_worked_last_time_is_expected_again() -> None:
    previous = _stats(yelp_venues=40, raw_total=10)

    result = evaluate_run_quality(_stats(), previous)

    assert result.anomalies == ("Yelp returned 0 venues (expected >0)",)


def test_unconfigured_source_without_history_is_not_an_anomaly() -> None:
    result = evaluate_run_quality(_stats(), _stats())

    assert result.passed


def test_raw_total_drop_is_an_anomaly() -> None:
    result = evaluate_run_quality(_stats(raw_total=40), _stats(raw_total=100))

    assert len(result.anomalies) == 1
    assert "dropped significantly: 40 vs 100" in result.anomalies[0]


def test_low_coverage_only_warns() -> None:
    result = evaluate_run_quality(_stats(venues_with_coords=4, venues_with_category=5), None)

    assert result.passed
    assert result.warnings == (
        "Only 40% of venues have coordinates",
        "Only 50% of venues have a category",
    )
    assert result.coverage_score == 40


def test_scores_survive_an_empty_run() -> None:
    result = evaluate_run_quality(RunStats(), None)

    assert result.coverage_score == 0
    assert result.quality_score == 0
    assert result.completeness_score == 0
    assert len(result.anomalies) == 1
