"""Run-level sanity checks against fixed thresholds and the previous good run."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from venuegraph.domain.ingest_pipeline.context import SourceCounter

if TYPE_CHECKING:
    from venuegraph.domain.ingest_pipeline.context import RunStats

MIN_COORDINATE_COVERAGE: Final[float] = 0.5
MIN_CATEGORY_COVERAGE: Final[float] = 0.7
MAX_RAW_TOTAL_DROP: Final[float] = 0.5

# Sources counted toward completeness, with the label used in messages. OSM
# needs no credentials, so it is expected to produce venues even on a first run.
_SCORED_SOURCES: Final[tuple[tuple[SourceCounter, str], ...]] = (
    (SourceCounter.OSM, "OSM"),
    (SourceCounter.FOURSQUARE, "Foursquare"),
    (SourceCounter.YELP, "Yelp"),
    (SourceCounter.EVENT_SITES, "Event sites"),
)
_ALWAYS_EXPECTED: Final[frozenset[SourceCounter]] = frozenset({SourceCounter.OSM})


@dataclass(frozen=True, slots=True)
class QualityCheckResult:
    warnings: tuple[str, ...]
    anomalies: tuple[str, ...]
    coverage_score: int
    quality_score: int
    completeness_score: int

    @property
    def passed(self) -> bool:
        return not self.anomalies


def _ratio(part: int, total: int) -> float:
    return part / max(total, 1)


def evaluate_run_quality(current: RunStats, previous: RunStats | None) -> QualityCheckResult:
    warnings: list[str] = []
    anomalies: list[str] = []

    for counter, label in _SCORED_SOURCES:
        if current.count_for(counter) > 0:
            continue
        known_to_work = counter in _ALWAYS_EXPECTED or (
            previous is not None and previous.count_for(counter) > 0
        )
        if known_to_work:
            anomalies.append(f"{label} returned 0 venues (expected >0)")

    coord_coverage = _ratio(current.venues_with_coords, current.normalized_total)
    if coord_coverage < MIN_COORDINATE_COVERAGE:
        warnings.append(f"Only {round(coord_coverage * 100)}% of venues have coordinates")

    category_coverage = _ratio(current.venues_with_category, current.normalized_total)
    if category_coverage < MIN_CATEGORY_COVERAGE:
        warnings.append(f"Only {round(category_coverage * 100)}% of venues have a category")

    if previous is not None and current.raw_total < previous.raw_total * MAX_RAW_TOTAL_DROP:
        anomalies.append(
            f"Raw venue count dropped significantly: {current.raw_total} vs "
            f"{previous.raw_total} in the last successful run"
        )

    website_coverage = _ratio(current.venues_with_website, current.normalized_total)
    completeness = sum(25 for counter, _ in _SCORED_SOURCES if current.count_for(counter) > 0)
    return QualityCheckResult(
        warnings=tuple(warnings),
        anomalies=tuple(anomalies),
        coverage_score=round(coord_coverage * 100),
        quality_score=round(category_coverage * 50 + coord_coverage * 30 + website_coverage * 20),
        completeness_score=completeness,
    )
