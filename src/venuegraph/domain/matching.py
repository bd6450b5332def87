"""Composite similarity scoring between venue candidates and canonical venues."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Final

from rapidfuzz.distance import Levenshtein

from venuegraph.domain.geo import haversine_meters
from venuegraph.domain.model.enums import VenueCategory
from venuegraph.domain.normalization import normalize_name

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from uuid import UUID

    from venuegraph.domain.model.records import NormalizedVenueCandidate
    from venuegraph.domain.model.venue import Venue

log = logging.getLogger(__name__)

NAME_WEIGHT: Final[float] = 0.5
GEO_WEIGHT: Final[float] = 0.3
CATEGORY_WEIGHT: Final[float] = 0.2
ALIAS_BONUS: Final[float] = 0.2
ALIAS_MATCH_THRESHOLD: Final[float] = 0.9
SUBSTRING_FLOOR: Final[float] = 0.85
DEFAULT_MATCH_THRESHOLD: Final[float] = 0.85
TIE_TOLERANCE: Final[float] = 1e-9

# (max distance in meters, score), checked in order
GEO_BANDS: Final[tuple[tuple[float, float], ...]] = (
    (25.0, 1.0),
    (50.0, 0.9),
    (100.0, 0.7),
    (500.0, 0.3),
)


@dataclass(frozen=True, slots=True)
class MatchProfile:
    """The fields the matcher compares, detached from where they came from."""

    normalized_name: str
    lat: float | None = None
    lon: float | None = None
    primary_category: VenueCategory | None = None
    aliases: frozenset[str] = field(default_factory=frozenset[str])

    @classmethod
    def from_candidate(cls, candidate: NormalizedVenueCandidate) -> MatchProfile:
        return cls(
            normalized_name=candidate.normalized_name,
            lat=candidate.lat,
            lon=candidate.lon,
            primary_category=candidate.primary_category,
            aliases=_alias_keys(candidate.aliases),
        )

    @classmethod
    def from_venue(cls, venue: Venue) -> MatchProfile:
        return cls(
            normalized_name=venue.normalized_name,
            lat=venue.lat,
            lon=venue.lon,
            primary_category=venue.primary_category,
            aliases=_alias_keys(alias.alias_normalized for alias in venue.aliases),
        )


def _alias_keys(aliases: Iterable[str]) -> frozenset[str]:
    return frozenset(key for key in (normalize_name(alias) for alias in aliases) if key)


def string_similarity(left: str, right: str) -> float:
    """``1 - levenshtein / max(len)``, in [0, 1]."""

    if left == right:
        return 1.0
    if not left or not right:
        return 0.0
    return Levenshtein.normalized_similarity(left, right)


def name_match_score(left: str, right: str) -> float:
    # a name that normalizes to nothing carries no evidence
    if not left or not right:
        return 0.0
    if left == right:
        return 1.0
    similarity = string_similarity(left, right)
    if left in right or right in left:
        return max(similarity, SUBSTRING_FLOOR)
    return similarity


def geo_score(distance_meters: float) -> float:
    for limit, score in GEO_BANDS:
        if distance_meters <= limit:
            return score
    return 0.0


def has_alias_match(left: frozenset[str], right: frozenset[str]) -> bool:
    if left & right:
        return True
    return any(
        name_match_score(alias_left, alias_right) > ALIAS_MATCH_THRESHOLD
        for alias_left in left
        for alias_right in right
    )


def _category_known(category: VenueCategory | None) -> bool:
    return category is not None and category.is_classified


def match_score(left: MatchProfile, right: MatchProfile) -> float:
    """Weighted average over the signals both sides actually carry.

    Missing coordinates or an unclassified category drop that signal from both
    numerator and denominator; a triggered alias match adds its own term.
    """

    total = name_match_score(left.normalized_name, right.normalized_name) * NAME_WEIGHT
    weights = NAME_WEIGHT

    if has_alias_match(left.aliases, right.aliases):
        total += ALIAS_BONUS
        weights += ALIAS_BONUS

    if (
        left.lat is not None
        and left.lon is not None
        and right.lat is not None
        and right.lon is not None
    ):
        distance = haversine_meters(left.lat, left.lon, right.lat, right.lon)
        total += geo_score(distance) * GEO_WEIGHT
        weights += GEO_WEIGHT

    if _category_known(left.primary_category) and _category_known(right.primary_category):
        total += (1.0 if left.primary_category == right.primary_category else 0.0) * (
            CATEGORY_WEIGHT
        )
        weights += CATEGORY_WEIGHT

    return total / weights


@dataclass(frozen=True, slots=True)
class MatchDecision:
    venue_id: UUID | None
    score: float
    ambiguous: bool = False
    tied_venue_ids: tuple[UUID, ...] = ()

    @property
    def is_match(self) -> bool:
        return self.venue_id is not None


@dataclass(frozen=True, slots=True)
class ExistingVenue:
    """A canonical venue prepared once for repeated comparisons."""

    venue_id: UUID
    created_at: datetime
    profile: MatchProfile

    @classmethod
    def from_venue(cls, venue: Venue) -> ExistingVenue:
        return cls(
            venue_id=venue.id,
            created_at=venue.created_at,
            profile=MatchProfile.from_venue(venue),
        )


def find_best_match(
    candidate: MatchProfile,
    existing: Sequence[ExistingVenue],
    *,
    threshold: float = DEFAULT_MATCH_THRESHOLD,
) -> MatchDecision:
    """Pick the single highest-scoring venue at or above ``threshold``.

    Exact ties resolve to the earliest-created venue (id as last resort) and
    are reported as ambiguous.
    """

    best_score = 0.0
    leaders: list[ExistingVenue] = []
    for venue in existing:
        score = match_score(candidate, venue.profile)
        if score < threshold:
            continue
        if not leaders or score > best_score + TIE_TOLERANCE:
            best_score = score
            leaders = [venue]
        elif abs(score - best_score) <= TIE_TOLERANCE:
            leaders.append(venue)

    if not leaders:
        return MatchDecision(venue_id=None, score=0.0)

    leaders.sort(key=lambda venue: (venue.created_at, str(venue.venue_id)))
    winner = leaders[0]
    ambiguous = len(leaders) > 1
    if ambiguous:
        log.warning(
            "Ambiguous match for %r: %s venues tied at %.3f, choosing %s",
            candidate.normalized_name,
            len(leaders),
            best_score,
            winner.venue_id,
        )
    return MatchDecision(
        venue_id=winner.venue_id,
        score=best_score,
        ambiguous=ambiguous,
        tied_venue_ids=tuple(venue.venue_id for venue in leaders),
    )
