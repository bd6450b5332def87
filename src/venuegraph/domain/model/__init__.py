"""Public domain model surface."""

from __future__ import annotations

from venuegraph.domain.model.city import BoundingBox, CityConfig
from venuegraph.domain.model.entity import Entity, new_id, utcnow
from venuegraph.domain.model.enums import (
    PriceBand,
    RunStatus,
    RunType,
    SignalType,
    SignalWindow,
    SourceType,
    VenueCategory,
)
from venuegraph.domain.model.records import MatchCandidate, NormalizedVenueCandidate, RawVenue
from venuegraph.domain.model.run import IngestionError, IngestionRun
from venuegraph.domain.model.venue import (
    Venue,
    VenueAlias,
    VenueHeatIndex,
    VenueSignal,
    VenueSource,
)

__all__ = [
    "BoundingBox",
    "CityConfig",
    "Entity",
    "IngestionError",
    "IngestionRun",
    "MatchCandidate",
    "NormalizedVenueCandidate",
    "PriceBand",
    "RawVenue",
    "RunStatus",
    "RunType",
    "SignalType",
    "SignalWindow",
    "SourceType",
    "Venue",
    "VenueAlias",
    "VenueCategory",
    "VenueHeatIndex",
    "VenueSignal",
    "VenueSource",
    "new_id",
    "utcnow",
]
