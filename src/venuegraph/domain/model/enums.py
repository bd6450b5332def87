"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class SourceType(StrEnum):
    OSM = "OSM"
    FOURSQUARE = "FOURSQUARE"
    YELP = "YELP"
    EVENTBRITE = "EVENTBRITE"
    MEETUP = "MEETUP"
    FEVER = "FEVER"
    DICE = "DICE"
    RA = "RA"
    NYC_DATA = "NYC_DATA"
    TIKTOK = "TIKTOK"
    INSTAGRAM = "INSTAGRAM"
    SNAPCHAT = "SNAPCHAT"
    REDDIT = "REDDIT"
    OTHER = "OTHER"


class VenueCategory(StrEnum):
    """Primary venue kind.

    ``UNCLASSIFIED`` is the explicit result when no source tag maps to a kind;
    ``OTHER`` is reserved for tags that are recognised but fall outside the
    named kinds (parks, stadiums).
    """

    MUSIC = "MUSIC"
    ARTS = "ARTS"
    THEATRE = "THEATRE"
    COMEDY = "COMEDY"
    FITNESS = "FITNESS"
    DANCE = "DANCE"
    FOOD = "FOOD"
    NETWORKING = "NETWORKING"
    FAMILY = "FAMILY"
    OTHER = "OTHER"
    UNCLASSIFIED = "UNCLASSIFIED"

    @property
    def is_classified(self) -> bool:
        return self is not VenueCategory.UNCLASSIFIED


class PriceBand(StrEnum):
    FREE = "FREE"
    LOW = "LOW"
    MID = "MID"
    HIGH = "HIGH"
    LUXE = "LUXE"


class SignalType(StrEnum):
    EVENT_ACTIVITY = "EVENT_ACTIVITY"
    SOCIAL_HEAT = "SOCIAL_HEAT"
    USER_TRAFFIC = "USER_TRAFFIC"
    RATING = "RATING"
    RISK = "RISK"


class SignalWindow(StrEnum):
    HOURLY = "HOURLY"
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"


class RunType(StrEnum):
    FULL = "FULL"
    INCREMENTAL = "INCREMENTAL"


class RunStatus(StrEnum):
    RUNNING = "RUNNING"
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"
    PARTIAL = "PARTIAL"
