"""Normalization utilities: name keys, field cleanup, category and price mapping,
and grouping of raw sightings into merged venue candidates.

Everything here is deterministic and free of I/O so the normalizer stage and
the matcher can share the exact same keys.
"""

from __future__ import annotations

import logging
import math
import re
import unicodedata
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final
from urllib.parse import urlsplit, urlunsplit

from venuegraph.domain.geo import haversine_meters
from venuegraph.domain.model.enums import PriceBand, VenueCategory
from venuegraph.domain.model.records import NormalizedVenueCandidate, RawVenue

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

log = logging.getLogger(__name__)

GROUP_RADIUS_METERS: Final[float] = 100.0
CELL_PRECISION: Final[int] = 1000  # 1/1000 degree, roughly 100 m of latitude
NO_LAT: Final[str] = "no_lat"
NO_LON: Final[str] = "no_lon"

_LEADING_ARTICLE = re.compile(r"^(the|a|an)\s+", re.IGNORECASE)
_PUNCTUATION = re.compile(r"[^\w\s]")
_WHITESPACE = re.compile(r"\s+")
_NON_DIGITS = re.compile(r"\D")
_ADDRESS_TOKEN = re.compile(r"\b([A-Za-z]{1,4})\b\.?")

_ADDRESS_ABBREVIATIONS: Final[dict[str, str]] = {
    "st": "Street",
    "ave": "Avenue",
    "blvd": "Boulevard",
    "rd": "Road",
    "dr": "Drive",
    "ln": "Lane",
    "ct": "Court",
    "pl": "Place",
    "sq": "Square",
    "pkwy": "Parkway",
    "hwy": "Highway",
    "n": "North",
    "s": "South",
    "e": "East",
    "w": "West",
    "ne": "Northeast",
    "nw": "Northwest",
    "se": "Southeast",
    "sw": "Southwest",
}

_ALIAS_TAGS: Final[tuple[str, ...]] = ("alt_name", "old_name", "short_name", "official_name")
_NEIGHBORHOOD_TAGS: Final[tuple[str, ...]] = (
    "addr:neighbourhood",
    "addr:suburb",
    "addr:district",
)

# Ordered: exact tag hits are tried first, then the first entry whose key
# appears as a whole ``_``-separated token run inside the tag.
CATEGORY_TABLE: Final[tuple[tuple[str, VenueCategory], ...]] = (
    ("nightclub", VenueCategory.MUSIC),
    ("music_venue", VenueCategory.MUSIC),
    ("musicvenues", VenueCategory.MUSIC),
    ("jazz_club", VenueCategory.MUSIC),
    ("jazzandblues", VenueCategory.MUSIC),
    ("concert_hall", VenueCategory.MUSIC),
    ("danceclubs", VenueCategory.MUSIC),
    ("cocktailbars", VenueCategory.MUSIC),
    ("bar", VenueCategory.MUSIC),
    ("bars", VenueCategory.MUSIC),
    ("pub", VenueCategory.MUSIC),
    ("lounge", VenueCategory.MUSIC),
    ("art_gallery", VenueCategory.ARTS),
    ("artgalleries", VenueCategory.ARTS),
    ("gallery", VenueCategory.ARTS),
    ("museum", VenueCategory.ARTS),
    ("museums", VenueCategory.ARTS),
    ("cultural_center", VenueCategory.ARTS),
    ("arts_centre", VenueCategory.ARTS),
    ("performing_arts_theater", VenueCategory.THEATRE),
    ("theatre", VenueCategory.THEATRE),
    ("theater", VenueCategory.THEATRE),
    ("comedy_club", VenueCategory.COMEDY),
    ("comedyclubs", VenueCategory.COMEDY),
    ("fitness_centre", VenueCategory.FITNESS),
    ("sports_centre", VenueCategory.FITNESS),
    ("yoga_studio", VenueCategory.FITNESS),
    ("gym", VenueCategory.FITNESS),
    ("gyms", VenueCategory.FITNESS),
    ("yoga", VenueCategory.FITNESS),
    ("dance_studio", VenueCategory.DANCE),
    ("studio_dance", VenueCategory.DANCE),
    ("restaurant", VenueCategory.FOOD),
    ("restaurants", VenueCategory.FOOD),
    ("cafe", VenueCategory.FOOD),
    ("food", VenueCategory.FOOD),
    ("coworking_space", VenueCategory.NETWORKING),
    ("convention_center", VenueCategory.NETWORKING),
    ("conference_centre", VenueCategory.NETWORKING),
    ("community_centre", VenueCategory.NETWORKING),
    ("amusement_park", VenueCategory.FAMILY),
    ("zoo", VenueCategory.FAMILY),
    ("aquarium", VenueCategory.FAMILY),
    ("park", VenueCategory.OTHER),
    ("stadium", VenueCategory.OTHER),
    ("marketplace", VenueCategory.OTHER),
)
_CATEGORY_LOOKUP: Final[dict[str, VenueCategory]] = dict(CATEGORY_TABLE)

_PRICE_BANDS: Final[tuple[PriceBand, ...]] = (
    PriceBand.FREE,
    PriceBand.LOW,
    PriceBand.MID,
    PriceBand.HIGH,
    PriceBand.LUXE,
)


# Names ----------------------------------------------------------------------


def normalize_name(name: str) -> str:
    """Matching key: lowercase, leading article and punctuation removed, spaces collapsed."""

    text = unicodedata.normalize("NFKC", name).casefold().strip()
    text = _LEADING_ARTICLE.sub("", text)
    text = _PUNCTUATION.sub("", text)
    return _WHITESPACE.sub(" ", text).strip()


def normalize_alias(alias: str) -> str:
    """Alias dedup key; unlike :func:`normalize_name` the article is kept."""

    text = unicodedata.normalize("NFKC", alias).casefold()
    text = _PUNCTUATION.sub("", text)
    return _WHITESPACE.sub(" ", text).strip()


def canonicalize_name(name: str) -> str:
    words = _WHITESPACE.sub(" ", name.strip()).split(" ")
    return " ".join(word[:1].upper() + word[1:].lower() for word in words)


def generate_aliases(name: str, tags: Mapping[str, str] | None = None) -> tuple[str, ...]:
    aliases: list[str] = [name]
    without_article = _LEADING_ARTICLE.sub("", name)
    if without_article and without_article != name:
        aliases.append(without_article)
    if tags:
        for key in _ALIAS_TAGS:
            value = tags.get(key)
            if value and value not in aliases:
                aliases.append(value)
    return tuple(aliases)


# Fields ---------------------------------------------------------------------


def extract_neighborhood(tags: Mapping[str, str] | None) -> str | None:
    if not tags:
        return None
    for key in _NEIGHBORHOOD_TAGS:
        value = tags.get(key)
        if value:
            return value
    return None


def normalize_phone(phone: str | None) -> str | None:
    """North American numbers become E.164; anything else is kept verbatim."""

    if not phone or not phone.strip():
        return None
    digits = _NON_DIGITS.sub("", phone)
    if len(digits) == 10:
        return f"+1{digits}"
    if len(digits) == 11 and digits.startswith("1"):
        return f"+{digits}"
    return phone.strip()


def _expand_address_token(match: re.Match[str]) -> str:
    token = match.group(1)
    expanded = _ADDRESS_ABBREVIATIONS.get(token.casefold())
    return expanded if expanded is not None else match.group(0)


def normalize_address(address: str | None) -> str | None:
    """Expand street-suffix and compass abbreviations, tidy commas and spacing."""

    if not address or not address.strip():
        return None
    parts = [_WHITESPACE.sub(" ", part).strip() for part in address.split(",")]
    cleaned = ", ".join(part for part in parts if part)
    return _ADDRESS_TOKEN.sub(_expand_address_token, cleaned) or None


def normalize_url(url: str | None) -> str | None:
    if not url or not url.strip():
        return None
    candidate = url.strip()
    if "://" not in candidate:
        candidate = f"https://{candidate}"
    try:
        parts = urlsplit(candidate)
    except ValueError:
        return None
    if parts.scheme not in {"http", "https"} or not parts.netloc or " " in parts.netloc:
        return None
    host = parts.hostname or ""
    if "." not in host and host != "localhost":
        return None
    return urlunsplit((parts.scheme, parts.netloc.lower(), parts.path, parts.query, ""))


def map_price_band(value: float | str | None) -> PriceBand | None:
    """Map a numeric tier (0-4+) or a ``$``-string onto a price band."""

    if value is None:
        return None
    if isinstance(value, str):
        tier = value.count("$")
    else:
        if value < 0 or math.isnan(value):
            return None
        tier = int(value)
    return _PRICE_BANDS[min(tier, len(_PRICE_BANDS) - 1)]


# Categories -----------------------------------------------------------------


def normalize_category_tag(tag: str) -> str:
    text = unicodedata.normalize("NFKD", tag)
    text = "".join(ch for ch in text if not unicodedata.combining(ch))
    return _WHITESPACE.sub("_", text.strip().lower())


def classify_tag(tag: str) -> VenueCategory:
    """Total mapping from one free-form tag to a category."""

    normalized = normalize_category_tag(tag)
    if not normalized:
        return VenueCategory.UNCLASSIFIED
    exact = _CATEGORY_LOOKUP.get(normalized)
    if exact is not None:
        return exact
    padded = f"_{normalized}_"
    for key, category in CATEGORY_TABLE:
        if f"_{key}_" in padded:
            return category
    return VenueCategory.UNCLASSIFIED


def map_categories(tags: Iterable[str]) -> tuple[VenueCategory, tuple[str, ...]]:
    """Resolve the primary category (first classifiable tag wins) and subcategories."""

    subcategories: list[str] = []
    primary = VenueCategory.UNCLASSIFIED
    for tag in tags:
        normalized = normalize_category_tag(tag)
        if not normalized:
            continue
        if normalized not in subcategories:
            subcategories.append(normalized)
        if primary is VenueCategory.UNCLASSIFIED:
            primary = classify_tag(normalized)
    return primary, tuple(subcategories)


# Grouping -------------------------------------------------------------------


def _cell(value: float | None, sentinel: str) -> str:
    if value is None:
        return sentinel
    return str(math.floor(value * CELL_PRECISION) / CELL_PRECISION)


def grouping_key(raw: RawVenue) -> str:
    """Coarse identity key: normalized name plus a ~100 m coordinate cell."""

    return (
        f"{normalize_name(raw.raw_name)}:{_cell(raw.lat, NO_LAT)}:{_cell(raw.lon, NO_LON)}"
    )


class _DisjointSet:
    def __init__(self, size: int) -> None:
        self._parent = list(range(size))

    def find(self, index: int) -> int:
        while self._parent[index] != index:
            self._parent[index] = self._parent[self._parent[index]]
            index = self._parent[index]
        return index

    def union(self, left: int, right: int) -> None:
        root_left, root_right = self.find(left), self.find(right)
        if root_left != root_right:
            self._parent[max(root_left, root_right)] = min(root_left, root_right)


def _within_radius(left: tuple[float, float], right: tuple[float, float]) -> bool:
    return haversine_meters(*left, *right) <= GROUP_RADIUS_METERS


def group_raw_venues(raw_venues: Sequence[RawVenue]) -> list[list[RawVenue]]:
    """Group sightings that share a normalized name and sit in the same place.

    Records sharing a grouping cell always group together. Records in
    different cells are also joined when they lie within 100 m of each other,
    so a cell boundary never splits one place in two. Records without
    coordinates group by name alone. Groups keep first-seen order.
    """

    by_name: dict[str, list[int]] = {}
    for index, raw in enumerate(raw_venues):
        by_name.setdefault(normalize_name(raw.raw_name), []).append(index)

    links = _DisjointSet(len(raw_venues))
    for indices in by_name.values():
        by_cell: dict[str, int] = {}
        located: list[tuple[int, tuple[float, float]]] = []
        for index in indices:
            raw = raw_venues[index]
            key = grouping_key(raw)
            if key in by_cell:
                links.union(by_cell[key], index)
            else:
                by_cell[key] = index
            if raw.lat is not None and raw.lon is not None:
                located.append((index, (raw.lat, raw.lon)))
        for position, (left, left_point) in enumerate(located):
            for right, right_point in located[position + 1 :]:
                if links.find(left) != links.find(right) and _within_radius(
                    left_point, right_point
                ):
                    links.union(left, right)

    groups: dict[int, list[RawVenue]] = {}
    for index, raw in enumerate(raw_venues):
        groups.setdefault(links.find(index), []).append(raw)
    return list(groups.values())


def _first[T](values: Iterable[T | None]) -> T | None:
    for value in values:
        if value is not None:
            return value
    return None


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def merge_group(records: Sequence[RawVenue], *, city: str) -> NormalizedVenueCandidate:
    """Merge one group of sightings into a single candidate.

    The highest-confidence record supplies the name; single-valued fields take
    the first non-null value in confidence order.
    """

    if not records:
        raise ValueError("Cannot merge an empty group")
    ordered = sorted(records, key=lambda raw: raw.confidence, reverse=True)
    base = ordered[0]

    aliases: list[str] = []
    for raw in ordered:
        for alias in (raw.raw_name, *raw.aliases):
            if alias and alias not in aliases:
                aliases.append(alias)

    located = [raw for raw in ordered if raw.lat is not None and raw.lon is not None]
    lat = sum(raw.lat for raw in located if raw.lat is not None) / len(located) if located else None
    lon = sum(raw.lon for raw in located if raw.lon is not None) / len(located) if located else None

    prices = [raw.price_level for raw in ordered if raw.price_level is not None]
    price_band = map_price_band(_round_half_up(sum(prices) / len(prices))) if prices else None

    capacities = [raw.capacity for raw in ordered if raw.capacity is not None]
    ratings = [raw.rating for raw in ordered if raw.rating is not None]
    descriptions = [raw.description for raw in ordered if raw.description]

    primary, subcategories = map_categories(tag for raw in ordered for tag in raw.categories)

    return NormalizedVenueCandidate(
        canonical_name=canonicalize_name(base.raw_name),
        normalized_name=normalize_name(base.raw_name),
        city=city,
        primary_category=primary,
        subcategories=subcategories,
        aliases=tuple(aliases),
        lat=lat,
        lon=lon,
        address=_first(normalize_address(raw.address) for raw in ordered),
        neighborhood=_first(raw.neighborhood for raw in ordered),
        price_band=price_band,
        capacity=max(capacities) if capacities else None,
        rating=sum(ratings) / len(ratings) if ratings else None,
        website=_first(normalize_url(raw.website) for raw in ordered),
        phone=_first(normalize_phone(raw.phone) for raw in ordered),
        description=max(descriptions, key=len) if descriptions else None,
        image_url=_first(raw.image_url for raw in ordered),
        is_active=True,
        sources=tuple(ordered),
    )


@dataclass(slots=True)
class NormalizationSummary:
    candidates: list[NormalizedVenueCandidate] = field(
        default_factory=list[NormalizedVenueCandidate]
    )
    with_coordinates: int = 0
    with_category: int = 0
    with_website: int = 0


def normalize_raw_venues(raw_venues: Sequence[RawVenue], *, city: str) -> NormalizationSummary:
    """Group and merge one city's sightings, tallying the coverage metrics."""

    summary = NormalizationSummary()
    for group in group_raw_venues(raw_venues):
        candidate = merge_group(group, city=city)
        summary.candidates.append(candidate)
        if candidate.has_coordinates:
            summary.with_coordinates += 1
        if candidate.primary_category.is_classified:
            summary.with_category += 1
        if candidate.website is not None:
            summary.with_website += 1
    log.debug(
        "Normalized %s raw venues into %s candidates", len(raw_venues), len(summary.candidates)
    )
    return summary
