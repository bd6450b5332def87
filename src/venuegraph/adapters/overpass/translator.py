"""Translate Overpass elements into raw venue sightings."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Final

from venuegraph.domain.model.enums import SourceType
from venuegraph.domain.model.records import RawVenue
from venuegraph.domain.normalization import extract_neighborhood, generate_aliases

if TYPE_CHECKING:
    from collections.abc import Mapping

    from .schema import OverpassElement

OSM_CONFIDENCE: Final[float] = 0.9
OSM_BROWSE_URL: Final[str] = "https://www.openstreetmap.org"

_CATEGORY_KEYS: Final[tuple[str, ...]] = ("amenity", "leisure", "tourism", "shop")


def extract_categories(tags: Mapping[str, str]) -> tuple[str, ...]:
    categories = [tags[key] for key in _CATEGORY_KEYS if tags.get(key)]
    if tags.get("studio"):
        categories.append(f"{tags.get('amenity') or 'studio'}_{tags['studio']}")
    if tags.get("cuisine"):
        categories.append(f"cuisine_{tags['cuisine']}")
    return tuple(categories)


def _address(tags: Mapping[str, str]) -> str | None:
    parts = [tags[key] for key in ("addr:housenumber", "addr:street") if tags.get(key)]
    return " ".join(parts) if parts else None


def _capacity(tags: Mapping[str, str]) -> int | None:
    try:
        capacity = int(tags.get("capacity", "").strip())
    except ValueError:
        return None
    return capacity if capacity > 0 else None


def translate_element(
    element: OverpassElement,
    *,
    city: str,
    payload: Mapping[str, Any],
) -> RawVenue | None:
    """Return the sighting for ``element``, or ``None`` when it has no name."""

    tags = element.tags
    name = (tags.get("name") or "").strip()
    if not name:
        return None

    coordinates = element.coordinates
    lat, lon = coordinates if coordinates is not None else (None, None)
    opening_hours = tags.get("opening_hours")
    return RawVenue(
        source=SourceType.OSM,
        source_external_id=element.osm_path,
        source_url=f"{OSM_BROWSE_URL}/{element.osm_path}",
        raw_payload=dict(payload),
        confidence=OSM_CONFIDENCE,
        raw_name=name,
        aliases=tuple(alias for alias in generate_aliases(name, tags) if alias != name),
        lat=lat,
        lon=lon,
        address=_address(tags),
        neighborhood=extract_neighborhood(tags),
        city=city,
        categories=extract_categories(tags),
        tags=tuple(tags),
        capacity=_capacity(tags),
        website=tags.get("website") or tags.get("contact:website"),
        phone=tags.get("phone") or tags.get("contact:phone"),
        description=tags.get("description"),
        hours={"default": opening_hours} if opening_hours else None,
        accessibility=("wheelchair",) if tags.get("wheelchair") == "yes" else (),
    )
