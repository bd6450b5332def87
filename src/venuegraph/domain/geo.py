"""Great-circle distance and bounding-box helpers."""

from __future__ import annotations

from math import atan2, cos, radians, sin, sqrt
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from venuegraph.domain.model.city import BoundingBox

EARTH_RADIUS_METERS: Final[float] = 6_371_000.0


def haversine_meters(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    phi1 = radians(lat1)
    phi2 = radians(lat2)
    d_phi = radians(lat2 - lat1)
    d_lambda = radians(lon2 - lon1)

    a = sin(d_phi / 2) ** 2 + cos(phi1) * cos(phi2) * sin(d_lambda / 2) ** 2
    # clamp guards against tiny negative values from float rounding
    a = min(max(a, 0.0), 1.0)
    return EARTH_RADIUS_METERS * 2 * atan2(sqrt(a), sqrt(1 - a))


def bbox_center(bbox: BoundingBox) -> tuple[float, float]:
    return ((bbox.north + bbox.south) / 2, (bbox.east + bbox.west) / 2)


def bbox_radius_meters(bbox: BoundingBox) -> float:
    """Distance from the box center to its north-east corner."""

    center_lat, center_lon = bbox_center(bbox)
    return haversine_meters(center_lat, center_lon, bbox.north, bbox.east)


def bbox_to_overpass(bbox: BoundingBox) -> str:
    """Format as Overpass expects: ``south,west,north,east``."""

    return f"{bbox.south},{bbox.west},{bbox.north},{bbox.east}"


def is_point_in_bbox(lat: float, lon: float, bbox: BoundingBox) -> bool:
    return bbox.south <= lat <= bbox.north and bbox.west <= lon <= bbox.east
