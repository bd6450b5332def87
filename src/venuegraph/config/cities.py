"""Built-in catalog of cities the venue pipeline knows how to scope."""

from __future__ import annotations

from typing import Final

from venuegraph.domain.model.city import BoundingBox, CityConfig

from .errors import UnknownCityError

CITY_CONFIGS: Final[dict[str, CityConfig]] = {
    "New York": CityConfig(
        name="New York",
        state="NY",
        country="US",
        bbox=BoundingBox(north=40.9176, south=40.4774, east=-73.7004, west=-74.2591),
        default_neighborhoods=(
            "Manhattan",
            "Brooklyn",
            "Queens",
            "The Bronx",
            "Staten Island",
            "Williamsburg",
            "DUMBO",
            "East Village",
            "West Village",
            "SoHo",
            "Chelsea",
            "Midtown",
            "Upper East Side",
            "Upper West Side",
            "Harlem",
        ),
    ),
    "Los Angeles": CityConfig(
        name="Los Angeles",
        state="CA",
        country="US",
        bbox=BoundingBox(north=34.3373, south=33.7037, east=-118.1553, west=-118.6682),
        default_neighborhoods=(
            "Downtown",
            "Hollywood",
            "West Hollywood",
            "Santa Monica",
            "Venice",
            "Beverly Hills",
            "Silver Lake",
            "Echo Park",
        ),
    ),
    "San Francisco": CityConfig(
        name="San Francisco",
        state="CA",
        country="US",
        bbox=BoundingBox(north=37.8324, south=37.7081, east=-122.3549, west=-122.5155),
        default_neighborhoods=(
            "Financial District",
            "SoMa",
            "Mission",
            "Castro",
            "Haight-Ashbury",
            "North Beach",
            "Chinatown",
            "Pac Heights",
        ),
    ),
    "Chicago": CityConfig(
        name="Chicago",
        state="IL",
        country="US",
        bbox=BoundingBox(north=42.0230, south=41.6445, east=-87.5240, west=-87.9401),
        default_neighborhoods=(
            "Loop",
            "River North",
            "Wicker Park",
            "Lincoln Park",
            "Lakeview",
            "Logan Square",
            "Pilsen",
            "Hyde Park",
        ),
    ),
    "Austin": CityConfig(
        name="Austin",
        state="TX",
        country="US",
        bbox=BoundingBox(north=30.5168, south=30.0986, east=-97.5684, west=-97.9383),
        default_neighborhoods=(
            "Downtown",
            "East Austin",
            "South Congress",
            "West Campus",
            "Hyde Park",
            "Mueller",
            "Rainey Street",
        ),
    ),
}


def get_city_config(name: str) -> CityConfig:
    """Look up a city by name, ignoring case and surrounding whitespace."""

    wanted = name.strip().casefold()
    for city_name, config in CITY_CONFIGS.items():
        if city_name.casefold() == wanted:
            return config
    raise UnknownCityError(name)


def list_city_names() -> tuple[str, ...]:
    return tuple(CITY_CONFIGS)
