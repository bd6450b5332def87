"""City scoping values handed to every source."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class BoundingBox:
    north: float
    south: float
    east: float
    west: float

    def __post_init__(self) -> None:
        if self.south > self.north:
            raise ValueError("Bounding box south edge must not exceed north edge")
        if self.west > self.east:
            raise ValueError("Bounding box west edge must not exceed east edge")


@dataclass(frozen=True, slots=True, kw_only=True)
class CityConfig:
    name: str
    bbox: BoundingBox
    state: str | None = None
    country: str | None = None
    default_neighborhoods: tuple[str, ...] = ()
