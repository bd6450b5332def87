"""Pydantic models describing Overpass API payloads."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class OverpassBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class CenterPayload(OverpassBaseModel):
    lat: float
    lon: float


class OverpassElement(OverpassBaseModel):
    type: Literal["node", "way", "relation"]
    id: int
    lat: float | None = None
    lon: float | None = None
    center: CenterPayload | None = None
    tags: dict[str, str] = Field(default_factory=dict)

    @property
    def coordinates(self) -> tuple[float, float] | None:
        """Nodes carry their own position; ways and relations report a center."""

        if self.type == "node":
            if self.lat is None or self.lon is None:
                return None
            return self.lat, self.lon
        if self.center is not None:
            return self.center.lat, self.center.lon
        return None

    @property
    def osm_path(self) -> str:
        return f"{self.type}/{self.id}"


class OverpassResponse(OverpassBaseModel):
    # elements stay raw so one malformed element is skipped, not the whole response
    elements: list[dict[str, Any]] = Field(default_factory=list)
