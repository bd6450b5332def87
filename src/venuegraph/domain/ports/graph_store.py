"""Port for the best-effort venue graph mirror."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from uuid import UUID


@dataclass(frozen=True, slots=True)
class VenueGraphRecord:
    venue_id: UUID
    name: str
    city: str
    category: str
    lat: float | None = None
    lon: float | None = None
    neighborhood: str | None = None


@runtime_checkable
class GraphStore(Protocol):
    """Upsert-only graph mirror whose lifecycle is owned by the pipeline driver."""

    @property
    def available(self) -> bool: ...

    def open(self) -> None: ...

    def close(self) -> None: ...

    def upsert_venue(self, record: VenueGraphRecord) -> None: ...
