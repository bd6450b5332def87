"""Ingestion run bookkeeping records."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import UUID

from venuegraph.domain.model.entity import Entity, utcnow
from venuegraph.domain.model.enums import RunStatus, RunType


@dataclass(eq=False, kw_only=True)
class IngestionRun(Entity):
    """One pipeline invocation for a (city, run type) pair.

    Opened as ``RUNNING`` and closed exactly once by :meth:`finish`.
    """

    run_type: RunType
    city: str
    started_at: datetime = field(default_factory=utcnow)
    finished_at: datetime | None = None
    status: RunStatus = RunStatus.RUNNING
    stats_json: dict[str, Any] | None = None

    @property
    def is_open(self) -> bool:
        return self.status is RunStatus.RUNNING

    def finish(
        self,
        *,
        status: RunStatus,
        stats: dict[str, Any],
        finished_at: datetime,
    ) -> None:
        if not self.is_open:
            raise ValueError(f"Run {self.id} already finalized with status {self.status}")
        if status is RunStatus.RUNNING:
            raise ValueError("A run cannot be finalized as RUNNING")
        self.status = status
        self.stats_json = stats
        self.finished_at = finished_at


@dataclass(eq=False, kw_only=True)
class IngestionError(Entity):
    run_id: UUID
    agent_name: str
    source: str
    message: str
    payload: dict[str, Any] | None = None
    created_at: datetime = field(default_factory=utcnow)
