"""Heat index stage: rescore every active venue of the city from its recent signals."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Final

from venuegraph.domain.heat import compute_heat_score
from venuegraph.domain.ingest_pipeline.orchestrator import PipelinePhase
from venuegraph.domain.model.entity import utcnow
from venuegraph.domain.model.enums import SignalWindow
from venuegraph.domain.model.venue import VenueHeatIndex

if TYPE_CHECKING:
    from venuegraph.domain.ingest_pipeline.context import IngestionContext
    from venuegraph.domain.ingest_pipeline.run_log import UnitOfWorkFactory

log = logging.getLogger(__name__)

SIGNAL_LOOKBACK: Final[timedelta] = timedelta(days=7)


@dataclass(slots=True)
class HeatIndexPhase(PipelinePhase):
    unit_of_work_factory: UnitOfWorkFactory
    clock: Callable[[], datetime] = utcnow
    name: str = "HeatIndex"

    def run(self, context: IngestionContext) -> IngestionContext:
        now = self.clock()
        with self.unit_of_work_factory() as uow:
            venue_ids = [venue.id for venue in uow.repositories.venues.list_active(context.city.name)]
            latest = uow.repositories.signals.latest_values(
                venue_ids, window=SignalWindow.WEEKLY, since=now - SIGNAL_LOOKBACK
            )
            for venue_id in venue_ids:
                score = compute_heat_score(latest.get(venue_id, {}))
                uow.repositories.heat_index.upsert(
                    VenueHeatIndex(venue_id=venue_id, composite_score=score, last_computed_at=now)
                )
            uow.commit()

        log.info("[%s] Heat indices computed for %s venues", self.name, len(venue_ids))
        return context.with_stats(heat_indexed=len(venue_ids))
