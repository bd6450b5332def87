from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING

from venuegraph.domain.ingest_pipeline.context import IngestionContext
from venuegraph.domain.ingest_pipeline.heat_index import HeatIndexPhase
from venuegraph.domain.model import RunType, SignalType, SignalWindow, VenueSignal
from tests.helpers.venues import FIXED_NOW, make_venue

if TYPE_CHECKING:
    from uuid import UUID

    from venuegraph.domain.ingest_pipeline.run_log import UnitOfWorkFactory
    from venuegraph.domain.model import CityConfig


def _signal(
    venue_id: UUID,
    signal_type: SignalType,
    value: float,
    *,
    age: timedelta,
    window: SignalWindow = SignalWindow.WEEKLY,
) -> VenueSignal:
    return VenueSignal(
        venue_id=venue_id,
        signal_type=signal_type,
        value=value,
        window=window,
        computed_at=FIXED_NOW - age,
    )


def test_heat_uses_latest_recent_weekly_signals(
    sqlite_unit_of_work: UnitOfWorkFactory, new_york: CityConfig
) -> None:
    venue = make_venue("Blue Note")
    quiet = make_venue("Smalls", lat=40.7343, lon=-74.0029)
    with sqlite_unit_of_work() as uow:
        uow.repositories.venues.add(venue)
        uow.repositories.venues.add(quiet)
        signals = uow.repositories.signals
        signals.add(_signal(venue.id, SignalType.EVENT_ACTIVITY, 5, age=timedelta(days=1)))
        signals.add(_signal(venue.id, SignalType.RATING, 4.0, age=timedelta(days=2)))
        signals.add(_signal(venue.id, SignalType.RATING, 5.0, age=timedelta(hours=1)))
        # outside the lookback and outside the weekly window respectively
        signals.add(_signal(venue.id, SignalType.SOCIAL_HEAT, 90, age=timedelta(days=10)))
        signals.add(
            _signal(
                venue.id,
                SignalType.USER_TRAFFIC,
                1000,
                age=timedelta(hours=2),
                window=SignalWindow.DAILY,
            )
        )
        uow.commit()

    result = HeatIndexPhase(sqlite_unit_of_work, clock=lambda: FIXED_NOW).run(
        IngestionContext(city=new_york, run_type=RunType.FULL)
    )

    assert result.stats.heat_indexed == 2
    with sqlite_unit_of_work() as uow:
        hot = uow.repositories.heat_index.get(venue.id)
        cold = uow.repositories.heat_index.get(quiet.id)
    assert hot is not None
    assert hot.composite_score == 40.0
    assert hot.last_computed_at == FIXED_NOW
    assert cold is not None
    assert cold.composite_score == 0.0


def test_heat_index_is_overwritten_on_rerun(
    sqlite_unit_of_work: UnitOfWorkFactory, new_york: CityConfig
) -> None:
    venue = make_venue("Blue Note")
    with sqlite_unit_of_work() as uow:
        uow.repositories.venues.add(venue)
        uow.commit()
    context = IngestionContext(city=new_york, run_type=RunType.FULL)
    HeatIndexPhase(sqlite_unit_of_work, clock=lambda: FIXED_NOW).run(context)

    with sqlite_unit_of_work() as uow:
        uow.repositories.signals.add(
            _signal(venue.id, SignalType.EVENT_ACTIVITY, 10, age=timedelta(minutes=5))
        )
        uow.commit()
    later = FIXED_NOW + timedelta(minutes=1)
    HeatIndexPhase(sqlite_unit_of_work, clock=lambda: later).run(context)

    with sqlite_unit_of_work() as uow:
        entry = uow.repositories.heat_index.get(venue.id)
    assert entry is not None
    assert entry.composite_score == 40.0
    assert entry.last_computed_at == later
