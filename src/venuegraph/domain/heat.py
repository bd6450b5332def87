"""Heat index scoring."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Final

from venuegraph.domain.model.enums import SignalType

EVENT_POINTS: Final[float] = 40.0
EVENT_SATURATION: Final[float] = 10.0
SOCIAL_POINTS: Final[float] = 30.0
SOCIAL_SCALE: Final[float] = 100.0
RATING_POINTS: Final[float] = 20.0
RATING_SCALE: Final[float] = 5.0
TRAFFIC_POINTS: Final[float] = 10.0
TRAFFIC_SATURATION: Final[float] = 1000.0


def _scaled(value: float | None, scale: float, points: float) -> float:
    if value is None or value <= 0:
        return 0.0
    return min(value / scale, 1.0) * points


def compute_heat_score(signals: Mapping[SignalType, float]) -> float:
    """Combine the latest weekly signals into a 0-100 score.

    Event activity counts one point-fraction per event up to ten events (40
    points), social heat is a 0-100 value (30 points), rating a 0-5 value (20
    points) and user traffic saturates at 1000 (10 points). Missing signals
    contribute nothing; risk signals are not scored.
    """

    return (
        _scaled(signals.get(SignalType.EVENT_ACTIVITY), EVENT_SATURATION, EVENT_POINTS)
        + _scaled(signals.get(SignalType.SOCIAL_HEAT), SOCIAL_SCALE, SOCIAL_POINTS)
        + _scaled(signals.get(SignalType.RATING), RATING_SCALE, RATING_POINTS)
        + _scaled(signals.get(SignalType.USER_TRAFFIC), TRAFFIC_SATURATION, TRAFFIC_POINTS)
    )
