"""Filters for sentinel readings and empty forecast points."""

import logging
import math
from collections.abc import Iterable

from surfcast.models.forecast import ForecastPoint
from surfcast.models.weather import NO_DATA_CODE, to_code

logger = logging.getLogger(__name__)

SENTINEL_MAGNITUDE = 900.0


def scrub_sentinel(value: float | None) -> float | None:
    """Treat upstream "no reading" placeholders (e.g. -999) as missing."""
    if value is None:
        return None
    if math.isnan(value) or abs(value) >= SENTINEL_MAGNITUDE:
        return None
    return value


def is_empty_point(point: ForecastPoint) -> bool:
    """True when wind, wave period and weather all carry no data."""
    return (
        point.wind_speed_ms == 0
        and point.wave_period_s == 0
        and to_code(point.weather) == NO_DATA_CODE
    )


def filter_valid(points: Iterable[ForecastPoint]) -> list[ForecastPoint]:
    """Drop sampling gaps, keeping the order of the remaining points."""
    points = list(points)
    kept = [p for p in points if not is_empty_point(p)]
    dropped = len(points) - len(kept)
    if dropped:
        logger.debug("Dropped %d empty forecast points of %d", dropped, len(points))
    return kept
