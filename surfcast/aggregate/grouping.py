"""Group forecast points by calendar day."""

from collections import defaultdict
from collections.abc import Iterable
from datetime import UTC, date, tzinfo

from surfcast.models.forecast import ForecastPoint


def group_by_day(
    points: Iterable[ForecastPoint], tz: tzinfo = UTC
) -> list[tuple[date, list[ForecastPoint]]]:
    """Bucket points by local day in ``tz``. Days and points are time-ascending."""
    buckets: dict[date, list[ForecastPoint]] = defaultdict(list)
    for p in points:
        buckets[p.time.astimezone(tz).date()].append(p)
    return [
        (day, sorted(buckets[day], key=lambda p: p.time))
        for day in sorted(buckets)
    ]
