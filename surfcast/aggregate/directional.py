"""Circular (vector) mean of compass headings."""

import math
from collections.abc import Iterable

CANCEL_EPSILON = 1e-6


def circular_mean(degrees: Iterable[float]) -> float | None:
    """Average compass bearings by summing unit vectors.

    Non-finite headings are skipped. Returns None when nothing is left or when the
    vectors cancel out (e.g. 0 and 180), since no direction is meaningful there.
    Result is in [0, 360).
    """
    sum_cos = 0.0
    sum_sin = 0.0
    count = 0
    for deg in degrees:
        if not math.isfinite(deg):
            continue
        rad = math.radians(deg)
        sum_cos += math.cos(rad)
        sum_sin += math.sin(rad)
        count += 1

    if count == 0:
        return None
    if abs(sum_cos) < CANCEL_EPSILON and abs(sum_sin) < CANCEL_EPSILON:
        return None

    angle = math.degrees(math.atan2(sum_sin, sum_cos))
    if angle < 0:
        angle += 360.0
    # atan2 can land on -0.0 or round up to exactly 360
    return angle % 360.0
