"""Wave period estimate from wind speed."""

import math

PM_PERIOD_FACTOR = 0.83
MIN_PERIOD_S = 2.0
MAX_PERIOD_S = 18.0


def estimate_wave_period(wind_speed_ms: float | None) -> float | None:
    """Pierson-Moskowitz fully developed sea: Tp ~= 0.83 * U10, clamped to surf range.

    Returns None when there is no usable wind speed.
    """
    if wind_speed_ms is None or not math.isfinite(wind_speed_ms) or wind_speed_ms <= 0:
        return None
    raw = PM_PERIOD_FACTOR * wind_speed_ms
    return max(MIN_PERIOD_S, min(MAX_PERIOD_S, raw))
