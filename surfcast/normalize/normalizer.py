"""Raw record -> canonical forecast point."""

import math
from collections.abc import Callable, Iterable

from surfcast.models.common import ensure_utc
from surfcast.models.forecast import ForecastPoint, RawRecord
from surfcast.normalize.classifier import classify
from surfcast.normalize.validator import scrub_sentinel
from surfcast.normalize.wave_period import estimate_wave_period

Resolver = Callable[[RawRecord], float | None]

# Each attribute resolves to the first usable candidate, else 0.0.
FIELD_FALLBACKS: dict[str, tuple[Resolver, ...]] = {
    "wave_height_m": (
        lambda r: scrub_sentinel(r.wave_height),
        lambda r: scrub_sentinel(r.alt_wave_height),
    ),
    "wave_period_s": (
        lambda r: r.wave_period,
        lambda r: estimate_wave_period(r.wind_speed),
    ),
    "wave_direction_deg": (lambda r: r.alt_wave_direction,),
    "water_temp_c": (lambda r: r.sea_surface_temperature,),
    "wind_speed_ms": (lambda r: r.wind_speed,),
    "wind_direction_deg": (lambda r: r.wind_direction,),
    "air_temp_c": (lambda r: r.air_temperature,),
}

DIRECTION_FIELDS = ("wave_direction_deg", "wind_direction_deg")
# Magnitudes below zero are upstream glitches, not readings.
NON_NEGATIVE_FIELDS = frozenset({"wind_speed_ms", "wave_height_m", "wave_period_s"})


def _usable(value: float | None, non_negative: bool) -> float | None:
    if value is None:
        return None
    value = float(value)
    if not math.isfinite(value) or (non_negative and value < 0):
        return None
    return value


def _resolve(
    raw: RawRecord, candidates: tuple[Resolver, ...], non_negative: bool = False
) -> float:
    for candidate in candidates:
        value = _usable(candidate(raw), non_negative)
        if value is not None:
            return value
    return 0.0


def normalize(raw: RawRecord) -> ForecastPoint:
    """Resolve every field of a raw record.

    NaN, infinities and negative magnitudes count as missing; missing data
    degrades to 0.0.
    """
    values = {
        name: _resolve(raw, candidates, name in NON_NEGATIVE_FIELDS)
        for name, candidates in FIELD_FALLBACKS.items()
    }
    for name in DIRECTION_FIELDS:
        # tiny negatives wrap to exactly 360.0
        values[name] = values[name] % 360.0 % 360.0

    weather = classify(
        sky_condition=raw.sky_condition or 0,
        precipitation_type=raw.precipitation_type or 0,
        humidity=raw.humidity,
        wind_speed=raw.wind_speed,
        precipitation_probability=raw.precipitation_probability,
        explicit_code=raw.explicit_weather_code,
    )

    return ForecastPoint(
        beach_id=raw.beach_id,
        time=ensure_utc(raw.timestamp),
        weather=weather,
        **values,
    )


def normalize_all(raws: Iterable[RawRecord]) -> list[ForecastPoint]:
    return [normalize(r) for r in raws]
