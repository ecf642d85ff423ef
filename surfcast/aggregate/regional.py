"""Regional wind/wave summary from the latest point of each beach."""

from collections.abc import Iterable, Sequence

from surfcast.aggregate.directional import circular_mean
from surfcast.models.forecast import ForecastPoint
from surfcast.models.summary import CardKind, RegionalSummaryCard


def format_wind(speed_ms: float) -> str:
    return f"{speed_ms:.1f}m/s"


def format_wave_height(height_m: float) -> str:
    return f"{height_m:.1f}m"


def format_period(period_s: float) -> str:
    return f"{period_s:.1f}s"


def latest_points(forecasts: Iterable[Sequence[ForecastPoint] | None]) -> list[ForecastPoint]:
    """Most recent point of each beach; failed (None) or empty beaches are skipped."""
    latest: list[ForecastPoint] = []
    for points in forecasts:
        if not points:
            continue
        latest.append(max(points, key=lambda p: p.time))
    return latest


def _mean(values: list[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def aggregate(latest_per_beach: Sequence[ForecastPoint]) -> list[RegionalSummaryCard]:
    """Build the [wind, wave] cards.

    Magnitudes are arithmetic means; directions are circular means. With no input
    both cards carry zero magnitudes and no direction.
    """
    points = list(latest_per_beach)

    wind_speed = _mean([p.wind_speed_ms for p in points])
    wave_height = _mean([p.wave_height_m for p in points])
    wave_period = _mean([p.wave_period_s for p in points])

    wind = RegionalSummaryCard(
        kind=CardKind.WIND,
        magnitude=wind_speed,
        magnitude_label=format_wind(wind_speed),
        direction_deg=circular_mean(p.wind_direction_deg for p in points),
    )
    wave = RegionalSummaryCard(
        kind=CardKind.WAVE,
        magnitude=wave_height,
        magnitude_label=format_wave_height(wave_height),
        secondary=wave_period,
        secondary_label=format_period(wave_period),
        direction_deg=circular_mean(p.wave_direction_deg for p in points),
    )
    return [wind, wave]
