"""Forecast record and point models."""

from dataclasses import dataclass, field
from datetime import datetime

from surfcast.models.weather import WeatherCategory


@dataclass(frozen=True)
class RawRecord:
    """One forecast document as received from the source, fields unresolved."""

    document_id: str
    beach_id: int
    region: str
    timestamp: datetime
    beach: str = ""
    datetime_label: str = ""
    wind_speed: float | None = None
    wind_direction: float | None = None
    wave_height: float | None = None
    wave_period: float | None = None
    air_temperature: float | None = None
    precipitation_probability: float | None = None
    precipitation_type: int | None = None
    sky_condition: int | None = None
    humidity: float | None = None
    precipitation: float | None = None
    snow: float | None = None
    alt_wave_height: float | None = None
    alt_wave_direction: float | None = None
    sea_surface_temperature: float | None = None
    explicit_weather_code: int | None = None


@dataclass(frozen=True)
class ForecastPoint:
    beach_id: int
    time: datetime
    wind_direction_deg: float
    wind_speed_ms: float
    wave_direction_deg: float
    wave_height_m: float
    wave_period_s: float
    water_temp_c: float
    air_temp_c: float
    weather: WeatherCategory


@dataclass(frozen=True)
class BeachMetadata:
    beach_id: int
    region: str
    beach: str
    last_updated: datetime
    total_forecasts: int
    status: str
    earliest_forecast: datetime | None = None
    latest_forecast: datetime | None = None
    next_forecast_time: datetime | None = None


@dataclass(frozen=True)
class BeachDescriptor:
    beach_id: str
    region: str
    region_name: str
    region_order: int
    display_name: str


@dataclass(frozen=True)
class BeachForecast:
    metadata: BeachMetadata
    points: list[ForecastPoint] = field(default_factory=list)
    fetched_at: datetime | None = None
