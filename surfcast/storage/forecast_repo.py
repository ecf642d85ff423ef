"""Repository for normalized forecast points.

Weather categories are stored as integer codes from the canonical table.
"""

import sqlite3
from collections.abc import Iterable
from datetime import datetime

from surfcast.models.common import ensure_utc
from surfcast.models.forecast import ForecastPoint
from surfcast.models.weather import WeatherCategory, from_code, to_code


def save_points(
    conn: sqlite3.Connection, region: str, points: Iterable[ForecastPoint]
) -> int:
    """Upsert points keyed by (beach_id, time). Returns the number written."""
    rows = [
        (
            p.beach_id,
            region,
            ensure_utc(p.time).isoformat(),
            p.wind_direction_deg,
            p.wind_speed_ms,
            p.wave_direction_deg,
            p.wave_height_m,
            p.wave_period_s,
            p.water_temp_c,
            p.air_temp_c,
            to_code(p.weather),
        )
        for p in points
    ]
    conn.executemany(
        "INSERT INTO forecast_points "
        "(beach_id, region, time, wind_direction_deg, wind_speed_ms, "
        "wave_direction_deg, wave_height_m, wave_period_s, water_temp_c, "
        "air_temp_c, weather_code) "
        "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?) "
        "ON CONFLICT(beach_id, time) DO UPDATE SET "
        "region = excluded.region, "
        "wind_direction_deg = excluded.wind_direction_deg, "
        "wind_speed_ms = excluded.wind_speed_ms, "
        "wave_direction_deg = excluded.wave_direction_deg, "
        "wave_height_m = excluded.wave_height_m, "
        "wave_period_s = excluded.wave_period_s, "
        "water_temp_c = excluded.water_temp_c, "
        "air_temp_c = excluded.air_temp_c, "
        "weather_code = excluded.weather_code, "
        "fetched_at = CURRENT_TIMESTAMP",
        rows,
    )
    conn.commit()
    return len(rows)


def get_points(
    conn: sqlite3.Connection, beach_id: int, since: datetime | None = None
) -> list[ForecastPoint]:
    """Stored points for a beach, time-ascending."""
    query = "SELECT * FROM forecast_points WHERE beach_id = ?"
    params: list = [beach_id]
    if since is not None:
        query += " AND time > ?"
        params.append(ensure_utc(since).isoformat())
    query += " ORDER BY time ASC"
    return [_row_to_point(row) for row in conn.execute(query, params).fetchall()]


def _row_to_point(row: sqlite3.Row) -> ForecastPoint:
    return ForecastPoint(
        beach_id=row["beach_id"],
        time=datetime.fromisoformat(row["time"]),
        wind_direction_deg=row["wind_direction_deg"],
        wind_speed_ms=row["wind_speed_ms"],
        wave_direction_deg=row["wave_direction_deg"],
        wave_height_m=row["wave_height_m"],
        wave_period_s=row["wave_period_s"],
        water_temp_c=row["water_temp_c"],
        air_temp_c=row["air_temp_c"],
        weather=from_code(row["weather_code"]) or WeatherCategory.UNKNOWN,
    )
