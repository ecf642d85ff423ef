"""Initial schema: normalized forecast points and regional summary runs."""

import sqlite3

DDL = [
    # One row per beach and forecast time; refetches overwrite
    """
    CREATE TABLE IF NOT EXISTS forecast_points (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        beach_id INTEGER NOT NULL,
        region TEXT NOT NULL,
        time TEXT NOT NULL,
        wind_direction_deg REAL NOT NULL,
        wind_speed_ms REAL NOT NULL,
        wave_direction_deg REAL NOT NULL,
        wave_height_m REAL NOT NULL,
        wave_period_s REAL NOT NULL,
        water_temp_c REAL NOT NULL,
        air_temp_c REAL NOT NULL,
        weather_code INTEGER NOT NULL,
        fetched_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
        UNIQUE(beach_id, time)
    )
    """,
    (
        "CREATE INDEX IF NOT EXISTS idx_forecast_points_beach_time "
        "ON forecast_points(beach_id, time)"
    ),

    # Regional aggregation results
    """
    CREATE TABLE IF NOT EXISTS summary_runs (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        run_id TEXT NOT NULL UNIQUE,
        region TEXT,
        config_hash TEXT NOT NULL DEFAULT '',
        stage TEXT NOT NULL,
        beaches_requested INTEGER NOT NULL,
        beaches_succeeded INTEGER NOT NULL,
        failed_json TEXT NOT NULL,
        cards_json TEXT NOT NULL,
        duration_seconds REAL NOT NULL,
        created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
    )
    """,
]


def up(conn: sqlite3.Connection) -> None:
    for stmt in DDL:
        conn.execute(stmt)
    conn.commit()
