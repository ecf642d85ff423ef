"""Shared test fixtures."""

import asyncio
from collections.abc import Callable
from datetime import datetime, timedelta
from pathlib import Path

import pytest
import yaml

from surfcast.config.defaults import DEFAULT_BEACHES
from surfcast.config.schema import SurfcastConfig
from surfcast.ingest.source import SourceErrorKind, SourceUnavailable
from surfcast.models.common import utc_now
from surfcast.models.forecast import (
    BeachDescriptor,
    BeachMetadata,
    ForecastPoint,
    RawRecord,
)
from surfcast.models.weather import WeatherCategory
from surfcast.storage.database import open_database


class FakeSource:
    """In-memory ForecastSource keyed by (beach_id, region)."""

    def __init__(self) -> None:
        self.records: dict[tuple[str, str], list[RawRecord]] = {}
        self.metadata: dict[tuple[str, str], BeachMetadata] = {}
        self.errors: dict[tuple[str, str], Exception] = {}
        self.beaches: list[BeachDescriptor] = []
        self.list_error: Exception | None = None
        self.fetch_delay = 0.01
        self.in_flight = 0
        self.max_in_flight = 0
        self.record_calls: list[tuple[str, str, datetime, int]] = []

    def add_beach(
        self, beach_id: str, region: str, records: list[RawRecord] | None = None
    ) -> None:
        self.metadata[(beach_id, region)] = BeachMetadata(
            beach_id=int(beach_id),
            region=region,
            beach=f"beach-{beach_id}",
            last_updated=utc_now(),
            total_forecasts=len(records or []),
            status="active",
        )
        self.records[(beach_id, region)] = list(records or [])

    async def fetch_metadata(self, beach_id: str, region: str) -> BeachMetadata | None:
        key = (beach_id, region)
        if key in self.errors:
            raise self.errors[key]
        return self.metadata.get(key)

    async def fetch_records(
        self, beach_id: str, region: str, since: datetime, limit: int
    ) -> list[RawRecord]:
        key = (beach_id, region)
        self.record_calls.append((beach_id, region, since, limit))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.fetch_delay)
            if key in self.errors:
                raise self.errors[key]
            matching = sorted(
                (r for r in self.records.get(key, []) if r.timestamp > since),
                key=lambda r: r.timestamp,
            )
            return matching[:limit]
        finally:
            self.in_flight -= 1

    async def list_beaches(self, region: str | None = None) -> list[BeachDescriptor]:
        if self.list_error is not None:
            raise self.list_error
        return [b for b in self.beaches if region is None or b.region == region]


@pytest.fixture
def fake_source() -> FakeSource:
    return FakeSource()


@pytest.fixture
def unavailable() -> SourceUnavailable:
    return SourceUnavailable(SourceErrorKind.UNAVAILABLE, "backend down")


@pytest.fixture
def make_raw() -> Callable[..., RawRecord]:
    """Factory for raw records; timestamps default to a few hours ago."""
    def _make(hours_ago: float = 1.0, beach_id: int = 2001, **fields) -> RawRecord:
        base = {
            "document_id": f"doc-{beach_id}-{hours_ago}",
            "beach_id": beach_id,
            "region": "pohang",
            "timestamp": utc_now() - timedelta(hours=hours_ago),
        }
        base.update(fields)
        return RawRecord(**base)

    return _make


@pytest.fixture
def make_point() -> Callable[..., ForecastPoint]:
    def _make(**fields) -> ForecastPoint:
        base = {
            "beach_id": 2001,
            "time": utc_now(),
            "wind_direction_deg": 0.0,
            "wind_speed_ms": 0.0,
            "wave_direction_deg": 0.0,
            "wave_height_m": 0.0,
            "wave_period_s": 0.0,
            "water_temp_c": 0.0,
            "air_temp_c": 0.0,
            "weather": WeatherCategory.UNKNOWN,
        }
        base.update(fields)
        return ForecastPoint(**base)

    return _make


@pytest.fixture
def default_config() -> SurfcastConfig:
    """Return default SurfcastConfig with default beaches."""
    return SurfcastConfig(beaches=DEFAULT_BEACHES)


@pytest.fixture
def config_yaml_path(tmp_path: Path) -> Path:
    """Write a minimal valid config YAML and return its path."""
    data = {
        "source": {"project_id": "test-project", "max_retries": 1},
        "pipeline": {"record_limit": 10},
    }
    path = tmp_path / "test_config.yaml"
    with open(path, "w") as f:
        yaml.dump(data, f)
    return path


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def tmp_db(tmp_path: Path):
    """Migrated SQLite database in a temp directory."""
    with open_database(tmp_path / "test.db") as conn:
        yield conn
