"""Surf forecast HTTP API: a FastAPI shell over the forecast pipeline."""

import os
from collections.abc import AsyncIterator
from dataclasses import asdict
from functools import lru_cache

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware

from surfcast.config.loader import load_config
from surfcast.config.schema import SurfcastConfig
from surfcast.ingest.firestore_client import FirestoreSource
from surfcast.ingest.source import NoMetadataFound, SourceUnavailable
from surfcast.models.summary import AggregationReport
from surfcast.pipeline.forecast_pipeline import ForecastPipeline
from surfcast.reporting.formatters import point_to_dict

CONFIG_PATH = os.environ.get("SURFCAST_CONFIG", "ops/configs/default.yaml")

app = FastAPI(title="Surf Forecast API", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@lru_cache(maxsize=1)
def get_config() -> SurfcastConfig:
    return load_config(CONFIG_PATH)


async def get_pipeline(
    config: SurfcastConfig = Depends(get_config),
) -> AsyncIterator[ForecastPipeline]:
    """One Firestore client per request, shared by that request's fan-out."""
    async with FirestoreSource.from_config(config.source) as source:
        yield ForecastPipeline(source, config.pipeline)


def _report_json(report: AggregationReport) -> dict:
    return {
        "run_id": report.run_id,
        "region": report.region,
        "cards": [asdict(c) for c in report.cards],
        "beaches_requested": len(report.requested),
        "beaches_reporting": len(report.succeeded),
        "partial": report.is_partial,
    }


def _unavailable(e: SourceUnavailable) -> HTTPException:
    return HTTPException(
        status_code=503,
        detail={"error": e.kind.value, "message": e.message, "retryable": e.is_retryable},
    )


# ── Data endpoints ──────────────────────────────────────────────


@app.get("/api/beaches/{beach_id}/forecast")
async def get_forecast(
    beach_id: str,
    region: str,
    days_back: int | None = Query(default=None, ge=1, le=14),
    pipeline: ForecastPipeline = Depends(get_pipeline),
):
    """Normalized, validated, time-ascending forecast for one beach."""
    try:
        points = await pipeline.get_forecast(beach_id, region, days_back)
    except NoMetadataFound as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except SourceUnavailable as e:
        raise _unavailable(e) from e
    return {
        "beach_id": beach_id,
        "region": region,
        "points": [point_to_dict(p) for p in points],
    }


@app.get("/api/summary")
async def get_summary(
    region: str | None = None,
    config: SurfcastConfig = Depends(get_config),
    pipeline: ForecastPipeline = Depends(get_pipeline),
):
    """Wind and wave cards averaged over the configured beaches."""
    report = await pipeline.run_regional_summary(config.beach_keys(region), region=region)
    return _report_json(report)


@app.get("/api/beaches")
async def list_beaches(
    region: str | None = None,
    pipeline: ForecastPipeline = Depends(get_pipeline),
):
    try:
        beaches = await pipeline.source.list_beaches(region)
    except SourceUnavailable as e:
        raise _unavailable(e) from e
    return [asdict(b) for b in beaches]


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8778)
