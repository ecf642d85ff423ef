"""Forecast pipeline: fetch, normalize, validate, sort and aggregate."""

import asyncio
import logging
import time
import uuid
from collections.abc import Sequence
from datetime import timedelta

from surfcast.aggregate.regional import aggregate, latest_points
from surfcast.config.schema import PipelineConfig
from surfcast.ingest.source import ForecastSource, NoMetadataFound, SourceUnavailable
from surfcast.models.common import BeachKey, utc_now
from surfcast.models.forecast import BeachForecast, BeachMetadata, ForecastPoint, RawRecord
from surfcast.models.summary import AggregationReport, PipelineStage, RegionalSummaryCard
from surfcast.normalize.normalizer import normalize_all
from surfcast.normalize.validator import filter_valid

logger = logging.getLogger(__name__)


class ForecastPipeline:
    def __init__(self, source: ForecastSource, config: PipelineConfig | None = None):
        self.source = source
        self.config = config or PipelineConfig()
        self.last_report: AggregationReport | None = None

    @property
    def stage(self) -> PipelineStage:
        """Stage of the most recently started regional run."""
        return self.last_report.stage if self.last_report is not None else PipelineStage.IDLE

    # -- single beach ----------------------------------------------------

    async def get_beach_forecast(
        self, beach_id: str, region: str, days_back: int | None = None
    ) -> BeachForecast:
        """Metadata plus normalized, validated, time-ascending points for one beach.

        Raises NoMetadataFound when the beach has no metadata, and lets
        SourceUnavailable from the source propagate unchanged.
        """
        days = days_back if days_back is not None else self.config.days_back
        metadata, raws = await self._fetch_beach(beach_id, region, days)
        if metadata is None:
            raise NoMetadataFound(beach_id, region)

        points = _prepare(raws)
        logger.info(
            "Beach %s/%s: %d records -> %d points", region, beach_id, len(raws), len(points)
        )
        return BeachForecast(metadata=metadata, points=points, fetched_at=utc_now())

    async def get_forecast(
        self, beach_id: str, region: str, days_back: int | None = None
    ) -> list[ForecastPoint]:
        forecast = await self.get_beach_forecast(beach_id, region, days_back)
        return forecast.points

    # -- regional --------------------------------------------------------

    async def get_regional_summary(
        self, beaches: Sequence[BeachKey]
    ) -> list[RegionalSummaryCard]:
        report = await self.run_regional_summary(beaches)
        return report.cards

    async def run_regional_summary(
        self, beaches: Sequence[BeachKey], region: str | None = None
    ) -> AggregationReport:
        """Aggregate the latest point of every beach.

        Per-beach failures only shrink the averaged set; they are never raised.
        """
        return await self._run(self._new_report(region), beaches)

    async def summarize_region(self, region: str | None = None) -> AggregationReport:
        """Regional summary over the beaches the source lists for ``region``.

        A failing beach listing moves the run to FAILED and is re-raised.
        """
        report = self._new_report(region)
        self._enter(report, PipelineStage.FETCHING_ALL)
        try:
            descriptors = await self.source.list_beaches(region)
        except SourceUnavailable:
            self._enter(report, PipelineStage.FAILED)
            logger.exception("Beach listing failed for region %s", region or "all")
            raise
        keys = [(d.beach_id, d.region) for d in descriptors]
        return await self._run(report, keys)

    async def _run(
        self, report: AggregationReport, beaches: Sequence[BeachKey]
    ) -> AggregationReport:
        start_time = time.monotonic()
        report.requested = list(beaches)

        self._enter(report, PipelineStage.FETCHING_ALL)
        results = await asyncio.gather(
            *(self._fetch_records_tolerant(beach_id, reg) for beach_id, reg in beaches)
        )

        self._enter(report, PipelineStage.NORMALIZING)
        normalized: list[list[ForecastPoint] | None] = []
        for key, raws in zip(beaches, results):
            if raws is None:
                report.failed.append(key)
                normalized.append(None)
            else:
                report.succeeded.append(key)
                normalized.append(normalize_all(raws))

        self._enter(report, PipelineStage.VALIDATING)
        validated = [
            sorted(filter_valid(points), key=lambda p: p.time) if points is not None else None
            for points in normalized
        ]

        self._enter(report, PipelineStage.AGGREGATING)
        latest = latest_points(validated)
        report.cards = aggregate(latest)

        self._enter(report, PipelineStage.DONE)
        report.duration_seconds = time.monotonic() - start_time

        if report.failed:
            logger.warning(
                "Regional summary used %d of %d beaches; failed: %s",
                len(report.succeeded), len(report.requested),
                ", ".join(f"{r}/{b}" for b, r in report.failed),
            )
        logger.info(
            "Regional summary from %d latest points in %.2fs",
            len(latest), report.duration_seconds,
        )
        return report

    async def find_region(self, beach_id: str, regions: Sequence[str]) -> str | None:
        """Query regions concurrently for the beach's metadata document.

        Returns the first region (in ``regions`` order) holding it. When none
        does and a lookup failed, that failure is raised.
        """
        results = await asyncio.gather(
            *(self.source.fetch_metadata(beach_id, r) for r in regions),
            return_exceptions=True,
        )
        first_error: SourceUnavailable | None = None
        for region, result in zip(regions, results):
            if isinstance(result, SourceUnavailable):
                first_error = first_error or result
            elif isinstance(result, BaseException):
                raise result
            elif result is not None:
                return region
        if first_error is not None:
            raise first_error
        return None

    # -- internals -------------------------------------------------------

    async def _fetch_beach(
        self, beach_id: str, region: str, days_back: int
    ) -> tuple[BeachMetadata | None, list[RawRecord]]:
        """Fetch metadata and records together; the first failure is raised once both settle."""
        since = utc_now() - timedelta(days=days_back)
        metadata, raws = await asyncio.gather(
            self.source.fetch_metadata(beach_id, region),
            self.source.fetch_records(beach_id, region, since, self.config.record_limit),
            return_exceptions=True,
        )
        for result in (metadata, raws):
            if isinstance(result, BaseException):
                raise result
        return metadata, raws

    async def _fetch_records_tolerant(
        self, beach_id: str, region: str
    ) -> list[RawRecord] | None:
        try:
            metadata, raws = await self._fetch_beach(beach_id, region, self.config.days_back)
        except Exception:
            logger.exception("Fetch failed for %s/%s, excluding from summary", region, beach_id)
            return None
        if metadata is None:
            logger.warning("No metadata for %s/%s, excluding from summary", region, beach_id)
            return None
        return raws

    def _new_report(self, region: str | None) -> AggregationReport:
        report = AggregationReport(run_id=str(uuid.uuid4()), region=region)
        self.last_report = report
        return report

    def _enter(self, report: AggregationReport, stage: PipelineStage) -> None:
        if report.stage != stage:
            logger.debug(
                "Run %s stage %s -> %s", report.run_id[:8], report.stage.value, stage.value
            )
        report.stage = stage


def _prepare(raws: Sequence[RawRecord]) -> list[ForecastPoint]:
    return sorted(filter_valid(normalize_all(raws)), key=lambda p: p.time)
