"""Output formatters for forecasts and regional summaries."""

import json
from collections.abc import Sequence
from dataclasses import asdict
from datetime import UTC, tzinfo

from surfcast.aggregate.grouping import group_by_day
from surfcast.models.forecast import ForecastPoint
from surfcast.models.summary import AggregationReport, CardKind, RegionalSummaryCard
from surfcast.models.weather import icon_name


def format_direction(deg: float | None) -> str:
    return "--" if deg is None else f"{deg:.0f}°"


def format_card(card: RegionalSummaryCard) -> str:
    parts = [f"{card.kind.value.capitalize()}: {card.magnitude_label}"]
    if card.secondary_label:
        parts.append(card.secondary_label)
    parts.append(f"dir {format_direction(card.direction_deg)}")
    return " | ".join(parts)


def format_forecast_text(
    points: Sequence[ForecastPoint], tz: tzinfo = UTC
) -> str:
    """Plain text table, one section per local day."""
    if not points:
        return "No forecast data"
    lines: list[str] = []
    for day, day_points in group_by_day(points, tz):
        lines.append(f"=== {day.isoformat()} ===")
        for p in day_points:
            lines.append(
                f"{p.time.astimezone(tz):%H:%M}  "
                f"wind {p.wind_speed_ms:4.1f}m/s {format_direction(p.wind_direction_deg):>4}  "
                f"wave {p.wave_height_m:3.1f}m {p.wave_period_s:4.1f}s "
                f"{format_direction(p.wave_direction_deg):>4}  "
                f"air {p.air_temp_c:4.1f}C water {p.water_temp_c:4.1f}C  "
                f"{p.weather.value}"
            )
    return "\n".join(lines)


def point_to_dict(p: ForecastPoint) -> dict:
    row = asdict(p)
    row["time"] = p.time.isoformat()
    row["icon"] = icon_name(p.weather)
    return row


def format_forecast_json(points: Sequence[ForecastPoint]) -> str:
    return json.dumps([point_to_dict(p) for p in points], indent=2)


def format_report_text(report: AggregationReport) -> str:
    """Plain text summary for logging and the CLI."""
    scope = report.region or "all regions"
    lines = [
        f"=== Regional Summary ({scope}) | Run {report.run_id[:8]} ===",
        f"Beaches: {len(report.succeeded)}/{len(report.requested)} reporting"
        + (" (partial)" if report.is_partial else ""),
    ]
    lines.extend(format_card(c) for c in report.cards)
    lines.append(f"Duration: {report.duration_seconds:.1f}s")
    return "\n".join(lines)


def format_report_json(report: AggregationReport) -> str:
    data = {
        "run_id": report.run_id,
        "region": report.region,
        "stage": report.stage.value,
        "partial": report.is_partial,
        "requested": [list(k) for k in report.requested],
        "succeeded": [list(k) for k in report.succeeded],
        "failed": [list(k) for k in report.failed],
        "cards": [asdict(c) for c in report.cards],
        "duration_seconds": report.duration_seconds,
    }
    return json.dumps(data, indent=2)


def format_stored_report(row: dict) -> str:
    """Plain text for a summary run read back from storage."""
    scope = row["region"] or "all regions"
    lines = [
        f"=== Last Regional Summary ({scope}) | Run {row['run_id'][:8]} ===",
        f"Stored: {row['created_at']} | stage {row['stage']}",
        f"Beaches: {row['beaches_succeeded']}/{row['beaches_requested']} reporting",
    ]
    for stored in row["cards"]:
        card = RegionalSummaryCard(**{**stored, "kind": CardKind(stored["kind"])})
        lines.append(format_card(card))
    if row["failed"]:
        lines.append("Failed: " + ", ".join(f"{r}/{b}" for b, r in row["failed"]))
    return "\n".join(lines)
