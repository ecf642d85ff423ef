"""Decode Firestore REST documents into raw records, metadata and beach lists."""

import logging
from datetime import datetime
from typing import Any

from surfcast.ingest.source import SourceErrorKind, SourceUnavailable
from surfcast.models.common import ensure_utc, utc_now
from surfcast.models.forecast import BeachDescriptor, BeachMetadata, RawRecord

logger = logging.getLogger(__name__)

METADATA_DOCUMENT_ID = "_metadata"


def decode_value(value: dict[str, Any]) -> Any:
    """Decode one Firestore typed value (e.g. {"doubleValue": 1.5})."""
    if "nullValue" in value:
        return None
    if "integerValue" in value:
        return int(value["integerValue"])
    if "doubleValue" in value:
        return float(value["doubleValue"])
    if "stringValue" in value:
        return value["stringValue"]
    if "booleanValue" in value:
        return bool(value["booleanValue"])
    if "timestampValue" in value:
        return _parse_timestamp(value["timestampValue"])
    if "arrayValue" in value:
        return [decode_value(v) for v in value["arrayValue"].get("values", [])]
    if "mapValue" in value:
        return decode_fields(value["mapValue"].get("fields", {}))
    raise SourceUnavailable(
        SourceErrorKind.DECODING_FAILED, f"Unsupported value type: {sorted(value)}"
    )


def decode_fields(fields: dict[str, Any]) -> dict[str, Any]:
    return {name: decode_value(v) for name, v in fields.items()}


def document_id(document: dict[str, Any]) -> str:
    """Last path segment of a document name."""
    return document.get("name", "").rsplit("/", 1)[-1]


def parse_record(document: dict[str, Any], beach_id: str, region: str) -> RawRecord:
    data = decode_fields(document.get("fields", {}))
    timestamp = data.get("timestamp")
    if not isinstance(timestamp, datetime):
        raise SourceUnavailable(
            SourceErrorKind.DECODING_FAILED,
            f"Document {document_id(document)} has no timestamp",
        )

    return RawRecord(
        document_id=document_id(document),
        beach_id=_as_int(data.get("beach_id")) or _as_int(beach_id) or 0,
        region=data.get("region") or region,
        timestamp=timestamp,
        beach=data.get("beach") or "",
        datetime_label=data.get("datetime") or "",
        wind_speed=_as_float(data.get("wind_speed")),
        wind_direction=_as_float(data.get("wind_direction")),
        wave_height=_as_float(data.get("wave_height")),
        wave_period=_as_float(data.get("wave_period")),
        air_temperature=_as_float(data.get("air_temperature")),
        precipitation_probability=_as_float(data.get("precipitation_probability")),
        precipitation_type=_as_int(data.get("precipitation_type")),
        sky_condition=_as_int(data.get("sky_condition")),
        humidity=_as_float(data.get("humidity")),
        precipitation=_as_float(data.get("precipitation")),
        snow=_as_float(data.get("snow")),
        alt_wave_height=_as_float(data.get("om_wave_height")),
        alt_wave_direction=_as_float(data.get("om_wave_direction")),
        sea_surface_temperature=_as_float(data.get("om_sea_surface_temperature")),
        explicit_weather_code=_as_int(data.get("weather_code")),
    )


def parse_records(
    query_results: list[dict[str, Any]], beach_id: str, region: str
) -> list[RawRecord]:
    """Parse a runQuery response. Entries without a document (readTime only) are skipped."""
    records: list[RawRecord] = []
    for entry in query_results:
        document = entry.get("document")
        if document is None or document_id(document) == METADATA_DOCUMENT_ID:
            continue
        records.append(parse_record(document, beach_id, region))
    return records


def parse_metadata(document: dict[str, Any], beach_id: str, region: str) -> BeachMetadata:
    data = decode_fields(document.get("fields", {}))
    return BeachMetadata(
        beach_id=_as_int(data.get("beach_id")) or _as_int(beach_id) or 0,
        region=data.get("region") or region,
        beach=data.get("beach") or "",
        last_updated=data.get("last_updated") or utc_now(),
        total_forecasts=_as_int(data.get("total_forecasts")) or 0,
        status=data.get("status") or "",
        earliest_forecast=data.get("earliest_forecast"),
        latest_forecast=data.get("latest_forecast"),
        next_forecast_time=data.get("next_forecast_time"),
    )


def parse_beach_list(document: dict[str, Any]) -> list[BeachDescriptor]:
    data = decode_fields(document.get("fields", {}))
    entries = data.get("beaches")
    if not isinstance(entries, list):
        raise SourceUnavailable(
            SourceErrorKind.DECODING_FAILED, "beaches field not found"
        )

    beaches: list[BeachDescriptor] = []
    for entry in entries:
        try:
            beaches.append(
                BeachDescriptor(
                    beach_id=str(entry["id"]),
                    region=str(entry["region"]),
                    region_name=str(entry["region_name"]),
                    region_order=int(entry["region_order"]),
                    display_name=str(entry["display_name"]),
                )
            )
        except (KeyError, TypeError, ValueError):
            logger.warning("Skipping invalid beach entry: %r", entry)
    return beaches


def _as_float(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _parse_timestamp(iso_str: str) -> datetime:
    # Firestore emits RFC 3339 with "Z" and up to nanosecond precision
    text = iso_str.replace("Z", "+00:00")
    if "." in text:
        head, _, tail = text.partition(".")
        frac = "".join(ch for ch in tail if ch.isdigit())
        offset = tail[len(frac):]
        text = f"{head}.{frac[:6]}{offset}"
    try:
        return ensure_utc(datetime.fromisoformat(text))
    except ValueError as e:
        raise SourceUnavailable(
            SourceErrorKind.DECODING_FAILED, f"Bad timestamp {iso_str!r}"
        ) from e
