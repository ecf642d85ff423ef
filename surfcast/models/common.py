"""Common types and helpers shared across models."""

from datetime import UTC, datetime
from typing import TypeAlias

BeachKey: TypeAlias = tuple[str, str]  # (beach_id, region)


def utc_now() -> datetime:
    return datetime.now(UTC)


def ensure_utc(dt: datetime) -> datetime:
    """Attach UTC to naive datetimes, convert aware ones."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)
