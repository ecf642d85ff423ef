"""Forecast source contract and the errors it may raise."""

from datetime import datetime
from enum import StrEnum
from typing import Protocol

from surfcast.models.forecast import BeachDescriptor, BeachMetadata, RawRecord


class SourceErrorKind(StrEnum):
    NOT_FOUND = "not_found"
    PERMISSION_DENIED = "permission_denied"
    UNAUTHENTICATED = "unauthenticated"
    UNAVAILABLE = "unavailable"
    DEADLINE_EXCEEDED = "deadline_exceeded"
    RESOURCE_EXHAUSTED = "resource_exhausted"
    INTERNAL = "internal"
    INVALID_ARGUMENT = "invalid_argument"
    DECODING_FAILED = "decoding_failed"
    UNKNOWN = "unknown"


RETRYABLE_KINDS = frozenset({
    SourceErrorKind.UNAVAILABLE,
    SourceErrorKind.DEADLINE_EXCEEDED,
    SourceErrorKind.RESOURCE_EXHAUSTED,
    SourceErrorKind.INTERNAL,
})


class SourceUnavailable(Exception):
    """Transport or auth failure reported by the forecast source."""

    def __init__(self, kind: SourceErrorKind, message: str = ""):
        self.kind = kind
        self.message = message or kind.value
        super().__init__(f"{kind.value}: {self.message}")

    @property
    def is_retryable(self) -> bool:
        return self.kind in RETRYABLE_KINDS


class NoMetadataFound(Exception):
    """The beach has no metadata document in the given region."""

    def __init__(self, beach_id: str, region: str):
        self.beach_id = beach_id
        self.region = region
        super().__init__(f"No metadata for beach {beach_id} in region {region}")


class ForecastSource(Protocol):
    async def fetch_metadata(self, beach_id: str, region: str) -> BeachMetadata | None:
        """Metadata for a beach, or None when the beach has none."""
        ...

    async def fetch_records(
        self, beach_id: str, region: str, since: datetime, limit: int
    ) -> list[RawRecord]:
        """Records with timestamp > since, ascending, at most ``limit``."""
        ...

    async def list_beaches(self, region: str | None = None) -> list[BeachDescriptor]:
        ...
