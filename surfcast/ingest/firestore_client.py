"""Firestore REST forecast source with retry and error mapping."""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any

import httpx

from surfcast.config.schema import FIRESTORE_BASE_URL, SourceConfig
from surfcast.ingest.document_parser import (
    METADATA_DOCUMENT_ID,
    parse_beach_list,
    parse_metadata,
    parse_records,
)
from surfcast.ingest.source import SourceErrorKind, SourceUnavailable
from surfcast.models.common import ensure_utc
from surfcast.models.forecast import BeachDescriptor, BeachMetadata, RawRecord

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "surfcast/0.1.0"
RETRY_STATUS_CODES = (429, 503)

STATUS_KINDS: dict[int, SourceErrorKind] = {
    400: SourceErrorKind.INVALID_ARGUMENT,
    401: SourceErrorKind.UNAUTHENTICATED,
    403: SourceErrorKind.PERMISSION_DENIED,
    404: SourceErrorKind.NOT_FOUND,
    408: SourceErrorKind.DEADLINE_EXCEEDED,
    429: SourceErrorKind.RESOURCE_EXHAUSTED,
    500: SourceErrorKind.INTERNAL,
    503: SourceErrorKind.UNAVAILABLE,
    504: SourceErrorKind.DEADLINE_EXCEEDED,
}


def error_kind_for_status(status_code: int) -> SourceErrorKind:
    if status_code in STATUS_KINDS:
        return STATUS_KINDS[status_code]
    if status_code >= 500:
        return SourceErrorKind.UNAVAILABLE
    return SourceErrorKind.UNKNOWN


class FirestoreSource:
    """ForecastSource backed by the Firestore REST API.

    Layout: regions/{region}/{beach_id}/{doc} holds one document per forecast
    timestamp plus a ``_metadata`` document; the beach list lives at
    _global_metadata/all_beaches.

    Used as ``async with source:`` it holds one AsyncClient for every request
    made inside the block; outside such a block each request opens its own.
    A caller-supplied ``client`` is used as is and never closed here.
    """

    def __init__(
        self,
        project_id: str,
        database: str = "(default)",
        base_url: str = FIRESTORE_BASE_URL,
        api_key: str = "",
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float = 30.0,
        max_retries: int = 3,
        retry_base_delay: float = 1.0,
        client: httpx.AsyncClient | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.project_id = project_id
        self.database = database
        self.api_key = api_key
        self.user_agent = user_agent
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_base_delay = retry_base_delay
        self._client = client
        self._owns_client = False

    @classmethod
    def from_config(cls, config: SourceConfig) -> "FirestoreSource":
        return cls(
            project_id=config.project_id,
            database=config.database,
            base_url=config.base_url,
            api_key=config.api_key,
            timeout=config.timeout_seconds,
            max_retries=config.max_retries,
            retry_base_delay=config.retry_base_delay,
        )

    async def __aenter__(self) -> "FirestoreSource":
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
            self._owns_client = True
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None
        self._owns_client = False

    @property
    def documents_url(self) -> str:
        return (
            f"{self.base_url}/projects/{self.project_id}"
            f"/databases/{self.database}/documents"
        )

    async def fetch_metadata(self, beach_id: str, region: str) -> BeachMetadata | None:
        url = f"{self.documents_url}/regions/{region}/{beach_id}/{METADATA_DOCUMENT_ID}"
        try:
            document = await self._request("GET", url)
        except SourceUnavailable as e:
            if e.kind == SourceErrorKind.NOT_FOUND:
                return None
            raise
        return parse_metadata(document, beach_id, region)

    async def fetch_records(
        self, beach_id: str, region: str, since: datetime, limit: int
    ) -> list[RawRecord]:
        url = f"{self.documents_url}/regions/{region}:runQuery"
        since_text = ensure_utc(since).isoformat().replace("+00:00", "Z")
        body = {
            "structuredQuery": {
                "from": [{"collectionId": beach_id}],
                "where": {
                    "fieldFilter": {
                        "field": {"fieldPath": "timestamp"},
                        "op": "GREATER_THAN",
                        "value": {"timestampValue": since_text},
                    }
                },
                "orderBy": [
                    {"field": {"fieldPath": "timestamp"}, "direction": "ASCENDING"}
                ],
                "limit": limit,
            }
        }
        results = await self._request("POST", url, json=body)
        records = parse_records(results, beach_id, region)
        logger.debug("Fetched %d records for %s/%s", len(records), region, beach_id)
        return records

    async def list_beaches(self, region: str | None = None) -> list[BeachDescriptor]:
        url = f"{self.documents_url}/_global_metadata/all_beaches"
        try:
            document = await self._request("GET", url)
        except SourceUnavailable as e:
            if e.kind == SourceErrorKind.NOT_FOUND:
                logger.warning("Beach list document missing at %s", url)
            raise
        beaches = parse_beach_list(document)
        if region is not None:
            beaches = [b for b in beaches if b.region == region]
        return beaches

    async def _request(self, method: str, url: str, json: Any = None) -> Any:
        """Send a request, retrying 429/503 and transport errors with exponential backoff."""
        headers = {"User-Agent": self.user_agent, "Accept": "application/json"}
        params = {"key": self.api_key} if self.api_key else None

        async with self._session() as client:
            for attempt in range(self.max_retries + 1):
                try:
                    resp = await client.request(
                        method, url, headers=headers, params=params, json=json
                    )
                except httpx.TimeoutException as e:
                    if attempt < self.max_retries:
                        await self._backoff(attempt, f"timeout: {e}")
                        continue
                    raise SourceUnavailable(SourceErrorKind.DEADLINE_EXCEEDED, str(e)) from e
                except httpx.RequestError as e:
                    if attempt < self.max_retries:
                        await self._backoff(attempt, f"request error: {e}")
                        continue
                    raise SourceUnavailable(SourceErrorKind.UNAVAILABLE, str(e)) from e

                if resp.status_code in RETRY_STATUS_CODES and attempt < self.max_retries:
                    await self._backoff(attempt, f"{url} returned {resp.status_code}")
                    continue
                if resp.is_error:
                    raise SourceUnavailable(
                        error_kind_for_status(resp.status_code),
                        f"{method} {url} returned {resp.status_code}",
                    )
                try:
                    return resp.json()
                except ValueError as e:
                    raise SourceUnavailable(
                        SourceErrorKind.DECODING_FAILED, f"Invalid JSON from {url}"
                    ) from e

        raise SourceUnavailable(SourceErrorKind.UNKNOWN, f"{method} {url} exhausted retries")

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._client is not None:
            yield self._client
        else:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                yield client

    async def _backoff(self, attempt: int, reason: str) -> None:
        delay = self.retry_base_delay * (2**attempt)
        logger.warning(
            "Firestore %s, retrying in %.1fs (attempt %d/%d)",
            reason, delay, attempt + 1, self.max_retries,
        )
        await asyncio.sleep(delay)
