"""Tests for the Firestore REST source with mocked httpx."""

import asyncio
import json
from datetime import UTC, datetime
from pathlib import Path

import httpx
import pytest
import respx

from surfcast.config.schema import SourceConfig
from surfcast.ingest.firestore_client import FirestoreSource, error_kind_for_status
from surfcast.ingest.source import SourceErrorKind, SourceUnavailable

FIXTURE_DIR = Path(__file__).parent.parent / "fixtures"
DOCS = "https://test-firestore.example.com/projects/test-project/databases/(default)/documents"


def _load(name: str):
    with open(FIXTURE_DIR / name) as f:
        return json.load(f)


@pytest.fixture
def source() -> FirestoreSource:
    return FirestoreSource(
        project_id="test-project",
        base_url="https://test-firestore.example.com",
        max_retries=1,
        retry_base_delay=0.0,  # no waiting in tests
    )


class TestFetchMetadata:
    @respx.mock
    def test_success(self, source: FirestoreSource):
        respx.get(f"{DOCS}/regions/pohang/2001/_metadata").mock(
            return_value=httpx.Response(200, json=_load("firestore_metadata_2001.json"))
        )
        meta = asyncio.run(source.fetch_metadata("2001", "pohang"))
        assert meta is not None
        assert meta.beach == "wolpo"

    @respx.mock
    def test_not_found_is_none(self, source: FirestoreSource):
        respx.get(f"{DOCS}/regions/pohang/9999/_metadata").mock(
            return_value=httpx.Response(404, json={"error": {"status": "NOT_FOUND"}})
        )
        assert asyncio.run(source.fetch_metadata("9999", "pohang")) is None

    @respx.mock
    def test_permission_denied_raises(self, source: FirestoreSource):
        respx.get(f"{DOCS}/regions/pohang/2001/_metadata").mock(
            return_value=httpx.Response(403)
        )
        with pytest.raises(SourceUnavailable) as exc_info:
            asyncio.run(source.fetch_metadata("2001", "pohang"))
        assert exc_info.value.kind == SourceErrorKind.PERMISSION_DENIED
        assert not exc_info.value.is_retryable


class TestFetchRecords:
    @respx.mock
    def test_success_and_query(self, source: FirestoreSource):
        route = respx.post(f"{DOCS}/regions/pohang:runQuery").mock(
            return_value=httpx.Response(200, json=_load("firestore_records_2001.json"))
        )
        since = datetime(2026, 10, 17, 0, 0, tzinfo=UTC)
        records = asyncio.run(source.fetch_records("2001", "pohang", since, 20))

        assert len(records) == 3
        body = json.loads(route.calls[0].request.content)
        query = body["structuredQuery"]
        assert query["from"] == [{"collectionId": "2001"}]
        assert query["limit"] == 20
        assert query["where"]["fieldFilter"]["op"] == "GREATER_THAN"
        assert query["where"]["fieldFilter"]["value"] == {
            "timestampValue": "2026-10-17T00:00:00Z"
        }
        assert query["orderBy"][0]["direction"] == "ASCENDING"

    @respx.mock
    def test_user_agent_and_api_key(self):
        source = FirestoreSource(
            project_id="test-project",
            base_url="https://test-firestore.example.com",
            api_key="secret",
        )
        route = respx.post(f"{DOCS}/regions/pohang:runQuery").mock(
            return_value=httpx.Response(200, json=[])
        )
        asyncio.run(source.fetch_records("2001", "pohang", datetime(2026, 1, 1, tzinfo=UTC), 5))
        request = route.calls[0].request
        assert "surfcast" in request.headers["user-agent"]
        assert request.url.params["key"] == "secret"

    @respx.mock
    def test_retry_on_503(self, source: FirestoreSource):
        route = respx.post(f"{DOCS}/regions/pohang:runQuery").mock(
            side_effect=[
                httpx.Response(503),
                httpx.Response(200, json=_load("firestore_records_2001.json")),
            ]
        )
        records = asyncio.run(
            source.fetch_records("2001", "pohang", datetime(2026, 1, 1, tzinfo=UTC), 20)
        )
        assert len(records) == 3
        assert route.call_count == 2

    @respx.mock
    def test_exhausted_retries(self, source: FirestoreSource):
        route = respx.post(f"{DOCS}/regions/pohang:runQuery").mock(
            return_value=httpx.Response(503)
        )
        with pytest.raises(SourceUnavailable) as exc_info:
            asyncio.run(
                source.fetch_records("2001", "pohang", datetime(2026, 1, 1, tzinfo=UTC), 20)
            )
        assert exc_info.value.kind == SourceErrorKind.UNAVAILABLE
        assert exc_info.value.is_retryable
        assert route.call_count == 2

    @respx.mock
    def test_transport_error_mapped(self, source: FirestoreSource):
        respx.post(f"{DOCS}/regions/pohang:runQuery").mock(
            side_effect=httpx.ConnectError("connection refused")
        )
        with pytest.raises(SourceUnavailable) as exc_info:
            asyncio.run(
                source.fetch_records("2001", "pohang", datetime(2026, 1, 1, tzinfo=UTC), 20)
            )
        assert exc_info.value.kind == SourceErrorKind.UNAVAILABLE

    @respx.mock
    def test_timeout_mapped(self, source: FirestoreSource):
        respx.post(f"{DOCS}/regions/pohang:runQuery").mock(
            side_effect=httpx.ReadTimeout("slow")
        )
        with pytest.raises(SourceUnavailable) as exc_info:
            asyncio.run(
                source.fetch_records("2001", "pohang", datetime(2026, 1, 1, tzinfo=UTC), 20)
            )
        assert exc_info.value.kind == SourceErrorKind.DEADLINE_EXCEEDED


class TestListBeaches:
    @respx.mock
    def test_all(self, source: FirestoreSource):
        respx.get(f"{DOCS}/_global_metadata/all_beaches").mock(
            return_value=httpx.Response(200, json=_load("firestore_all_beaches.json"))
        )
        beaches = asyncio.run(source.list_beaches())
        assert len(beaches) == 3

    @respx.mock
    def test_region_filter(self, source: FirestoreSource):
        respx.get(f"{DOCS}/_global_metadata/all_beaches").mock(
            return_value=httpx.Response(200, json=_load("firestore_all_beaches.json"))
        )
        beaches = asyncio.run(source.list_beaches("pohang"))
        assert [b.beach_id for b in beaches] == ["2001", "2002"]

    @respx.mock
    def test_missing_document_raises(self, source: FirestoreSource):
        respx.get(f"{DOCS}/_global_metadata/all_beaches").mock(
            return_value=httpx.Response(404)
        )
        with pytest.raises(SourceUnavailable) as exc_info:
            asyncio.run(source.list_beaches())
        assert exc_info.value.kind == SourceErrorKind.NOT_FOUND


class TestClientLifecycle:
    def _mock_beach(self):
        respx.get(f"{DOCS}/regions/pohang/2001/_metadata").mock(
            return_value=httpx.Response(200, json=_load("firestore_metadata_2001.json"))
        )
        respx.post(f"{DOCS}/regions/pohang:runQuery").mock(
            return_value=httpx.Response(200, json=_load("firestore_records_2001.json"))
        )

    @respx.mock
    def test_one_client_per_block(self, source: FirestoreSource, monkeypatch):
        self._mock_beach()
        created: list[httpx.AsyncClient] = []
        real_client = httpx.AsyncClient

        def counting_client(*args, **kwargs):
            client = real_client(*args, **kwargs)
            created.append(client)
            return client

        monkeypatch.setattr(httpx, "AsyncClient", counting_client)
        since = datetime(2026, 10, 17, tzinfo=UTC)

        async def fan_out():
            async with source:
                await asyncio.gather(*(
                    call
                    for _ in range(3)
                    for call in (
                        source.fetch_metadata("2001", "pohang"),
                        source.fetch_records("2001", "pohang", since, 10),
                    )
                ))

        asyncio.run(fan_out())

        assert len(created) == 1
        assert created[0].is_closed
        assert respx.calls.call_count == 6

    @respx.mock
    def test_caller_client_left_open(self):
        self._mock_beach()

        async def run():
            async with httpx.AsyncClient() as client:
                source = FirestoreSource(
                    project_id="test-project",
                    base_url="https://test-firestore.example.com",
                    client=client,
                )
                async with source:
                    await source.fetch_metadata("2001", "pohang")
                return client.is_closed

        assert asyncio.run(run()) is False


class TestConfig:
    def test_from_config(self):
        config = SourceConfig(project_id="p1", max_retries=5, timeout_seconds=10.0)
        source = FirestoreSource.from_config(config)
        assert source.project_id == "p1"
        assert source.max_retries == 5
        assert source.timeout == 10.0
        assert source.documents_url.endswith("/projects/p1/databases/(default)/documents")

    @pytest.mark.parametrize(
        "status,kind",
        [
            (401, SourceErrorKind.UNAUTHENTICATED),
            (429, SourceErrorKind.RESOURCE_EXHAUSTED),
            (502, SourceErrorKind.UNAVAILABLE),
            (504, SourceErrorKind.DEADLINE_EXCEEDED),
            (418, SourceErrorKind.UNKNOWN),
        ],
    )
    def test_status_mapping(self, status: int, kind: SourceErrorKind):
        assert error_kind_for_status(status) == kind
