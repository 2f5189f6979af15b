"""
Tests for the reference data client.

Uses httpx.MockTransport so no network access is needed.
"""

import httpx
import pytest

from tcof.core.config.models import ReferenceConfig, TcofConfig
from tcof.core.plans.models import Stage
from tcof.core.reference.client import FACTORS_PATH, HEURISTICS_PATH, ReferenceDataClient
from tcof.core.reference.defaults import DEFAULT_PRESET_HEURISTICS, DEFAULT_SUCCESS_FACTORS
from tcof.core.reference.models import SUCCESS_FACTOR_RATINGS, ReferenceSource

HEURISTICS = [{"id": "H9", "text": "Measure twice", "notes": "cut once"}]
FACTORS = [
    {
        "id": "1.1",
        "title": "Ask Why",
        "tasks": {
            "Identification": ["Consult key stakeholders"],
            "Definition": ["-"],
            "Delivery": [],
            "Closure": [],
        },
    }
]


def make_client(handler) -> ReferenceDataClient:
    return ReferenceDataClient(
        base_url="https://tcof.example.com/",
        transport=httpx.MockTransport(handler),
    )


def ok_handler(request: httpx.Request) -> httpx.Response:
    if request.url.path == HEURISTICS_PATH:
        return httpx.Response(200, json=HEURISTICS)
    if request.url.path == FACTORS_PATH:
        return httpx.Response(200, json=FACTORS)
    return httpx.Response(404)


class TestRemoteFetch:
    """Test successful fetches."""

    @pytest.mark.asyncio
    async def test_fetch_preset_heuristics(self) -> None:
        heuristics, source = await make_client(ok_handler).fetch_preset_heuristics()

        assert source == ReferenceSource.REMOTE
        assert [(h.id, h.text, h.notes) for h in heuristics] == [
            ("H9", "Measure twice", "cut once")
        ]

    @pytest.mark.asyncio
    async def test_fetch_success_factors(self) -> None:
        factors, source = await make_client(ok_handler).fetch_success_factors()

        assert source == ReferenceSource.REMOTE
        assert factors[0].tasks_for(Stage.IDENTIFICATION) == ["Consult key stakeholders"]
        assert factors[0].tasks_for(Stage.DEFINITION) == []

    @pytest.mark.asyncio
    async def test_load(self) -> None:
        data = await make_client(ok_handler).load()

        assert data.heuristics_source == ReferenceSource.REMOTE
        assert data.factors_source == ReferenceSource.REMOTE
        assert data.get_factor("1.1").title == "Ask Why"
        assert data.get_factor("9.9") is None


class TestFallback:
    """Test fallback to embedded defaults."""

    @pytest.mark.asyncio
    async def test_no_base_url_skips_network(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        client = ReferenceDataClient(transport=httpx.MockTransport(handler))
        data = await client.load()

        assert data.heuristics_source == ReferenceSource.EMBEDDED
        assert data.factors_source == ReferenceSource.EMBEDDED
        assert data.preset_heuristics == DEFAULT_PRESET_HEURISTICS
        assert data.success_factors == DEFAULT_SUCCESS_FACTORS

    @pytest.mark.asyncio
    async def test_server_error(self) -> None:
        client = make_client(lambda request: httpx.Response(500))

        heuristics, source = await client.fetch_preset_heuristics()

        assert source == ReferenceSource.EMBEDDED
        assert heuristics == DEFAULT_PRESET_HEURISTICS

    @pytest.mark.asyncio
    async def test_connection_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        factors, source = await make_client(handler).fetch_success_factors()

        assert source == ReferenceSource.EMBEDDED
        assert factors == DEFAULT_SUCCESS_FACTORS

    @pytest.mark.asyncio
    async def test_invalid_json(self) -> None:
        client = make_client(lambda request: httpx.Response(200, text="<html>"))
        _, source = await client.fetch_preset_heuristics()
        assert source == ReferenceSource.EMBEDDED

    @pytest.mark.asyncio
    async def test_invalid_payload_shape(self) -> None:
        client = make_client(lambda request: httpx.Response(200, json=[{"title": "no id"}]))
        _, source = await client.fetch_success_factors()
        assert source == ReferenceSource.EMBEDDED

    @pytest.mark.asyncio
    async def test_fallback_returns_a_copy(self) -> None:
        heuristics, _ = await ReferenceDataClient().fetch_preset_heuristics()
        heuristics.clear()
        assert len(DEFAULT_PRESET_HEURISTICS) == 2


class TestConfiguration:
    """Test client construction."""

    def test_from_config(self) -> None:
        config = TcofConfig(reference=ReferenceConfig(base_url="https://x.test/", timeout=3))
        client = ReferenceDataClient.from_config(config)
        assert client.base_url == "https://x.test"
        assert client.timeout == 3

    def test_from_reference_config(self) -> None:
        client = ReferenceDataClient.from_config(ReferenceConfig())
        assert client.base_url is None


class TestEmbeddedData:
    """Test the embedded reference content."""

    def test_factor_ids_are_unique(self) -> None:
        ids = [f.id for f in DEFAULT_SUCCESS_FACTORS]
        assert len(ids) == len(set(ids)) == 12

    def test_every_factor_has_all_stages(self) -> None:
        for factor in DEFAULT_SUCCESS_FACTORS:
            assert set(factor.tasks) == set(Stage)

    def test_rating_labels(self) -> None:
        assert sorted(SUCCESS_FACTOR_RATINGS) == [1, 2, 3, 4, 5]
        assert SUCCESS_FACTOR_RATINGS[5].description.startswith("Essential")
