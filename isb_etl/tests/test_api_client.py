"""
Tests for the ISB API client.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from isb_etl.src.api_client import APIConfig, ISBAPIClient, normalize_records
from isb_etl.src.errors import FetchFailed, ParseFailed


def make_response(status=200, text="[]"):
    """Build a mock aiohttp response."""
    response = MagicMock()
    response.status = status
    response.text = AsyncMock(return_value=text)
    return response


def attach_session(client, response):
    """Give the client a mock session whose GET returns ``response``."""
    session = MagicMock()
    session.get.return_value.__aenter__.return_value = response
    session.get.return_value.__aexit__.return_value = False
    client.session = session
    return session


class TestNormalizeRecords:
    """Test suite for normalize_records."""

    def test_bare_array(self):
        assert normalize_records([{"a": 1}]) == [{"a": 1}]

    def test_data_wrapper(self):
        assert normalize_records({"data": [{"a": 1}]}) == [{"a": 1}]

    def test_empty_data_wrapper(self):
        assert normalize_records({"data": []}) == []

    @pytest.mark.parametrize("payload", [
        {"data": None},
        {"data": {"a": 1}},
        {"items": [{"a": 1}]},
        "text",
        42,
        None,
    ])
    def test_other_shapes_are_empty(self, payload):
        assert normalize_records(payload) == []


class TestAPIConfig:
    """Test suite for APIConfig."""

    def test_defaults(self):
        config = APIConfig()
        assert config.base_url == "https://isb.lkpp.go.id/isb-2/api"
        assert config.rate_limit == 5

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("ISB_BASE_URL", "https://test.api")
        monkeypatch.setenv("ISB_TIMEOUT", "30")
        monkeypatch.delenv("ISB_RATE_LIMIT", raising=False)

        with patch("isb_etl.src.api_client.load_dotenv"):
            config = APIConfig.from_env()

        assert config.base_url == "https://test.api"
        assert config.timeout == 30
        assert config.rate_limit == APIConfig().rate_limit


class TestISBAPIClient:
    """Test suite for ISBAPIClient."""

    @pytest.fixture
    def client(self):
        return ISBAPIClient(APIConfig(base_url="https://test.api", rate_limit=100, timeout=5))

    @pytest.mark.asyncio
    async def test_get_records_unwraps_data(self, client):
        session = attach_session(client, make_response(text='{"data": [{"a": 1}]}'))

        records = await client.get_records("https://test.api/x")

        assert records == [{"a": 1}]
        session.get.assert_called_once_with("https://test.api/x")
        assert client.get_statistics()["total_requests"] == 1

    @pytest.mark.asyncio
    async def test_non_2xx_raises_fetch_failed(self, client):
        attach_session(client, make_response(status=503, text="Service Unavailable"))

        with pytest.raises(FetchFailed) as exc_info:
            await client.get_json("https://test.api/x")

        assert exc_info.value.status == 503
        assert client.get_statistics()["total_errors"] == 1

    @pytest.mark.asyncio
    async def test_invalid_json_raises_parse_failed(self, client):
        attach_session(client, make_response(text="<html>maintenance</html>"))

        with pytest.raises(ParseFailed):
            await client.get_json("https://test.api/x")

    @pytest.mark.asyncio
    async def test_deeply_nested_json_raises_parse_failed(self, client):
        attach_session(client, make_response(text="[" * 100000 + "]" * 100000))

        with pytest.raises(ParseFailed):
            await client.get_json("https://test.api/x")

    @pytest.mark.asyncio
    async def test_requires_context_manager(self, client):
        with pytest.raises(RuntimeError):
            await client.get_json("https://test.api/x")

    @pytest.mark.asyncio
    async def test_context_manager_opens_and_closes_session(self, client):
        async with client:
            assert client.session is not None
            session = client.session
        assert session.closed
        assert client.session is None

    def test_url_for_uses_configured_base(self, client):
        from isb_etl.src.catalog import RUP

        url = client.url_for(RUP, "D197", "RUP-MasterSatker", 2024)
        assert url.startswith("https://test.api/")

    def test_statistics_without_requests(self, client):
        stats = client.get_statistics()
        assert stats == {"total_requests": 0, "total_errors": 0, "success_rate": 0}
