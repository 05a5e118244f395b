"""Unit tests for AdsApiClient and the wire format."""

from unittest.mock import AsyncMock, Mock, patch

import httpx
import pytest

from adsmith.models.block import ContentBlock, EphemeralId, PersistedId, Zone
from adsmith.models.config import ApiConfig
from adsmith.services.ads_client import AdsApiClient, block_from_wire, block_to_wire
from adsmith.services.exceptions import TransportFailure


@pytest.fixture
def api_client():
    return AdsApiClient(ApiConfig(base_url="https://api.test.com/api", token="test-token", timeout=10))


def mock_response(data=None, status_code=200, content=b"{}"):
    response = Mock()
    response.status_code = status_code
    response.content = content
    response.json = Mock(return_value=data)
    response.raise_for_status = Mock()
    return response


def mock_http_client(response=None, error=None):
    client = AsyncMock()
    client.__aenter__.return_value = client
    client.__aexit__.return_value = None
    if error is not None:
        client.request.side_effect = error
    else:
        client.request.return_value = response
    return client


class TestWireFormat:
    """Tests for converting between wire items and blocks."""

    def test_block_from_wire(self):
        """Test an API ad becomes a persisted block."""
        block = block_from_wire(
            {"_id": "65f1", "content": "<p>hi</p>", "position": "middle", "order": 2, "site": "a1satta.pro"},
            "a1satta.pro",
        )

        assert block.identity == PersistedId(id="65f1")
        assert block.zone == Zone.MIDDLE
        assert block.order == 2
        assert block.content == "<p>hi</p>"

    def test_block_from_wire_defaults(self):
        """Test missing order, content and site get defaults."""
        block = block_from_wire({"id": 7, "position": "top"}, "a3satta.pro")

        assert block.key == "7"
        assert block.order == 0
        assert block.content == ""
        assert block.site == "a3satta.pro"

    @pytest.mark.parametrize("item", [
        "not an ad",
        {"position": "top"},
        {"_id": "x", "position": "sidebar"},
    ])
    def test_block_from_wire_rejects_bad_items(self, item):
        """Test malformed ads are rejected."""
        with pytest.raises(ValueError):
            block_from_wire(item, "a1satta.pro")

    def test_block_to_wire_ephemeral(self):
        """Test unsaved blocks are sent without an id."""
        block = ContentBlock(identity=EphemeralId(temp_id="tmp-top-1"), zone=Zone.TOP, order=0, site="a1satta.pro")

        assert block_to_wire(block, "<p>hi</p>") == {
            "content": "<p>hi</p>",
            "position": "top",
            "order": 0,
            "site": "a1satta.pro",
        }

    def test_block_to_wire_persisted(self):
        """Test saved blocks keep their id and stored content by default."""
        block = ContentBlock(
            identity=PersistedId(id="65f1"), zone=Zone.BOTTOM, order=3, content="<b>x</b>", site="a1satta.pro"
        )

        wire = block_to_wire(block)

        assert wire["_id"] == "65f1"
        assert wire["content"] == "<b>x</b>"
        assert wire["order"] == 3


class TestListAds:
    """Tests for listing ads."""

    @pytest.mark.asyncio
    async def test_list_ads(self, api_client):
        """Test a list response becomes blocks and the request is authorized."""
        http = mock_http_client(mock_response([
            {"_id": "a", "content": "<p>A</p>", "position": "top", "order": 0},
            {"_id": "b", "content": "<p>B</p>", "position": "bottom", "order": 0},
        ]))

        with patch("httpx.AsyncClient", return_value=http) as client_class:
            blocks = await api_client.list_ads("a1satta.pro")

        assert [block.key for block in blocks] == ["a", "b"]
        assert client_class.call_args.kwargs["timeout"] == api_client.timeout
        http.request.assert_awaited_once_with(
            "GET",
            "https://api.test.com/api/ads",
            params={"site": "a1satta.pro"},
            json=None,
            headers={"Accept": "application/json", "Authorization": "Bearer test-token"},
        )

    @pytest.mark.asyncio
    async def test_list_ads_wrapped_response(self, api_client):
        """Test an {"ads": [...]} body is accepted too."""
        http = mock_http_client(mock_response({"ads": [{"_id": "a", "position": "top"}]}))

        with patch("httpx.AsyncClient", return_value=http):
            blocks = await api_client.list_ads("a1satta.pro")

        assert len(blocks) == 1

    @pytest.mark.asyncio
    async def test_list_ads_bad_shape(self, api_client):
        """Test a body that is not a list of ads is a transport failure."""
        http = mock_http_client(mock_response({"error": "nope"}))

        with patch("httpx.AsyncClient", return_value=http):
            with pytest.raises(TransportFailure) as exc_info:
                await api_client.list_ads("a1satta.pro")

        assert exc_info.value.operation == "list"

    @pytest.mark.asyncio
    async def test_list_ads_bad_item(self, api_client):
        """Test an ad with an unknown position fails the whole listing."""
        http = mock_http_client(mock_response([{"_id": "a", "position": "side"}]))

        with patch("httpx.AsyncClient", return_value=http):
            with pytest.raises(TransportFailure, match="unknown position"):
                await api_client.list_ads("a1satta.pro")


class TestUpsertBatch:
    """Tests for saving a zone."""

    @pytest.mark.asyncio
    async def test_upsert_returns_canonical_blocks(self, api_client):
        """Test the server's ads (with assigned ids) are returned."""
        payload = [{"content": "<p>hi</p>", "position": "top", "order": 0, "site": "a1satta.pro"}]
        http = mock_http_client(mock_response({"ads": [dict(payload[0], _id="new-1")]}))

        with patch("httpx.AsyncClient", return_value=http):
            blocks = await api_client.upsert_batch("a1satta.pro", Zone.TOP, payload)

        assert blocks[0].identity == PersistedId(id="new-1")
        assert blocks[0].order == 0
        call = http.request.call_args
        assert call.args == ("POST", "https://api.test.com/api/ads")
        assert call.kwargs["json"] == payload

    @pytest.mark.asyncio
    async def test_upsert_requires_ads_key(self, api_client):
        """Test a response without an ads list is a transport failure."""
        http = mock_http_client(mock_response([{"_id": "a", "position": "top"}]))

        with patch("httpx.AsyncClient", return_value=http):
            with pytest.raises(TransportFailure) as exc_info:
                await api_client.upsert_batch("a1satta.pro", Zone.TOP, [])

        assert exc_info.value.operation == "upsert"


class TestErrors:
    """Tests for mapping httpx errors to TransportFailure."""

    @pytest.mark.asyncio
    async def test_http_status_error(self, api_client):
        """Test error statuses keep their status code."""
        response = mock_response(status_code=500)
        response.raise_for_status.side_effect = httpx.HTTPStatusError(
            "Server error", request=Mock(), response=Mock(status_code=500)
        )
        http = mock_http_client(response)

        with patch("httpx.AsyncClient", return_value=http):
            with pytest.raises(TransportFailure) as exc_info:
                await api_client.list_ads("a1satta.pro")

        assert exc_info.value.status_code == 500
        assert exc_info.value.message == "Server returned HTTP 500"

    @pytest.mark.asyncio
    async def test_timeout(self, api_client):
        """Test timeouts are reported as such."""
        http = mock_http_client(error=httpx.ReadTimeout("timed out"))

        with patch("httpx.AsyncClient", return_value=http):
            with pytest.raises(TransportFailure, match="timed out"):
                await api_client.list_ads("a1satta.pro")

    @pytest.mark.asyncio
    async def test_connection_error(self, api_client):
        """Test network errors become transport failures."""
        http = mock_http_client(error=httpx.ConnectError("connection refused"))

        with patch("httpx.AsyncClient", return_value=http):
            with pytest.raises(TransportFailure, match="connection refused"):
                await api_client.delete("65f1")

    @pytest.mark.asyncio
    async def test_invalid_json(self, api_client):
        """Test an unparseable body is a transport failure."""
        response = mock_response()
        response.json.side_effect = ValueError("Expecting value")
        http = mock_http_client(response)

        with patch("httpx.AsyncClient", return_value=http):
            with pytest.raises(TransportFailure, match="invalid JSON"):
                await api_client.list_ads("a1satta.pro")


@pytest.mark.asyncio
async def test_delete(api_client):
    """Test delete calls the ad's URL and accepts an empty body."""
    http = mock_http_client(mock_response(status_code=204, content=b""))

    with patch("httpx.AsyncClient", return_value=http):
        await api_client.delete("65f1")

    call = http.request.call_args
    assert call.args == ("DELETE", "https://api.test.com/api/ads/65f1")


def test_base_url_without_trailing_slash():
    """Test a trailing slash in the base URL does not double up."""
    client = AdsApiClient(ApiConfig(base_url="https://api.test.com/"))

    assert client.base_url == "https://api.test.com"
    assert "Authorization" not in client._headers()
