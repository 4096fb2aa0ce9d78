"""
Tests for place search clients.

HTTP is never performed: ``requests.get`` is patched.
"""
import pytest
import requests
from unittest.mock import MagicMock, patch

from textcrm.core.exceptions import SearchError
from textcrm.sources.places import (
    ADDRESS_NOT_AVAILABLE,
    NominatimPlaceSearch,
    format_address,
    parse_result,
)

NOMINATIM_ITEM = {
    "name": "Luigi Trattoria",
    "display_name": "Luigi Trattoria, 12, Mulberry Street, New York",
    "lat": "40.7196",
    "lon": "-73.9970",
    "address": {
        "house_number": "12",
        "road": "Mulberry Street",
        "city": "New York",
        "state": "New York",
    },
}


def fake_response(payload):
    response = MagicMock()
    response.json.return_value = payload
    response.raise_for_status.return_value = None
    return response


class TestFormatAddress:
    def test_full_address(self):
        assert format_address(NOMINATIM_ITEM["address"]) == "12 Mulberry Street, New York, New York"

    def test_town_without_number(self):
        assert format_address({"pedestrian": "Main Walk", "town": "Hope"}) == "Main Walk, Hope"

    def test_empty(self):
        assert format_address({}) == ADDRESS_NOT_AVAILABLE


class TestParseResult:
    def test_parse(self):
        result = parse_result(NOMINATIM_ITEM)
        assert result.name == "Luigi Trattoria"
        assert result.coordinate.latitude == pytest.approx(40.7196)
        assert result.coordinate.longitude == pytest.approx(-73.997)

    def test_name_from_display_name(self):
        result = parse_result({"display_name": "Central Park, Manhattan", "lat": "1", "lon": "2"})
        assert result.name == "Central Park"
        assert result.address == ADDRESS_NOT_AVAILABLE

    def test_bad_coordinates_dropped(self):
        result = parse_result({"name": "Nowhere", "lat": "999", "lon": "0"})
        assert result.coordinate is None

    def test_no_name(self):
        assert parse_result({"lat": "1", "lon": "2"}) is None


class TestNominatimPlaceSearch:
    """Tests for NominatimPlaceSearch."""

    @patch("textcrm.sources.places.requests.get")
    def test_request_parameters(self, mock_get):
        mock_get.return_value = fake_response([NOMINATIM_ITEM])
        search = NominatimPlaceSearch(url="https://example.test/search", user_agent="tests/1.0", limit=3)

        results = search.search_sync(" Luigi ")

        assert [r.name for r in results] == ["Luigi Trattoria"]
        args, kwargs = mock_get.call_args
        assert args[0] == "https://example.test/search"
        assert kwargs["params"]["q"] == "Luigi"
        assert kwargs["params"]["limit"] == 3
        assert kwargs["headers"]["User-Agent"] == "tests/1.0"

    @patch("textcrm.sources.places.requests.get")
    def test_results_capped(self, mock_get):
        items = [dict(NOMINATIM_ITEM, name=f"Place {i}") for i in range(15)]
        mock_get.return_value = fake_response(items)
        assert len(NominatimPlaceSearch().search_sync("place")) == 10

    @patch("textcrm.sources.places.requests.get")
    def test_blank_query_skips_request(self, mock_get):
        assert NominatimPlaceSearch().search_sync("   ") == []
        mock_get.assert_not_called()

    @patch("textcrm.sources.places.requests.get")
    def test_transport_error(self, mock_get):
        mock_get.side_effect = requests.exceptions.ConnectionError("offline")
        with pytest.raises(SearchError, match="offline"):
            NominatimPlaceSearch().search_sync("Luigi")

    @patch("textcrm.sources.places.requests.get")
    def test_bad_json(self, mock_get):
        response = fake_response(None)
        response.json.side_effect = ValueError("not json")
        mock_get.return_value = response
        with pytest.raises(SearchError):
            NominatimPlaceSearch().search_sync("Luigi")

    @patch("textcrm.sources.places.requests.get")
    def test_unexpected_payload(self, mock_get):
        mock_get.return_value = fake_response({"error": "rate limited"})
        with pytest.raises(SearchError, match="Unexpected"):
            NominatimPlaceSearch().search_sync("Luigi")

    @pytest.mark.asyncio
    @patch("textcrm.sources.places.requests.get")
    async def test_async_search(self, mock_get):
        mock_get.return_value = fake_response([NOMINATIM_ITEM])
        results = await NominatimPlaceSearch().search("Luigi")
        assert results[0].address == "12 Mulberry Street, New York, New York"
