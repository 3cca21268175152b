"""Tests for reverse geocoding service."""

import pytest
from unittest.mock import AsyncMock, patch

from nofish.services.geocoding import (
    UNKNOWN_MUNICIPALITY,
    UNNAMED_LOCATION,
    parse_location,
    reverse_geocode,
)
from nofish.services.http import NetworkError


class TestParseLocation:
    """Tests for place name precedence."""

    def test_village_preferred(self) -> None:
        """The most specific name wins."""
        data = {
            "display_name": "Sotra, Øygarden, Vestland, Norge",
            "address": {
                "village": "Sotra",
                "city": "Bergen",
                "municipality": "Øygarden",
                "county": "Vestland",
                "country": "Norge",
            },
        }

        result = parse_location(data)

        assert result.name == "Sotra"
        assert result.municipality == "Øygarden"
        assert result.county == "Vestland"
        assert result.country == "Norge"
        assert result.display_name == "Sotra, Øygarden, Vestland, Norge"

    def test_falls_back_through_admin_levels(self) -> None:
        """Without settlement names the county is used."""
        data = {"address": {"county": "Nordland", "state": "Nord-Norge"}}

        result = parse_location(data)

        assert result.name == "Nordland"
        assert result.municipality == "Nordland"
        assert result.county == "Nordland"

    def test_state_used_as_county_fallback(self) -> None:
        """State fills the county when the county is missing."""
        result = parse_location({"address": {"state": "Troms"}})

        assert result.name == "Troms"
        assert result.county == "Troms"
        assert result.municipality == UNKNOWN_MUNICIPALITY

    def test_nothing_resolves(self) -> None:
        """An empty response gives generic labels instead of failing."""
        result = parse_location({})

        assert result.name == UNNAMED_LOCATION
        assert result.municipality == UNKNOWN_MUNICIPALITY
        assert result.county == ""
        assert result.country == ""


class TestReverseGeocode:
    """Tests for reverse_geocode."""

    @pytest.mark.asyncio
    @patch("nofish.services.geocoding._rate_limit", new_callable=AsyncMock)
    @patch("nofish.services.geocoding.fetch_json", new_callable=AsyncMock)
    async def test_success_is_cached(
        self,
        mock_fetch: AsyncMock,
        mock_rate_limit: AsyncMock,
    ) -> None:
        """Should return location data and reuse it for the same point."""
        mock_fetch.return_value = {
            "display_name": "Bergen, Vestland, Norge",
            "address": {"city": "Bergen", "county": "Vestland", "country": "Norge"},
        }

        first = await reverse_geocode(60.39, 5.32)
        second = await reverse_geocode(60.39, 5.32)

        assert first.success is True
        assert first.data.name == "Bergen"
        assert second == first
        assert mock_fetch.await_count == 1
        params = mock_fetch.call_args.kwargs["params"]
        assert params["zoom"] == 10
        assert params["addressdetails"] == 1

    @pytest.mark.asyncio
    @patch("nofish.services.geocoding._rate_limit", new_callable=AsyncMock)
    @patch("nofish.services.geocoding.fetch_json", new_callable=AsyncMock)
    async def test_http_error(
        self,
        mock_fetch: AsyncMock,
        mock_rate_limit: AsyncMock,
    ) -> None:
        """Should report the upstream status."""
        mock_fetch.side_effect = NetworkError("nominatim returned 429", status_code=429)

        result = await reverse_geocode(60.39, 5.32)

        assert result.success is False
        assert result.error_message == "Geocoding service returned 429"

    @pytest.mark.asyncio
    @patch("nofish.services.geocoding._rate_limit", new_callable=AsyncMock)
    @patch("nofish.services.geocoding.fetch_json", new_callable=AsyncMock)
    async def test_connection_error(
        self,
        mock_fetch: AsyncMock,
        mock_rate_limit: AsyncMock,
    ) -> None:
        """Should report a connection problem."""
        mock_fetch.side_effect = NetworkError("Could not connect")

        result = await reverse_geocode(60.39, 5.32)

        assert result.success is False
        assert "connect" in result.error_message
