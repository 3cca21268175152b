"""Tests for the ocean forecast service."""

import pytest
from unittest.mock import AsyncMock, patch

from nofish.services.http import NetworkError
from nofish.services.ocean import fetch_ocean, parse_ocean_response


class TestParseOceanResponse:
    """Tests for parsing Oceanforecast responses."""

    def test_parse_complete_response(self, sample_oceanforecast_response: dict) -> None:
        """Should map all five ocean fields."""
        result = parse_ocean_response(sample_oceanforecast_response)

        assert len(result) == 2
        assert result[0].time == "2024-06-01T12:00:00Z"
        assert result[0].wave_height == 1.2
        assert result[0].wave_from_direction == 250.1
        assert result[0].sea_water_temperature == 11.4
        assert result[0].sea_water_speed == 0.3
        assert result[0].sea_water_to_direction == 15.0

    def test_parse_entry_without_details(self) -> None:
        """Missing details leave fields absent."""
        data = {"properties": {"timeseries": [{"time": "2024-06-01T12:00:00Z", "data": {}}]}}

        result = parse_ocean_response(data)

        assert result[0].wave_height is None


class TestFetchOcean:
    """Tests for fetch_ocean."""

    @pytest.mark.asyncio
    @patch("nofish.services.ocean.fetch_json", new_callable=AsyncMock)
    async def test_fetch_success(
        self,
        mock_fetch: AsyncMock,
        sample_oceanforecast_response: dict,
    ) -> None:
        """Should return parsed samples on success."""
        mock_fetch.return_value = sample_oceanforecast_response

        result = await fetch_ocean(60.39, 5.32)

        assert result is not None
        assert len(result) == 2

    @pytest.mark.asyncio
    @patch("nofish.services.ocean.fetch_json", new_callable=AsyncMock)
    async def test_uncovered_location_returns_none(self, mock_fetch: AsyncMock) -> None:
        """Inland points answer 422; that is not an error for the caller."""
        mock_fetch.side_effect = NetworkError("met.no returned 422", status_code=422)

        assert await fetch_ocean(59.91, 10.75) is None

    @pytest.mark.asyncio
    @patch("nofish.services.ocean.fetch_json", new_callable=AsyncMock)
    async def test_malformed_payload_returns_none(self, mock_fetch: AsyncMock) -> None:
        """A malformed payload degrades to None."""
        mock_fetch.return_value = {"properties": {"timeseries": "nope"}}

        assert await fetch_ocean(60.39, 5.32) is None
