"""Atmospheric forecast service using MET Norway Locationforecast 2.0."""

import logging

from nofish.config import get_settings
from nofish.models.schemas import AtmosphericSample, LocationValidation, PeriodSummary
from nofish.services.http import NetworkError, fetch_json

logger = logging.getLogger(__name__)


class UpstreamError(Exception):
    """Raised when the mandatory atmospheric source fails or is malformed."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def coordinate_params(latitude: float, longitude: float) -> dict[str, str]:
    """MET.no accepts at most four decimals per coordinate."""
    return {"lat": f"{latitude:.4f}", "lon": f"{longitude:.4f}"}


async def fetch_atmospheric(
    latitude: float,
    longitude: float,
) -> list[AtmosphericSample]:
    """
    Fetch the atmospheric forecast for given coordinates.

    Args:
        latitude: Latitude coordinate.
        longitude: Longitude coordinate.

    Returns:
        Samples ordered by time ascending.

    Raises:
        UpstreamError: If the service fails or the payload is malformed.
    """
    settings = get_settings()
    try:
        data = await fetch_json(
            settings.met_locationforecast_url,
            params=coordinate_params(latitude, longitude),
        )
    except NetworkError as e:
        logger.error(f"Weather API error: {e}")
        raise UpstreamError(
            f"Weather API failed: {e}", status_code=e.status_code
        ) from e

    try:
        return parse_atmospheric_response(data)
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        logger.error(f"Malformed weather payload: {e}")
        raise UpstreamError("Weather API returned a malformed payload") from e


def parse_atmospheric_response(data: dict) -> list[AtmosphericSample]:
    """
    Parse a Locationforecast response into atmospheric samples.

    Args:
        data: Raw API response dictionary.

    Returns:
        List of AtmosphericSample in source order.

    Raises:
        KeyError, TypeError, ValueError: If the payload lacks a timeseries.
    """
    timeseries = data["properties"]["timeseries"]
    if not isinstance(timeseries, list):
        raise TypeError("timeseries is not a list")

    samples: list[AtmosphericSample] = []
    for entry in timeseries:
        entry_data = entry["data"]
        details = entry_data.get("instant", {}).get("details", {})
        samples.append(
            AtmosphericSample(
                time=entry["time"],
                air_temperature=details.get("air_temperature"),
                wind_speed=details.get("wind_speed"),
                wind_from_direction=details.get("wind_from_direction"),
                relative_humidity=details.get("relative_humidity"),
                cloud_area_fraction=details.get("cloud_area_fraction"),
                air_pressure_at_sea_level=details.get("air_pressure_at_sea_level"),
                next_1_hours=_parse_period(entry_data.get("next_1_hours")),
                next_6_hours=_parse_period(entry_data.get("next_6_hours")),
            )
        )
    return samples


def _parse_period(period: dict | None) -> PeriodSummary | None:
    if not period:
        return None
    return PeriodSummary(
        symbol_code=period.get("summary", {}).get("symbol_code"),
        precipitation_amount=period.get("details", {}).get("precipitation_amount"),
    )


async def validate_location(
    latitude: float,
    longitude: float,
) -> LocationValidation:
    """
    Check that the atmospheric source covers the given coordinates.

    Ocean and tide coverage are not consulted: their absence only reduces
    the detail of the forecast.

    Args:
        latitude: Latitude coordinate.
        longitude: Longitude coordinate.

    Returns:
        LocationValidation with availability and an optional diagnostic.
    """
    settings = get_settings()
    try:
        data = await fetch_json(
            settings.met_locationforecast_url,
            params=coordinate_params(latitude, longitude),
        )
    except NetworkError as e:
        logger.warning(f"Weather validation error: {e}")
        if e.status_code is not None:
            return LocationValidation(
                available=False,
                error=f"MET.no API returned {e.status_code}",
            )
        return LocationValidation(available=False, error=str(e))

    timeseries = None
    if isinstance(data, dict):
        properties = data.get("properties")
        if isinstance(properties, dict):
            timeseries = properties.get("timeseries")

    if isinstance(timeseries, list) and timeseries:
        return LocationValidation(available=True)

    return LocationValidation(
        available=False,
        error="No forecast data available for this location",
    )
