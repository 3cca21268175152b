"""Ocean forecast service using MET Norway Oceanforecast 2.0."""

import logging

from nofish.config import get_settings
from nofish.models.schemas import OceanSample
from nofish.services.http import NetworkError, fetch_json
from nofish.services.weather import coordinate_params

logger = logging.getLogger(__name__)


async def fetch_ocean(
    latitude: float,
    longitude: float,
) -> list[OceanSample] | None:
    """
    Fetch the ocean forecast for given coordinates.

    Not every coastal point is covered, so any failure degrades to None
    instead of propagating.

    Args:
        latitude: Latitude coordinate.
        longitude: Longitude coordinate.

    Returns:
        Samples ordered by time ascending, or None when unavailable.
    """
    settings = get_settings()
    try:
        data = await fetch_json(
            settings.met_oceanforecast_url,
            params=coordinate_params(latitude, longitude),
        )
        return parse_ocean_response(data)
    except NetworkError as e:
        logger.warning(f"Ocean forecast unavailable: {e}")
        return None
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        logger.warning(f"Malformed ocean payload: {e}")
        return None


def parse_ocean_response(data: dict) -> list[OceanSample]:
    """
    Parse an Oceanforecast response into ocean samples.

    Args:
        data: Raw API response dictionary.

    Returns:
        List of OceanSample in source order.
    """
    timeseries = data["properties"]["timeseries"]
    if not isinstance(timeseries, list):
        raise TypeError("timeseries is not a list")

    samples: list[OceanSample] = []
    for entry in timeseries:
        details = entry["data"].get("instant", {}).get("details", {})
        samples.append(
            OceanSample(
                time=entry["time"],
                wave_height=details.get("sea_surface_wave_height"),
                wave_from_direction=details.get("sea_surface_wave_from_direction"),
                sea_water_temperature=details.get("sea_water_temperature"),
                sea_water_speed=details.get("sea_water_speed"),
                sea_water_to_direction=details.get("sea_water_to_direction"),
            )
        )
    return samples
