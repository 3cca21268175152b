"""Reverse geocoding service using OpenStreetMap Nominatim API."""

import asyncio
import logging
from datetime import datetime, timedelta

from cachetools import TTLCache

from nofish.config import get_settings
from nofish.models.schemas import LocationInfo, ReverseGeocodingResponse
from nofish.services.http import NetworkError, fetch_json

logger = logging.getLogger(__name__)

UNNAMED_LOCATION = "Unnamed location"
UNKNOWN_MUNICIPALITY = "Unknown municipality"

# Most specific first
NAME_PRECEDENCE = (
    "village",
    "town",
    "city",
    "hamlet",
    "municipality",
    "county",
    "state",
    "locality",
)

# Cache geocoding results for 24 hours
_geocoding_cache: TTLCache = TTLCache(maxsize=500, ttl=86400)

# Rate limiting: track last request time
_last_request_time: datetime | None = None
_rate_limit_lock = asyncio.Lock()


async def _rate_limit() -> None:
    """Enforce Nominatim rate limit of 1 request per second."""
    global _last_request_time
    async with _rate_limit_lock:
        if _last_request_time is not None:
            elapsed = datetime.now() - _last_request_time
            if elapsed < timedelta(seconds=1):
                await asyncio.sleep(1 - elapsed.total_seconds())
        _last_request_time = datetime.now()


def parse_location(data: dict) -> LocationInfo:
    """
    Build a LocationInfo from a Nominatim reverse response.

    Falls back through administrative levels when finer names are
    missing, ending at a generic "Unnamed location".

    Args:
        data: Raw Nominatim response dictionary.

    Returns:
        LocationInfo with best-effort names.
    """
    address = data.get("address") or {}

    name = next(
        (address[key] for key in NAME_PRECEDENCE if address.get(key)),
        UNNAMED_LOCATION,
    )
    return LocationInfo(
        name=name,
        municipality=(
            address.get("municipality")
            or address.get("county")
            or UNKNOWN_MUNICIPALITY
        ),
        county=address.get("county") or address.get("state") or "",
        country=address.get("country") or "",
        display_name=data.get("display_name") or "",
    )


async def reverse_geocode(
    latitude: float,
    longitude: float,
) -> ReverseGeocodingResponse:
    """
    Reverse geocode coordinates to a place description.

    Args:
        latitude: GPS latitude.
        longitude: GPS longitude.

    Returns:
        ReverseGeocodingResponse with location data or error message.
    """
    settings = get_settings()
    cache_key = f"reverse:{latitude:.4f},{longitude:.4f}"

    if cache_key in _geocoding_cache:
        return _geocoding_cache[cache_key]

    params = {
        "lat": latitude,
        "lon": longitude,
        "format": "json",
        "zoom": 10,
        "addressdetails": 1,
    }
    headers = {"User-Agent": settings.nominatim_user_agent}

    try:
        await _rate_limit()
        data = await fetch_json(
            f"{settings.nominatim_base_url}/reverse",
            params=params,
            headers=headers,
        )
    except NetworkError as e:
        logger.error(f"Reverse geocoding error: {e}")
        return ReverseGeocodingResponse(
            success=False,
            error_message=(
                f"Geocoding service returned {e.status_code}"
                if e.status_code is not None
                else "Could not connect to the geocoding service."
            ),
        )

    if not isinstance(data, dict):
        data = {}

    result = ReverseGeocodingResponse(success=True, data=parse_location(data))
    _geocoding_cache[cache_key] = result
    logger.debug(
        f"Reverse geocoded ({latitude}, {longitude}) -> {result.data.name}"
    )
    return result


def clear_geocoding_cache() -> None:
    """Clear cached geocoding results."""
    _geocoding_cache.clear()
