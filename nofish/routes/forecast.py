"""Forecast, validation, geocoding and lookup audit endpoints."""

import logging

from fastapi import APIRouter, BackgroundTasks, Query, Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.util import get_remote_address

from nofish.config import get_settings
from nofish.models.schemas import (
    LocationValidation,
    LogApiResponse,
    LookupRecord,
    LookupRequest,
    WeatherApiResponse,
)
from nofish.services.fusion import get_combined_forecast
from nofish.services.geocoding import reverse_geocode
from nofish.services.lookups import record_lookup
from nofish.services.weather import UpstreamError, validate_location

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")

# Rate limiter per client address, limit taken from settings
limiter = Limiter(key_func=get_remote_address)


def _rate_limit() -> str:
    return get_settings().rate_limit


def parse_coordinates(
    lat: str | None,
    lon: str | None,
) -> tuple[float, float] | JSONResponse:
    """
    Parse query string coordinates.

    Returns:
        (latitude, longitude), or a 400 JSONResponse describing the problem.
    """
    if not lat or not lon:
        return JSONResponse(
            status_code=400,
            content={"success": False, "error": "Missing required parameters: lat and lon"},
        )
    try:
        latitude = float(lat)
        longitude = float(lon)
    except ValueError:
        return JSONResponse(
            status_code=400,
            content={"success": False, "error": "Invalid coordinates"},
        )
    if not (-90 <= latitude <= 90 and -180 <= longitude <= 180):
        return JSONResponse(
            status_code=400,
            content={"success": False, "error": "Invalid coordinates"},
        )
    return latitude, longitude


@router.get("/weather", response_model=WeatherApiResponse)
@limiter.limit(_rate_limit)
async def combined_forecast(
    request: Request,
    lat: str | None = Query(default=None),
    lon: str | None = Query(default=None),
):
    """
    Return the fused hourly forecast for a coordinate.

    Responds 400 for missing/invalid coordinates and 502 when the
    atmospheric source fails.
    """
    coordinates = parse_coordinates(lat, lon)
    if isinstance(coordinates, JSONResponse):
        return coordinates
    latitude, longitude = coordinates

    try:
        result = await get_combined_forecast(latitude, longitude)
    except UpstreamError as e:
        logger.error(f"Weather API error: {e}")
        return JSONResponse(
            status_code=502,
            content=WeatherApiResponse(success=False, error=str(e)).model_dump(
                by_alias=True
            ),
        )

    return WeatherApiResponse(
        success=True,
        data=result.forecasts,
        metadata=result.metadata,
    )


@router.get("/validate", response_model=LocationValidation)
@limiter.limit(_rate_limit)
async def validate(
    request: Request,
    lat: str | None = Query(default=None),
    lon: str | None = Query(default=None),
):
    """Check whether weather forecasts are available for a coordinate."""
    coordinates = parse_coordinates(lat, lon)
    if isinstance(coordinates, JSONResponse):
        return coordinates
    return await validate_location(*coordinates)


@router.get("/geocoding")
@limiter.limit(_rate_limit)
async def geocoding(
    request: Request,
    lat: str | None = Query(default=None),
    lon: str | None = Query(default=None),
):
    """Return a best-effort place name for a coordinate."""
    coordinates = parse_coordinates(lat, lon)
    if isinstance(coordinates, JSONResponse):
        return coordinates

    result = await reverse_geocode(*coordinates)
    if not result.success:
        return JSONResponse(
            status_code=502,
            content={"success": False, "error": result.error_message},
        )
    return {"success": True, "data": result.data.model_dump(by_alias=True)}


@router.post("/log", response_model=LogApiResponse)
@limiter.limit(_rate_limit)
async def log_lookup(
    request: Request,
    lookup: LookupRequest,
    background_tasks: BackgroundTasks,
) -> LogApiResponse:
    """
    Record a coordinate lookup.

    The write happens after the response is sent; storage failures are
    logged and never reach the caller.
    """
    forwarded = request.headers.get("x-forwarded-for")
    ip_address = (
        forwarded.split(",")[0].strip()
        if forwarded
        else request.headers.get("x-real-ip")
    )

    record = LookupRecord(
        lat=lookup.lat,
        lon=lookup.lon,
        location_name=lookup.location_name,
        municipality=lookup.municipality,
        county=lookup.county,
        ip_address=ip_address,
        user_agent=request.headers.get("user-agent"),
    )
    background_tasks.add_task(record_lookup, record)
    return LogApiResponse(success=True)
