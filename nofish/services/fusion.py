"""Combined hourly forecast built from atmospheric, ocean and tide sources."""

import asyncio
import time
from datetime import datetime, timedelta, timezone

from nofish.config import get_settings
from nofish.logging_config import get_logger
from nofish.models.schemas import (
    AtmosphericSample,
    CombinedForecast,
    ForecastMetadata,
    HourlyForecast,
    OceanSample,
    TideDataSource,
    TideSeries,
)
from nofish.services.ocean import fetch_ocean
from nofish.services.tide_phase import calculate_tide_phase, interpolate_tide_height
from nofish.services.tides import (
    fetch_tide,
    parse_tide_payload,
    parse_timestamp,
    synthesize_tide,
    truncate_to_hour,
)
from nofish.services.weather import fetch_atmospheric

SAMPLE_TIDE_MESSAGE = (
    "Real tide data is temporarily unavailable for this location. "
    "Showing simulated tide data."
)


def combine(
    atmospheric: list[AtmosphericSample],
    ocean: list[OceanSample] | None,
    tide: TideSeries | None,
) -> list[HourlyForecast]:
    """
    Merge the three sources into one record per atmospheric sample.

    The atmospheric series defines the rows; ocean and tide data only fill
    optional fields. Ocean samples are joined on the exact timestamp
    string, falling back to a sample in the same hour. With tide extrema
    each row gets a phase label. Heights come from a continuous sample in
    the row's hour when one exists, otherwise from interpolation between
    the neighbouring extrema.

    Args:
        atmospheric: Atmospheric samples ordered by time.
        ocean: Ocean samples, or None when unavailable.
        tide: Decoded tide series, or None when unavailable.

    Returns:
        HourlyForecast list in the same order as ``atmospheric``.
    """
    ocean_by_time: dict[str, OceanSample] = {}
    ocean_by_hour: dict[datetime, OceanSample] = {}
    for sample in ocean or []:
        ocean_by_time[sample.time] = sample
        hour = _hour_key(sample.time)
        if hour is not None:
            ocean_by_hour.setdefault(hour, sample)

    extrema = tide.extrema if tide else []
    tide_by_hour: dict[datetime, float] = {}
    if tide:
        for reading in tide.samples:
            tide_by_hour.setdefault(truncate_to_hour(reading.time), reading.value)

    forecasts: list[HourlyForecast] = []
    for sample in atmospheric:
        period = sample.next_1_hours or sample.next_6_hours
        fields = {
            "time": sample.time,
            "temperature": sample.air_temperature,
            "wind_speed": sample.wind_speed,
            "wind_direction": sample.wind_from_direction,
            "humidity": sample.relative_humidity,
            "cloud_cover": sample.cloud_area_fraction,
            "pressure": sample.air_pressure_at_sea_level,
            "precipitation": period.precipitation_amount if period else None,
            "symbol_code": period.symbol_code if period else None,
        }

        hour = _hour_key(sample.time)
        ocean_sample = ocean_by_time.get(sample.time)
        if ocean_sample is None and hour is not None:
            ocean_sample = ocean_by_hour.get(hour)
        if ocean_sample is not None:
            fields["wave_height"] = ocean_sample.wave_height
            fields["wave_direction"] = ocean_sample.wave_from_direction
            fields["sea_temperature"] = ocean_sample.sea_water_temperature
            fields["current_speed"] = ocean_sample.sea_water_speed
            fields["current_direction"] = ocean_sample.sea_water_to_direction

        if hour is not None:
            # Measured readings take precedence over the interpolated curve
            height = tide_by_hour.get(hour)
            if extrema:
                fields["tide_phase"] = calculate_tide_phase(hour, extrema)
                if height is None:
                    height = interpolate_tide_height(hour, extrema)
            fields["tide_height"] = height

        forecasts.append(HourlyForecast(**fields))

    return forecasts


async def get_combined_forecast(
    latitude: float,
    longitude: float,
    now: datetime | None = None,
) -> CombinedForecast:
    """
    Fetch all sources concurrently and fuse them into an hourly forecast.

    Ocean and tide failures degrade the result; a synthetic tide series
    replaces missing tide data and the metadata discloses it.

    Args:
        latitude: Latitude coordinate.
        longitude: Longitude coordinate.
        now: Reference time for the tide window (defaults to now).

    Returns:
        CombinedForecast with ordered rows and tide provenance.

    Raises:
        UpstreamError: If the atmospheric source fails.
    """
    log = get_logger(__name__, latitude=latitude, longitude=longitude)
    started = time.perf_counter()
    now = now or datetime.now(timezone.utc)

    atmospheric, ocean, raw_tide = await asyncio.gather(
        fetch_atmospheric(latitude, longitude),
        fetch_ocean(latitude, longitude),
        fetch_tide(latitude, longitude, now=now),
        return_exceptions=True,
    )

    if isinstance(atmospheric, BaseException):
        raise atmospheric
    if isinstance(ocean, BaseException):
        log.warning(f"Ocean fetch failed: {ocean!r}")
        ocean = None
    if isinstance(raw_tide, BaseException):
        log.warning(f"Tide fetch failed: {raw_tide!r}")
        raw_tide = None

    tide = parse_tide_payload(raw_tide)
    if tide.has_data:
        metadata = ForecastMetadata(
            tide_data_source=TideDataSource.REAL,
            tide_station_name=tide.station_name,
        )
    else:
        log.warning("No usable tide data, using synthetic tide")
        start, end = _tide_window(atmospheric, now)
        tide = TideSeries(samples=synthesize_tide(latitude, longitude, start, end))
        metadata = ForecastMetadata(
            tide_data_source=TideDataSource.SAMPLE,
            tide_data_message=SAMPLE_TIDE_MESSAGE,
        )

    forecasts = combine(atmospheric, ocean, tide)
    log.info(
        f"Combined forecast built: {len(forecasts)} hours, "
        f"ocean={'yes' if ocean else 'no'}, tide={metadata.tide_data_source.value}",
        extra={"duration_ms": round((time.perf_counter() - started) * 1000, 1)},
    )
    return CombinedForecast(forecasts=forecasts, metadata=metadata)


def _tide_window(
    atmospheric: list[AtmosphericSample],
    now: datetime,
) -> tuple[datetime, datetime]:
    times = [t for t in (_parse_or_none(s.time) for s in atmospheric) if t is not None]
    if times:
        return min(times), max(times)
    return now, now + timedelta(days=get_settings().tide_window_days)


def _parse_or_none(value: str) -> datetime | None:
    try:
        return parse_timestamp(value)
    except ValueError:
        return None


def _hour_key(value: str) -> datetime | None:
    parsed = _parse_or_none(value)
    return truncate_to_hour(parsed) if parsed is not None else None
