"""Pydantic models for forecast data and API responses."""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class PeriodSummary(BaseModel):
    """Precipitation and weather symbol for a forecast period (next 1h/6h)."""

    symbol_code: Optional[str] = None
    precipitation_amount: Optional[float] = None


class AtmosphericSample(BaseModel):
    """One timestamped record from the atmospheric forecast."""

    time: str
    air_temperature: Optional[float] = None
    wind_speed: Optional[float] = None
    wind_from_direction: Optional[float] = None
    relative_humidity: Optional[float] = None
    cloud_area_fraction: Optional[float] = None
    air_pressure_at_sea_level: Optional[float] = None
    next_1_hours: Optional[PeriodSummary] = None
    next_6_hours: Optional[PeriodSummary] = None


class OceanSample(BaseModel):
    """One timestamped record from the ocean forecast."""

    time: str
    wave_height: Optional[float] = None
    wave_from_direction: Optional[float] = None
    sea_water_temperature: Optional[float] = None
    sea_water_speed: Optional[float] = None
    sea_water_to_direction: Optional[float] = None


class TideFlag(str, Enum):
    """High or low water event."""

    HIGH = "high"
    LOW = "low"


class TideExtremum(BaseModel):
    """A single high or low tide event."""

    time: datetime
    value: float  # Water level in cm
    flag: TideFlag


class TideContinuousSample(BaseModel):
    """Instantaneous water level without a high/low flag."""

    time: datetime
    value: float  # Water level in cm


class TideSeries(BaseModel):
    """Decoded tide payload: extrema and/or continuous samples."""

    extrema: list[TideExtremum] = []
    samples: list[TideContinuousSample] = []
    station_name: Optional[str] = None

    @property
    def has_data(self) -> bool:
        """Check if at least one usable data point was decoded."""
        return bool(self.extrema or self.samples)


class HourlyForecast(BaseModel):
    """Merged weather, ocean and tide conditions for a single hour."""

    time: str
    temperature: Optional[float] = None
    wind_speed: Optional[float] = Field(default=None, alias="windSpeed")
    wind_direction: Optional[float] = Field(default=None, alias="windDirection")
    precipitation: Optional[float] = None
    humidity: Optional[float] = None
    cloud_cover: Optional[float] = Field(default=None, alias="cloudCover")
    pressure: Optional[float] = None
    symbol_code: Optional[str] = Field(default=None, alias="symbolCode")
    wave_height: Optional[float] = Field(default=None, alias="waveHeight")
    wave_direction: Optional[float] = Field(default=None, alias="waveDirection")
    sea_temperature: Optional[float] = Field(default=None, alias="seaTemperature")
    current_speed: Optional[float] = Field(default=None, alias="currentSpeed")
    current_direction: Optional[float] = Field(default=None, alias="currentDirection")
    tide_height: Optional[float] = Field(default=None, alias="tideHeight")
    # e.g. "Hi (13:18)", "Hi+1", "Falling", "Lo-2"
    tide_phase: Optional[str] = Field(default=None, alias="tidePhase")

    class Config:
        populate_by_name = True


class TideDataSource(str, Enum):
    """Provenance of the tide values in a combined forecast."""

    REAL = "real"
    SAMPLE = "sample"


class ForecastMetadata(BaseModel):
    """Provenance information attached to a combined forecast."""

    tide_data_source: TideDataSource = Field(alias="tideDataSource")
    tide_data_message: Optional[str] = Field(default=None, alias="tideDataMessage")
    tide_station_name: Optional[str] = Field(default=None, alias="tideStationName")

    class Config:
        populate_by_name = True


class CombinedForecast(BaseModel):
    """Ordered hourly forecasts plus provenance metadata."""

    forecasts: list[HourlyForecast]
    metadata: ForecastMetadata


class WeatherApiResponse(BaseModel):
    """Model for the combined forecast endpoint response."""

    success: bool
    data: Optional[list[HourlyForecast]] = None
    metadata: Optional[ForecastMetadata] = None
    error: Optional[str] = None


class LocationValidation(BaseModel):
    """Result of the atmospheric coverage probe."""

    available: bool
    error: Optional[str] = None


class LocationInfo(BaseModel):
    """Best-effort place description for a coordinate."""

    name: str
    municipality: str
    county: str = ""
    country: str = ""
    display_name: str = Field(default="", alias="displayName")

    class Config:
        populate_by_name = True


class ReverseGeocodingResponse(BaseModel):
    """Model for reverse geocoding results."""

    success: bool
    data: Optional[LocationInfo] = None
    error_message: Optional[str] = None


class LookupRequest(BaseModel):
    """Model for an incoming lookup audit request."""

    lat: float
    lon: float
    location_name: Optional[str] = Field(default=None, alias="locationName")
    municipality: Optional[str] = None
    county: Optional[str] = None

    class Config:
        populate_by_name = True


class LookupRecord(BaseModel):
    """Audit record of a coordinate lookup."""

    lat: float
    lon: float
    location_name: Optional[str] = None
    municipality: Optional[str] = None
    county: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class LogApiResponse(BaseModel):
    """Model for the lookup audit endpoint response."""

    success: bool
    error: Optional[str] = None
