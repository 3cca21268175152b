"""Pytest configuration and fixtures for NoFish tests."""

from datetime import datetime, timezone
from typing import Generator

import pytest
from fastapi.testclient import TestClient

from nofish.main import app
from nofish.models.schemas import (
    AtmosphericSample,
    OceanSample,
    PeriodSummary,
    TideExtremum,
    TideFlag,
)
from nofish.routes.forecast import limiter
from nofish.services.geocoding import clear_geocoding_cache
from nofish.services.lookups import clear_lookup_store


def utc(*args: int) -> datetime:
    """Build a UTC datetime."""
    return datetime(*args, tzinfo=timezone.utc)


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    """Create test client for FastAPI app."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture(autouse=True)
def reset_state() -> Generator[None, None, None]:
    """Reset rate limits, caches and stores between tests."""
    limiter.reset()
    clear_geocoding_cache()
    clear_lookup_store()
    yield
    clear_lookup_store()


@pytest.fixture
def sample_locationforecast_response() -> dict:
    """Sample MET.no Locationforecast 2.0 compact response."""
    return {
        "type": "Feature",
        "geometry": {"type": "Point", "coordinates": [5.3242, 60.3913, 12]},
        "properties": {
            "meta": {
                "updated_at": "2024-06-01T10:41:09Z",
                "units": {"air_temperature": "celsius"},
            },
            "timeseries": [
                {
                    "time": "2024-06-01T12:00:00Z",
                    "data": {
                        "instant": {
                            "details": {
                                "air_pressure_at_sea_level": 1013.2,
                                "air_temperature": 14.2,
                                "cloud_area_fraction": 35.2,
                                "relative_humidity": 71.3,
                                "wind_from_direction": 205.4,
                                "wind_speed": 4.1,
                            }
                        },
                        "next_1_hours": {
                            "summary": {"symbol_code": "partlycloudy_day"},
                            "details": {"precipitation_amount": 0.0},
                        },
                        "next_6_hours": {
                            "summary": {"symbol_code": "rain"},
                            "details": {"precipitation_amount": 2.4},
                        },
                    },
                },
                {
                    "time": "2024-06-01T13:00:00Z",
                    "data": {
                        "instant": {
                            "details": {
                                "air_pressure_at_sea_level": 1012.8,
                                "air_temperature": 14.8,
                                "cloud_area_fraction": 60.0,
                                "relative_humidity": 69.0,
                                "wind_from_direction": 210.0,
                                "wind_speed": 4.6,
                            }
                        },
                        "next_6_hours": {
                            "summary": {"symbol_code": "lightrain"},
                            "details": {"precipitation_amount": 1.1},
                        },
                    },
                },
                {
                    "time": "2024-06-01T18:00:00Z",
                    "data": {
                        "instant": {
                            "details": {
                                "air_temperature": 12.9,
                                "wind_speed": 3.2,
                            }
                        },
                    },
                },
            ],
        },
    }


@pytest.fixture
def sample_oceanforecast_response() -> dict:
    """Sample MET.no Oceanforecast 2.0 response."""
    return {
        "type": "Feature",
        "properties": {
            "meta": {"updated_at": "2024-06-01T09:00:00Z", "units": {}},
            "timeseries": [
                {
                    "time": "2024-06-01T12:00:00Z",
                    "data": {
                        "instant": {
                            "details": {
                                "sea_surface_wave_from_direction": 250.1,
                                "sea_surface_wave_height": 1.2,
                                "sea_water_speed": 0.3,
                                "sea_water_temperature": 11.4,
                                "sea_water_to_direction": 15.0,
                            }
                        }
                    },
                },
                {
                    "time": "2024-06-01T13:00:00Z",
                    "data": {
                        "instant": {
                            "details": {
                                "sea_surface_wave_from_direction": 252.0,
                                "sea_surface_wave_height": 1.3,
                                "sea_water_speed": 0.2,
                                "sea_water_temperature": 11.5,
                                "sea_water_to_direction": 20.0,
                            }
                        }
                    },
                },
            ],
        },
    }


@pytest.fixture
def sample_tide_xml() -> str:
    """Sample Kartverket XML payload with high/low events."""
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        "<tide>\n"
        "  <locationdata>\n"
        '    <location name="BERGEN" code="BGO" latitude="60.398046" longitude="5.320487"/>\n'
        '    <reflevelcode>CD</reflevelcode>\n'
        '    <data type="prediction" unit="cm">\n'
        '      <waterlevel value="140.0" time="2024-06-01T09:00:00+00:00" flag="high"/>\n'
        '      <waterlevel value="60.0" time="2024-06-01T15:24:00+00:00" flag="low"/>\n'
        '      <waterlevel value="151.3" time="2024-06-01T21:37:00+00:00" flag="high"/>\n'
        "    </data>\n"
        "  </locationdata>\n"
        "</tide>\n"
    )


@pytest.fixture
def sample_tide_tab() -> str:
    """Sample tab separated tide payload."""
    return (
        "# Kartverket water level predictions\n"
        "# time\tvalue (cm)\n"
        "2024-06-01T12:00:00+00:00\t112.4\n"
        "2024-06-01T13:00:00+00:00\t98.1\n"
        "\n"
        "2024-06-01T14:00:00+00:00\t80.6\n"
    )


@pytest.fixture
def falling_leg() -> list[TideExtremum]:
    """High at 09:00 followed by a low at 15:24."""
    return [
        TideExtremum(time=utc(2024, 6, 1, 9, 0), value=140.0, flag=TideFlag.HIGH),
        TideExtremum(time=utc(2024, 6, 1, 15, 24), value=60.0, flag=TideFlag.LOW),
    ]


@pytest.fixture
def atmospheric_samples() -> list[AtmosphericSample]:
    """Two hourly atmospheric samples."""
    return [
        AtmosphericSample(
            time="2024-06-01T12:00:00Z",
            air_temperature=14.2,
            wind_speed=4.1,
            wind_from_direction=205.4,
            relative_humidity=71.3,
            cloud_area_fraction=35.2,
            air_pressure_at_sea_level=1013.2,
            next_1_hours=PeriodSummary(
                symbol_code="partlycloudy_day", precipitation_amount=0.0
            ),
            next_6_hours=PeriodSummary(symbol_code="rain", precipitation_amount=2.4),
        ),
        AtmosphericSample(
            time="2024-06-01T13:00:00Z",
            air_temperature=14.8,
            next_6_hours=PeriodSummary(symbol_code="lightrain", precipitation_amount=1.1),
        ),
    ]


@pytest.fixture
def ocean_samples() -> list[OceanSample]:
    """Ocean sample matching the first atmospheric hour only."""
    return [
        OceanSample(
            time="2024-06-01T12:00:00Z",
            wave_height=1.2,
            wave_from_direction=250.1,
            sea_water_temperature=11.4,
            sea_water_speed=0.3,
            sea_water_to_direction=15.0,
        )
    ]
