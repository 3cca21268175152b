"""Tide service using the Kartverket water level API.

The API has answered in two shapes over time: an XML document with
flagged high/low ``<waterlevel>`` events, and tab separated text with
one continuous reading per line. Both are decoded into a ``TideSeries``.
When neither yields data, a synthetic series keeps the tide column
populated.
"""

import logging
import math
import re
from datetime import datetime, timedelta, timezone

from nofish.config import get_settings
from nofish.models.schemas import (
    TideContinuousSample,
    TideExtremum,
    TideFlag,
    TideSeries,
)
from nofish.services.http import NetworkError, fetch_text

logger = logging.getLogger(__name__)

# Synthetic tide model: principal lunar (M2) and solar (S2) semi-diurnal waves
M2_PERIOD_HOURS = 12.42
S2_PERIOD_HOURS = 12.0
S2_RELATIVE_AMPLITUDE = 0.3
MEAN_HIGH_WATER = 150.0  # cm
MEAN_LOW_WATER = 50.0  # cm

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

_WATERLEVEL_RE = re.compile(r"<waterlevel\b([^>]*?)/?>", re.IGNORECASE)
_LOCATION_RE = re.compile(r"<location\b([^>]*?)/?>", re.IGNORECASE)
_ATTRIBUTE_RE = re.compile(r'(\w+)\s*=\s*"([^"]*)"')


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO timestamp; naive values are taken as UTC."""
    dt = datetime.fromisoformat(value.strip())
    return dt.replace(tzinfo=timezone.utc) if dt.tzinfo is None else dt


def as_utc(dt: datetime) -> datetime:
    """Convert to UTC; naive values are taken as UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def truncate_to_hour(dt: datetime) -> datetime:
    """Return the start of the UTC hour containing ``dt``."""
    return as_utc(dt).replace(minute=0, second=0, microsecond=0)


async def fetch_tide(
    latitude: float,
    longitude: float,
    now: datetime | None = None,
) -> str | None:
    """
    Fetch raw tide data for the configured window starting now.

    Args:
        latitude: Latitude coordinate.
        longitude: Longitude coordinate.
        now: Start of the window (defaults to the current time).

    Returns:
        Raw payload text, or None if the service is unavailable.
    """
    settings = get_settings()
    start = as_utc(now) if now else datetime.now(timezone.utc)
    end = start + timedelta(days=settings.tide_window_days)

    params = {
        "tide_request": "locationdata",
        "lat": f"{latitude:.4f}",
        "lon": f"{longitude:.4f}",
        "datatype": settings.tide_datatype,
        "refcode": settings.tide_refcode,
        "lang": "en",
        "interval": 60,
        "dst": 0,
        "tzone": 0,
        "fromtime": start.strftime("%Y-%m-%dT%H:%M"),
        "totime": end.strftime("%Y-%m-%dT%H:%M"),
    }

    try:
        return await fetch_text(settings.tide_api_url, params=params)
    except NetworkError as e:
        logger.warning(f"Tide API unavailable: {e}")
        return None


def parse_tide_payload(raw: str | None) -> TideSeries:
    """
    Decode a tide payload of either known shape.

    Args:
        raw: Raw payload text (XML events or tab separated readings).

    Returns:
        TideSeries, empty when nothing usable was found.
    """
    if not raw or not raw.strip():
        return TideSeries()
    if raw.lstrip().startswith("<"):
        return parse_tide_events(raw)
    return TideSeries(samples=parse_tab_separated(raw))


def parse_tab_separated(raw: str) -> list[TideContinuousSample]:
    """
    Parse tab separated ``timestamp<TAB>height`` lines.

    Comment lines (``#``), blank lines and lines that fail to parse are
    skipped.
    """
    samples: list[TideContinuousSample] = []
    for line in raw.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        fields = line.split("\t")
        if len(fields) < 2:
            continue
        try:
            value = float(fields[1])
            time = parse_timestamp(fields[0])
        except ValueError:
            logger.debug(f"Skipping tide line: {line!r}")
            continue
        if math.isnan(value):
            continue
        samples.append(TideContinuousSample(time=time, value=value))
    return samples


def parse_tide_events(raw: str) -> TideSeries:
    """
    Extract ``<waterlevel>`` entries from an XML tide document.

    Entries flagged ``high``/``low`` become extrema. Kartverket lists
    entries chronologically, so for a well-formed document the result
    matches document order; both lists are sorted by time so an
    out-of-order document still yields an ordered series. Unflagged
    entries are kept as continuous samples. Malformed entries are skipped.
    """
    extrema: list[TideExtremum] = []
    samples: list[TideContinuousSample] = []

    for match in _WATERLEVEL_RE.finditer(raw):
        attrs = dict(_ATTRIBUTE_RE.findall(match.group(1)))
        try:
            value = float(attrs["value"])
            time = parse_timestamp(attrs["time"])
        except (KeyError, ValueError):
            continue

        flag = attrs.get("flag", "").lower()
        if flag in (TideFlag.HIGH.value, TideFlag.LOW.value):
            extrema.append(TideExtremum(time=time, value=value, flag=TideFlag(flag)))
        elif not flag:
            samples.append(TideContinuousSample(time=time, value=value))

    extrema.sort(key=lambda e: e.time)
    samples.sort(key=lambda s: s.time)

    station_name = None
    location = _LOCATION_RE.search(raw)
    if location:
        station_name = dict(_ATTRIBUTE_RE.findall(location.group(1))).get("name")

    return TideSeries(extrema=extrema, samples=samples, station_name=station_name)


def synthesize_tide(
    latitude: float,
    longitude: float,
    from_time: datetime,
    to_time: datetime,
) -> list[TideContinuousSample]:
    """
    Generate hourly synthetic tide heights between two times.

    Sum of an M2 wave (12.42h) and an S2 wave (12h, 30% amplitude) around
    the mean of MEAN_HIGH_WATER and MEAN_LOW_WATER. Deterministic for
    identical arguments.

    Args:
        latitude: Latitude coordinate.
        longitude: Longitude coordinate.
        from_time: Window start (truncated to the hour).
        to_time: Window end (inclusive).

    Returns:
        One TideContinuousSample per hour, heights rounded to 0.1 cm.
    """
    mean_level = (MEAN_HIGH_WATER + MEAN_LOW_WATER) / 2
    amplitude = (MEAN_HIGH_WATER - MEAN_LOW_WATER) / 2
    # Location dependent phase so neighbouring coasts differ
    phase = math.radians(longitude) + math.radians(latitude) / 2

    samples: list[TideContinuousSample] = []
    current = truncate_to_hour(from_time)
    end = as_utc(to_time)
    while current <= end:
        hours = (current - _EPOCH).total_seconds() / 3600
        primary = amplitude * math.cos(2 * math.pi * hours / M2_PERIOD_HOURS + phase)
        secondary = (
            S2_RELATIVE_AMPLITUDE
            * amplitude
            * math.cos(2 * math.pi * hours / S2_PERIOD_HOURS + phase)
        )
        samples.append(
            TideContinuousSample(
                time=current,
                value=round(mean_level + primary + secondary, 1),
            )
        )
        current += timedelta(hours=1)
    return samples
