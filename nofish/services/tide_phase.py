"""Tide phase labels derived from high/low water events."""

import math
from datetime import datetime

from nofish.models.schemas import TideExtremum, TideFlag
from nofish.services.tides import as_utc, truncate_to_hour

NO_TIDE_DATA = "—"
RISING = "Rising"
FALLING = "Falling"

# Hours either side of an extremum that get an offset label (Hi+1, Lo-2, ...)
OFFSET_WINDOW_HOURS = 2


def find_neighbours(
    hour: datetime,
    extrema: list[TideExtremum],
) -> tuple[TideExtremum | None, TideExtremum | None]:
    """
    Return the latest extremum before ``hour`` and the first at or after it.

    Args:
        hour: Hour being labelled (already truncated).
        extrema: Events ordered by time ascending.
    """
    previous: TideExtremum | None = None
    for extremum in extrema:
        if as_utc(extremum.time) < hour:
            previous = extremum
        else:
            return previous, extremum
    return previous, None


def calculate_tide_phase(target: datetime, extrema: list[TideExtremum]) -> str:
    """
    Derive a tide phase label for the hour containing ``target``.

    Labels are ``"Hi (HH:MM)"``/``"Lo (HH:MM)"`` on the hour of an event,
    ``Hi+1``, ``Hi+2``, ``Lo-2``, ``Lo-1`` (and the mirrored forms) within
    two hours of an event, and ``Rising``/``Falling`` in between.

    Args:
        target: Time to label; truncated to the hour.
        extrema: High/low events ordered by time ascending.

    Returns:
        Phase label, or NO_TIDE_DATA when no events are known.
    """
    if not extrema:
        return NO_TIDE_DATA

    hour = truncate_to_hour(target)
    previous, upcoming = find_neighbours(hour, extrema)

    if upcoming is not None and truncate_to_hour(upcoming.time) == hour:
        return exact_label(upcoming)

    if previous is None:
        until = _whole_hours(hour, truncate_to_hour(upcoming.time))
        if until <= OFFSET_WINDOW_HOURS:
            return _offset_label(upcoming.flag, -until)
        return _direction_towards(upcoming.flag)

    since = _whole_hours(truncate_to_hour(previous.time), hour)

    if upcoming is None:
        if since <= OFFSET_WINDOW_HOURS:
            return _offset_label(previous.flag, since)
        return _direction_away_from(previous.flag)

    until = _whole_hours(hour, truncate_to_hour(upcoming.time))

    # Short legs can put both events in range; the nearer one wins
    if until < since and until <= OFFSET_WINDOW_HOURS:
        return _offset_label(upcoming.flag, -until)
    if since <= OFFSET_WINDOW_HOURS:
        return _offset_label(previous.flag, since)
    if until <= OFFSET_WINDOW_HOURS:
        return _offset_label(upcoming.flag, -until)
    return _direction_towards(upcoming.flag)


def interpolate_tide_height(
    target: datetime,
    extrema: list[TideExtremum],
) -> float | None:
    """
    Estimate the water level for the hour containing ``target``.

    Uses a half-cosine curve between the neighbouring events. Returns the
    event's own level on an event hour and None outside the known range.
    """
    if not extrema:
        return None

    hour = truncate_to_hour(target)
    previous, upcoming = find_neighbours(hour, extrema)

    if upcoming is not None and truncate_to_hour(upcoming.time) == hour:
        return upcoming.value
    if previous is None or upcoming is None:
        return None

    start = as_utc(previous.time)
    span = (as_utc(upcoming.time) - start).total_seconds()
    if span <= 0:
        return None
    fraction = min(1.0, max(0.0, (hour - start).total_seconds() / span))
    weight = (1 - math.cos(math.pi * fraction)) / 2
    return round(previous.value + (upcoming.value - previous.value) * weight, 1)


def exact_label(extremum: TideExtremum) -> str:
    """Label for the hour containing an event, using its own clock time."""
    prefix = "Hi" if extremum.flag == TideFlag.HIGH else "Lo"
    return f"{prefix} ({extremum.time.strftime('%H:%M')})"


def _offset_label(flag: TideFlag, offset: int) -> str:
    prefix = "Hi" if flag == TideFlag.HIGH else "Lo"
    return f"{prefix}{offset:+d}"


def _direction_towards(flag: TideFlag) -> str:
    return RISING if flag == TideFlag.HIGH else FALLING


def _direction_away_from(flag: TideFlag) -> str:
    return FALLING if flag == TideFlag.HIGH else RISING


def _whole_hours(start: datetime, end: datetime) -> int:
    return round((end - start).total_seconds() / 3600)
