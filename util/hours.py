"""
Opening-hours evaluation.

Providers report hours as local wall-clock ranges ("05:00 - 23:00") with no
UTC offset, so the location's physical timezone is resolved from its
coordinates and "now" is evaluated in that zone.
"""

import logging
import re
from datetime import datetime, time, timedelta
from typing import NamedTuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from timezonefinder import TimezoneFinder

logger = logging.getLogger(__name__)

HOURS_DELIMITER = " - "

_HHMM = re.compile(r"^(\d{1,2}):(\d{2})$")

_finder = None


class InvalidHoursError(ValueError):
    """Raised when an opening-hours string is not in "HH:MM - HH:MM" form."""


class TimezoneResolutionError(Exception):
    """Raised when a coordinate or zone name does not map to a loadable timezone."""


class OpenStatus(NamedTuple):
    """Open/closed status plus the bounds of today's window (None when open 24 hours)."""

    is_open: bool
    open_time: datetime | None = None
    close_time: datetime | None = None


def get_timezone_finder() -> TimezoneFinder:
    """Get the timezone finder (lazy initialization, reused across Lambda invocations)."""
    global _finder
    if _finder is None:
        _finder = TimezoneFinder()
    return _finder


def _clear_finder():
    """Clear the cached finder (for testing only)."""
    global _finder
    _finder = None


def lookup_timezone(lat: float, lng: float) -> str:
    """
    Resolve the IANA timezone name for a coordinate.

    Args:
        lat: Latitude in decimal degrees.
        lng: Longitude in decimal degrees.

    Returns:
        Timezone name, e.g. "America/New_York".

    Raises:
        TimezoneResolutionError: If no timezone covers the coordinate.
    """
    try:
        name = get_timezone_finder().timezone_at(lng=lng, lat=lat)
    except ValueError as e:
        raise TimezoneResolutionError(f"Invalid coordinate ({lat}, {lng}): {e}") from e

    if not name:
        raise TimezoneResolutionError(f"No timezone found for ({lat}, {lng})")

    logger.debug("Resolved (%s, %s) to %s", lat, lng, name)
    return name


def load_timezone(timezone_id: str) -> ZoneInfo:
    try:
        return ZoneInfo(timezone_id)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise TimezoneResolutionError(f"Unknown timezone '{timezone_id}'") from e


def parse_clock_time(value: str) -> time:
    """Parse a 24-hour "HH:MM" string."""
    match = _HHMM.match(value.strip())
    if not match:
        raise InvalidHoursError(f"Invalid time '{value}', expected HH:MM")

    try:
        return time(int(match.group(1)), int(match.group(2)))
    except ValueError as e:
        raise InvalidHoursError(f"Invalid time '{value}': {e}") from e


def parse_hours_range(hours_text: str) -> tuple[time, time]:
    """
    Split an opening-hours string into its open and close times.

    Args:
        hours_text: Two HH:MM times joined by " - ", e.g. "05:00 - 23:00".

    Returns:
        (open_time, close_time) as naive clock times.

    Raises:
        InvalidHoursError: If the string is not in the expected form.
    """
    if not isinstance(hours_text, str):
        raise InvalidHoursError(f"Hours must be a string, got {type(hours_text).__name__}")

    parts = hours_text.split(HOURS_DELIMITER)
    if len(parts) != 2:
        raise InvalidHoursError(f"Invalid hours range '{hours_text}'")

    return parse_clock_time(parts[0]), parse_clock_time(parts[1])


def resolve_open_status(hours_text: str, timezone_id: str, now_utc: datetime) -> OpenStatus:
    """
    Work out whether a location is open right now.

    Both times are anchored to the current local date in ``timezone_id``.
    Equal times mean the location never closes. A close hour earlier than
    the open hour means the window runs past midnight, in which case the
    close instant lands on the following day. If local "now" is still
    inside last night's overnight window, that window is used instead.

    Args:
        hours_text: Local hours, e.g. "05:00 - 23:00" or "20:00 - 04:00".
        timezone_id: IANA timezone of the location.
        now_utc: Timezone-aware current instant.

    Returns:
        OpenStatus with is_open and, for bounded schedules, the window instants.

    Raises:
        InvalidHoursError: If ``hours_text`` cannot be parsed.
        TimezoneResolutionError: If ``timezone_id`` cannot be loaded.
    """
    open_clock, close_clock = parse_hours_range(hours_text)
    return resolve_window(open_clock, close_clock, timezone_id, now_utc)


def resolve_window(open_clock: time, close_clock: time, timezone_id: str, now_utc: datetime) -> OpenStatus:
    """Evaluate already-parsed open/close clock times; see resolve_open_status."""
    if now_utc.tzinfo is None:
        raise ValueError("now_utc must be timezone-aware")

    if open_clock == close_clock:
        return OpenStatus(is_open=True)

    tz = load_timezone(timezone_id)
    now_local = now_utc.astimezone(tz)
    today = now_local.date()

    open_at = datetime.combine(today, open_clock, tzinfo=tz)
    close_at = datetime.combine(today, close_clock, tzinfo=tz)

    if close_clock.hour < open_clock.hour:
        close_at += timedelta(days=1)
        # Still inside the window that opened yesterday
        if now_local < close_at - timedelta(days=1):
            open_at -= timedelta(days=1)
            close_at -= timedelta(days=1)

    return OpenStatus(
        is_open=open_at < now_local < close_at,
        open_time=open_at,
        close_time=close_at,
    )
