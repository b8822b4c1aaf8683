"""McDonald's restaurant locator provider."""

import logging
import os
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

import requests

from util.geo import distance_miles, miles_to_km, round_distance
from util.hours import (
    InvalidHoursError,
    OpenStatus,
    TimezoneResolutionError,
    lookup_timezone,
    parse_hours_range,
    resolve_window,
)
from util.models import Location
from util.providers.base import (
    PROVIDER_TIMEOUT_SECONDS,
    LocationProvider,
    UpstreamParseError,
    UpstreamTransportError,
    title_case,
)

logger = logging.getLogger(__name__)

TYPE_MCDONALDS = "mcdonalds"

MCDONALDS_API_URL = os.environ.get(
    "MCDONALDS_API_URL",
    "https://www.mcdonalds.com/googleapps/GoogleRestaurantLocAction.do",
)

URL_TEMPLATE = (
    "{base_url}?method=searchLocation"
    "&latitude={lat}&longitude={lng}&radius={radius_km}&maxResults={max_results}"
    "&country=us&language=en-us"
)

DRIVE_THRU_FILTER = "DRIVETHRU"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class McDonaldsProvider(LocationProvider):
    """
    Drive-thru locations from the McDonald's store locator.

    The locator returns a GeoJSON-style feature collection. Each feature has
    ``properties.filterType`` (facility tags), ``geometry.coordinates`` as
    [lng, lat], ``properties.addressLine1`` and ``properties.driveTodayHours``
    in local time. Features without the DRIVETHRU tag are dropped.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        """
        Initialize the McDonald's provider.

        Args:
            base_url: Locator endpoint. Defaults to MCDONALDS_API_URL env var.
            timeout: Upstream timeout in seconds. Defaults to PROVIDER_TIMEOUT_SECONDS.
            clock: Returns the current aware UTC instant (injectable for testing).
        """
        self._base_url = base_url or MCDONALDS_API_URL
        self._timeout = timeout if timeout is not None else PROVIDER_TIMEOUT_SECONDS
        self._clock = clock or _utc_now

    @property
    def provider_type(self) -> str:
        return TYPE_MCDONALDS

    def build_url(self, lat: float, lng: float, radius_miles: float, max_results: int) -> str:
        """Fill the locator URL template; the upstream radius is in kilometers."""
        return URL_TEMPLATE.format(
            base_url=self._base_url,
            lat=lat,
            lng=lng,
            radius_km=miles_to_km(radius_miles),
            max_results=max_results,
        )

    def get_locations(
        self,
        lat: float,
        lng: float,
        radius_miles: float,
        max_results: int,
    ) -> list[Location]:
        url = self.build_url(lat, lng, radius_miles, max_results)
        logger.info("Querying %s within %.2f mi of (%s, %s)", TYPE_MCDONALDS, radius_miles, lat, lng)

        try:
            response = requests.get(url, timeout=self._timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise UpstreamTransportError(TYPE_MCDONALDS, f"request failed: {e}") from e

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamParseError(TYPE_MCDONALDS, f"invalid JSON in response: {e}") from e

        locations = self.parse_locations(data, (lat, lng), self._clock())
        logger.info(
            "%s returned %d drive-thru location(s), keeping %d",
            TYPE_MCDONALDS,
            len(locations),
            min(len(locations), max_results),
        )
        return locations[:max_results]

    def parse_locations(
        self,
        data: Any,
        origin: tuple[float, float],
        now_utc: datetime,
    ) -> list[Location]:
        """
        Map a locator response to drive-thru Locations sorted by distance.

        Args:
            data: Decoded JSON body.
            origin: (lat, lng) of the query point.
            now_utc: Instant used for open/closed status.

        Returns:
            All drive-thru locations, nearest first (not truncated).

        Raises:
            UpstreamParseError: If the body or any feature is malformed.
        """
        features = data.get("features") if isinstance(data, dict) else None
        if not isinstance(features, list):
            raise UpstreamParseError(TYPE_MCDONALDS, "missing 'features' in response")

        ranked = []
        for index, feature in enumerate(features):
            try:
                parsed = self._parse_feature(feature, origin, now_utc)
            except (KeyError, IndexError, TypeError, ValueError) as e:
                raise UpstreamParseError(
                    TYPE_MCDONALDS, f"malformed feature at index {index}: {e!r}"
                ) from e

            if parsed is not None:
                ranked.append(parsed)

        # Sort on the raw distance; display rounding happens per record
        ranked.sort(key=lambda pair: pair[0])
        return [location for _, location in ranked]

    def _parse_feature(
        self,
        feature: dict,
        origin: tuple[float, float],
        now_utc: datetime,
    ) -> tuple[float, Location] | None:
        props = feature["properties"]

        filter_types = props.get("filterType") or []
        if not isinstance(filter_types, list):
            raise TypeError(f"filterType must be a list, got {type(filter_types).__name__}")
        if DRIVE_THRU_FILTER not in filter_types:
            logger.debug("Skipping %s: no drive-thru", props.get("addressLine1"))
            return None

        coords = feature["geometry"]["coordinates"]
        loc_lng, loc_lat = _as_float(coords[0]), _as_float(coords[1])

        address = props["addressLine1"]
        if not isinstance(address, str):
            raise TypeError(f"addressLine1 must be a string, got {type(address).__name__}")

        status = self._open_status(props["driveTodayHours"], loc_lat, loc_lng, now_utc)
        distance = distance_miles(origin, (loc_lat, loc_lng))

        location = Location(
            type=TYPE_MCDONALDS,
            address=title_case(address),
            lat=loc_lat,
            lng=loc_lng,
            distance_miles=round_distance(distance),
            is_open=status.is_open,
            open_time=status.open_time,
            close_time=status.close_time,
        )
        return distance, location

    def _open_status(self, hours: str, lat: float, lng: float, now_utc: datetime) -> OpenStatus:
        try:
            open_clock, close_clock = parse_hours_range(hours)
            # 24-hour schedules need no timezone lookup
            if open_clock == close_clock:
                return OpenStatus(is_open=True)
            return resolve_window(open_clock, close_clock, lookup_timezone(lat, lng), now_utc)
        except InvalidHoursError as e:
            raise ValueError(f"driveTodayHours: {e}") from e
        except TimezoneResolutionError as e:
            logger.warning("Treating (%s, %s) as closed: %s", lat, lng, e)
            return OpenStatus(is_open=False)


def _as_float(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"expected a number, got {value!r}")
    return float(value)
