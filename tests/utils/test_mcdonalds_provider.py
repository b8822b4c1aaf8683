"""Tests for the McDonald's location provider."""

import copy
from datetime import datetime, timezone

import pytest
import requests
import responses

from util.geo import distance_miles
from util.hours import TimezoneResolutionError
from util.providers import (
    McDonaldsProvider,
    UpstreamParseError,
    UpstreamTransportError,
)
from util.providers.base import title_case

MCDONALDS_URL = "https://www.mcdonalds.com/googleapps/GoogleRestaurantLocAction.do"

QUERY_LAT, QUERY_LNG = 40.8768, -73.3246

# 12:00 local time in New York (EDT)
FIXED_NOW = datetime(2026, 10, 19, 16, 0, tzinfo=timezone.utc)


@pytest.fixture
def provider():
    """Provider with a fixed clock and the default endpoint."""
    return McDonaldsProvider(base_url=MCDONALDS_URL, timeout=5, clock=lambda: FIXED_NOW)


class TestTitleCase:
    """Tests for upstream address normalization."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("1ST AND MAIN ST", "1st And Main St"),
            ("O'NEIL SQ", "O'Neil Sq"),
            ("ÉLAN AVE", "Élan Ave"),
            ("CALLE SAN JOSÉ", "Calle San José"),
        ],
    )
    def test_title_case(self, text, expected):
        assert title_case(text) == expected


class TestBuildUrl:
    """Tests for upstream URL construction."""

    def test_radius_converted_to_km(self, provider):
        """Should template lat/lng, radius in km and max results into the URL."""
        url = provider.build_url(1.0, -2.0, 5.0, 30)

        assert url.startswith(MCDONALDS_URL + "?method=searchLocation")
        assert "latitude=1.0" in url
        assert "longitude=-2.0" in url
        assert "radius=8.04672" in url
        assert "maxResults=30" in url
        assert url.endswith("&country=us&language=en-us")

    def test_provider_type(self, provider):
        """Should register under 'mcdonalds'."""
        assert provider.provider_type == "mcdonalds"


class TestParseLocations:
    """Tests for mapping locator responses to Locations."""

    def test_drops_features_without_drive_thru(self, provider, mcdonalds_response):
        """The WALT WHITMAN RD feature has no DRIVETHRU tag and must be discarded."""
        locations = provider.parse_locations(
            mcdonalds_response, (QUERY_LAT, QUERY_LNG), FIXED_NOW
        )

        assert len(locations) == 4
        assert all("Walt Whitman" not in loc.address for loc in locations)

    def test_sorted_by_distance(self, provider, mcdonalds_response):
        """Should order locations nearest first."""
        locations = provider.parse_locations(
            mcdonalds_response, (QUERY_LAT, QUERY_LNG), FIXED_NOW
        )

        distances = [loc.distance_miles for loc in locations]
        assert distances == sorted(distances)
        assert [loc.address for loc in locations] == [
            "100 New York Ave",
            "1st And Main St",
            "7 W Jericho Tpke",
            "O'Neil Sq",
        ]

    def test_distance_is_rounded_haversine(self, provider, mcdonalds_response):
        """Each distance is the haversine miles to the query point, rounded to 2 places."""
        locations = provider.parse_locations(
            mcdonalds_response, (QUERY_LAT, QUERY_LNG), FIXED_NOW
        )

        for loc in locations:
            expected = round(distance_miles((QUERY_LAT, QUERY_LNG), (loc.lat, loc.lng)), 2)
            assert loc.distance_miles == expected
            assert loc.distance_miles >= 0

    def test_coordinates_are_lng_lat(self, provider, mcdonalds_response):
        """GeoJSON coordinates are [lng, lat]."""
        nearest = provider.parse_locations(
            mcdonalds_response, (QUERY_LAT, QUERY_LNG), FIXED_NOW
        )[0]

        assert nearest.lat == 40.87
        assert nearest.lng == -73.33
        assert nearest.type == "mcdonalds"

    def test_open_status(self, provider, mcdonalds_response):
        """Should derive open status in the location's local time."""
        by_address = {
            loc.address: loc
            for loc in provider.parse_locations(
                mcdonalds_response, (QUERY_LAT, QUERY_LNG), FIXED_NOW
            )
        }

        regular = by_address["100 New York Ave"]
        assert regular.is_open is True
        assert regular.open_time.isoformat() == "2026-10-19T05:00:00-04:00"
        assert regular.close_time.isoformat() == "2026-10-19T23:00:00-04:00"

        always_open = by_address["1st And Main St"]
        assert always_open.is_open is True
        assert always_open.open_time is None
        assert always_open.close_time is None

        overnight = by_address["7 W Jericho Tpke"]
        assert overnight.is_open is False
        assert overnight.open_time.isoformat() == "2026-10-19T18:00:00-04:00"
        assert overnight.close_time.isoformat() == "2026-10-20T02:00:00-04:00"

    def test_timezone_failure_treated_as_closed(self, provider, mcdonalds_response, mocker):
        """Locations are still returned, closed and without a window, when the zone is unknown."""
        mocker.patch(
            "util.providers.mcdonalds.lookup_timezone",
            side_effect=TimezoneResolutionError("No timezone found"),
        )

        locations = provider.parse_locations(
            mcdonalds_response, (QUERY_LAT, QUERY_LNG), FIXED_NOW
        )

        assert len(locations) == 4
        for loc in locations:
            if loc.address == "1st And Main St":
                # 24-hour schedules don't need a timezone
                assert loc.is_open is True
            else:
                assert loc.is_open is False
            assert loc.open_time is None
            assert loc.close_time is None

    def test_24_hour_location_skips_timezone_lookup(self, provider, mcdonalds_response, mocker):
        """Open-all-day features are resolved without looking up a timezone."""
        lookup = mocker.patch("util.providers.mcdonalds.lookup_timezone")
        data = {"features": [mcdonalds_response["features"][0]]}

        locations = provider.parse_locations(data, (QUERY_LAT, QUERY_LNG), FIXED_NOW)

        assert [loc.is_open for loc in locations] == [True]
        lookup.assert_not_called()

    def test_empty_features(self, provider):
        """An empty feature collection yields no locations."""
        assert provider.parse_locations({"features": []}, (QUERY_LAT, QUERY_LNG), FIXED_NOW) == []

    @pytest.mark.parametrize("data", [{}, {"features": None}, {"features": {}}, [], "features"])
    def test_missing_features_raises(self, provider, data):
        """Should raise UpstreamParseError when 'features' is missing or not a list."""
        with pytest.raises(UpstreamParseError, match="missing 'features'"):
            provider.parse_locations(data, (QUERY_LAT, QUERY_LNG), FIXED_NOW)

    @pytest.mark.parametrize(
        "path, value",
        [
            (("geometry",), None),
            (("geometry", "coordinates"), []),
            (("geometry", "coordinates"), ["-73.33", "40.87"]),
            (("properties", "addressLine1"), None),
            (("properties", "driveTodayHours"), "open late"),
            (("properties", "filterType"), "DRIVETHRU"),
        ],
    )
    def test_malformed_feature_fails_whole_response(self, provider, mcdonalds_response, path, value):
        """One corrupt drive-thru feature fails the provider instead of returning a partial list."""
        data = copy.deepcopy(mcdonalds_response)
        target = data["features"][3]
        for key in path[:-1]:
            target = target[key]
        target[path[-1]] = value

        with pytest.raises(UpstreamParseError, match="malformed feature at index 3"):
            provider.parse_locations(data, (QUERY_LAT, QUERY_LNG), FIXED_NOW)

    def test_missing_filter_type_is_not_drive_thru(self, provider, mcdonalds_response):
        """A feature without facility tags fails the relevance filter."""
        data = copy.deepcopy(mcdonalds_response)
        del data["features"][3]["properties"]["filterType"]

        locations = provider.parse_locations(data, (QUERY_LAT, QUERY_LNG), FIXED_NOW)

        assert len(locations) == 3
        assert "100 New York Ave" not in [loc.address for loc in locations]


class TestGetLocations:
    """Tests for get_locations against a stubbed upstream."""

    @responses.activate
    def test_returns_locations(self, provider, mcdonalds_response):
        """Should call the locator once and return parsed locations."""
        responses.add(responses.GET, MCDONALDS_URL, json=mcdonalds_response, status=200)

        locations = provider.get_locations(QUERY_LAT, QUERY_LNG, 5.0, 30)

        assert len(responses.calls) == 1
        assert "radius=8.04672" in responses.calls[0].request.url
        assert "maxResults=30" in responses.calls[0].request.url
        assert len(locations) == 4

    @responses.activate
    def test_truncates_to_max_results(self, provider, mcdonalds_response):
        """Should keep only the nearest max_results locations."""
        responses.add(responses.GET, MCDONALDS_URL, json=mcdonalds_response, status=200)

        locations = provider.get_locations(QUERY_LAT, QUERY_LNG, 5.0, 2)

        assert [loc.address for loc in locations] == ["100 New York Ave", "1st And Main St"]

    @responses.activate
    def test_http_error_raises_transport_error(self, provider):
        """Should raise UpstreamTransportError on a non-success status."""
        responses.add(responses.GET, MCDONALDS_URL, status=503)

        with pytest.raises(UpstreamTransportError, match="mcdonalds: request failed"):
            provider.get_locations(QUERY_LAT, QUERY_LNG, 5.0, 30)

    @responses.activate
    def test_connection_error_raises_transport_error(self, provider):
        """Should raise UpstreamTransportError when the connection fails."""
        responses.add(
            responses.GET, MCDONALDS_URL, body=requests.ConnectionError("connection refused")
        )

        with pytest.raises(UpstreamTransportError, match="connection refused"):
            provider.get_locations(QUERY_LAT, QUERY_LNG, 5.0, 30)

    @responses.activate
    def test_timeout_raises_transport_error(self, provider):
        """Should raise UpstreamTransportError on timeout."""
        responses.add(responses.GET, MCDONALDS_URL, body=requests.Timeout("read timed out"))

        with pytest.raises(UpstreamTransportError):
            provider.get_locations(QUERY_LAT, QUERY_LNG, 5.0, 30)

    @responses.activate
    def test_invalid_json_raises_parse_error(self, provider):
        """Should raise UpstreamParseError when the body isn't JSON."""
        responses.add(responses.GET, MCDONALDS_URL, body="<html>oops</html>", status=200)

        with pytest.raises(UpstreamParseError, match="invalid JSON"):
            provider.get_locations(QUERY_LAT, QUERY_LNG, 5.0, 30)

    def test_passes_timeout(self, provider, mocker, mcdonalds_response):
        """Should bound the upstream call with the configured timeout."""
        mock_get = mocker.patch("util.providers.mcdonalds.requests.get")
        mock_get.return_value.json.return_value = mcdonalds_response

        provider.get_locations(QUERY_LAT, QUERY_LNG, 5.0, 30)

        mock_get.assert_called_once()
        assert mock_get.call_args.kwargs["timeout"] == 5
