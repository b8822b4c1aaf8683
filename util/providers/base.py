"""Base location provider abstract class."""

import os
import re
from abc import ABC, abstractmethod

from util.models import Location

PROVIDER_TIMEOUT_SECONDS = float(os.environ.get("PROVIDER_TIMEOUT_SECONDS", "10"))

# A letter starts a word unless it follows a letter, digit or underscore,
# so "1ST AVE" becomes "1st Ave", "O'NEIL" becomes "O'Neil" and
# "ÉLAN" becomes "Élan".
_WORD_START = re.compile(r"(?<!\w)([^\W\d_])")


def title_case(text: str) -> str:
    """Normalize an upstream address like "123 MAIN ST" to "123 Main St"."""
    return _WORD_START.sub(lambda m: m.group(1).upper(), text.lower())


class ProviderError(Exception):
    """Raised when a provider cannot produce locations."""

    def __init__(self, provider_type: str, message: str):
        super().__init__(f"{provider_type}: {message}")
        self.provider_type = provider_type


class UpstreamTransportError(ProviderError):
    """Raised on network failure, timeout, or a non-success status from the upstream API."""


class UpstreamParseError(ProviderError):
    """Raised when the upstream body is malformed or missing expected fields."""


class LocationProvider(ABC):
    """
    Abstract base class for upstream location sources.

    Each implementation owns one upstream API: it builds the request, maps
    the proprietary response to canonical Locations, and applies its own
    relevance filter. Implementations make exactly one upstream call per
    get_locations invocation and never return partially parsed results.
    """

    @property
    @abstractmethod
    def provider_type(self) -> str:
        """Return the stable registry key (e.g. "mcdonalds")."""
        pass

    @abstractmethod
    def get_locations(
        self,
        lat: float,
        lng: float,
        radius_miles: float,
        max_results: int,
    ) -> list[Location]:
        """
        Find drive-thru locations near a point.

        Args:
            lat: Query latitude in decimal degrees.
            lng: Query longitude in decimal degrees.
            radius_miles: Search radius in miles.
            max_results: Maximum number of locations to return.

        Returns:
            Locations sorted by ascending distance, at most max_results long.

        Raises:
            UpstreamTransportError: If the upstream call fails.
            UpstreamParseError: If the upstream response cannot be parsed.
        """
        pass
