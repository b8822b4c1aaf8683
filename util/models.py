"""Centralized Pydantic models for drive-thru search requests and results."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, model_validator

DEFAULT_DISTANCE_MILES = 5.0
MAX_DISTANCE_MILES = 25.0
DEFAULT_MAX_RESULTS = 30
MAX_RESULTS_LIMIT = 30


class Location(BaseModel):
    """
    A provider-agnostic drive-thru location.

    open_time/close_time bound today's window in the location's local time
    and are both None when the location is open 24 hours (or when its
    timezone could not be resolved).
    """

    type: str
    address: str
    lat: float
    lng: float
    distance_miles: float = Field(ge=0)
    is_open: bool
    open_time: datetime | None = None
    close_time: datetime | None = None

    @model_validator(mode="after")
    def _check_window(self) -> "Location":
        if (self.open_time is None) != (self.close_time is None):
            raise ValueError("open_time and close_time must both be set or both be None")
        return self


class SearchRequest(BaseModel):
    """A validated search request with defaults applied."""

    lat: float = Field(ge=-90.0, le=90.0, allow_inf_nan=False)
    lng: float = Field(ge=-180.0, le=180.0, allow_inf_nan=False)
    distance_miles: float = Field(
        DEFAULT_DISTANCE_MILES, gt=0.0, le=MAX_DISTANCE_MILES, allow_inf_nan=False
    )
    max_results: int = Field(DEFAULT_MAX_RESULTS, ge=1, le=MAX_RESULTS_LIMIT)
    # Accepted for compatibility; closed locations are not filtered out.
    show_closed: bool = False
    types: list[str] = Field(default_factory=list)


class SearchResponse(BaseModel):
    """
    Aggregated search result.

    Locations keep provider order (each provider's list sorted by distance);
    errors holds one message per failed provider.
    """

    locations: list[Location] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)

    def to_payload(self) -> dict[str, Any]:
        """JSON-ready dict; errors is omitted when empty."""
        payload = self.model_dump(mode="json")
        if not payload["errors"]:
            del payload["errors"]
        return payload
